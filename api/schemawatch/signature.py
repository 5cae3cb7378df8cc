"""GitHub webhook signature verification."""

import hashlib
import hmac
import secrets
from typing import Optional

SIGNATURE_HEADER = "X-Hub-Signature-256"
_PREFIX = "sha256="


def compute_signature(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{_PREFIX}{digest}"


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    """Check ``signature`` against the HMAC of ``body`` in constant time."""
    if not signature or not signature.startswith(_PREFIX):
        return False
    return secrets.compare_digest(compute_signature(secret, body), signature)
