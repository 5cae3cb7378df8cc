"""Base types for notification channel adapters."""

from dataclasses import dataclass
from typing import Optional, Sequence

from schemawatch.diff import ChangeRecord


@dataclass
class ChannelPayload:
    """Represents the HTTP request payload for a notification channel."""
    method: str
    url: str
    headers: dict[str, str]
    body: str  # JSON string


@dataclass(frozen=True)
class NotificationContext:
    """Data every channel receives for one push; shared across channels."""
    changes: Sequence[ChangeRecord]
    environment: str
    repo: str
    owner: str
    commit: Optional[str] = None

    @property
    def commit_url(self) -> Optional[str]:
        if not self.commit:
            return None
        return f"https://github.com/{self.owner}/{self.repo}/commit/{self.commit}"
