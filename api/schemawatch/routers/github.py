import json
import logging
from typing import Callable, Mapping, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from schemawatch.channels.senders import Sender
from schemawatch.config import settings
from schemawatch.github import GitHubContentsClient, GitHubContentsConfig
from schemawatch.pipeline import handle_schema_change_notifications
from schemawatch.response import single_response
from schemawatch.schemas.push import PushEvent
from schemawatch.signature import SIGNATURE_HEADER, verify_signature

gh_logger = logging.getLogger("github.webhooks")

router = APIRouter(prefix="/github", tags=["github"])

ContentsClientFactory = Callable[[str, str], GitHubContentsClient]


# ---------------------------------------------------------------------------
# Dependencies (overridable in tests)
# ---------------------------------------------------------------------------


def get_webhook_secret() -> str:
    return settings.github_webhook_secret


def get_contents_client_factory() -> ContentsClientFactory:
    config = GitHubContentsConfig(
        api_url=settings.github_api_url,
        token=settings.github_token,
        config_path=settings.config_path,
    )
    return lambda owner, repo: GitHubContentsClient(owner, repo, config)


def get_senders() -> Optional[Mapping[str, Sender]]:
    # None selects the default HTTP senders
    return None


# ---------------------------------------------------------------------------
# Public: receive GitHub webhooks
# ---------------------------------------------------------------------------


@router.post("/webhook", summary="Receive a GitHub webhook")
async def receive_github_webhook(
    request: Request,
    secret: str = Depends(get_webhook_secret),
    client_factory: ContentsClientFactory = Depends(get_contents_client_factory),
    senders: Optional[Mapping[str, Sender]] = Depends(get_senders),
):
    body = await request.body()

    if secret:
        if not verify_signature(secret, body, request.headers.get(SIGNATURE_HEADER)):
            gh_logger.warning("Rejected webhook with a missing or invalid signature")
            raise HTTPException(status_code=401, detail="Invalid webhook signature")
    else:
        gh_logger.warning("GITHUB_WEBHOOK_SECRET is not set; accepting unsigned webhook")

    event = request.headers.get("X-GitHub-Event", "")
    delivery = request.headers.get("X-GitHub-Delivery", "-")

    if event == "ping":
        return single_response({"status": "pong"})
    if event != "push":
        gh_logger.info("Ignoring %s event (delivery %s)", event or "unknown", delivery)
        return single_response({"status": "ignored", "event": event})

    try:
        payload = json.loads(body)
        push = PushEvent.model_validate(payload)
    except ValueError as exc:
        # ValidationError is a ValueError too
        detail = "Invalid push payload" if isinstance(exc, ValidationError) else "Body is not valid JSON"
        raise HTTPException(status_code=422, detail=detail)

    def on_error(exc: Exception) -> None:
        gh_logger.warning("Notification delivery failed for %s/%s: %s", push.owner, push.repo, exc)

    async with client_factory(push.owner, push.repo) as github:
        result = await handle_schema_change_notifications(
            payload=payload,
            owner=push.owner,
            repo=push.repo,
            ref=push.ref,
            before=push.before,
            load_file=github.load_file,
            load_config=github.load_config,
            on_error=on_error,
            release=settings.release,
            action=payload.get("action") or event,
            senders=senders,
        )

    return single_response({
        "status": "processed",
        "delivery": delivery,
        "outcome": result.outcome.value,
        "failed_channels": result.failed_channels,
    })
