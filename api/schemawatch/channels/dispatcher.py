"""Notification dispatcher for all channel types."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from schemawatch.channels import NotificationContext
from schemawatch.channels.senders import Sender, default_senders
from schemawatch.diff import ChangeRecord
from schemawatch.environments import NormalizedConfig, NotificationsEnabled

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Exception], None]


@dataclass(frozen=True)
class DeliveryTask:
    channel: str
    url: str
    context: NotificationContext
    sender: Sender


@dataclass(frozen=True)
class DeliveryOutcome:
    channel: str
    delivered: bool
    error: Optional[Exception] = None


def extract_commit_id(payload: Mapping[str, Any]) -> Optional[str]:
    """
    Return the id of the first commit in a push payload, if there is one.

    A missing, empty or oddly shaped ``commits`` value means no commit id.
    """
    commits = payload.get("commits")
    if not isinstance(commits, Sequence) or isinstance(commits, str) or not commits:
        return None
    first = commits[0]
    if not isinstance(first, Mapping):
        return None
    commit_id = first.get("id")
    return commit_id if isinstance(commit_id, str) and commit_id else None


def build_delivery_tasks(
    notifications: NotificationsEnabled,
    context: NotificationContext,
    senders: Mapping[str, Sender],
) -> list[DeliveryTask]:
    """One task per registered channel with a target; all share ``context``."""
    tasks = []
    for channel, sender in senders.items():
        url = notifications.targets.get(channel)
        if url:
            tasks.append(DeliveryTask(channel=channel, url=url, context=context, sender=sender))

    for channel in notifications.targets:
        if channel not in senders:
            logger.warning("No sender registered for channel %s", channel)
    return tasks


def _report_error(on_error: ErrorHandler, exc: Exception, log: Union[logging.Logger, logging.LoggerAdapter]) -> None:
    try:
        on_error(exc)
    except Exception:
        log.exception("Error handler failed while reporting a delivery failure")


async def _run_isolated(
    task: DeliveryTask,
    on_error: ErrorHandler,
    log: Union[logging.Logger, logging.LoggerAdapter],
) -> DeliveryOutcome:
    try:
        await task.sender(task.url, task.context)
    except Exception as exc:
        _report_error(on_error, exc, log)
        log.error("Failed to send a notification via %s: %s", task.channel, exc, exc_info=exc)
        return DeliveryOutcome(channel=task.channel, delivered=False, error=exc)

    log.info("Sent a notification via %s", task.channel)
    return DeliveryOutcome(channel=task.channel, delivered=True)


async def dispatch_notifications(
    changes: Sequence[ChangeRecord],
    config: NormalizedConfig,
    *,
    repo: str,
    owner: str,
    commit: Optional[str],
    on_error: ErrorHandler,
    senders: Optional[Mapping[str, Sender]] = None,
    log: Union[logging.Logger, logging.LoggerAdapter, None] = None,
) -> list[DeliveryOutcome]:
    """
    Deliver a change notification to every active channel concurrently.

    A sender that raises is reported to ``on_error`` and logged; it never
    affects the other channels, and this coroutine never raises because of it.

    Args:
        changes: Non-empty list of detected changes
        config: Normalized environment; notifications must be enabled
        repo: Repository name
        owner: Repository owner login
        commit: Head commit id, if known
        on_error: Sink for per-channel delivery failures
        senders: Channel id -> sender registry (defaults to HTTP senders)
        log: Logger to report through (defaults to this module's logger)

    Returns:
        One outcome per launched delivery, in registry order
    """
    log = log or logger
    if not isinstance(config.notifications, NotificationsEnabled):
        return []

    context = NotificationContext(
        changes=changes,
        environment=config.name,
        repo=repo,
        owner=owner,
        commit=commit,
    )
    tasks = build_delivery_tasks(
        config.notifications,
        context,
        senders if senders is not None else default_senders(),
    )
    if not tasks:
        log.info("no notification channels configured")
        return []

    return list(await asyncio.gather(*(_run_isolated(task, on_error, log) for task in tasks)))
