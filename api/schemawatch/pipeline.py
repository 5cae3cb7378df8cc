"""
Schema change notifications for a single push.

``handle_schema_change_notifications`` runs one push through the stages::

    gate -> load sources -> build schemas -> diff -> dispatch

Gate rejections and an empty diff end the run quietly. Config, loader and
schema build errors propagate to the caller. Delivery failures are handed
to ``on_error`` one channel at a time and never end the run.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional

from schemawatch.channels.dispatcher import (
    DeliveryOutcome,
    ErrorHandler,
    dispatch_notifications,
    extract_commit_id,
)
from schemawatch.channels.senders import Sender
from schemawatch.diff import diff_schemas
from schemawatch.environments import (
    NotificationsEnabled,
    branch_from_ref,
    create_config,
    is_branch_ref,
)
from schemawatch.logger import create_logger
from schemawatch.sources import FileLoader, build_schemas, create_pointers, load_sources

ConfigLoader = Callable[[], Awaitable[Optional[Mapping[str, Any]]]]


class PipelineOutcome(str, enum.Enum):
    """Terminal state reached by one invocation."""
    NOT_BRANCH_PUSH = "not_branch_push"
    MISSING_CONFIG = "missing_config"
    NOTIFICATIONS_DISABLED = "notifications_disabled"
    BRANCH_MISMATCH = "branch_mismatch"
    SCHEMAS_EQUAL = "schemas_equal"
    DISPATCHED = "dispatched"


@dataclass(frozen=True)
class PipelineResult:
    outcome: PipelineOutcome
    deliveries: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def failed_channels(self) -> list[str]:
        return [d.channel for d in self.deliveries if not d.delivered]


async def handle_schema_change_notifications(
    *,
    payload: Mapping[str, Any],
    owner: str,
    repo: str,
    ref: str,
    before: str,
    load_file: FileLoader,
    load_config: ConfigLoader,
    on_error: ErrorHandler,
    release: str,
    action: str,
    senders: Optional[Mapping[str, Sender]] = None,
) -> PipelineResult:
    """
    Notify the configured channels about schema changes introduced by a push.

    Args:
        payload: Raw push event payload (used for the head commit id)
        owner: Repository owner login
        repo: Repository name
        ref: Pushed ref, e.g. ``refs/heads/main``
        before: Revision the ref pointed to before the push
        load_file: Loads a schema file at a revision
        load_config: Loads the repository config, ``None`` when absent
        on_error: Sink for per-channel delivery failures
        release: Release tag used in log lines
        action: Event action label, logged only
        senders: Channel sender registry override

    Raises:
        ConfigError: the config applies to this branch but is malformed
        SchemaNotFoundError, GitHubAPIError: a schema revision could not be loaded
        SchemaBuildError: a schema revision is not a usable GraphQL schema
    """
    log = create_logger("NOTIFICATIONS", f"{owner}/{repo}#{ref}", release)
    log.info("started")
    log.info("action - %s", action)

    if not is_branch_ref(ref):
        log.warning('Received Push event is not a branch push event (ref "%s")', ref)
        return PipelineResult(PipelineOutcome.NOT_BRANCH_PUSH)

    raw_config = await load_config()
    if raw_config is None:
        log.error("Missing config file")
        return PipelineResult(PipelineOutcome.MISSING_CONFIG)

    branch = branch_from_ref(ref)
    config = create_config(raw_config, [branch])

    if not isinstance(config.notifications, NotificationsEnabled):
        log.info("disabled. Skipping...")
        return PipelineResult(PipelineOutcome.NOTIFICATIONS_DISABLED)
    log.info("enabled")

    if config.branch != branch:
        log.info('Received branch "%s" doesn\'t match expected branch "%s". Skipping...', branch, config.branch)
        return PipelineResult(PipelineOutcome.BRANCH_MISMATCH)

    old_pointer, new_pointer = create_pointers(config.schema, before, ref)
    sources = await load_sources(old_pointer, new_pointer, load_file)
    schemas = build_schemas(sources, old_pointer, new_pointer)
    log.info("built schemas")

    changes = diff_schemas(schemas.old, schemas.new)
    if not changes:
        log.info("schemas are equal. Skipping...")
        return PipelineResult(PipelineOutcome.SCHEMAS_EQUAL)
    log.info("found %d changes in %s", len(changes), config.name)

    deliveries = await dispatch_notifications(
        changes,
        config,
        repo=repo,
        owner=owner,
        commit=extract_commit_id(payload),
        on_error=on_error,
        senders=senders,
        log=log,
    )
    return PipelineResult(PipelineOutcome.DISPATCHED, deliveries)
