"""Prefixed loggers for per-invocation pipeline messages."""

import logging
from typing import Any, MutableMapping


class PipelineLogger(logging.LoggerAdapter):
    """Prefix every message with the release tag, stage name and event id."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = self.extra or {}
        return f"[{extra['release']}] {extra['name']} {extra['id']}: {msg}", kwargs


def create_logger(name: str, event_id: str, release: str) -> PipelineLogger:
    """
    Build a logger for one pipeline invocation.

    Args:
        name: Stage label, e.g. ``NOTIFICATIONS``
        event_id: ``owner/repo#ref`` identifier of the triggering push
        release: Release tag of the running service
    """
    return PipelineLogger(
        logging.getLogger("schemawatch.pipeline"),
        {"name": name, "id": event_id, "release": release},
    )
