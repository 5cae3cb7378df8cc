"""Shared fixtures for SchemaWatch unit tests."""

from __future__ import annotations

import pytest

from tests.helpers import NEW_SDL, OLD_SDL, FakeRepository


@pytest.fixture
def changed_repository() -> FakeRepository:
    """Repository whose schema differs between revisions A and B."""
    return FakeRepository(
        files={
            ("schema.graphql", "A"): OLD_SDL,
            ("schema.graphql", "refs/heads/main"): NEW_SDL,
        },
        config={
            "schema": "schema.graphql",
            "branch": "main",
            "notifications": {
                "slack": "https://hooks.slack.com/services/T/B/X",
                "discord": "https://discord.com/api/webhooks/1/abc",
            },
        },
    )
