"""Shared test doubles and payload builders."""

from __future__ import annotations

import typing as typ

from schemawatch.sources import SchemaPointer

OLD_SDL = """
type Query {
  user(id: ID!): User
}

type User {
  id: ID!
  name: String
  email: String
}
"""

NEW_SDL = """
type Query {
  user(id: ID!): User
}

type User {
  id: ID!
  name: String
  avatar: String
}
"""


class FakeRepository:
    """In-memory stand-in for the GitHub file and config loaders."""

    def __init__(
        self,
        files: dict[tuple[str, str], str] | None = None,
        config: dict[str, typ.Any] | None = None,
    ) -> None:
        self.files = files or {}
        self.config = config
        self.file_requests: list[SchemaPointer] = []
        self.config_requests = 0

    async def load_file(self, pointer: SchemaPointer) -> str:
        self.file_requests.append(pointer)
        return self.files[(pointer.path, pointer.ref)]

    async def load_config(self) -> dict[str, typ.Any] | None:
        self.config_requests += 1
        return self.config


class RecordingSender:
    """Channel sender that records calls and optionally fails."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, typ.Any]] = []

    async def __call__(self, url: str, ctx: typ.Any) -> None:
        self.calls.append((url, ctx))
        if self.error is not None:
            raise self.error


def push_payload(
    *,
    ref: str = "refs/heads/main",
    before: str = "A",
    after: str = "B",
    commits: typ.Any = None,
) -> dict[str, typ.Any]:
    """Build a minimal GitHub push payload."""
    payload: dict[str, typ.Any] = {
        "ref": ref,
        "before": before,
        "after": after,
        "repository": {
            "name": "reef",
            "default_branch": "main",
            "owner": {"login": "octo", "name": "octo"},
        },
    }
    if commits is not None:
        payload["commits"] = commits
    return payload
