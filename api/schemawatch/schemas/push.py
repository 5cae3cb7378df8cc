"""Pydantic schemas for GitHub push webhook payloads."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class RepositoryOwner(BaseModel):
    login: Optional[str] = None
    name: Optional[str] = None

    model_config = {"extra": "ignore"}


class Repository(BaseModel):
    name: str
    owner: RepositoryOwner
    default_branch: Optional[str] = None

    model_config = {"extra": "ignore"}


class PushEvent(BaseModel):
    """The parts of a push payload the notification pipeline reads."""

    ref: str
    before: str
    after: Optional[str] = None
    repository: Repository
    # Kept loosely typed: the head commit id is extracted best-effort
    commits: Optional[Any] = Field(None, description="Commits included in the push")

    model_config = {"extra": "ignore"}

    @property
    def owner(self) -> str:
        owner = self.repository.owner
        return owner.login or owner.name or ""

    @property
    def repo(self) -> str:
        return self.repository.name
