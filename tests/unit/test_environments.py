"""Unit tests for repository config normalization."""

from __future__ import annotations

import dataclasses

import pytest

from schemawatch.environments import (
    NotificationsDisabled,
    NotificationsEnabled,
    branch_from_ref,
    create_config,
    is_branch_ref,
    normalize_notifications,
)
from schemawatch.errors import ConfigError


class TestRefHelpers:
    def test_branch_ref_detection(self) -> None:
        """Only refs/heads/ refs count as branch pushes."""
        assert is_branch_ref("refs/heads/main")
        assert not is_branch_ref("refs/tags/v1")
        assert not is_branch_ref("refs/pull/1/merge")

    def test_branch_from_ref_strips_prefix(self) -> None:
        """Nested branch names survive prefix stripping."""
        assert branch_from_ref("refs/heads/feature/x") == "feature/x"


class TestNormalizeNotifications:
    @pytest.mark.parametrize("raw", [None, False, 0, "", [], "https://example.test", True])
    def test_falsy_or_non_mapping_disables(self, raw: object) -> None:
        """Anything but a populated mapping disables notifications."""
        assert normalize_notifications(raw) == NotificationsDisabled()

    def test_keeps_known_channels_with_targets(self) -> None:
        """Unknown channels and empty targets are dropped."""
        result = normalize_notifications(
            {"slack": "https://s.test", "discord": "", "webhook": None, "teams": "https://t.test"}
        )
        assert isinstance(result, NotificationsEnabled)
        assert dict(result.targets) == {"slack": "https://s.test"}

    def test_empty_mapping_disables(self) -> None:
        """An empty block is not a populated notifications setting."""
        result = normalize_notifications({})
        assert result == NotificationsDisabled()


class TestCreateConfig:
    def test_single_environment(self) -> None:
        """Top-level settings form the default environment."""
        config = create_config(
            {"schema": "schema.graphql", "branch": "main", "notifications": {"slack": "https://s.test"}},
            ["main"],
        )
        assert config.name == "default"
        assert config.branch == "main"
        assert config.schema == "schema.graphql"
        assert isinstance(config.notifications, NotificationsEnabled)

    def test_branch_defaults_to_master(self) -> None:
        """Without any branch setting the tracked branch is master."""
        config = create_config({"schema": "schema.graphql"}, ["main"])
        assert config.branch == "master"
        assert config.notifications == NotificationsDisabled()

    def test_legacy_schema_carries_branch(self) -> None:
        """A "branch:path" schema value yields both parts."""
        config = create_config({"schema": "develop:api/schema.graphql"}, ["develop"])
        assert config.branch == "develop"
        assert config.schema == "api/schema.graphql"

    def test_selects_environment_for_branch(self) -> None:
        """The environment whose branch was pushed wins and inherits defaults."""
        raw = {
            "schema": "schema.graphql",
            "notifications": {"webhook": "https://hooks.test/default"},
            "env": {
                "production": {"branch": "main", "notifications": {"slack": "https://s.test"}},
                "preview": {"branch": "develop"},
            },
        }
        production = create_config(raw, ["main"])
        preview = create_config(raw, ["develop"])

        assert production.name == "production"
        assert dict(production.notifications.targets) == {"slack": "https://s.test"}
        assert preview.name == "preview"
        assert preview.schema == "schema.graphql"
        assert dict(preview.notifications.targets) == {"webhook": "https://hooks.test/default"}

    def test_unmatched_branch_falls_back_to_default(self) -> None:
        """With no matching environment the default's branch fails the gate later."""
        raw = {"schema": "schema.graphql", "env": {"production": {"branch": "main"}}}
        config = create_config(raw, ["feature"])
        assert config.name == "default"
        assert config.branch != "feature"

    def test_unmatched_master_push_does_not_match_implicit_default(self) -> None:
        """The fallback never inherits ``master`` when no entry names it."""
        raw = {
            "schema": "schema.graphql",
            "notifications": {"slack": "https://s.test"},
            "env": {"production": {"branch": "main"}},
        }
        config = create_config(raw, ["master"])
        assert config.name == "default"
        assert config.branch is None

    def test_unmatched_branch_keeps_explicit_top_level_branch(self) -> None:
        raw = {"schema": "schema.graphql", "branch": "master", "env": {"production": {"branch": "main"}}}
        config = create_config(raw, ["master"])
        assert config.name == "default"
        assert config.branch == "master"

    def test_malformed_environment_for_other_branch_is_skipped(self) -> None:
        """A broken entry does not stop a later entry from applying."""
        raw = {"schema": "schema.graphql", "env": {"broken": ["main"], "production": {"branch": "main"}}}
        config = create_config(raw, ["main"])
        assert config.name == "production"

    def test_empty_config_is_disabled(self) -> None:
        """An empty config has nothing to notify and needs no schema."""
        config = create_config({}, ["master"])
        assert isinstance(config.notifications, NotificationsDisabled)

    def test_missing_schema_for_applicable_environment_raises(self) -> None:
        """A config that applies to the pushed branch must name a schema."""
        with pytest.raises(ConfigError):
            create_config({"branch": "main", "notifications": {"slack": "https://s.test"}}, ["main"])

    def test_missing_schema_for_other_branch_is_tolerated(self) -> None:
        """An environment that does not apply is not validated."""
        config = create_config({"branch": "main"}, ["develop"])
        assert config.branch == "main"

    def test_malformed_env_block_raises(self) -> None:
        """``env`` must be a mapping."""
        with pytest.raises(ConfigError):
            create_config({"schema": "schema.graphql", "env": ["main"]}, ["main"])

    def test_config_is_frozen(self) -> None:
        """The normalized config cannot be mutated after resolution."""
        config = create_config({"schema": "schema.graphql", "branch": "main"}, ["main"])
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.branch = "other"  # type: ignore[misc]
