"""
Repository config normalization.

A repository config comes in one of three shapes::

    # single environment
    schema: schema.graphql
    branch: main
    notifications:
      slack: https://hooks.slack.com/...

    # multiple environments, selected by the pushed branch
    schema: schema.graphql
    env:
      production:
        branch: main
        notifications:
          discord: https://discord.com/api/webhooks/...
      preview:
        branch: develop

    # legacy: branch and path packed into one value
    schema: "main:schema.graphql"

Whatever the shape, ``create_config`` reduces it to a single frozen
``NormalizedConfig`` for the branch that was pushed.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Union

from schemawatch.errors import ConfigError

logger = logging.getLogger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"
DEFAULT_ENVIRONMENT = "default"
DEFAULT_BRANCH = "master"

# Channel ids a notifications block may name
CHANNELS = ("slack", "discord", "webhook")


@dataclass(frozen=True)
class NotificationsDisabled:
    """Notifications are switched off for this environment."""


@dataclass(frozen=True)
class NotificationsEnabled:
    """Notifications are on; ``targets`` maps channel id to target URL."""
    targets: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


Notifications = Union[NotificationsDisabled, NotificationsEnabled]


@dataclass(frozen=True)
class NormalizedConfig:
    """The environment settings that apply to one push."""
    name: str
    branch: Optional[str]
    schema: str
    notifications: Notifications


def is_branch_ref(ref: str) -> bool:
    return ref.startswith(BRANCH_REF_PREFIX)


def branch_from_ref(ref: str) -> str:
    return ref[len(BRANCH_REF_PREFIX):] if is_branch_ref(ref) else ref


def normalize_notifications(raw: Any, environment: str = DEFAULT_ENVIRONMENT) -> Notifications:
    """
    Turn a raw ``notifications`` value into the tagged form.

    Falsy values and anything that is not a mapping disable notifications.
    Within a mapping only known channels with a non-empty string target
    are kept.
    """
    if not raw or not isinstance(raw, Mapping):
        return NotificationsDisabled()

    targets: dict[str, str] = {}
    for channel, target in raw.items():
        if channel not in CHANNELS:
            logger.warning("Ignoring unknown notification channel %r in %s", channel, environment)
            continue
        if isinstance(target, str) and target.strip():
            targets[channel] = target.strip()

    return NotificationsEnabled(targets=MappingProxyType(targets))


def _split_legacy_schema(value: str) -> tuple[Optional[str], str]:
    # "main:schema.graphql" -> ("main", "schema.graphql")
    if ":" in value:
        branch, _, path = value.partition(":")
        if branch and path:
            return branch, path
    return None, value


def _build(
    name: str,
    settings: Mapping[str, Any],
    defaults: Mapping[str, Any],
    branches: Sequence[str],
    default_branch: Optional[str] = DEFAULT_BRANCH,
) -> NormalizedConfig:
    schema = settings.get("schema", defaults.get("schema"))
    legacy_branch, schema_path = None, ""
    if isinstance(schema, str):
        legacy_branch, schema_path = _split_legacy_schema(schema.strip())

    branch = settings.get("branch") or defaults.get("branch") or legacy_branch or default_branch
    if branch is not None:
        branch = str(branch)

    if "notifications" in settings:
        raw_notifications = settings["notifications"]
    else:
        raw_notifications = defaults.get("notifications")
    notifications = normalize_notifications(raw_notifications, name)

    # A missing schema only matters for an enabled environment that applies
    if not schema_path and branch in branches and isinstance(notifications, NotificationsEnabled):
        raise ConfigError.missing_schema(name)

    return NormalizedConfig(
        name=name,
        branch=branch,
        schema=schema_path,
        notifications=notifications,
    )


def create_config(raw: Mapping[str, Any], branches: Sequence[str]) -> NormalizedConfig:
    """
    Resolve the environment for the given branches.

    When the config declares several environments, the first one whose
    branch is in ``branches`` wins. Without a match the top-level settings
    are used as the ``default`` environment. That fallback only carries a
    branch when the config names one explicitly, so the gate rejects the
    push unless the top-level branch is the one pushed.

    Raises:
        ConfigError: if the config has no usable schema path or a malformed
            ``env`` block
    """
    environments = raw.get("env")
    if environments is None:
        return _build(DEFAULT_ENVIRONMENT, raw, {}, branches)

    if not isinstance(environments, Mapping):
        raise ConfigError.invalid_env()

    for name, env_settings in environments.items():
        env_settings = env_settings or {}
        if not isinstance(env_settings, Mapping):
            logger.warning("Ignoring malformed environment %r", name)
            continue
        candidate = _build(str(name), env_settings, raw, branches)
        if candidate.branch in branches:
            return candidate

    return _build(DEFAULT_ENVIRONMENT, raw, {}, branches, default_branch=None)
