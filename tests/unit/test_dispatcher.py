"""Unit tests for concurrent, failure-isolated notification dispatch."""

from __future__ import annotations

import asyncio
import typing as typ
from types import MappingProxyType

import pytest

from schemawatch.channels.dispatcher import dispatch_notifications, extract_commit_id
from schemawatch.diff import ChangeRecord, Criticality
from schemawatch.environments import NormalizedConfig, NotificationsDisabled, NotificationsEnabled
from tests.helpers import RecordingSender

_CHANGES = [ChangeRecord(Criticality.BREAKING, "FIELD_REMOVED", "User.email was removed.")]


def _config(targets: dict[str, str]) -> NormalizedConfig:
    return NormalizedConfig(
        name="production",
        branch="main",
        schema="schema.graphql",
        notifications=NotificationsEnabled(targets=MappingProxyType(targets)),
    )


class TestExtractCommitId:
    def test_first_commit_id(self) -> None:
        """The first commit's id is used."""
        assert extract_commit_id({"commits": [{"id": "c1"}, {"id": "c2"}]}) == "c1"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"commits": []},
            {"commits": None},
            {"commits": "c1"},
            {"commits": ["c1"]},
            {"commits": [{}]},
            {"commits": [{"id": 7}]},
        ],
    )
    def test_missing_or_malformed_commits(self, payload: dict[str, typ.Any]) -> None:
        """Absent or oddly shaped commits mean no commit id."""
        assert extract_commit_id(payload) is None


@pytest.mark.asyncio
async def test_every_active_channel_gets_identical_context() -> None:
    """N configured channels produce N deliveries sharing one context."""
    senders = {name: RecordingSender() for name in ("slack", "discord", "webhook")}
    config = _config({"slack": "u1", "discord": "u2", "webhook": "u3"})

    outcomes = await dispatch_notifications(
        _CHANGES, config, repo="reef", owner="octo", commit="c1", on_error=lambda exc: None, senders=senders
    )

    assert [o.channel for o in outcomes] == ["slack", "discord", "webhook"]
    assert all(o.delivered for o in outcomes)
    assert [senders[name].calls[0][0] for name in ("slack", "discord", "webhook")] == ["u1", "u2", "u3"]

    contexts = [sender.calls[0][1] for sender in senders.values()]
    assert all(ctx is contexts[0] for ctx in contexts)
    assert contexts[0].changes is _CHANGES
    assert (contexts[0].environment, contexts[0].repo, contexts[0].owner, contexts[0].commit) == (
        "production",
        "reef",
        "octo",
        "c1",
    )


@pytest.mark.asyncio
async def test_inactive_channels_are_skipped() -> None:
    """Only channels with a target are invoked."""
    senders = {name: RecordingSender() for name in ("slack", "discord", "webhook")}

    outcomes = await dispatch_notifications(
        _CHANGES,
        _config({"discord": "u2"}),
        repo="reef",
        owner="octo",
        commit=None,
        on_error=lambda exc: None,
        senders=senders,
    )

    assert [o.channel for o in outcomes] == ["discord"]
    assert senders["slack"].calls == []
    assert senders["webhook"].calls == []


@pytest.mark.asyncio
async def test_failing_channel_does_not_affect_others() -> None:
    """A sender error reaches on_error once and siblings still deliver."""
    failure = RuntimeError("slack is down")
    senders = {"slack": RecordingSender(error=failure), "discord": RecordingSender()}
    errors: list[Exception] = []

    outcomes = await dispatch_notifications(
        _CHANGES,
        _config({"slack": "u1", "discord": "u2"}),
        repo="reef",
        owner="octo",
        commit=None,
        on_error=errors.append,
        senders=senders,
    )

    assert errors == [failure]
    assert len(senders["discord"].calls) == 1
    assert senders["discord"].calls[0][1].changes is _CHANGES
    by_channel = {o.channel: o for o in outcomes}
    assert by_channel["slack"].delivered is False
    assert by_channel["slack"].error is failure
    assert by_channel["discord"].delivered is True


@pytest.mark.asyncio
async def test_failing_error_handler_is_contained() -> None:
    """An on_error sink that raises does not break the dispatch."""
    senders = {"slack": RecordingSender(error=RuntimeError("boom")), "webhook": RecordingSender()}

    def _broken_sink(exc: Exception) -> None:
        raise ValueError("sink unavailable")

    outcomes = await dispatch_notifications(
        _CHANGES,
        _config({"slack": "u1", "webhook": "u3"}),
        repo="reef",
        owner="octo",
        commit=None,
        on_error=_broken_sink,
        senders=senders,
    )

    assert [o.delivered for o in outcomes] == [False, True]


@pytest.mark.asyncio
async def test_deliveries_run_concurrently() -> None:
    """All senders start before any of them finishes."""
    started: list[str] = []
    release = asyncio.Event()

    def _sender(name: str):
        async def _send(url: str, ctx: typ.Any) -> None:
            started.append(name)
            if len(started) == 2:
                release.set()
            await release.wait()

        return _send

    outcomes = await asyncio.wait_for(
        dispatch_notifications(
            _CHANGES,
            _config({"slack": "u1", "discord": "u2"}),
            repo="reef",
            owner="octo",
            commit=None,
            on_error=lambda exc: None,
            senders={"slack": _sender("slack"), "discord": _sender("discord")},
        ),
        timeout=1,
    )

    assert sorted(started) == ["discord", "slack"]
    assert all(o.delivered for o in outcomes)


@pytest.mark.asyncio
async def test_no_targets_or_disabled_is_a_no_op() -> None:
    """Nothing is sent without active channels."""
    sender = RecordingSender()
    disabled = NormalizedConfig("default", "main", "schema.graphql", NotificationsDisabled())

    assert await dispatch_notifications(
        _CHANGES, _config({}), repo="r", owner="o", commit=None, on_error=lambda e: None, senders={"slack": sender}
    ) == []
    assert await dispatch_notifications(
        _CHANGES, disabled, repo="r", owner="o", commit=None, on_error=lambda e: None, senders={"slack": sender}
    ) == []
    assert sender.calls == []
