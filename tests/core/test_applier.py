"""
Tests for applying one action to one Slack identity.
"""

import asyncio

import pytest

from app.core.applier import ActionApplier
from app.core.errors import ActionApplyError
from app.models.trigger import CLEAR_STATUS_ACTION, Action, Presence
from app.models.user import AccessCredential

CREDENTIAL = AccessCredential(slack_id="U1", access_token="xoxp-1", user_id="user-1", team_id="T1")

DND_HOUR = Action(
    presence=Presence.AWAY,
    status_text="Heads down",
    status_emoji=":headphones:",
    dnd=True,
    duration="1h",
)


class TestDoNotDisturb:
    @pytest.mark.asyncio
    async def test_dnd_starts_snooze_every_time_without_querying(self, applier, status_api):
        await applier.apply(CREDENTIAL, DND_HOUR)
        await applier.apply(CREDENTIAL, DND_HOUR)

        assert status_api.calls_for("U1", "start_snooze") == [(60,), (60,)]
        assert status_api.calls_for("U1", "get_dnd_state") == []
        assert status_api.calls_for("U1", "end_snooze") == []

    @pytest.mark.asyncio
    async def test_no_dnd_and_no_snooze_does_not_end_snooze(self, applier, status_api):
        await applier.apply(CREDENTIAL, CLEAR_STATUS_ACTION)

        assert len(status_api.calls_for("U1", "get_dnd_state")) == 1
        assert status_api.calls_for("U1", "end_snooze") == []

    @pytest.mark.asyncio
    async def test_no_dnd_ends_active_snooze_once(self, applier, status_api):
        status_api.snoozed["U1"] = True

        await applier.apply(CREDENTIAL, CLEAR_STATUS_ACTION)

        assert len(status_api.calls_for("U1", "end_snooze")) == 1
        assert status_api.calls_for("U1", "start_snooze") == []

    @pytest.mark.asyncio
    async def test_dnd_without_duration_uses_default_snooze(self, status_api):
        applier = ActionApplier(status_api, default_snooze_minutes=25)
        action = Action(presence=Presence.AWAY, status_emoji=":zzz:", dnd=True)

        await applier.apply(CREDENTIAL, action)

        assert status_api.calls_for("U1", "start_snooze") == [(25,)]
        # No duration, so the status does not auto-clear
        assert status_api.calls_for("U1", "set_custom_status") == [("", ":zzz:", 0)]

    @pytest.mark.asyncio
    async def test_sub_minute_duration_rounds_up_not_to_default(self, applier, status_api):
        # A stored template can still carry a sub-minute duration
        action = Action(presence=Presence.AWAY, status_emoji=":zzz:", dnd=True, duration="30s")

        await applier.apply(CREDENTIAL, action)

        assert status_api.calls_for("U1", "start_snooze") == [(1,)]
        assert status_api.calls_for("U1", "set_custom_status") == [("", ":zzz:", 1)]


class TestStatusAndPresence:
    @pytest.mark.asyncio
    async def test_sets_presence_and_status(self, applier, status_api):
        await applier.apply(CREDENTIAL, DND_HOUR)

        assert status_api.calls_for("U1", "set_presence") == [(Presence.AWAY,)]
        assert status_api.calls_for("U1", "set_custom_status") == [
            ("Heads down", ":headphones:", 60)
        ]

    @pytest.mark.asyncio
    async def test_duration_is_ignored_without_dnd(self, applier, status_api):
        action = Action(presence=Presence.AWAY, status_emoji=":hamburger:", duration="45m")

        await applier.apply(CREDENTIAL, action)

        assert status_api.calls_for("U1", "set_custom_status") == [("", ":hamburger:", 0)]
        assert status_api.calls_for("U1", "start_snooze") == []

    @pytest.mark.asyncio
    async def test_clear_status(self, applier, status_api):
        await applier.apply(CREDENTIAL, CLEAR_STATUS_ACTION)

        assert status_api.calls_for("U1", "set_presence") == [(Presence.ACTIVE,)]
        assert status_api.calls_for("U1", "set_custom_status") == [("", "", 0)]


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_the_others(self, applier, status_api):
        status_api.fail.add(("U1", "set_custom_status"))

        with pytest.raises(ActionApplyError) as exc_info:
            await applier.apply(CREDENTIAL, DND_HOUR)

        assert exc_info.value.operations == ["status"]
        assert exc_info.value.slack_id == "U1"
        assert "could not set status" in str(exc_info.value)
        # Presence and DND still went through
        assert status_api.calls_for("U1", "set_presence") == [(Presence.AWAY,)]
        assert status_api.calls_for("U1", "start_snooze") == [(60,)]

    @pytest.mark.asyncio
    async def test_all_failures_are_reported(self, applier, status_api):
        status_api.fail.update(
            {("U1", "set_presence"), ("U1", "set_custom_status"), ("U1", "get_dnd_state")}
        )

        with pytest.raises(ActionApplyError) as exc_info:
            await applier.apply(CREDENTIAL, CLEAR_STATUS_ACTION)

        assert sorted(exc_info.value.operations) == ["dnd", "presence", "status"]

    @pytest.mark.asyncio
    async def test_slow_call_times_out(self, status_api):
        class SlowPresenceAPI(type(status_api)):
            async def set_presence(self, credential, presence):
                await asyncio.sleep(5)

        slow = SlowPresenceAPI()
        applier = ActionApplier(slow, call_timeout=0.05)

        with pytest.raises(ActionApplyError) as exc_info:
            await applier.apply(CREDENTIAL, CLEAR_STATUS_ACTION)

        assert exc_info.value.operations == ["presence"]
        assert isinstance(exc_info.value.failures[0].error, TimeoutError)
        assert slow.calls_for("U1", "set_custom_status") == [("", "", 0)]
