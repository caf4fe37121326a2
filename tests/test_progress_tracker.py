"""Tests for mission progress tracking, including the compound mission."""
import asyncio

import pytest
from sqlalchemy import update

from gamification.models.mission import CompoundProgress, MissionActionType, MissionInstance
from gamification.services.events import ActionEvent
from gamification.utils.exceptions import InvariantViolationError

from tests.conftest import FailingNotificationSink, LEGENDARY_DAY


def _by_template(missions):
    return {m.template_id: m for m in missions}


class TestActionEvent:

    def test_string_action_type_is_coerced(self):
        assert ActionEvent("share_media").action_type == MissionActionType.SHARE_MEDIA

    @pytest.mark.parametrize("value", [0, -1, True, 1.5])
    def test_invalid_value_rejected(self, value):
        with pytest.raises(ValueError):
            ActionEvent(MissionActionType.SEND_MESSAGES, value)

    def test_unknown_action_type_rejected(self):
        with pytest.raises(ValueError):
            ActionEvent("teleport")


class TestSimpleProgress:

    @pytest.mark.asyncio
    async def test_partial_progress_accumulates_until_target(self, engine, player_id, notifier):
        """3 + 2 of a 5-message mission completes on the second event."""
        first = await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 3)
        second = await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 2)

        assert first == []
        assert [m.template_id for m in second] == ["send_5_messages"]
        assert second[0].is_completed
        assert second[0].completed_at is not None

        missions = _by_template(await engine.list_active_missions(player_id))
        assert missions["send_5_messages"].current_value == 5
        assert missions["send_10_messages"].current_value == 5
        assert not missions["send_10_messages"].is_completed
        assert notifier.completed == [(player_id, missions["send_5_messages"].title)]

    @pytest.mark.asyncio
    async def test_only_matching_action_type_advances(self, engine, player_id):
        await engine.apply_action_event(player_id, MissionActionType.SHARE_MEDIA, 1)

        missions = _by_template(await engine.list_active_missions(player_id))
        assert missions["share_2_media"].current_value == 1
        assert missions["send_5_messages"].current_value == 0
        assert missions["translate_3_messages"].current_value == 0

    @pytest.mark.asyncio
    async def test_completed_missions_stop_advancing(self, engine, player_id):
        await engine.apply_action_event(player_id, MissionActionType.COMPLETE_TRANSLATIONS, 3)
        await engine.apply_action_event(player_id, MissionActionType.COMPLETE_TRANSLATIONS, 4)

        missions = _by_template(await engine.list_active_missions(player_id))
        assert missions["translate_3_messages"].current_value == 3
        assert missions["translate_3_messages"].is_completed

    @pytest.mark.asyncio
    async def test_event_without_eligible_mission_is_noop(self, engine, player_id):
        assert await engine.apply_action_event(player_id, MissionActionType.ADD_CONTACTS, 4) == []
        missions = await engine.list_active_missions(player_id)
        assert all(m.current_value == 0 for m in missions)

    @pytest.mark.asyncio
    async def test_invalid_value_raises_before_any_work(self, engine, player_id, random_source):
        with pytest.raises(ValueError):
            await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 0)
        assert random_source.draws == 0

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_event(self, engine, player_id):
        engine.notifier = FailingNotificationSink()

        completed = await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 5)

        assert [m.template_id for m in completed] == ["send_5_messages"]


class TestCompoundProgress:

    @pytest.mark.asyncio
    async def test_compound_requires_every_counter(self, engine, random_source, player_id, session_factory):
        """49/20/10 is not complete; the 50th message completes it."""
        random_source.script(*LEGENDARY_DAY)
        await engine.refresh_daily_missions(player_id)

        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 49)
        await engine.apply_action_event(player_id, MissionActionType.COMPLETE_TRANSLATIONS, 20)
        completed = await engine.apply_action_event(player_id, MissionActionType.SHARE_MEDIA, 10)

        legend = _by_template(await engine.list_active_missions(player_id))["communication_legend"]
        assert "communication_legend" not in [m.template_id for m in completed]
        assert not legend.is_completed
        assert legend.current_value == 49

        completed = await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 1)

        assert "communication_legend" in [m.template_id for m in completed]
        legend = _by_template(await engine.list_active_missions(player_id))["communication_legend"]
        assert legend.is_completed
        assert legend.current_value == 50

        async with session_factory() as session:
            progress = await session.get(CompoundProgress, player_id)
        assert (progress.messages, progress.translations, progress.media) == (50, 20, 10)

    @pytest.mark.asyncio
    async def test_compound_display_value_is_floored_average(self, engine, random_source, player_id):
        random_source.script(*LEGENDARY_DAY)
        await engine.refresh_daily_missions(player_id)

        await engine.apply_action_event(player_id, MissionActionType.SHARE_MEDIA, 10)

        legend = _by_template(await engine.list_active_missions(player_id))["communication_legend"]
        # (0 + 0 + 1) / 3 * 50
        assert legend.current_value == 16

    @pytest.mark.asyncio
    async def test_compound_counters_cap_in_display(self, engine, random_source, player_id):
        random_source.script(*LEGENDARY_DAY)
        await engine.refresh_daily_missions(player_id)

        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 500)

        legend = _by_template(await engine.list_active_missions(player_id))["communication_legend"]
        assert legend.current_value == 16
        assert not legend.is_completed


class TestTrackerSafety:

    @pytest.mark.asyncio
    async def test_concurrent_events_are_serialized(self, engine, player_id):
        await engine.refresh_daily_missions(player_id)

        await asyncio.gather(*[
            engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 1) for _ in range(8)
        ])

        missions = _by_template(await engine.list_active_missions(player_id))
        assert missions["send_10_messages"].current_value == 8
        assert missions["send_5_messages"].current_value == 5

    @pytest.mark.asyncio
    async def test_corrupt_mission_raises_invariant_violation(self, engine, player_id, session_factory):
        missions = await engine.list_active_missions(player_id)
        target = next(m for m in missions if m.template_id == "send_5_messages")
        async with session_factory() as session:
            await session.execute(
                update(MissionInstance)
                .where(MissionInstance.mission_id == target.mission_id)
                .values(current_value=-3)
            )
            await session.commit()

        with pytest.raises(InvariantViolationError):
            await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 1)

        missions = _by_template(await engine.list_active_missions(player_id))
        assert missions["send_10_messages"].current_value == 0
