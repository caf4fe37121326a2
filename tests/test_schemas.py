"""Tests for response schema serialization."""
import uuid
from datetime import datetime, timedelta, timezone

from gamification.schemas.mission import (
    ClaimMissionResponse,
    MissionListResponse,
    MissionResponse,
    SpecialRewardResponse,
)
from gamification.schemas.progression import ProgressionResponse


def _mission(**overrides):
    values = dict(
        mission_id=uuid.uuid4(),
        template_id="send_5_messages",
        title="Chatterbox",
        description="Send 5 messages",
        icon="chat",
        action_type="send_messages",
        rarity="common",
        target_value=5,
        current_value=2,
        points_reward=10,
        special_reward_chance=0.0,
        is_completed=False,
        is_claimed=False,
        # Naive, as SQLite returns it
        expires_at=datetime(2026, 3, 10, 23, 59, 59, 999000),
        created_at=datetime(2026, 3, 10, 12, 0),
        progress=0.4,
    )
    values.update(overrides)
    return MissionResponse(**values)


class TestUtcDatetimeSerialization:

    def test_nested_mission_datetimes_end_with_z(self):
        response = MissionListResponse(
            missions=[_mission()],
            total_count=1,
            completed_count=0,
            claimed_count=0,
            claimable_count=0,
        )

        data = response.model_dump(mode="json")

        mission = data["missions"][0]
        assert mission["expires_at"] == "2026-03-10T23:59:59.999000Z"
        assert mission["created_at"] == "2026-03-10T12:00:00Z"
        assert mission["completed_at"] is None

    def test_json_string_output_uses_z(self):
        response = MissionListResponse(
            missions=[_mission(completed_at=datetime(2026, 3, 10, 13, 0))],
            total_count=1,
            completed_count=1,
            claimed_count=0,
            claimable_count=1,
        )

        assert '"completed_at":"2026-03-10T13:00:00Z"' in response.model_dump_json()

    def test_aware_datetimes_are_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        mission = _mission(created_at=datetime(2026, 3, 10, 14, 0, tzinfo=plus_two))

        assert mission.model_dump(mode="json")["created_at"] == "2026-03-10T12:00:00Z"

    def test_python_mode_keeps_datetime_objects(self):
        mission = _mission()
        assert isinstance(mission.model_dump()["expires_at"], datetime)

    def test_special_reward_inside_claim_response(self):
        reward = SpecialRewardResponse(
            reward_id=uuid.uuid4(),
            title="Epic Theme",
            description="A theme",
            icon="palette",
            rarity="epic",
            reward_type="theme",
            payload={"theme_id": "aurora"},
            created_at=datetime(2026, 3, 10, 12, 30),
        )
        claim = ClaimMissionResponse(
            success=True,
            mission_id=uuid.uuid4(),
            points_awarded=25,
            special_reward=reward,
        )

        data = claim.model_dump(mode="json")
        assert data["special_reward"]["created_at"] == "2026-03-10T12:30:00Z"

    def test_progression_updated_at(self):
        progression = ProgressionResponse(
            player_id=uuid.uuid4(),
            points=0,
            level="novice",
            streak_days=0,
            achievements_unlocked=[],
            owned_reward_ids=[],
            action_counters={},
            updated_at=datetime(2026, 3, 10, 8, 15),
        )

        assert progression.model_dump(mode="json")["updated_at"] == "2026-03-10T08:15:00Z"
