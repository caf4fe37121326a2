"""Tests for mission claims and special reward minting."""
import uuid
from collections import Counter
from datetime import timedelta

import pytest
from sqlalchemy import select, update

from gamification.models.mission import CompoundProgress, MissionActionType, MissionInstance, MissionRarity
from gamification.models.special_reward import MissionHistoryEntry, SpecialReward, SpecialRewardType
from gamification.services.collaborators import SystemRandomSource
from gamification.services.progression_service import ProgressionService
from gamification.services.reward_resolver import (
    ClaimAccepted,
    ClaimRejected,
    ESCALATION,
    ClaimRejectionReason,
    RewardResolver,
)
from gamification.utils.exceptions import InvariantViolationError

from tests.conftest import LEGENDARY_DAY, START_TIME, ScriptedRandomSource


async def _mission(engine, player_id, template_id):
    missions = await engine.list_active_missions(player_id)
    return next(m for m in missions if m.template_id == template_id)


async def _history(session_factory, player_id):
    async with session_factory() as session:
        result = await session.execute(
            select(MissionHistoryEntry).where(MissionHistoryEntry.player_id == player_id)
        )
        return list(result.scalars().all())


class TestClaim:

    @pytest.mark.asyncio
    async def test_claim_completed_mission_pays_points(self, engine, player_id, session_factory):
        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 5)
        mission = await _mission(engine, player_id, "send_5_messages")

        result = await engine.claim(player_id, mission.mission_id)

        assert isinstance(result, ClaimAccepted)
        assert result.points_awarded == 25
        assert result.special_reward is None
        assert result.mission.is_claimed
        assert result.mission.claimed_at is not None

        ledger = await engine.get_progression(player_id)
        assert ledger.points == 25
        assert ledger.action_counters["daily_mission_completed"] == 1

        history = await _history(session_factory, player_id)
        assert len(history) == 1
        assert history[0].template_id == "send_5_messages"
        assert history[0].points_earned == 25
        assert history[0].reward_id is None

    @pytest.mark.asyncio
    async def test_claim_is_idempotent(self, engine, player_id, session_factory):
        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 5)
        mission = await _mission(engine, player_id, "send_5_messages")

        first = await engine.claim(player_id, mission.mission_id)
        second = await engine.claim(player_id, mission.mission_id)

        assert isinstance(first, ClaimAccepted)
        assert isinstance(second, ClaimRejected)
        assert second.reason == ClaimRejectionReason.ALREADY_CLAIMED
        assert (await engine.get_progression(player_id)).points == 25
        assert len(await _history(session_factory, player_id)) == 1

    @pytest.mark.asyncio
    async def test_incomplete_mission_cannot_be_claimed(self, engine, player_id):
        mission = await _mission(engine, player_id, "share_2_media")

        result = await engine.claim(player_id, mission.mission_id)

        assert isinstance(result, ClaimRejected)
        assert result.reason == ClaimRejectionReason.NOT_COMPLETED
        assert (await engine.get_progression(player_id)).points == 0

    @pytest.mark.asyncio
    async def test_unknown_mission_is_not_found(self, engine, player_id):
        result = await engine.claim(player_id, uuid.uuid4())

        assert isinstance(result, ClaimRejected)
        assert result.reason == ClaimRejectionReason.NOT_FOUND

    @pytest.mark.asyncio
    async def test_other_players_mission_is_not_found(self, engine, player_id):
        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 5)
        mission = await _mission(engine, player_id, "send_5_messages")

        result = await engine.claim(uuid.uuid4(), mission.mission_id)

        assert isinstance(result, ClaimRejected)
        assert result.reason == ClaimRejectionReason.NOT_FOUND
        assert not (await _mission(engine, player_id, "send_5_messages")).is_claimed

    @pytest.mark.asyncio
    async def test_claimed_but_incomplete_raises(self, engine, player_id, session_factory):
        mission = await _mission(engine, player_id, "share_2_media")
        async with session_factory() as session:
            await session.execute(
                update(MissionInstance).where(MissionInstance.mission_id == mission.mission_id).values(is_claimed=True)
            )
            await session.commit()

        with pytest.raises(InvariantViolationError):
            await engine.claim(player_id, mission.mission_id)


class TestSpecialRewards:

    @pytest.mark.asyncio
    async def test_winning_roll_mints_reward(self, engine, random_source, player_id, session_factory):
        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 10)
        mission = await _mission(engine, player_id, "send_10_messages")
        # Chance roll wins (0.1 < 0.2), escalation wins (0.05 < 0.3), first reward type
        random_source.script(0.1, 0.05, 0.0)

        result = await engine.claim(player_id, mission.mission_id)

        reward = result.special_reward
        assert reward is not None
        assert reward.rarity == MissionRarity.RARE.value
        assert reward.reward_type == SpecialRewardType.THEME.value
        assert reward.title == "Theme Rare"
        assert list(reward.payload) == ["theme_id"]
        assert reward.payload["theme_id"].startswith("theme_rare_")

        ledger = await engine.get_progression(player_id)
        assert str(reward.reward_id) in ledger.owned_reward_ids
        owned = await engine.get_owned_special_rewards(player_id)
        assert [r.reward_id for r in owned] == [reward.reward_id]
        history = await _history(session_factory, player_id)
        assert history[0].reward_id == reward.reward_id

    @pytest.mark.asyncio
    async def test_losing_roll_mints_nothing(self, engine, random_source, player_id):
        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 10)
        mission = await _mission(engine, player_id, "send_10_messages")
        random_source.script(0.2)

        result = await engine.claim(player_id, mission.mission_id)

        assert result.special_reward is None
        assert await engine.get_owned_special_rewards(player_id) == []

    @pytest.mark.asyncio
    async def test_zero_chance_never_rolls(self, engine, random_source, player_id):
        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 5)
        mission = await _mission(engine, player_id, "send_5_messages")
        draws_before = random_source.draws
        random_source.script(0.0)

        result = await engine.claim(player_id, mission.mission_id)

        assert result.special_reward is None
        assert random_source.draws == draws_before

    @pytest.mark.asyncio
    async def test_payloads_are_unique_per_mint(self, repo, clock, player_id):
        resolver = RewardResolver(repo, clock, ScriptedRandomSource(default=0.0), None, None)

        first = await resolver.mint_special_reward(player_id, MissionRarity.COMMON)
        second = await resolver.mint_special_reward(player_id, MissionRarity.COMMON)

        assert first.reward_type == second.reward_type == SpecialRewardType.THEME.value
        assert first.rarity == MissionRarity.UNCOMMON.value
        assert first.payload != second.payload

    @pytest.mark.asyncio
    async def test_claiming_compound_resets_its_progress(self, engine, random_source, player_id, session_factory):
        random_source.script(*LEGENDARY_DAY)
        await engine.refresh_daily_missions(player_id)
        await engine.apply_action_event(player_id, MissionActionType.SEND_MESSAGES, 50)
        await engine.apply_action_event(player_id, MissionActionType.COMPLETE_TRANSLATIONS, 20)
        await engine.apply_action_event(player_id, MissionActionType.SHARE_MEDIA, 10)
        legend = await _mission(engine, player_id, "communication_legend")

        result = await engine.claim(player_id, legend.mission_id)

        assert isinstance(result, ClaimAccepted)
        assert result.points_awarded == 200
        # Legendary missions always mint and never escalate past Legendary
        assert result.special_reward.rarity == MissionRarity.LEGENDARY.value
        async with session_factory() as session:
            assert await session.get(CompoundProgress, player_id) is None
            rewards = (await session.execute(select(SpecialReward))).scalars().all()
        assert len(rewards) == 1


class TestEscalation:

    def test_rare_escalates_to_epic_about_forty_percent(self):
        resolver = RewardResolver(None, None, SystemRandomSource(seed=2024), None, None)
        trials = 10_000

        upgraded = sum(1 for _ in range(trials) if resolver.escalate(MissionRarity.RARE) == MissionRarity.EPIC)

        assert abs(upgraded / trials - 0.4) < 0.03

    @pytest.mark.asyncio
    async def test_rare_claims_with_guaranteed_reward_escalate_about_forty_percent(
        self, repo, catalog, clock, player_id
    ):
        random_source = SystemRandomSource(seed=7)
        progression = ProgressionService(repo, catalog, clock)
        resolver = RewardResolver(repo, clock, random_source, progression, None)
        claims = 400

        rarities = Counter()
        reward_types = Counter()
        for _ in range(claims):
            mission = await repo.create(
                MissionInstance,
                player_id,
                template_id="translate_10_messages",
                title="Master Translator",
                description="Translate 10 messages in a single day",
                icon="globe",
                action_type=MissionActionType.COMPLETE_TRANSLATIONS.value,
                rarity=MissionRarity.RARE.value,
                target_value=10,
                current_value=10,
                points_reward=80,
                special_reward_chance=1.0,
                is_completed=True,
                is_claimed=False,
                expires_at=START_TIME + timedelta(hours=11),
                completed_at=START_TIME,
            )

            result = await resolver.claim(player_id, mission.mission_id)

            assert isinstance(result, ClaimAccepted)
            assert result.special_reward is not None
            rarities[result.special_reward.rarity] += 1
            reward_types[result.special_reward.reward_type] += 1

        assert set(rarities) == {"rare", "epic"}
        assert abs(rarities["epic"] / claims - 0.4) < 0.08
        assert set(reward_types) == {t.value for t in SpecialRewardType}

        ledger = await progression.get_or_create(player_id)
        assert len(ledger.owned_reward_ids) == claims

    @pytest.mark.parametrize("rarity, draw, expected", [
        (MissionRarity.COMMON, 0.09, MissionRarity.UNCOMMON),
        (MissionRarity.COMMON, 0.1, MissionRarity.COMMON),
        (MissionRarity.UNCOMMON, 0.29, MissionRarity.RARE),
        (MissionRarity.EPIC, 0.49, MissionRarity.LEGENDARY),
        (MissionRarity.EPIC, 0.5, MissionRarity.EPIC),
        (MissionRarity.LEGENDARY, 0.0, MissionRarity.LEGENDARY),
    ])
    def test_escalation_table(self, rarity, draw, expected):
        resolver = RewardResolver(None, None, ScriptedRandomSource([draw]), None, None)
        assert resolver.escalate(rarity) == expected

    def test_escalation_moves_at_most_one_tier_up(self):
        tiers = list(MissionRarity)

        for position, rarity in enumerate(tiers):
            upgrade, _ = ESCALATION[rarity]
            assert upgrade == tiers[min(position + 1, len(tiers) - 1)]
        assert [r.display_name for r in tiers] == ["Common", "Uncommon", "Rare", "Epic", "Legendary"]
