"""Mission claims: points, probabilistic special rewards and claim history."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union
from uuid import UUID, uuid4

from gamification.models.mission import MissionInstance, MissionRarity
from gamification.models.progression import RewardAction
from gamification.models.special_reward import MissionHistoryEntry, SpecialReward, SpecialRewardType
from gamification.services.collaborators import Clock, RandomSource
from gamification.services.mission_generator import MissionGenerator
from gamification.services.progression_service import ProgressionService
from gamification.services.repository import Repository

logger = logging.getLogger(__name__)


class ClaimRejectionReason(str, Enum):
    NOT_FOUND = "not_found"
    NOT_COMPLETED = "not_completed"
    ALREADY_CLAIMED = "already_claimed"


@dataclass
class ClaimAccepted:
    mission: MissionInstance
    points_awarded: int
    special_reward: Optional[SpecialReward] = None
    success: bool = True


@dataclass
class ClaimRejected:
    mission_id: UUID
    reason: ClaimRejectionReason
    success: bool = False


ClaimResult = Union[ClaimAccepted, ClaimRejected]


# Mission rarity -> (rarity the reward may escalate to, probability)
ESCALATION: Dict[MissionRarity, Tuple[MissionRarity, float]] = {
    MissionRarity.COMMON: (MissionRarity.UNCOMMON, 0.1),
    MissionRarity.UNCOMMON: (MissionRarity.RARE, 0.3),
    MissionRarity.RARE: (MissionRarity.EPIC, 0.4),
    MissionRarity.EPIC: (MissionRarity.LEGENDARY, 0.5),
    MissionRarity.LEGENDARY: (MissionRarity.LEGENDARY, 0.0),
}

# Reward type -> (label, description noun, icon, payload key)
REWARD_TEMPLATES: Dict[SpecialRewardType, Tuple[str, str, str, str]] = {
    SpecialRewardType.THEME: ("Theme", "an exclusive color theme", "palette", "theme"),
    SpecialRewardType.AVATAR_FRAME: ("Avatar Frame", "a special frame for your avatar", "user", "frame"),
    SpecialRewardType.SOUND: ("Notification Sound", "a unique notification sound", "volume-2", "sound"),
    SpecialRewardType.EMOJI: ("Emoji Pack", "a collection of exclusive emoji", "smile", "emoji_pack"),
    SpecialRewardType.BACKGROUND: ("Chat Background", "a special chat background", "image", "background"),
    SpecialRewardType.STICKER: ("Sticker Pack", "an exclusive sticker set", "sticky-note", "sticker_pack"),
}

_REWARD_TYPES = list(SpecialRewardType)


class RewardResolver:
    """Validates claims and pays out mission rewards."""

    def __init__(self, repo: Repository, clock: Clock, random_source: RandomSource,
                 progression: ProgressionService, generator: MissionGenerator):
        self.repo = repo
        self.clock = clock
        self.random_source = random_source
        self.progression = progression
        self.generator = generator

    async def claim(self, player_id: UUID, mission_id: UUID) -> ClaimResult:
        """Claim a completed mission.

        Rejections are returned, never raised. A claim that is accepted has
        already updated the ledger, history and owned rewards when this returns.
        """
        mission = await self.repo.get(MissionInstance, mission_id, player_id, for_update=True)
        if mission is None:
            logger.warning(f"Claim rejected, mission not found: {player_id=} {mission_id=}")
            return ClaimRejected(mission_id=mission_id, reason=ClaimRejectionReason.NOT_FOUND)

        mission.verify_invariants()

        if mission.is_claimed:
            logger.warning(f"Claim rejected, already claimed: {player_id=} {mission_id=}")
            return ClaimRejected(mission_id=mission_id, reason=ClaimRejectionReason.ALREADY_CLAIMED)
        if not mission.is_completed:
            logger.warning(f"Claim rejected, not completed: {player_id=} {mission_id=}")
            return ClaimRejected(mission_id=mission_id, reason=ClaimRejectionReason.NOT_COMPLETED)

        now = self.clock.now()

        def mark_claimed(record: MissionInstance) -> None:
            record.is_claimed = True
            record.claimed_at = now

        await self.repo.update(mission, mark_claimed)

        await self.progression.add_points(player_id, mission.points_reward)
        await self.progression.track_action(player_id, RewardAction.DAILY_MISSION_COMPLETED)

        special_reward = None
        chance = mission.special_reward_chance or 0.0
        if chance > 0 and self.random_source.uniform() < chance:
            special_reward = await self.mint_special_reward(player_id, MissionRarity(mission.rarity))
            await self.progression.grant_owned_reward(player_id, str(special_reward.reward_id))

        await self.repo.create(
            MissionHistoryEntry,
            player_id,
            template_id=mission.template_id,
            action_type=mission.action_type,
            completed_at=now,
            points_earned=mission.points_reward,
            reward_id=special_reward.reward_id if special_reward else None,
        )

        if mission.is_compound:
            await self.generator.reset_compound_progress(player_id)

        logger.info(
            f"Mission {mission.template_id} claimed by {player_id=}: +{mission.points_reward} points"
            f"{f', special reward {special_reward.reward_type}' if special_reward else ''}"
        )
        return ClaimAccepted(mission=mission, points_awarded=mission.points_reward, special_reward=special_reward)

    def escalate(self, rarity: MissionRarity) -> MissionRarity:
        upgrade, probability = ESCALATION[rarity]
        if self.random_source.uniform() < probability:
            return upgrade
        return rarity

    async def mint_special_reward(self, player_id: UUID, mission_rarity: MissionRarity) -> SpecialReward:
        """Create a new cosmetic reward, possibly one tier above the mission."""
        rarity = self.escalate(mission_rarity)
        reward_type = _REWARD_TYPES[self.random_source.choice_index(len(_REWARD_TYPES))]
        label, noun, icon, payload_key = REWARD_TEMPLATES[reward_type]

        return await self.repo.create(
            SpecialReward,
            player_id,
            title=f"{label} {rarity.display_name}",
            description=f"Unlocked {noun} of {rarity.value} rarity",
            icon=icon,
            rarity=rarity.value,
            reward_type=reward_type.value,
            payload={f"{payload_key}_id": f"{payload_key}_{rarity.value}_{uuid4().hex}"},
            created_at=self.clock.now(),
        )
