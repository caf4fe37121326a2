"""Static mission, achievement and reward catalog with rarity-tiered sampling."""
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from gamification.models.mission import COMPOUND_TEMPLATE_ID, MissionActionType, MissionRarity
from gamification.models.progression import AchievementCategory
from gamification.models.special_reward import SpecialRewardType
from gamification.services.collaborators import RandomSource
from gamification.utils.exceptions import CatalogError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MissionTemplate:
    id: str
    title: str
    description: str
    icon: str
    action_type: MissionActionType
    target_value: int
    points_reward: int
    rarity: MissionRarity
    special_reward_chance: float = 0.0

    @property
    def is_compound(self) -> bool:
        return self.id == COMPOUND_TEMPLATE_ID


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    icon: str
    category: AchievementCategory
    requirement: int
    points: int


@dataclass(frozen=True)
class UnlockableReward:
    """Reward bought with a points threshold rather than minted on claim."""
    id: str
    title: str
    description: str
    icon: str
    points_required: int
    category: SpecialRewardType
    payload: Dict[str, str] = field(default_factory=dict)


# Compound mission: action type -> (CompoundProgress field, cap)
COMPOUND_REQUIREMENTS: Dict[MissionActionType, Tuple[str, int]] = {
    MissionActionType.SEND_MESSAGES: ("messages", 50),
    MissionActionType.COMPLETE_TRANSLATIONS: ("translations", 20),
    MissionActionType.SHARE_MEDIA: ("media", 10),
}

# Daily sampling odds; each tier is an independent draw
UNCOMMON_DOUBLE_CHANCE = 0.5
RARE_CHANCE = 0.5
EPIC_CHANCE = 0.2
LEGENDARY_CHANCE = 0.05
COMMON_DAILY_COUNT = 3


MISSION_TEMPLATES: Tuple[MissionTemplate, ...] = (
    # Common
    MissionTemplate(
        id="send_5_messages",
        title="Active Communicator",
        description="Send 5 messages to any contact",
        icon="message-circle",
        action_type=MissionActionType.SEND_MESSAGES,
        target_value=5,
        points_reward=25,
        rarity=MissionRarity.COMMON,
    ),
    MissionTemplate(
        id="translate_3_messages",
        title="Translator of the Day",
        description="Translate 3 messages into any language",
        icon="globe",
        action_type=MissionActionType.COMPLETE_TRANSLATIONS,
        target_value=3,
        points_reward=30,
        rarity=MissionRarity.COMMON,
    ),
    MissionTemplate(
        id="share_2_media",
        title="Visual Sharer",
        description="Share 2 media files with your contacts",
        icon="image",
        action_type=MissionActionType.SHARE_MEDIA,
        target_value=2,
        points_reward=20,
        rarity=MissionRarity.COMMON,
    ),
    MissionTemplate(
        id="use_2_features",
        title="Feature Explorer",
        description="Use 2 different app features",
        icon="compass",
        action_type=MissionActionType.USE_FEATURES,
        target_value=2,
        points_reward=15,
        rarity=MissionRarity.COMMON,
    ),
    # Uncommon
    MissionTemplate(
        id="send_10_messages",
        title="Prolific Messenger",
        description="Send 10 messages in a single day",
        icon="message-square",
        action_type=MissionActionType.SEND_MESSAGES,
        target_value=10,
        points_reward=40,
        rarity=MissionRarity.UNCOMMON,
        special_reward_chance=0.2,
    ),
    MissionTemplate(
        id="translate_5_messages",
        title="Polyglot of the Day",
        description="Translate 5 messages into different languages",
        icon="globe",
        action_type=MissionActionType.COMPLETE_TRANSLATIONS,
        target_value=5,
        points_reward=50,
        rarity=MissionRarity.UNCOMMON,
        special_reward_chance=0.2,
    ),
    MissionTemplate(
        id="chat_15_minutes",
        title="Dedicated Conversationalist",
        description="Chat for a total of 15 minutes",
        icon="clock",
        action_type=MissionActionType.CHAT_DURATION,
        target_value=15,
        points_reward=35,
        rarity=MissionRarity.UNCOMMON,
        special_reward_chance=0.2,
    ),
    # Rare
    MissionTemplate(
        id="send_20_messages",
        title="Expert Communicator",
        description="Send 20 messages to different contacts",
        icon="send",
        action_type=MissionActionType.SEND_MESSAGES,
        target_value=20,
        points_reward=75,
        rarity=MissionRarity.RARE,
        special_reward_chance=0.4,
    ),
    MissionTemplate(
        id="translate_10_messages",
        title="Master Translator",
        description="Translate 10 messages in a single day",
        icon="globe",
        action_type=MissionActionType.COMPLETE_TRANSLATIONS,
        target_value=10,
        points_reward=80,
        rarity=MissionRarity.RARE,
        special_reward_chance=0.4,
    ),
    MissionTemplate(
        id="share_5_media",
        title="Content Creator",
        description="Share 5 different media files",
        icon="film",
        action_type=MissionActionType.SHARE_MEDIA,
        target_value=5,
        points_reward=70,
        rarity=MissionRarity.RARE,
        special_reward_chance=0.4,
    ),
    # Epic
    MissionTemplate(
        id="use_all_features",
        title="VokaFlow Master",
        description="Use every main feature of the app in one day",
        icon="award",
        action_type=MissionActionType.USE_FEATURES,
        target_value=8,
        points_reward=120,
        rarity=MissionRarity.EPIC,
        special_reward_chance=0.7,
    ),
    MissionTemplate(
        id="offline_master",
        title="Offline Master",
        description="Use the app in offline mode for 30 minutes",
        icon="wifi-off",
        action_type=MissionActionType.USE_OFFLINE,
        target_value=30,
        points_reward=100,
        rarity=MissionRarity.EPIC,
        special_reward_chance=0.7,
    ),
    # Legendary: completion is tracked across three counters, see COMPOUND_REQUIREMENTS
    MissionTemplate(
        id=COMPOUND_TEMPLATE_ID,
        title="Communication Legend",
        description="Send 50 messages, translate 20 and share 10 files in one day",
        icon="star",
        action_type=MissionActionType.SEND_MESSAGES,
        target_value=50,
        points_reward=200,
        rarity=MissionRarity.LEGENDARY,
        special_reward_chance=1.0,
    ),
)


ACHIEVEMENTS: Tuple[Achievement, ...] = (
    Achievement(
        id="daily_login_7",
        title="Steady Communicator",
        description="Log in 7 days in a row",
        icon="calendar-check",
        category=AchievementCategory.LOGIN,
        requirement=7,
        points=50,
    ),
    Achievement(
        id="messages_sent_100",
        title="Prolific Messenger",
        description="Send 100 messages",
        icon="message-circle",
        category=AchievementCategory.MESSAGES,
        requirement=100,
        points=75,
    ),
    Achievement(
        id="translations_50",
        title="Expert Translator",
        description="Complete 50 translations",
        icon="globe",
        category=AchievementCategory.TRANSLATIONS,
        requirement=50,
        points=100,
    ),
    Achievement(
        id="features_used_10",
        title="Feature Explorer",
        description="Use 10 different app features",
        icon="compass",
        category=AchievementCategory.FEATURES,
        requirement=10,
        points=60,
    ),
    Achievement(
        id="media_shared_25",
        title="Media Sharer",
        description="Share 25 media files",
        icon="image",
        category=AchievementCategory.MEDIA,
        requirement=25,
        points=50,
    ),
)


UNLOCKABLE_REWARDS: Tuple[UnlockableReward, ...] = (
    UnlockableReward(
        id="theme_neon_blue",
        title="Neon Blue Theme",
        description="An exclusive theme with neon blue accents",
        icon="palette",
        points_required=100,
        category=SpecialRewardType.THEME,
        payload={"theme_id": "neon_blue"},
    ),
    UnlockableReward(
        id="avatar_frame_gold",
        title="Gold Avatar Frame",
        description="An exclusive gold frame for your profile avatar",
        icon="user",
        points_required=200,
        category=SpecialRewardType.AVATAR_FRAME,
        payload={"frame_id": "gold"},
    ),
    UnlockableReward(
        id="notification_sound_premium",
        title="Premium Notification Sound",
        description="An exclusive sound for your notifications",
        icon="bell",
        points_required=150,
        category=SpecialRewardType.SOUND,
        payload={"sound_id": "premium_1"},
    ),
    UnlockableReward(
        id="chat_background_exclusive",
        title="Exclusive Chat Background",
        description="A custom background for your conversations",
        icon="image",
        points_required=300,
        category=SpecialRewardType.BACKGROUND,
        payload={"background_id": "exclusive_1"},
    ),
    UnlockableReward(
        id="emoji_pack_special",
        title="Special Emoji Pack",
        description="An exclusive collection of emoji for your messages",
        icon="smile",
        points_required=250,
        category=SpecialRewardType.EMOJI,
        payload={"pack_id": "special_1"},
    ),
)


class Catalog:
    """Immutable, process-wide table of templates, achievements and rewards."""

    def __init__(
        self,
        templates: Sequence[MissionTemplate],
        achievements: Sequence[Achievement] = (),
        unlockable_rewards: Sequence[UnlockableReward] = (),
    ):
        self.templates: Tuple[MissionTemplate, ...] = tuple(templates)
        self.achievements: Tuple[Achievement, ...] = tuple(achievements)
        self.unlockable_rewards: Tuple[UnlockableReward, ...] = tuple(unlockable_rewards)
        self._validate()

        self._templates_by_id = {t.id: t for t in self.templates}
        self._tiers: Dict[MissionRarity, Tuple[MissionTemplate, ...]] = {
            rarity: tuple(t for t in self.templates if t.rarity == rarity) for rarity in MissionRarity
        }
        self._rewards_by_id = {r.id: r for r in self.unlockable_rewards}

    def _validate(self) -> None:
        template_ids = [t.id for t in self.templates]
        if len(template_ids) != len(set(template_ids)):
            raise CatalogError("Duplicate mission template ids")

        for template in self.templates:
            if template.target_value <= 0:
                raise CatalogError(f"Template {template.id} must have a positive target_value")
            if template.points_reward < 0:
                raise CatalogError(f"Template {template.id} has a negative points_reward")
            if not 0.0 <= template.special_reward_chance <= 1.0:
                raise CatalogError(f"Template {template.id} special_reward_chance must be within [0, 1]")

        achievement_ids = [a.id for a in self.achievements]
        if len(achievement_ids) != len(set(achievement_ids)):
            raise CatalogError("Duplicate achievement ids")

        reward_ids = [r.id for r in self.unlockable_rewards]
        if len(reward_ids) != len(set(reward_ids)):
            raise CatalogError("Duplicate unlockable reward ids")

        minimums = {
            MissionRarity.COMMON: COMMON_DAILY_COUNT,
            MissionRarity.UNCOMMON: 2,
            MissionRarity.RARE: 1,
            MissionRarity.EPIC: 1,
            MissionRarity.LEGENDARY: 1,
        }
        for rarity, minimum in minimums.items():
            count = sum(1 for t in self.templates if t.rarity == rarity)
            if count < minimum:
                raise CatalogError(f"Catalog needs at least {minimum} {rarity.value} templates, has {count}")

    def get_template(self, template_id: str) -> Optional[MissionTemplate]:
        return self._templates_by_id.get(template_id)

    def templates_by_rarity(self, rarity: MissionRarity) -> Tuple[MissionTemplate, ...]:
        return self._tiers[rarity]

    def achievements_for(self, category: AchievementCategory) -> List[Achievement]:
        return [a for a in self.achievements if a.category == category]

    def get_unlockable_reward(self, reward_id: str) -> Optional[UnlockableReward]:
        return self._rewards_by_id.get(reward_id)

    def _take(self, rarity: MissionRarity, count: int, random_source: RandomSource) -> List[MissionTemplate]:
        """Shuffle a copy of the tier and take a prefix, so picks are distinct."""
        tier = list(self._tiers[rarity])
        random_source.shuffle(tier)
        return tier[:count]

    def sample_daily(self, random_source: RandomSource) -> List[MissionTemplate]:
        """Pick the day's templates.

        Always 3 Common and 1-2 Uncommon, then independent chances of one Rare
        (50%), one Epic (20%) and one Legendary (5%). Yields 3 to 8 templates,
        never the same template twice.
        """
        selected = self._take(MissionRarity.COMMON, COMMON_DAILY_COUNT, random_source)

        uncommon_count = 2 if random_source.uniform() < UNCOMMON_DOUBLE_CHANCE else 1
        selected.extend(self._take(MissionRarity.UNCOMMON, uncommon_count, random_source))

        for rarity, chance in (
            (MissionRarity.RARE, RARE_CHANCE),
            (MissionRarity.EPIC, EPIC_CHANCE),
            (MissionRarity.LEGENDARY, LEGENDARY_CHANCE),
        ):
            if random_source.uniform() < chance:
                selected.extend(self._take(rarity, 1, random_source))

        return selected


@lru_cache()
def get_catalog() -> Catalog:
    """Get the cached built-in catalog."""
    catalog = Catalog(MISSION_TEMPLATES, ACHIEVEMENTS, UNLOCKABLE_REWARDS)
    logger.info(
        f"Loaded catalog: {len(catalog.templates)} templates, {len(catalog.achievements)} achievements, "
        f"{len(catalog.unlockable_rewards)} unlockable rewards"
    )
    return catalog
