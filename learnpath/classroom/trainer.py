"""
TrainerAggregator - Cross-topic trainer profile.

Combines every topic's progress into one profile:
- Global XP (sum of topic snapshots) and level
- Daily streak
- Global badges
- Export/import of the whole profile

The persisted profile is the source of truth: sync() and update_streak()
reload, mutate and save, so several topic pages sharing one store do not
clobber each other's snapshots (the last writer still wins).
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Optional

from pydantic import ValidationError

from learnpath.schemas import TopicConfig, TopicSnapshot, TopicState, TrainerState

from .storage import Storage, TRAINER_KEY, probe_storage, topic_key


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Level:
    level: int
    xp: int  # global XP threshold
    name: str
    icon: str


LEVELS = (
    Level(1, 0, "Novice Trainer", "🥚"),
    Level(2, 200, "Apprentice Learner", "🐛"),
    Level(3, 500, "Knowledge Collector", "🦋"),
    Level(4, 1000, "Skill Explorer", "⚡"),
    Level(5, 1800, "Architecture Cadet", "🌟"),
    Level(6, 2800, "Pattern Keeper", "🔥"),
    Level(7, 4000, "Senior Developer", "💎"),
    Level(8, 5500, "Tech Mentor", "🐉"),
    Level(9, 7500, "Architecture Master", "👑"),
    Level(10, 10000, "Legendary Trainer", "🏆"),
)


class GlobalBadgeType(str, Enum):
    """What a global badge threshold is compared against."""
    TOPICS_STARTED = "topics_started"
    TOPICS_COMPLETED = "topics_completed"
    STREAK = "streak"
    GLOBAL_XP = "global_xp"


@dataclass(frozen=True)
class GlobalBadge:
    id: str
    name: str
    icon: str
    type: GlobalBadgeType
    threshold: int


GLOBAL_BADGES = (
    GlobalBadge("explorer-1", "First Expedition", "🗺️", GlobalBadgeType.TOPICS_STARTED, 1),
    GlobalBadge("explorer-3", "Three-Realm Explorer", "🧭", GlobalBadgeType.TOPICS_COMPLETED, 3),
    GlobalBadge("streak-7", "Seven-Day Streak", "🔥", GlobalBadgeType.STREAK, 7),
    GlobalBadge("streak-30", "Monthly Devotee", "💪", GlobalBadgeType.STREAK, 30),
    GlobalBadge("xp-1000", "Thousand-Point Sage", "⚡", GlobalBadgeType.GLOBAL_XP, 1000),
    GlobalBadge("xp-5000", "Five-Thousand Ace", "🎯", GlobalBadgeType.GLOBAL_XP, 5000),
)

# Entries written by the first standalone pages; only their streak is adopted
LEGACY_STREAK_KEYS = ("ca-learn", "nia-arch-learn")


def _parse_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class TrainerAggregator:
    """
    Owner of the trainer profile for one browser profile / store.

    Storage availability is probed once at construction. When the probe
    fails the profile lives in memory only for the rest of the session.
    """

    levels = LEVELS
    global_badges = GLOBAL_BADGES

    def __init__(
        self,
        storage: Storage,
        today: Optional[Callable[[], date]] = None,
        legacy_streak_keys: tuple[str, ...] = LEGACY_STREAK_KEYS,
    ):
        """
        Initialize the aggregator.

        Args:
            storage: Store shared with the topic engines
            today: Returns the local calendar date (default: date.today)
            legacy_streak_keys: Keys scanned for a streak on first-ever load
        """
        self.storage = storage
        self._today = today or date.today
        self.legacy_streak_keys = legacy_streak_keys
        self._storage_available = probe_storage(storage)
        self._state = TrainerState()
        if self._storage_available:
            self._load()
        else:
            logger.warning("Storage unavailable; trainer progress will not be saved")

    @property
    def storage_available(self) -> bool:
        return self._storage_available

    @property
    def state(self) -> TrainerState:
        """Copy of the current profile."""
        return self._state.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load(self):
        """Replace the in-memory profile with the persisted one."""
        if not self._storage_available:
            return

        raw = self.storage.get(TRAINER_KEY)
        if raw is None:
            self._state = TrainerState()
            self._migrate_streak()
            return

        try:
            self._state = TrainerState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding malformed trainer profile: {e}")
            self._state = TrainerState()

    def _save(self) -> bool:
        if not self._storage_available:
            return False
        return self.storage.set(TRAINER_KEY, self._state.model_dump_json())

    def _migrate_streak(self):
        """Adopt the longest streak found under the legacy keys."""
        max_streak = 0
        latest_date = None
        for key in self.legacy_streak_keys:
            raw = self.storage.get(key)
            if not raw:
                continue
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Skipping unreadable legacy entry {key!r}")
                continue
            if not isinstance(parsed, dict):
                continue
            streak = parsed.get("streak")
            if isinstance(streak, int) and streak > max_streak:
                max_streak = streak
                latest_date = _parse_date(parsed.get("last_date", parsed.get("lastDate")))

        if max_streak > 0:
            logger.info(f"Migrated legacy streak of {max_streak} days")
            self._state.streak = max_streak
            self._state.last_date = latest_date

    # -------------------------------------------------------------------------
    # Levels
    # -------------------------------------------------------------------------

    def get_level(self) -> Level:
        """Highest level whose threshold the global XP has reached."""
        for level in reversed(self.levels):
            if self._state.global_xp >= level.xp:
                return level
        return self.levels[0]

    def get_next_level(self) -> Optional[Level]:
        """Level after the current one, None at the top."""
        index = self.levels.index(self.get_level())
        if index + 1 >= len(self.levels):
            return None
        return self.levels[index + 1]

    def level_progress(self) -> float:
        """Fraction of the way from the current level to the next."""
        current = self.get_level()
        next_level = self.get_next_level()
        if next_level is None:
            return 1.0
        span = next_level.xp - current.xp
        return min(1.0, (self._state.global_xp - current.xp) / span)

    # -------------------------------------------------------------------------
    # Streak
    # -------------------------------------------------------------------------

    def update_streak(self):
        """
        Record today's engagement.

        Same day: no change. Consecutive day: streak + 1. Any gap: back to 1.
        """
        self._load()
        today = self._today()
        if self._state.last_date == today:
            return

        if self._state.last_date == today - timedelta(days=1):
            self._state.streak += 1
        else:
            self._state.streak = 1
        self._state.last_date = today
        logger.debug(f"Streak is now {self._state.streak}")
        self._save()

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    def sync(self, topic_id: str, topic_state: TopicState, topic_config: TopicConfig):
        """Store a topic's snapshot and recompute the global figures."""
        self._load()

        self._state.topic_snapshots[topic_id] = TopicSnapshot(
            xp=topic_state.xp,
            completed_parts=list(topic_state.completed_parts),
            total_parts=len(topic_config.parts),
            badge_count=len(topic_state.badges),
            total_badges=len(topic_config.badges),
        )
        # Full recomputation; snapshots are replaced, never accumulated
        self._state.global_xp = sum(
            snapshot.xp for snapshot in self._state.topic_snapshots.values()
        )

        self.check_global_badges()
        self._save()

    def check_global_badges(self) -> list[str]:
        """Grant global badges whose threshold is met. Returns new badge IDs."""
        snapshots = self._state.topic_snapshots
        measures = {
            GlobalBadgeType.TOPICS_STARTED: len(snapshots),
            GlobalBadgeType.TOPICS_COMPLETED: sum(1 for s in snapshots.values() if s.is_complete),
            GlobalBadgeType.STREAK: self._state.streak,
            GlobalBadgeType.GLOBAL_XP: self._state.global_xp,
        }

        granted = []
        for badge in self.global_badges:
            if badge.id in self._state.global_badges:
                continue
            if measures[badge.type] >= badge.threshold:
                self._state.global_badges.append(badge.id)
                granted.append(badge.id)
                logger.info(f"Global badge earned: {badge.id}")
        return granted

    # -------------------------------------------------------------------------
    # Export / Import
    # -------------------------------------------------------------------------

    def export_data(self) -> str:
        """
        Serialize the profile and every snapshotted topic's saved state.

        Returns:
            JSON document {"trainer": ..., "topics": {topic_id: ...}}
        """
        self._load()
        topics = {}
        for topic_id in self._state.topic_snapshots:
            raw = self.storage.get(topic_key(topic_id)) if self._storage_available else None
            if not raw:
                continue
            try:
                topics[topic_id] = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Leaving unreadable topic {topic_id!r} out of export")

        data = {
            "trainer": self._state.model_dump(mode="json"),
            "topics": topics,
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def import_data(self, document: str) -> bool:
        """
        Load a document produced by export_data().

        The trainer section is merged onto defaults and saved first, then each
        topic is written verbatim under its own key. Not transactional: a
        failure part-way leaves the earlier writes in place.

        Returns:
            True on success, False if the document could not be applied
        """
        try:
            data = json.loads(document)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Import rejected, not JSON: {e}")
            return False
        if not isinstance(data, dict):
            logger.warning("Import rejected, document is not an object")
            return False

        if data.get("trainer") is not None:
            try:
                self._state = TrainerState.model_validate(data["trainer"])
            except ValidationError as e:
                logger.warning(f"Import rejected, invalid trainer section: {e}")
                return False
            self._save()

        topics = data.get("topics")
        if topics:
            if not isinstance(topics, dict):
                logger.warning("Import stopped, topics section is not an object")
                return False
            if not self._storage_available:
                logger.warning("Import stopped, storage is unavailable for topic entries")
                return False
            for topic_id, topic_data in topics.items():
                if not self.storage.set(topic_key(topic_id), json.dumps(topic_data, ensure_ascii=False)):
                    return False

        logger.info(f"Imported profile with {len(topics or {})} topics")
        return True
