"""
TopicProgressEngine - Progress state machine for one topic.

Each part is locked or unlocked, completed or not, and independently read.
Part 1 is always unlocked; completing part n unlocks part n+1. XP is capped
at the topic's total and never decreases; badges are never revoked.

Every mutation is persisted immediately. XP and badge changes are pushed to
the TrainerAggregator so the cross-topic profile stays current.
"""

import json
import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from learnpath.schemas import TopicConfig, TopicSnapshot, TopicState
from learnpath.viewer.highlight import CodeTokenizer, code_block

from .storage import Storage, topic_key
from .trainer import TrainerAggregator


logger = logging.getLogger(__name__)

INSIGHT_XP = 25

# Field spellings used by entries under a topic's legacy keys
LEGACY_FIELD_NAMES = {
    "currentPart": "current_part",
    "completedParts": "completed_parts",
    "unlockedParts": "unlocked_parts",
    "readParts": "read_parts",
    "briefingsRead": "briefings_read",
    "expandedInsights": "expanded_insights",
    "openingDone": "opening_done",
    "lastDate": "last_date",
}

Notifier = Callable[[str, str], None]


def log_notifier(text: str, kind: str):
    """Default notifier: no UI attached, just log."""
    logger.info(f"[{kind}] {text}")


class TopicProgressEngine:
    """
    Owns the progress state of one topic.

    Construction loads the persisted state (or migrates a legacy entry) and,
    when a trainer is attached, records today's streak and mirrors it.
    """

    def __init__(
        self,
        config: TopicConfig,
        storage: Storage,
        trainer: Optional[TrainerAggregator] = None,
        notifier: Optional[Notifier] = None,
    ):
        """
        Initialize the engine for one topic.

        Args:
            config: Topic configuration (parts, badges, vocabularies)
            storage: Store for the topic-<id> entry
            trainer: Cross-topic aggregator to sync with (optional)
            notifier: Called as notifier(text, kind) for XP and badge awards
        """
        self._config = config
        self.storage = storage
        self.trainer = trainer
        self.notify = notifier or log_notifier
        self.storage_key = topic_key(config.id)
        self.tokenizer = CodeTokenizer(config.hl_keywords, config.hl_types)
        self._open_insights: set[Any] = set()

        self._state = self._default_state()
        self.load()

        if self.trainer is not None:
            self.trainer.update_streak()
            trainer_state = self.trainer.state
            self._state.streak = trainer_state.streak
            self._state.last_date = trainer_state.last_date

    @property
    def config(self) -> TopicConfig:
        """Copy of the topic configuration."""
        return self._config.model_copy(deep=True)

    @property
    def state(self) -> TopicState:
        """Copy of the current state; mutate through the engine's methods."""
        return self._state.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _default_state(self) -> TopicState:
        return TopicState(**self._config.default_state_extra)

    def _merge(self, raw: str, legacy: bool = False) -> TopicState:
        """Overlay persisted data on fresh defaults."""
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("persisted state is not an object")
        if legacy:
            for old_name, name in LEGACY_FIELD_NAMES.items():
                if old_name in data:
                    data[name] = data.pop(old_name)
        merged = self._default_state().model_dump()
        merged.update(data)
        return TopicState.model_validate(merged)

    def load(self):
        """
        Load persisted progress.

        Tries the current key first, then each legacy key in order. A legacy
        entry that loads is rewritten under the current key with current
        field names, and the legacy entry removed. Malformed entries are
        skipped and the defaults kept. Insights already expanded start open.
        """
        loaded = False
        raw = self.storage.get(self.storage_key)
        if raw:
            try:
                self._state = self._merge(raw)
                loaded = True
            except (ValueError, ValidationError) as e:
                logger.warning(f"Discarding malformed progress for {self._config.id}: {e}")

        if not loaded:
            self._load_legacy()

        self._ensure_first_unlocked()
        self._open_insights = set(self._state.expanded_insights)

    def _load_legacy(self):
        for legacy_key in self._config.legacy_keys:
            raw = self.storage.get(legacy_key)
            if not raw:
                continue
            try:
                self._state = self._merge(raw, legacy=True)
            except (ValueError, ValidationError) as e:
                logger.warning(f"Skipping malformed legacy entry {legacy_key!r}: {e}")
                continue
            self.storage.set(self.storage_key, self._state.model_dump_json())
            self.storage.remove(legacy_key)
            logger.info(f"Migrated {legacy_key!r} to {self.storage_key!r}")
            return

    def _ensure_first_unlocked(self):
        if 1 not in self._state.unlocked_parts:
            self._state.unlocked_parts.insert(0, 1)

    def save(self) -> bool:
        """Persist the state. Returns False if the store refused it."""
        saved = self.storage.set(self.storage_key, self._state.model_dump_json())
        if not saved:
            logger.warning(f"Progress for {self._config.id} kept in memory only")
        return saved

    def _sync_trainer(self):
        if self.trainer is not None:
            self.trainer.sync(self._config.id, self._state, self._config)

    # -------------------------------------------------------------------------
    # Gamification
    # -------------------------------------------------------------------------

    def add_xp(self, amount: int, message: str = ""):
        """Award XP, capped at the topic total. XP never goes down."""
        capped = min(self._state.xp + amount, self._config.total_xp)
        self._state.xp = max(self._state.xp, capped)
        self.save()
        self.notify(f"+{amount} XP — {message}" if message else f"+{amount} XP", "xp")
        self._sync_trainer()

    def check_badges(self) -> list[str]:
        """
        Grant every badge whose required parts are all completed.

        Returns:
            IDs of badges granted by this call
        """
        completed = set(self._state.completed_parts)
        granted = []
        for badge in self._config.badges:
            if badge.id in self._state.badges:
                continue
            if all(part_id in completed for part_id in badge.required_part_ids):
                self._state.badges.append(badge.id)
                granted.append(badge.id)
                self.save()
                self.notify(f"{badge.icon} Badge earned: {badge.name}", "badge")
        return granted

    def mark_read(self, part_id: int):
        """Mark a part as read, awarding its reading XP once."""
        if part_id in self._state.read_parts:
            return
        part = self._config.get_part(part_id)
        self._state.read_parts.append(part_id)
        self.save()
        if part and part.xp_read > 0:
            self.add_xp(part.xp_read, f"Finished reading Part {part_id}")

    def complete_part(self, part_id: int):
        """Complete a part: unlock the next one, award quiz XP, check badges."""
        if part_id in self._state.completed_parts:
            return
        part = self._config.get_part(part_id)
        self._state.completed_parts.append(part_id)

        next_id = part_id + 1
        if next_id in self._config.part_ids and next_id not in self._state.unlocked_parts:
            self._state.unlocked_parts.append(next_id)
        self.save()

        if part and part.xp_quiz > 0:
            self.add_xp(part.xp_quiz, f"Passed the Part {part_id} quiz")
        self.check_badges()
        self._sync_trainer()

    def expand_insight(self, insight_id) -> bool:
        """
        Toggle an insight block open or closed.

        The first time an insight is ever opened it is recorded and grants
        INSIGHT_XP; reopening it grants nothing.

        Returns:
            True if the insight is now open
        """
        if insight_id in self._open_insights:
            self._open_insights.discard(insight_id)
            return False

        self._open_insights.add(insight_id)
        if insight_id not in self._state.expanded_insights:
            self._state.expanded_insights.append(insight_id)
            self.save()
            self.add_xp(INSIGHT_XP, "Explored an insight")
        return True

    def is_insight_open(self, insight_id) -> bool:
        return insight_id in self._open_insights

    def mark_briefing_read(self, part_id: int):
        if part_id not in self._state.briefings_read:
            self._state.briefings_read.append(part_id)
            self.save()

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def navigate_to(self, part_id: int) -> bool:
        """Make an unlocked part current. Returns False for a locked part."""
        if part_id not in self._state.unlocked_parts:
            return False
        self._state.current_part = part_id
        self.save()
        return True

    def start_journey(self):
        """Dismiss the opening screen for good."""
        self._state.opening_done = True
        self.save()

    # -------------------------------------------------------------------------
    # Snapshots & Rendering Helpers
    # -------------------------------------------------------------------------

    def snapshot(self) -> TopicSnapshot:
        """Condensed summary, as the trainer stores it."""
        return TopicSnapshot(
            xp=self._state.xp,
            completed_parts=list(self._state.completed_parts),
            total_parts=len(self._config.parts),
            badge_count=len(self._state.badges),
            total_badges=len(self._config.badges),
        )

    def highlight(self, code: str) -> str:
        return self.tokenizer.highlight(code)

    def code_block(self, code: str) -> str:
        return code_block(code, self.tokenizer)
