"""
learnpath Classroom - Runtime components for tracking topic progress.

This module provides:
- Storage: Fallible key-value persistence (memory, SQLite)
- TopicProgressEngine: Per-topic progress state machine
- TrainerAggregator: Cross-topic profile, streak, and global badges
- Navigator: Part sequencing and availability
"""

from .storage import (
    Storage,
    MemoryStorage,
    SQLiteStorage,
    probe_storage,
    topic_key,
    TRAINER_KEY,
    DEFAULT_STORAGE_DIR,
    DEFAULT_STORAGE_DB,
)

from .trainer import (
    TrainerAggregator,
    Level,
    GlobalBadge,
    GlobalBadgeType,
    LEVELS,
    GLOBAL_BADGES,
    LEGACY_STREAK_KEYS,
)

from .engine import (
    TopicProgressEngine,
    INSIGHT_XP,
)

from .navigator import (
    Navigator,
    PartAvailability,
    NavigationPart,
)

__all__ = [
    # Storage
    "Storage",
    "MemoryStorage",
    "SQLiteStorage",
    "probe_storage",
    "topic_key",
    "TRAINER_KEY",
    "DEFAULT_STORAGE_DIR",
    "DEFAULT_STORAGE_DB",
    # Trainer
    "TrainerAggregator",
    "Level",
    "GlobalBadge",
    "GlobalBadgeType",
    "LEVELS",
    "GLOBAL_BADGES",
    "LEGACY_STREAK_KEYS",
    # Engine
    "TopicProgressEngine",
    "INSIGHT_XP",
    # Navigator
    "Navigator",
    "PartAvailability",
    "NavigationPart",
]
