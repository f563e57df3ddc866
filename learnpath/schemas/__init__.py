"""
learnpath Schemas - Pydantic models for the learning page engine.

This module exports all schema classes for:
- Topic: parts, badges, highlighter vocabularies
- Progress: topic state, topic snapshots, trainer profile
"""

# Topic schemas
from .topic import (
    Insight,
    Part,
    Badge,
    TopicConfig,
)

# Progress schemas
from .progress import (
    TopicState,
    TopicSnapshot,
    TrainerState,
    TRAINER_STATE_VERSION,
    dedupe,
)

__all__ = [
    # Topic
    'Insight',
    'Part',
    'Badge',
    'TopicConfig',
    # Progress
    'TopicState',
    'TopicSnapshot',
    'TrainerState',
    'TRAINER_STATE_VERSION',
    'dedupe',
]
