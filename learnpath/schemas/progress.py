"""
Progress tracking schemas for learnpath.

Defines Pydantic models for learner progress including:
- Per-topic progress state
- Condensed topic snapshots used by the trainer profile
- The cross-topic trainer profile
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date


def dedupe(values: list) -> list:
    """Drop repeated ids, keeping first occurrence order."""
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


class TopicState(BaseModel):
    """
    Progress of one learner in one topic.

    streak/last_date are copied from the trainer profile at load time and are
    for display only. Extra keys come from the topic's default_state_extra.
    """
    model_config = ConfigDict(extra="allow")

    current_part: int = 1
    xp: int = Field(default=0, ge=0)
    completed_parts: list[int] = []
    unlocked_parts: list[int] = [1]
    read_parts: list[int] = []
    briefings_read: list[int] = []
    badges: list[str] = []
    expanded_insights: list[int | str] = []
    opening_done: bool = False
    streak: int = Field(default=0, ge=0)
    last_date: Optional[date] = None

    @field_validator(
        'completed_parts', 'unlocked_parts', 'read_parts',
        'briefings_read', 'badges', 'expanded_insights',
    )
    @classmethod
    def no_duplicates(cls, v):
        return dedupe(v)


class TopicSnapshot(BaseModel):
    """Condensed per-topic summary kept in the trainer profile."""
    xp: int = Field(default=0, ge=0)
    completed_parts: list[int] = []
    total_parts: int = Field(default=0, ge=0)
    badge_count: int = Field(default=0, ge=0)
    total_badges: int = Field(default=0, ge=0)

    @property
    def is_complete(self) -> bool:
        return len(self.completed_parts) >= self.total_parts


TRAINER_STATE_VERSION = 1


class TrainerState(BaseModel):
    """
    Cross-topic trainer profile.

    Unknown fields are ignored and missing ones fall back to defaults, so
    documents written by newer or older versions still load.
    """
    version: int = TRAINER_STATE_VERSION
    global_xp: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    last_date: Optional[date] = None
    topic_snapshots: dict[str, TopicSnapshot] = {}
    global_badges: list[str] = []

    @field_validator('global_badges')
    @classmethod
    def no_duplicates(cls, v):
        return dedupe(v)
