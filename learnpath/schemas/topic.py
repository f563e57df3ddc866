"""
Topic configuration schemas for learnpath.

Defines Pydantic models for the declarative per-topic configuration:
- Parts (ordered content units with XP rewards)
- Badges (gated on completed parts)
- Highlighter vocabularies and legacy storage keys
"""

from pydantic import BaseModel, Field
from typing import Any, Optional


class Insight(BaseModel):
    """Optional expandable detail block; first expansion grants a bonus."""
    id: int | str
    text: str


class Part(BaseModel):
    id: int = Field(..., ge=1)  # ordinal, parts are numbered from 1
    title: str
    icon: str = ""
    xp_read: int = Field(default=0, ge=0)
    xp_quiz: int = Field(default=0, ge=0)
    content: str = ""  # markdown body shown by the page
    code: str = ""     # code sample run through the highlighter
    insights: list[Insight] = []


class Badge(BaseModel):
    """Per-topic badge, granted once every required part is completed."""
    id: str
    name: str
    icon: str = ""
    required_part_ids: list[int]


class TopicConfig(BaseModel):
    """
    Fully formed configuration of one topic.

    Supplied at engine construction; never mutated by the engine.
    """
    id: str = Field(..., pattern=r'^[A-Za-z0-9_-]+$')
    title: str = ""
    parts: list[Part] = Field(..., min_length=1)
    badges: list[Badge] = []
    total_xp: int = Field(..., ge=0)
    hl_keywords: list[str] = []
    hl_types: list[str] = []
    legacy_keys: list[str] = []
    default_state_extra: dict[str, Any] = {}

    @property
    def part_ids(self) -> list[int]:
        return [part.id for part in self.parts]

    def get_part(self, part_id: int) -> Optional[Part]:
        """Look up a part by id, None if it is not configured."""
        for part in self.parts:
            if part.id == part_id:
                return part
        return None
