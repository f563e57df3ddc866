"""
Navigator - Part sequencing, availability, and navigation.

Provides:
- Next/previous part navigation
- Part availability derived from unlocked/completed flags
- Part list with status indicators
- Progress summary for the sidebar
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from learnpath.schemas import Part

from .engine import TopicProgressEngine


class PartAvailability(str, Enum):
    """Part availability status for UI display."""
    LOCKED = "locked"           # Predecessor not completed
    AVAILABLE = "available"     # Unlocked, not completed
    COMPLETED = "completed"     # Finished


@dataclass
class NavigationPart:
    """Part with navigation metadata."""
    part: Part
    availability: PartAvailability
    is_current: bool
    is_read: bool


class Navigator:
    """
    Navigate through a topic's parts.

    Reads state snapshots from the TopicProgressEngine; navigation itself
    goes through engine.navigate_to so it is persisted.
    """

    def __init__(self, engine: TopicProgressEngine):
        self.engine = engine
        self._part_order: list[int] = engine.config.part_ids
        self._part_index: dict[int, int] = {pid: idx for idx, pid in enumerate(self._part_order)}

    @property
    def total_parts(self) -> int:
        """Total number of parts."""
        return len(self._part_order)

    # -------------------------------------------------------------------------
    # Availability Checking
    # -------------------------------------------------------------------------

    def get_part_availability(self, part_id: int) -> PartAvailability:
        """Completed wins over locked: a part can be completed out of order."""
        state = self.engine.state
        if part_id in state.completed_parts:
            return PartAvailability.COMPLETED
        if part_id in state.unlocked_parts:
            return PartAvailability.AVAILABLE
        return PartAvailability.LOCKED

    def is_part_available(self, part_id: int) -> bool:
        """Check if a part can be opened."""
        return part_id in self.engine.state.unlocked_parts

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def get_next_part_id(self, current_id: int) -> Optional[int]:
        """Get the ID of the next part in order."""
        if current_id not in self._part_index:
            return None
        current_idx = self._part_index[current_id]
        if current_idx + 1 >= len(self._part_order):
            return None
        return self._part_order[current_idx + 1]

    def get_previous_part_id(self, current_id: int) -> Optional[int]:
        """Get the ID of the previous part in order."""
        if current_id not in self._part_index:
            return None
        current_idx = self._part_index[current_id]
        if current_idx <= 0:
            return None
        return self._part_order[current_idx - 1]

    def get_part_position(self, part_id: int) -> tuple[int, int]:
        """
        Get part position as (current, total).

        Returns (0, total) if part not found.
        """
        if part_id not in self._part_index:
            return (0, len(self._part_order))
        return (self._part_index[part_id] + 1, len(self._part_order))

    # -------------------------------------------------------------------------
    # Part List
    # -------------------------------------------------------------------------

    def get_navigation_tree(self) -> list[NavigationPart]:
        """Get every part annotated with availability and current/read flags."""
        state = self.engine.state
        return [
            NavigationPart(
                part=part,
                availability=self.get_part_availability(part.id),
                is_current=part.id == state.current_part,
                is_read=part.id in state.read_parts,
            )
            for part in self.engine.config.parts
        ]

    def get_status_indicator(self, part_id: int) -> str:
        """
        Get status indicator for sidebar display.

        Returns:
            ✓ for completed
            → for current
            ○ for available
            ◌ for locked
        """
        availability = self.get_part_availability(part_id)

        if availability == PartAvailability.COMPLETED:
            return "✓"
        elif part_id == self.engine.state.current_part:
            return "→"
        elif availability == PartAvailability.AVAILABLE:
            return "○"
        else:
            return "◌"

    # -------------------------------------------------------------------------
    # Progress Summary
    # -------------------------------------------------------------------------

    def get_progress_summary(self) -> dict:
        """Get progress summary for display."""
        state = self.engine.state
        config = self.engine.config
        completed = len(state.completed_parts)

        return {
            "total_parts": self.total_parts,
            "completed": completed,
            "completion_percent": round(completed / self.total_parts * 100) if self.total_parts > 0 else 0,
            "xp": state.xp,
            "total_xp": config.total_xp,
            "badges": len(state.badges),
            "total_badges": len(config.badges),
            "current_part": state.current_part,
        }
