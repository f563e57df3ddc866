"""
Drive summary - Octalysis radar values for a topic page.

The eight drives are computed purely from counters the engine and trainer
already expose; nothing here owns state.
"""

import html
import math
from dataclasses import dataclass

from learnpath.schemas import TopicConfig, TopicState


@dataclass(frozen=True)
class Drive:
    """One radar axis, value in [0, 1]."""
    name: str
    value: float


def _ratio(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return min(numerator / denominator, 1.0)


def compute_drives(state: TopicState, config: TopicConfig, streak: int = 0) -> list[Drive]:
    """
    Compute the eight core drives for the radar chart.

    Args:
        state: Topic state snapshot
        config: Topic configuration
        streak: Current trainer streak in days

    Returns:
        Drives in clockwise order starting at the top
    """
    parts = config.parts
    last_part_id = parts[-1].id
    return [
        Drive("Meaning", 1.0 if state.opening_done else 0.0),
        Drive("Accomplishment", _ratio(state.xp, config.total_xp)),
        Drive("Empowerment", 1.0 if last_part_id in state.completed_parts else 0.0),
        Drive("Ownership", _ratio(len(state.badges), len(config.badges))),
        Drive("Social Influence", _ratio(len(state.briefings_read), len(parts))),
        Drive("Scarcity", _ratio(len(state.unlocked_parts), len(parts))),
        Drive("Unpredictability", _ratio(len(state.expanded_insights), max(len(parts) - 1, 1))),
        Drive("Avoidance", _ratio(streak, 7)),
    ]


def render_radar_svg(drives: list[Drive], size: int = 300) -> str:
    """Render drives as an SVG radar chart with four grid rings."""
    cx = cy = size / 2
    radius = size * 0.37
    count = len(drives)

    def point(index: int, scale: float) -> tuple[float, float]:
        angle = -math.pi / 2 + index * 2 * math.pi / count
        return (cx + radius * scale * math.cos(angle), cy + radius * scale * math.sin(angle))

    grid = []
    for ring in (0.25, 0.5, 0.75, 1.0):
        pts = " ".join(f"{x:.1f},{y:.1f}" for x, y in (point(i, ring) for i in range(count)))
        grid.append(f'<polygon points="{pts}" fill="none" stroke="#e0dce8" stroke-width="0.5"/>')

    labels = []
    for i, drive in enumerate(drives):
        x, y = point(i, 1.0)
        lx, ly = point(i, 1.0 + 25 / radius)
        labels.append(f'<line x1="{cx}" y1="{cy}" x2="{x:.1f}" y2="{y:.1f}" stroke="#e0dce8" stroke-width="1"/>')
        labels.append(
            f'<text x="{lx:.1f}" y="{ly:.1f}" text-anchor="middle" dominant-baseline="middle" '
            f'font-size="10" fill="#8E8A9E">{html.escape(drive.name)}</text>'
        )

    values = " ".join(f"{x:.1f},{y:.1f}" for x, y in (point(i, d.value) for i, d in enumerate(drives)))
    return (
        f'<svg viewBox="0 0 {size} {size}" width="{size}" height="{size}" style="max-width:100%">'
        f'{"".join(grid)}{"".join(labels)}'
        f'<polygon points="{values}" fill="rgba(184,169,232,0.2)" stroke="#B8A9E8" stroke-width="2"/>'
        '</svg>'
    )
