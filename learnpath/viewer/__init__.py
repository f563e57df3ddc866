"""
learnpath Viewer - Rendering helpers for topic pages.

This module provides:
- Code highlighting driven by per-topic vocabularies
- Octalysis drive summary and radar chart
"""

from .highlight import (
    TokenRule,
    Token,
    CodeTokenizer,
    code_block,
    escape_html_attr,
    get_code_css,
)

from .summary import (
    Drive,
    compute_drives,
    render_radar_svg,
)

__all__ = [
    # Highlighting
    "TokenRule",
    "Token",
    "CodeTokenizer",
    "code_block",
    "escape_html_attr",
    "get_code_css",
    # Summary
    "Drive",
    "compute_drives",
    "render_radar_svg",
]
