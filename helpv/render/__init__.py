"""Rendering helpers: ANSI text shaping, frame composition and help content."""

from .ansi import clip_ansi_line, display_width, fit_ansi_line, highlight_substrings
from .help import help_lines
from .screen import content_rows, overlay_list_rows, render_frame

__all__ = [
    "clip_ansi_line",
    "content_rows",
    "display_width",
    "fit_ansi_line",
    "help_lines",
    "highlight_substrings",
    "overlay_list_rows",
    "render_frame",
]
