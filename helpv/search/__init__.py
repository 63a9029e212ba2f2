"""Fuzzy ranking shared by the finder and command switcher overlays."""

from __future__ import annotations

from .fuzzy import Scorer, best_field_score, fuzzy_score, rank_items

__all__ = [
    "Scorer",
    "best_field_score",
    "fuzzy_score",
    "rank_items",
]
