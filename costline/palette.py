"""
Category lookups (colour + display name)
----------------------------------------

Two small tables keyed by category. The strict `lookup_*` functions raise
`UnknownCategoryError`; the lenient ones used while rendering return a
neutral fallback instead, so one odd record never stops a whole chart.
"""

from __future__ import annotations
from typing import Dict

from .models import (
    CATEGORIES,
    DROUGHT_WILDFIRE,
    FLOODING,
    SEVERE_STORM,
    TROPICAL_CYCLONE,
    WINTER_STORM_FREEZE,
    UnknownCategoryError,
)

FALLBACK_COLOR = "#999999"
FALLBACK_NAME = ""

# Ordinal colour range, assigned along CATEGORIES
COLOR_RANGE = ("#ccc", "#ffffd9", "#41b6c4", "#081d58", "#c7e9b4")
COLORS: Dict[str, str] = dict(zip(CATEGORIES, COLOR_RANGE))

DISPLAY_NAMES: Dict[str, str] = {
    WINTER_STORM_FREEZE: "Winter storms, freezing",
    DROUGHT_WILDFIRE: "Drought and wildfire",
    FLOODING: "Flooding",
    TROPICAL_CYCLONE: "Tropical cyclones",
    SEVERE_STORM: "Severe storms",
}


def lookup_color(category: str) -> str:
    try:
        return COLORS[category]
    except KeyError:
        raise UnknownCategoryError(category) from None


def lookup_display_name(category: str) -> str:
    try:
        return DISPLAY_NAMES[category]
    except KeyError:
        raise UnknownCategoryError(category) from None


def color_for(category: str) -> str:
    """Fill colour for a category, neutral grey when unknown."""
    try:
        return lookup_color(category)
    except UnknownCategoryError:
        return FALLBACK_COLOR


def display_name(category: str) -> str:
    """Legend label for a category, empty string when unknown."""
    try:
        return lookup_display_name(category)
    except UnknownCategoryError:
        return FALLBACK_NAME
