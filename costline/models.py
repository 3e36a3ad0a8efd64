"""
Data model (EventRecord)
========================

Each row of the disaster cost table becomes one `EventRecord`.
Records are immutable (`frozen=True`) so that:
- the dataset cannot be edited after it is built, and
- filtering only ever *selects* records, it never rewrites them.

The category vocabulary is fixed. Records with another category are still
accepted; colour / label lookups for them fall back to neutral values
(see `costline.palette`).
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Tuple

WINTER_STORM_FREEZE = "winter-storm-freeze"
DROUGHT_WILDFIRE = "drought-wildfire"
FLOODING = "flooding"
TROPICAL_CYCLONE = "tropical-cyclone"
SEVERE_STORM = "severe-storm"

# Order matters: the colour palette is assigned along this sequence.
CATEGORIES: Tuple[str, ...] = (
    WINTER_STORM_FREEZE,
    DROUGHT_WILDFIRE,
    FLOODING,
    TROPICAL_CYCLONE,
    SEVERE_STORM,
)


class MalformedRecordError(ValueError):
    """A record has no usable date or a negative / non-numeric magnitude."""


class UnknownCategoryError(KeyError):
    """A lookup was asked about a category outside `CATEGORIES`."""


@dataclass(frozen=True)
class EventRecord:
    """One disaster event.

    `year` is authoritative for the vertical band; only the month/day of
    `occurred_on` matter for the horizontal position.
    """
    category: str
    # billions of US$
    magnitude: float
    occurred_on: date
    year: int
    name: str
