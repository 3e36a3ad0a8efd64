"""
Scales and shapes
=================

Small, explicit positioning primitives used by the timeline engine:

- BandScale: discrete value -> fixed-width row (years on the vertical axis)
- TimeScale: calendar date -> pixel (month/day on the horizontal axis)
- SqrtScale: magnitude -> radius, so half-disc *area* grows linearly
- half_disc / half_disc_path: geometry of one 180-degree mark

All coordinates are screen coordinates: x to the right, y pointing down.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
import math
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np


def reanchor(d: date, year: int) -> date:
    """Move `d` onto `year`, keeping month and day.

    Feb 29 on a non-leap target year rolls over to Mar 1.
    """
    try:
        return d.replace(year=year)
    except ValueError:
        return date(year, 3, 1)


@dataclass(frozen=True)
class Tick:
    """One axis tick: pixel position along the axis and its text."""
    position: float
    label: str


@dataclass
class BandScale:
    """Discrete scale with no padding: each domain value owns one row."""
    domain: Sequence[Hashable]
    range: Tuple[float, float]
    _index: Dict[Hashable, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.domain = list(dict.fromkeys(self.domain))
        self._index = {v: i for i, v in enumerate(self.domain)}

    @property
    def step(self) -> float:
        r0, r1 = self.range
        return (r1 - r0) / len(self.domain) if self.domain else 0.0

    @property
    def bandwidth(self) -> float:
        return self.step

    def __call__(self, value: Hashable) -> Optional[float]:
        i = self._index.get(value)
        if i is None:
            return None
        return self.range[0] + i * self.step

    def ticks(self, fmt: str = "{:d}") -> List[Tick]:
        # ticks sit in the middle of each band
        half = self.bandwidth / 2
        return [Tick(self(v) + half, fmt.format(v)) for v in self.domain]


@dataclass
class TimeScale:
    """Linear scale over calendar days between `start` and `end`."""
    start: date
    end: date
    range: Tuple[float, float]

    def __call__(self, d: date) -> float:
        d0 = self.start.toordinal()
        span = self.end.toordinal() - d0
        r0, r1 = self.range
        if span == 0:
            return (r0 + r1) / 2
        return r0 + (d.toordinal() - d0) / span * (r1 - r0)

    def ticks(self, fmt: str = "%b") -> List[Tick]:
        """First day of every month inside the domain."""
        out: List[Tick] = []
        y, m = self.start.year, self.start.month
        if self.start.day != 1:
            m += 1
        while True:
            if m > 12:
                y, m = y + 1, 1
            d = date(y, m, 1)
            if d > self.end:
                break
            out.append(Tick(self(d), d.strftime(fmt)))
            m += 1
        return out


@dataclass
class SqrtScale:
    """Square-root scale: r0 + (sqrt(x) - sqrt(d0)) / (sqrt(d1) - sqrt(d0)) * (r1 - r0).

    A degenerate domain (d0 == d1) maps every value to the middle of the range.
    Values outside the domain are extrapolated, not clamped.
    """
    domain: Tuple[float, float]
    range: Tuple[float, float]

    def __call__(self, x: float) -> float:
        s0, s1 = math.sqrt(self.domain[0]), math.sqrt(self.domain[1])
        r0, r1 = self.range
        if s1 == s0:
            return (r0 + r1) / 2
        return r0 + (math.sqrt(x) - s0) / (s1 - s0) * (r1 - r0)


def half_disc(radius: float, segments: int = 48) -> np.ndarray:
    """Vertices of a half-disc with its flat side down, centred on (0, 0).

    The sweep runs from the left edge over the top to the right edge and is
    closed back through the centre (inner radius 0). Shape: (segments + 2, 2).
    """
    theta = np.linspace(math.pi, 0.0, segments + 1)
    arc = np.column_stack((radius * np.cos(theta), -radius * np.sin(theta)))
    return np.vstack((arc, [[0.0, 0.0]]))


def half_disc_path(radius: float) -> str:
    """SVG path data for the same half-disc, for SVG rendering surfaces."""
    r = f"{radius:g}"
    return f"M-{r},0A{r},{r},0,0,1,{r},0L0,0Z"
