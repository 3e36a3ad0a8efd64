"""
Timeline engine
===============

This is the heart of the project. The engine turns an `EventDataset` into a
description of the chart:

1) Build scales once from the *full* dataset (axes never move when filtering)
   - vertical: one band per year, newest year at the top
   - horizontal: Jan 1 .. Dec 31 of the latest year; every event is
     re-anchored onto that year so only month/day decide its x position
   - radius: square-root scale over the global magnitude range
2) Keep a FilterState (set of selected categories, empty = show all)
3) `render()` projects the visible records onto primitives:
   half-disc marks, "costliest of the year" labels, axis ticks, legend
4) `toggle_category()` flips one category and re-renders

A rendered `Frame` is a complete description of the current view, keyed by
record index. Diffing against the previous frame is the drawing surface's job.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
import logging
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

import numpy as np

from .dataset import EventDataset
from .models import EventRecord
from .palette import color_for, display_name
from .scales import BandScale, SqrtScale, Tick, TimeScale, half_disc, half_disc_path, reanchor

logger = logging.getLogger(__name__)


@dataclass
class TimelineConfig:
    """Chart geometry and styling knobs (pixels)."""
    container_width: int = 800
    container_height: int = 900
    margin_top: int = 120
    margin_right: int = 20
    margin_bottom: int = 20
    margin_left: int = 45

    min_radius: float = 4.0
    max_radius: float = 140.0
    # distance from the top of a year band to the mark centre / label baseline
    mark_offset: float = 10.0
    label_offset: float = 20.0

    legend_radius: float = 5.0
    legend_row: float = 14.0
    legend_x: float = 10.0
    legend_top: float = 10.0
    legend_text_x: float = 20.0
    legend_font_size: int = 12
    selected_color: str = "black"
    unselected_color: str = "grey"

    label_color: str = "grey"
    label_font_size: int = 10
    tooltip_padding: int = 15

    x_tick_size: float = 10.0
    tick_padding: float = 8.0

    @property
    def width(self) -> float:
        return self.container_width - self.margin_left - self.margin_right

    @property
    def height(self) -> float:
        return self.container_height - self.margin_top - self.margin_bottom


@dataclass
class FilterState:
    """Selected categories. Empty means "no filter" (show everything)."""
    selected: Set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.selected = set(self.selected)

    def toggle(self, category: str) -> bool:
        """Flip membership of `category`; return True if it is now selected."""
        if category in self.selected:
            self.selected.discard(category)
            return False
        self.selected.add(category)
        return True

    def clear(self) -> None:
        self.selected.clear()

    def snapshot(self) -> FrozenSet[str]:
        return frozenset(self.selected)


# ---------------- Visual primitives ----------------

@dataclass(frozen=True)
class ArcMark:
    """One half-disc, centred at (x, y) in chart-area coordinates."""
    key: int
    category: str
    name: str
    magnitude: float
    x: float
    y: float
    radius: float
    color: str

    @property
    def path(self) -> str:
        return half_disc_path(self.radius)

    def outline(self, segments: int = 48) -> np.ndarray:
        """Absolute vertices of the half-disc."""
        return half_disc(self.radius, segments) + np.array([self.x, self.y])


@dataclass(frozen=True)
class TextLabel:
    key: int
    text: str
    x: float
    y: float
    color: str
    font_size: int
    anchor: str = "middle"


@dataclass(frozen=True)
class LegendEntry:
    """Clickable legend row. Positions are container coordinates."""
    category: str
    label: str
    color: str
    count: int
    selected: bool
    text_color: str
    cx: float
    cy: float
    text_x: float
    text_y: float


@dataclass(frozen=True)
class Tooltip:
    name: str
    magnitude: float

    def lines(self) -> List[str]:
        return [self.name, f"{self.magnitude:.15g} Billion"]


@dataclass(frozen=True)
class Frame:
    """Everything the drawing surface needs for one render."""
    marks: Tuple[ArcMark, ...]
    labels: Tuple[TextLabel, ...]
    x_ticks: Tuple[Tick, ...]
    y_ticks: Tuple[Tick, ...]
    legend: Tuple[LegendEntry, ...]
    selected: FrozenSet[str]
    width: float
    height: float

    def marks_by_key(self) -> Dict[int, ArcMark]:
        return {m.key: m for m in self.marks}


# ---------------- Engine ----------------

@dataclass
class TimelineEngine:
    """Scales + filter state + render cycle for the half-disc timeline.

    The scales and the legend are fixed at construction. Only `state`
    changes, and only through `toggle_category` / `clear_filter`.
    """
    dataset: EventDataset
    config: TimelineConfig = field(default_factory=TimelineConfig)
    color_of: Callable[[str], str] = color_for
    label_of: Callable[[str], str] = display_name
    state: FilterState = field(default_factory=FilterState)

    y_scale: BandScale = field(init=False)
    x_scale: TimeScale = field(init=False)
    radius_scale: SqrtScale = field(init=False)
    template_year: int = field(init=False)

    _legend: List[Tuple[str, int]] = field(default_factory=list, init=False, repr=False)
    _cache_key: Optional[FrozenSet[str]] = field(default=None, init=False, repr=False)
    _visible: List[Tuple[int, EventRecord]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.dataset) == 0:
            raise ValueError("cannot build a timeline from an empty dataset")
        cfg = self.config
        self.template_year = self.dataset.max_year()

        self.y_scale = BandScale(self.dataset.years_descending(), (0.0, cfg.height))
        self.x_scale = TimeScale(
            date(self.template_year, 1, 1), date(self.template_year, 12, 31), (0.0, cfg.width)
        )
        self.radius_scale = SqrtScale(self.dataset.magnitude_range, (cfg.min_radius, cfg.max_radius))

        # categories never change, so the legend grouping is done once
        self._legend = list(self.dataset.category_counts.items())
        logger.debug(
            "timeline: %d events, %d years, template year %d, magnitudes %s",
            len(self.dataset), len(self.dataset.years), self.template_year, self.dataset.magnitude_range,
        )

    # ---------------- Positioning ----------------
    def x_of(self, record: EventRecord) -> float:
        return self.x_scale(reanchor(record.occurred_on, self.template_year))

    def radius_of(self, magnitude: float) -> float:
        return self.radius_scale(magnitude)

    # ---------------- Filter / render ----------------
    @property
    def selected(self) -> FrozenSet[str]:
        return self.state.snapshot()

    @property
    def visible(self) -> List[EventRecord]:
        """Records shown by the last render."""
        return [r for _, r in self._visible]

    def _visible_for(self, selected: FrozenSet[str]) -> List[Tuple[int, EventRecord]]:
        if selected != self._cache_key:
            self._visible = self.dataset.keyed(selected)
            self._cache_key = selected
        return self._visible

    def render(self, filter_state: Optional[FilterState] = None) -> Frame:
        """Project the visible subset onto marks, labels, axes and legend."""
        cfg = self.config
        selected = (filter_state or self.state).snapshot()
        visible = self._visible_for(selected)

        marks: List[ArcMark] = []
        labels: List[TextLabel] = []
        for key, r in visible:
            x = self.x_of(r)
            band = self.y_scale(r.year)
            marks.append(ArcMark(
                key=key,
                category=r.category,
                name=r.name,
                magnitude=r.magnitude,
                x=x,
                y=band + cfg.mark_offset,
                radius=self.radius_of(r.magnitude),
                color=self.color_of(r.category),
            ))
            # exact comparison: ties at the yearly maximum are all labelled
            if r.magnitude == self.dataset.per_year_max[r.year]:
                labels.append(TextLabel(
                    key=key,
                    text=r.name,
                    x=x,
                    y=band + cfg.label_offset,
                    color=cfg.label_color,
                    font_size=cfg.label_font_size,
                ))

        logger.debug("render: %d of %d events visible, %d labels, selected=%s",
                     len(marks), len(self.dataset), len(labels), sorted(selected))
        return Frame(
            marks=tuple(marks),
            labels=tuple(labels),
            x_ticks=tuple(self.x_scale.ticks("%b")),
            y_ticks=tuple(self.y_scale.ticks("{:d}")),
            legend=tuple(self.legend(selected)),
            selected=selected,
            width=cfg.width,
            height=cfg.height,
        )

    def legend(self, selected: Optional[Iterable[str]] = None) -> List[LegendEntry]:
        cfg = self.config
        chosen = self.selected if selected is None else frozenset(selected)
        out: List[LegendEntry] = []
        for i, (category, count) in enumerate(self._legend):
            on = category in chosen
            out.append(LegendEntry(
                category=category,
                label=self.label_of(category),
                color=self.color_of(category),
                count=count,
                selected=on,
                text_color=cfg.selected_color if on else cfg.unselected_color,
                cx=cfg.legend_x,
                cy=cfg.legend_top + i * cfg.legend_row,
                text_x=cfg.legend_text_x,
                text_y=(i + 1) * cfg.legend_row,
            ))
        return out

    # ---------------- Interaction ----------------
    def toggle_category(self, category: str) -> Frame:
        """Add `category` to the filter if absent, remove it if present, re-render."""
        now_on = self.state.toggle(category)
        logger.info("category %s %s", category, "selected" if now_on else "deselected")
        return self.render()

    def clear_filter(self) -> Frame:
        self.state.clear()
        return self.render()

    def hover(self, key: int) -> Tooltip:
        """Tooltip request for the visible mark with this key."""
        for k, r in self._visible_for(self.selected):
            if k == key:
                return Tooltip(name=r.name, magnitude=r.magnitude)
        raise KeyError(f"no visible event with key {key}")
