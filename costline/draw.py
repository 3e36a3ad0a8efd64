"""
Drawing surface (matplotlib)
----------------------------

Turns a `Frame` produced by the engine into pixels. Two ways to use it:

- `draw_frame(frame, config, "chart.png")` writes an image (PNG/SVG/PDF by
  extension), used by the CLI `render` command and by the DOCX report.
- `show_interactive(engine)` opens a window where clicking a legend row
  toggles that category and hovering a half-disc shows its tooltip.

The figure is laid out in pixels: one figure of container size at 100 dpi,
a transparent full-size overlay for the legend, and a chart axes placed
inside the margins. Both axes have y pointing down, like the frame.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import os
from typing import Dict, Optional

from .engine import Frame, TimelineConfig, TimelineEngine

logger = logging.getLogger(__name__)

DPI = 100
LEGEND_GID = "legend:"
# config sizes are pixels, matplotlib fonts are points
PX_TO_PT = 0.75
GRID_COLOR = "#e0e0e0"
MARK_EDGE = "#555555"


def _pyplot():
    # Lazy import: the engine works without matplotlib until something is drawn.
    try:
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib.\n"
            "Install it with: python -m pip install matplotlib"
        ) from e
    return plt


@dataclass
class Painted:
    """Handles to the artists of one painted frame (used for interaction)."""
    chart: object
    overlay: object
    marks: Dict[int, object] = field(default_factory=dict)
    tooltip: Optional[object] = None


def paint(fig, frame: Frame, config: TimelineConfig) -> Painted:
    """Clear `fig` and draw `frame` on it."""
    from matplotlib.patches import Circle, Polygon

    fig.clear()
    W, H = config.container_width, config.container_height

    overlay = fig.add_axes([0, 0, 1, 1])
    overlay.set_xlim(0, W)
    overlay.set_ylim(H, 0)
    overlay.set_axis_off()
    overlay.patch.set_visible(False)

    chart = fig.add_axes([
        config.margin_left / W,
        config.margin_bottom / H,
        frame.width / W,
        frame.height / H,
    ])
    chart.set_xlim(0, frame.width)
    chart.set_ylim(frame.height, 0)
    chart.patch.set_visible(False)
    for spine in chart.spines.values():
        spine.set_visible(False)

    # top month axis
    chart.set_xticks([t.position for t in frame.x_ticks])
    chart.set_xticklabels([t.label for t in frame.x_ticks])
    chart.xaxis.tick_top()
    chart.tick_params(axis="x", length=config.x_tick_size, pad=config.tick_padding)

    # left year axis, one gridline across the chart per year
    chart.set_yticks([t.position for t in frame.y_ticks])
    chart.set_yticklabels([t.label for t in frame.y_ticks])
    chart.tick_params(axis="y", length=0, pad=config.tick_padding)
    chart.yaxis.grid(True, color=GRID_COLOR, linewidth=0.8)
    chart.set_axisbelow(True)

    painted = Painted(chart=chart, overlay=overlay)

    # big marks first so small ones stay visible (and hoverable) on top
    for z, mark in enumerate(sorted(frame.marks, key=lambda m: -m.radius)):
        poly = Polygon(
            mark.outline(), closed=True,
            facecolor=mark.color, edgecolor=MARK_EDGE, linewidth=0.4, zorder=2 + z * 1e-6,
        )
        poly.set_gid(str(mark.key))
        chart.add_patch(poly)
        painted.marks[mark.key] = poly

    for label in frame.labels:
        chart.text(
            label.x, label.y, label.text,
            ha="center", va="top", color=label.color, fontsize=label.font_size * PX_TO_PT,
            clip_on=True, zorder=3,
        )

    for entry in frame.legend:
        dot = Circle((entry.cx, entry.cy), config.legend_radius, facecolor=entry.color,
                     edgecolor=MARK_EDGE, linewidth=0.4, picker=True)
        dot.set_gid(LEGEND_GID + entry.category)
        overlay.add_patch(dot)
        txt = overlay.text(entry.text_x, entry.text_y, entry.label or entry.category,
                           color=entry.text_color, fontsize=config.legend_font_size * PX_TO_PT,
                           va="baseline", picker=True)
        txt.set_gid(LEGEND_GID + entry.category)

    painted.tooltip = chart.annotate(
        "", xy=(0, 0), xytext=(config.tooltip_padding, config.tooltip_padding),
        textcoords="offset points", fontsize=9, zorder=10,
        bbox=dict(boxstyle="round", fc="white", ec="#999999"),
    )
    painted.tooltip.set_visible(False)
    return painted


def draw_frame(frame: Frame, config: Optional[TimelineConfig] = None, out_path: str = "timeline.png") -> str:
    """Draw `frame` to an image file and return its path."""
    plt = _pyplot()
    config = config or TimelineConfig()
    fig = plt.figure(figsize=(config.container_width / DPI, config.container_height / DPI), dpi=DPI)
    try:
        paint(fig, frame, config)
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        fig.savefig(out_path, dpi=DPI)
    finally:
        plt.close(fig)
    logger.info("drew %d marks, %d labels to %s", len(frame.marks), len(frame.labels), out_path)
    return out_path


@dataclass
class Interactive:
    """A figure wired to an engine; `painted` is replaced on every redraw."""
    fig: object
    engine: TimelineEngine
    painted: Painted


def connect_interactive(fig, engine: TimelineEngine) -> Interactive:
    """Paint the current frame on `fig` and hook up legend clicks and hover."""
    cfg = engine.config
    current = Interactive(fig=fig, engine=engine, painted=paint(fig, engine.render(), cfg))

    def on_pick(event) -> None:
        gid = event.artist.get_gid() or ""
        if not gid.startswith(LEGEND_GID):
            return
        frame = engine.toggle_category(gid[len(LEGEND_GID):])
        current.painted = paint(fig, frame, cfg)
        fig.canvas.draw_idle()

    def on_move(event) -> None:
        painted = current.painted
        tip = painted.tooltip
        if event.inaxes is not painted.chart:
            if tip.get_visible():
                tip.set_visible(False)
                fig.canvas.draw_idle()
            return
        # topmost (smallest) mark under the pointer wins
        hit = None
        for key, poly in painted.marks.items():
            if poly.contains(event)[0]:
                hit = key
        if hit is None:
            if tip.get_visible():
                tip.set_visible(False)
                fig.canvas.draw_idle()
            return
        tooltip = engine.hover(hit)
        tip.xy = (event.xdata, event.ydata)
        tip.set_text("\n".join(tooltip.lines()))
        tip.set_visible(True)
        fig.canvas.draw_idle()

    fig.canvas.mpl_connect("pick_event", on_pick)
    fig.canvas.mpl_connect("motion_notify_event", on_move)
    return current


def show_interactive(engine: TimelineEngine) -> Interactive:
    """Open a window: click legend rows to filter, hover marks for details."""
    plt = _pyplot()
    cfg = engine.config
    fig = plt.figure(figsize=(cfg.container_width / DPI, cfg.container_height / DPI), dpi=DPI)
    current = connect_interactive(fig, engine)
    plt.show()
    return current
