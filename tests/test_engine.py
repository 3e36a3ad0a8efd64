"""
Tests for costline/engine.py

Scales fixed at construction, the filter toggle, the render cycle
(marks, costliest-of-year labels, axes, legend) and hover tooltips.
"""
import numpy as np
import pytest

from costline.dataset import EventDataset
from costline.engine import FilterState, TimelineConfig, TimelineEngine, Tooltip
from costline.palette import FALLBACK_COLOR


# ── construction ──────────────────────────────────────────────────────────────

class TestConstruction:
    def test_empty_dataset_rejected(self):
        with pytest.raises(ValueError):
            TimelineEngine(EventDataset.build([]))

    def test_inner_size_from_margins(self):
        cfg = TimelineConfig()
        assert cfg.width == 735
        assert cfg.height == 760

    def test_year_bands_newest_on_top(self, mixed_engine):
        assert mixed_engine.y_scale.domain == [2021, 2012, 2005]
        assert mixed_engine.y_scale(2021) == 0.0
        assert mixed_engine.y_scale(2005) == pytest.approx(2 * 760 / 3)

    def test_time_axis_spans_template_year(self, mixed_engine):
        assert mixed_engine.template_year == 2021
        assert mixed_engine.x_scale.start.isoformat() == "2021-01-01"
        assert mixed_engine.x_scale.end.isoformat() == "2021-12-31"

    def test_radius_domain_is_global_range(self, mixed_engine):
        assert mixed_engine.radius_scale.domain == (1.0, 125.0)
        assert mixed_engine.radius_of(1.0) == pytest.approx(4.0)
        assert mixed_engine.radius_of(125.0) == pytest.approx(140.0)


# ── FilterState / toggle ──────────────────────────────────────────────────────

class TestToggle:
    def test_filter_state_toggle(self):
        fs = FilterState()
        assert fs.toggle("flooding") is True
        assert fs.toggle("flooding") is False
        assert fs.selected == set()

    def test_filter_state_copies_initial_selection(self):
        chosen = {"flooding"}
        fs = FilterState(chosen)
        fs.toggle("flooding")
        fs.toggle("drought-wildfire")
        assert chosen == {"flooding"}

    def test_double_toggle_restores_membership(self, mixed_engine):
        mixed_engine.toggle_category("severe-storm")
        before = mixed_engine.selected
        mixed_engine.toggle_category("flooding")
        mixed_engine.toggle_category("flooding")
        assert mixed_engine.selected == before

    def test_multi_select(self, mixed_engine):
        mixed_engine.toggle_category("flooding")
        frame = mixed_engine.toggle_category("severe-storm")
        assert frame.selected == {"flooding", "severe-storm"}
        assert sorted(m.name for m in frame.marks) == ["Hawaii Flooding", "Southern Storms"]

    def test_per_year_max_stable_across_toggles(self, mixed_engine):
        before = dict(mixed_engine.dataset.per_year_max)
        for c in ("flooding", "tropical-cyclone", "flooding", "drought-wildfire"):
            mixed_engine.toggle_category(c)
        assert mixed_engine.dataset.per_year_max == before

    def test_axes_stable_across_toggles(self, mixed_engine):
        first = mixed_engine.render()
        after = mixed_engine.toggle_category("flooding")
        assert after.x_ticks == first.x_ticks
        assert after.y_ticks == first.y_ticks

    def test_clear_filter_shows_all(self, mixed_engine):
        mixed_engine.toggle_category("flooding")
        frame = mixed_engine.clear_filter()
        assert frame.selected == frozenset()
        assert len(frame.marks) == 6


# ── render ────────────────────────────────────────────────────────────────────

class TestRender:
    def test_katrina_scenario(self, katrina_dataset):
        engine = TimelineEngine(katrina_dataset)
        frame = engine.render(FilterState())
        assert len(frame.marks) == 2
        assert [lb.text for lb in frame.labels] == ["Katrina"]

        frame = engine.toggle_category("flooding")
        assert frame.selected == {"flooding"}
        assert len(frame.marks) == 2

        frame = engine.toggle_category("flooding")
        assert frame.selected == frozenset()
        assert len(frame.marks) == 2

    def test_katrina_geometry(self, katrina_dataset):
        frame = TimelineEngine(katrina_dataset).render()
        katrina, spring = frame.marks
        assert katrina.x == pytest.approx(240 / 364 * 735)
        assert spring.x == pytest.approx(59 / 364 * 735)
        assert katrina.y == 10.0
        assert katrina.radius == pytest.approx(140.0)
        assert spring.radius == pytest.approx(4.0)
        assert katrina.path == "M-140,0A140,140,0,0,1,140,0L0,0Z"
        [label] = frame.labels
        assert (label.x, label.y) == (katrina.x, 20.0)
        assert label.anchor == "middle"

    def test_hidden_maximum_is_not_replaced(self, hidden_max_dataset):
        engine = TimelineEngine(hidden_max_dataset)
        frame = engine.toggle_category("flooding")
        assert [m.name for m in frame.marks] == ["A"]
        assert frame.labels == ()

    def test_hidden_maximum_labelled_when_visible(self, hidden_max_dataset):
        frame = TimelineEngine(hidden_max_dataset).render()
        assert [lb.text for lb in frame.labels] == ["B"]

    def test_ties_all_labelled(self, rec):
        ds = EventDataset.build([
            rec("flooding", 40, "2003-05-01", "first"),
            rec("severe-storm", 40, "2003-09-01", "second"),
            rec("flooding", 39.999, "2003-10-01", "close"),
        ])
        frame = TimelineEngine(ds).render()
        assert sorted(lb.text for lb in frame.labels) == ["first", "second"]

    def test_one_label_per_year(self, mixed_engine):
        frame = mixed_engine.render()
        assert sorted(lb.text for lb in frame.labels) == ["Katrina", "Sandy", "Texas Freeze"]

    def test_same_month_day_same_x(self, rec):
        ds = EventDataset.build([
            rec("flooding", 1, "1999-07-04", "old"),
            rec("flooding", 2, "2010-07-04", "new"),
        ])
        old, new = TimelineEngine(ds).render().marks
        assert old.x == new.x
        assert old.y != new.y

    def test_leap_day_positioned_as_march_first(self, rec):
        ds = EventDataset.build([
            rec("flooding", 1, "2004-02-29", "leap"),
            rec("flooding", 2, "2005-03-01", "march"),
        ])
        leap, march = TimelineEngine(ds).render().marks
        assert leap.x == march.x

    def test_radius_monotonic_and_bounded(self, mixed_engine):
        marks = sorted(mixed_engine.render().marks, key=lambda m: m.magnitude)
        radii = [m.radius for m in marks]
        assert all(a < b for a, b in zip(radii, radii[1:]))
        assert all(4.0 - 1e-9 <= r <= 140.0 + 1e-9 for r in radii)

    def test_radius_uses_global_range_when_filtered(self, mixed_engine):
        full = mixed_engine.render().marks_by_key()
        filtered = mixed_engine.toggle_category("severe-storm").marks_by_key()
        assert filtered[1].radius == full[1].radius

    def test_marks_keyed_by_dataset_index(self, mixed_engine):
        frame = mixed_engine.toggle_category("tropical-cyclone")
        assert [m.key for m in frame.marks] == [0, 3]
        assert [lb.key for lb in frame.labels] == [0, 3]

    def test_colors_from_palette(self, mixed_engine):
        colors = {m.category: m.color for m in mixed_engine.render().marks}
        assert colors["flooding"] == "#41b6c4"
        assert colors["tropical-cyclone"] == "#081d58"

    def test_unknown_category_renders_with_fallback(self, rec):
        ds = EventDataset.build([
            rec("volcano", 3, "2001-05-18", "Eruption"),
            rec("flooding", 1, "2001-06-01", "Flood"),
        ])
        frame = TimelineEngine(ds).render()
        assert len(frame.marks) == 2
        assert frame.marks[0].color == FALLBACK_COLOR
        assert frame.legend[0].label == ""

    def test_explicit_filter_state_does_not_mutate_engine(self, mixed_engine):
        frame = mixed_engine.render(FilterState({"flooding"}))
        assert [m.name for m in frame.marks] == ["Hawaii Flooding"]
        assert mixed_engine.selected == frozenset()

    def test_rerender_is_idempotent(self, mixed_engine):
        mixed_engine.toggle_category("drought-wildfire")
        assert mixed_engine.render() == mixed_engine.render()
        assert [r.name for r in mixed_engine.visible] == ["Drought"]

    def test_axis_ticks(self, mixed_engine):
        frame = mixed_engine.render()
        assert [t.label for t in frame.x_ticks][0] == "Jan"
        assert len(frame.x_ticks) == 12
        assert [t.label for t in frame.y_ticks] == ["2021", "2012", "2005"]

    def test_mark_outline_is_translated(self, katrina_dataset):
        mark = TimelineEngine(katrina_dataset).render().marks[0]
        pts = mark.outline()
        np.testing.assert_allclose(pts[-1], [mark.x, mark.y])
        assert pts[:, 1].min() == pytest.approx(mark.y - mark.radius)


# ── legend ────────────────────────────────────────────────────────────────────

class TestLegend:
    def test_entries_once_per_category_in_first_seen_order(self, mixed_engine):
        legend = mixed_engine.render().legend
        assert [e.category for e in legend] == [
            "tropical-cyclone", "severe-storm", "drought-wildfire", "winter-storm-freeze", "flooding",
        ]
        assert [e.count for e in legend] == [2, 1, 1, 1, 1]

    def test_selected_emphasis(self, mixed_engine):
        legend = {e.category: e for e in mixed_engine.toggle_category("flooding").legend}
        assert legend["flooding"].selected
        assert legend["flooding"].text_color == "black"
        assert legend["severe-storm"].text_color == "grey"

    def test_nothing_selected_all_muted(self, mixed_engine):
        assert {e.text_color for e in mixed_engine.render().legend} == {"grey"}

    def test_layout(self, mixed_engine):
        legend = mixed_engine.render().legend
        assert [(e.cx, e.cy) for e in legend[:2]] == [(10.0, 10.0), (10.0, 24.0)]
        assert [(e.text_x, e.text_y) for e in legend[:2]] == [(20.0, 14.0), (20.0, 28.0)]

    def test_display_names(self, mixed_engine):
        labels = [e.label for e in mixed_engine.render().legend]
        assert labels[0] == "Tropical cyclones"
        assert labels[3] == "Winter storms, freezing"


# ── hover ─────────────────────────────────────────────────────────────────────

class TestHover:
    def test_tooltip_for_visible_mark(self, katrina_dataset):
        engine = TimelineEngine(katrina_dataset)
        tip = engine.hover(0)
        assert tip == Tooltip(name="Katrina", magnitude=50)
        assert tip.lines() == ["Katrina", "50 Billion"]

    def test_tooltip_keeps_full_precision(self):
        assert Tooltip(name="x", magnitude=1234.5678).lines() == ["x", "1234.5678 Billion"]
        assert Tooltip(name="y", magnitude=0.35).lines()[1] == "0.35 Billion"

    def test_hidden_mark_has_no_tooltip(self, hidden_max_dataset):
        engine = TimelineEngine(hidden_max_dataset)
        engine.toggle_category("flooding")
        with pytest.raises(KeyError):
            engine.hover(1)
