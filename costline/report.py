from __future__ import annotations

"""
Costline report generator
-------------------------
Writes a DOCX snapshot of the current timeline view:

- dataset summary and the active category filter
- the timeline chart itself (drawn with matplotlib, embedded as PNG)
- a legend table (category, records, shown or not)
- the costliest event of every year, computed on the *full* dataset,
  with a column saying whether it is visible under the current filter

python-docx is imported lazily so the rest of the package works without it.
"""

from dataclasses import dataclass, field
from datetime import datetime
import io
import logging
import os
import tempfile
from typing import List, Optional

from .draw import draw_frame
from .engine import TimelineEngine

logger = logging.getLogger(__name__)


@dataclass
class DatasetCitation:
    """Source metadata printed in the report."""
    database_name: str = "U.S. Billion-Dollar Weather and Climate Disasters"
    institutional_author: str = "NOAA National Centers for Environmental Information (NCEI)"
    website: str = "https://www.ncei.noaa.gov/access/billions/"
    file_name: Optional[str] = None


@dataclass
class ReportConfig:
    title: str = "Costline Report"
    subtitle: str = "Billion-dollar disasters by time of year"
    citation: DatasetCitation = field(default_factory=DatasetCitation)
    chart_width_inches: float = 6.0
    # Optional: CLI commands that produced the current view
    command_log: Optional[List[str]] = None


def generate_docx_report(
    engine: TimelineEngine,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """Write the report for the engine's current filter and return its path."""
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.shared import Inches, Pt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    frame = engine.render()
    dataset = engine.dataset
    visible_keys = set(frame.marks_by_key())

    # chart bytes are kept in memory so the temp directory can go right away
    with tempfile.TemporaryDirectory(prefix="costline_report_") as tmpdir:
        chart_path = draw_frame(frame, engine.config, os.path.join(tmpdir, "timeline.png"))
        with open(chart_path, "rb") as f:
            chart_png = io.BytesIO(f.read())

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    years = dataset.years_descending()
    _kv("Events in dataset", str(len(dataset)))
    _kv("Events shown", str(len(frame.marks)))
    _kv("Years", f"{years[-1]} to {years[0]}")
    lo, hi = dataset.magnitude_range
    _kv("Cost range", f"{lo:g} to {hi:g} billion US$")
    if frame.selected:
        _kv("Category filter", ", ".join(engine.label_of(c) or c for c in sorted(frame.selected)))
    else:
        _kv("Category filter", "none (all categories shown)")

    doc.add_heading("Timeline", level=1)
    doc.add_picture(chart_png, width=Inches(config.chart_width_inches))
    doc.add_paragraph(
        "Each half-disc is one event. Its area is proportional to the cost; its horizontal "
        "position is the day of the year, its row the year. The costliest event of each "
        "year is labelled when it is shown."
    )

    doc.add_heading("Categories", level=1)
    t = doc.add_table(rows=1, cols=3)
    h = t.rows[0].cells
    h[0].text = "Category"
    h[1].text = "Events"
    h[2].text = "Shown"
    for entry in frame.legend:
        row = t.add_row().cells
        row[0].text = entry.label or entry.category
        row[1].text = str(entry.count)
        row[2].text = "yes" if (entry.selected or not frame.selected) else "no"

    doc.add_heading("Costliest event per year", level=1)
    t2 = doc.add_table(rows=1, cols=5)
    h = t2.rows[0].cells
    h[0].text = "Year"
    h[1].text = "Event"
    h[2].text = "Category"
    h[3].text = "Cost (billion US$)"
    h[4].text = "Shown"
    for year, top in dataset.costliest_per_year():
        for key, r in top:
            row = t2.add_row().cells
            row[0].text = str(year)
            row[1].text = r.name
            row[2].text = engine.label_of(r.category) or r.category
            row[3].text = f"{r.magnitude:g}"
            row[4].text = "yes" if key in visible_keys else "no"

    doc.add_heading("Source", level=1)
    cit = config.citation
    doc.add_paragraph(f"{cit.institutional_author}. {cit.database_name}. {cit.website}")
    if cit.file_name:
        doc.add_paragraph(f"Data file used: {cit.file_name}")

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as costline_version
    doc.add_paragraph(f"Costline version: {costline_version}")
    doc.add_paragraph(f"Report generated at: {datetime.now().isoformat(timespec='seconds')}")
    if config.command_log:
        doc.add_paragraph("Commands used (log):")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    logger.info("report written to %s", out_path)
    return out_path
