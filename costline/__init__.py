"""
Costline package
================

Half-disc timeline of billion-dollar disasters with a clickable category filter.

- Records and the validated dataset: `costline/models.py`, `costline/dataset.py`.
- Scales and the layout/render engine: `costline/scales.py`, `costline/engine.py`.
- Drawing (matplotlib) and the DOCX report: `costline/draw.py`, `costline/report.py`.
- The CLI entry point is in `costline/cli.py`.
"""

__version__ = '0.1.0'
