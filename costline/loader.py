"""
Dataset loader (CSV / Excel -> EventRecord list)
================================================

Reads the disaster cost table and converts each row into an `EventRecord`.

Expected columns: category, cost (billions), year, mid (YYYY-MM-DD), name.

Key ideas:
- Column names are matched loosely ("Cost", " cost ", "COST" all work).
- Conversion helpers (_to_int/_to_float/_to_date) turn blanks and junk into
  None instead of raising; `EventDataset.build` then rejects the bad row
  with a message naming it. The loader itself never drops rows.
- A blank `year` is taken from the date.
"""

from __future__ import annotations
from datetime import date, datetime
import logging
import os
import re
from typing import List, Optional

import pandas as pd

from .dataset import EventDataset
from .models import EventRecord

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def _to_int(x) -> Optional[int]:
    """Convert a cell to int, returning None if missing/invalid."""
    if pd.isna(x): return None
    try:
        f = float(x)
    except (TypeError, ValueError):
        return None
    return int(f) if f.is_integer() else None

def _to_float(x) -> Optional[float]:
    """Convert a cell to float, returning None if missing/invalid."""
    if pd.isna(x): return None
    try: return float(x)
    except (TypeError, ValueError): return None

def _to_date(x) -> Optional[date]:
    if isinstance(x, datetime):
        return None if pd.isna(x) else x.date()
    if isinstance(x, date):
        return x
    if pd.isna(x): return None
    try: return datetime.strptime(str(x).strip(), DATE_FORMAT).date()
    except ValueError: return None

def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x).strip()

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(df: pd.DataFrame, *names: str) -> str:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={cols}")


def read_table(path: str) -> pd.DataFrame:
    ext = os.path.splitext(path)[1].lower()
    if ext in (".xlsx", ".xlsm"):
        df = pd.read_excel(path, engine="openpyxl")
    elif ext in (".csv", ".txt", ""):
        df = pd.read_csv(path)
    else:
        raise ValueError(f"Unsupported file type {ext!r} (use .csv or .xlsx)")
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    return df


def records_from_frame(df: pd.DataFrame) -> List[EventRecord]:
    category_col = _col(df, "category", "Disaster Type", "type")
    cost_col = _col(df, "cost", "Cost (billions)", "magnitude")
    mid_col = _col(df, "mid", "date", "Date")
    name_col = _col(df, "name", "Event", "title")
    year_col = next((c for c in df.columns if _norm(c) == "year"), None)

    records: List[EventRecord] = []
    for _, row in df.iterrows():
        occurred_on = _to_date(row[mid_col])
        year = _to_int(row[year_col]) if year_col else None
        if year is None and occurred_on is not None:
            year = occurred_on.year
        cost = _to_float(row[cost_col])
        records.append(EventRecord(
            category=_to_str(row[category_col]).lower(),
            magnitude=cost,
            occurred_on=occurred_on,
            year=year,
            name=_to_str(row[name_col]),
        ))
    return records


def load_events(path: str) -> List[EventRecord]:
    """Read `path` (.csv or .xlsx) into a list of EventRecord (unvalidated)."""
    df = read_table(path)
    records = records_from_frame(df)
    logger.info("loaded %d rows from %s", len(records), path)
    return records


def load_dataset(path: str) -> EventDataset:
    """Read and validate `path`.

    Raises:
        MalformedRecordError: if any row has no usable date or a bad cost.
    """
    return EventDataset.build(load_events(path))
