"""
EventDataset (validated records + precomputed aggregates)
=========================================================

The dataset is built once and never changes. Building it:

1) validates every record (all-or-nothing: one bad record, no dataset)
2) computes the aggregates the timeline needs:
   - `magnitude_range`: (min, max) over *all* records, so radii stay
     comparable no matter which categories are visible
   - `years`: distinct years (domain of the vertical bands)
   - `per_year_max`: year -> largest magnitude in that year
   - `category_counts`: category -> number of records, in first-seen order
     (the legend is built from this)

The aggregates come from the unfiltered data. Filtering later never touches
them, which is why a year whose costliest event is hidden shows no label.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
import math
import numbers
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from .models import EventRecord, MalformedRecordError


def _check_record(i: int, r: EventRecord) -> None:
    """Raise MalformedRecordError if record number `i` is unusable."""
    if not isinstance(r.occurred_on, date):
        raise MalformedRecordError(f"record {i} ({r.name!r}): missing or unparseable date")
    if isinstance(r.year, bool) or not isinstance(r.year, numbers.Integral):
        raise MalformedRecordError(f"record {i} ({r.name!r}): year must be an integer, got {r.year!r}")
    if r.occurred_on.year != r.year:
        raise MalformedRecordError(
            f"record {i} ({r.name!r}): year {r.year} does not match date {r.occurred_on.isoformat()}"
        )
    m = r.magnitude
    if isinstance(m, bool) or not isinstance(m, numbers.Real):
        raise MalformedRecordError(f"record {i} ({r.name!r}): magnitude must be numeric, got {m!r}")
    if not math.isfinite(m) or m < 0:
        raise MalformedRecordError(f"record {i} ({r.name!r}): magnitude must be a non-negative number, got {m!r}")


@dataclass(frozen=True, eq=False)
class EventDataset:
    """Immutable collection of events plus filter-independent aggregates.

    The mappings are read-only views; datasets compare and hash by identity.
    """
    records: Tuple[EventRecord, ...]
    magnitude_range: Optional[Tuple[float, float]]
    years: frozenset
    per_year_max: Mapping[int, float]
    category_counts: Mapping[str, int]

    @classmethod
    def build(cls, records: Iterable[EventRecord]) -> "EventDataset":
        """Validate `records` and compute the aggregates.

        Raises:
            MalformedRecordError: on the first invalid record.
        """
        recs = tuple(records)
        for i, r in enumerate(recs):
            _check_record(i, r)

        per_year_max: Dict[int, float] = {}
        category_counts: Dict[str, int] = {}
        years: Set[int] = set()
        for r in recs:
            years.add(r.year)
            if r.year not in per_year_max or r.magnitude > per_year_max[r.year]:
                per_year_max[r.year] = r.magnitude
            category_counts[r.category] = category_counts.get(r.category, 0) + 1

        mags = [r.magnitude for r in recs]
        magnitude_range = (min(mags), max(mags)) if mags else None

        return cls(
            records=recs,
            magnitude_range=magnitude_range,
            years=frozenset(years),
            per_year_max=MappingProxyType(per_year_max),
            category_counts=MappingProxyType(category_counts),
        )

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[EventRecord]:
        return iter(self.records)

    def max_year(self) -> int:
        """Latest year present (the template year for the horizontal axis)."""
        if not self.years:
            raise ValueError("dataset is empty: no max year")
        return max(self.years)

    def years_descending(self) -> List[int]:
        return sorted(self.years, reverse=True)

    def categories(self) -> List[str]:
        """Distinct categories in first-appearance order."""
        return list(self.category_counts)

    def filtered_by(self, categories: Optional[Iterable[str]]) -> List[EventRecord]:
        """Records whose category is in `categories`.

        An empty (or None) selection means "no filter": every record is
        returned. Dataset order is preserved.
        """
        wanted = set(categories or ())
        if not wanted:
            return list(self.records)
        return [r for r in self.records if r.category in wanted]

    def keyed(self, categories: Optional[Iterable[str]] = None) -> List[Tuple[int, EventRecord]]:
        """Like `filtered_by` but paired with each record's dataset index."""
        wanted = set(categories or ())
        return [(i, r) for i, r in enumerate(self.records) if not wanted or r.category in wanted]

    def costliest_per_year(self) -> List[Tuple[int, List[Tuple[int, EventRecord]]]]:
        """(year, [(index, record), ...]) for the records holding each year's
        maximum, newest year first. Ties are all included."""
        by_year: Dict[int, List[Tuple[int, EventRecord]]] = {}
        for i, r in enumerate(self.records):
            if r.magnitude == self.per_year_max[r.year]:
                by_year.setdefault(r.year, []).append((i, r))
        return [(y, by_year[y]) for y in self.years_descending()]
