"""
Pytest fixtures for the Costline tests.

Provides a record factory plus the small datasets used across test modules:
the Katrina / Spring Flood pair, a year whose maximum belongs to another
category, and a multi-year mixed dataset.
"""
from datetime import date

import matplotlib
import pytest

matplotlib.use("Agg")

from costline.dataset import EventDataset
from costline.engine import TimelineEngine
from costline.models import EventRecord


def make_record(category, cost, mid, name, year=None):
    d = date.fromisoformat(mid)
    return EventRecord(category=category, magnitude=cost, occurred_on=d,
                       year=d.year if year is None else year, name=name)


@pytest.fixture
def rec():
    return make_record


@pytest.fixture
def katrina_dataset():
    return EventDataset.build([
        make_record("flooding", 50, "2005-08-29", "Katrina"),
        make_record("flooding", 10, "2005-03-01", "Spring Flood"),
    ])


@pytest.fixture
def hidden_max_dataset():
    # 2010 maximum ("B") is in a category the filter will not select
    return EventDataset.build([
        make_record("flooding", 30, "2010-04-01", "A"),
        make_record("drought-wildfire", 80, "2010-07-01", "B"),
    ])


@pytest.fixture
def mixed_dataset():
    return EventDataset.build([
        make_record("tropical-cyclone", 125.0, "2005-08-29", "Katrina"),
        make_record("severe-storm", 2.5, "2005-04-06", "Southern Storms"),
        make_record("drought-wildfire", 35.0, "2012-07-15", "Drought"),
        make_record("tropical-cyclone", 70.0, "2012-10-30", "Sandy"),
        make_record("winter-storm-freeze", 24.0, "2021-02-16", "Texas Freeze"),
        make_record("flooding", 1.0, "2021-03-15", "Hawaii Flooding"),
    ])


@pytest.fixture
def mixed_engine(mixed_dataset):
    return TimelineEngine(mixed_dataset)
