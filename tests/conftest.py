from __future__ import annotations

from typing import Any

import polars as pl
import pytest

from plotgrammar.io import load_sample


@pytest.fixture()
def gap() -> pl.DataFrame:
    """The bundled workshop sample."""
    return load_sample()


@pytest.fixture()
def tiny() -> pl.DataFrame:
    return pl.DataFrame(
        {
            "country": ["A", "B", "C", "D"],
            "income": [1000.0, 4000.0, 16000.0, 64000.0],
            "life": [55.0, 63.5, 71.0, 80.2],
            "pop": [1_000_000, 5_000_000, 20_000_000, 2_000_000],
            "region": ["asia", "africa", "asia", "europe"],
        }
    )


def find_in_spec(obj: Any, predicate) -> bool:
    """Recursively scan a chart spec dict for a predicate match."""
    if isinstance(obj, dict):
        if predicate(obj):
            return True
        return any(find_in_spec(v, predicate) for v in obj.values())
    if isinstance(obj, list):
        return any(find_in_spec(v, predicate) for v in obj)
    return False


def collect_in_spec(obj: Any, predicate) -> list[dict]:
    """Return every dict in a chart spec that matches the predicate."""
    out: list[dict] = []
    if isinstance(obj, dict):
        if predicate(obj):
            out.append(obj)
        for v in obj.values():
            out.extend(collect_in_spec(v, predicate))
    elif isinstance(obj, list):
        for v in obj:
            out.extend(collect_in_spec(v, predicate))
    return out
