"""Tests for the thread pool helpers."""
from __future__ import annotations

import pytest

from normalmap_pipeline.core.utils_parallel import run_parallel, split_range


def test_split_range_covers_every_index() -> None:
    spans = split_range(10, 3)
    assert spans == [(0, 4), (4, 7), (7, 10)]


def test_split_range_never_creates_empty_spans() -> None:
    assert split_range(2, 8) == [(0, 1), (1, 2)]
    assert split_range(0, 4) == []


def test_run_parallel_preserves_order() -> None:
    assert run_parallel(lambda value: value * value, [3, 1, 2], max_workers=3) == [9, 1, 4]


def test_run_parallel_propagates_errors() -> None:
    def explode(value: int) -> int:
        if value == 2:
            raise RuntimeError("boom")
        return value

    with pytest.raises(RuntimeError, match="boom"):
        run_parallel(explode, [1, 2, 3], max_workers=2)
