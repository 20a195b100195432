"""Tests for greedy calendar lane packing."""

from __future__ import annotations

import random
from datetime import date, timedelta

from prosjektstyring.domain.lanes import compute_lanes, dates_overlap
from prosjektstyring.domain.models import Interval


WINDOW_START = "2024-01-01"
WINDOW_END = "2024-01-31"


def _interval(interval_id: str, start: str, end: str) -> Interval:
    return Interval(interval_id=interval_id, start_date=start, end_date=end)


def _random_intervals(rng: random.Random, count: int) -> list[Interval]:
    base = date(2024, 1, 1)
    intervals = []
    for index in range(count):
        start = base + timedelta(days=rng.randint(-5, 35))
        end = start + timedelta(days=rng.randint(0, 9))
        intervals.append(_interval(f"i{index}", start.isoformat(), end.isoformat()))
    return intervals


def _max_depth(intervals: list[Interval]) -> int:
    depth = 0
    for probe in intervals:
        day = probe.start_date
        depth = max(
            depth,
            sum(1 for other in intervals if other.start_date <= day <= other.end_date),
        )
    return depth


# --- documented scenarios ---


def test_overlapping_intervals_use_two_lanes() -> None:
    lanes = compute_lanes(
        [_interval("A", "2024-01-01", "2024-01-05"), _interval("B", "2024-01-03", "2024-01-10")],
        WINDOW_START,
        WINDOW_END,
    )
    assert lanes["A"].total_lanes == 2
    assert lanes["B"].total_lanes == 2
    assert lanes["A"].lane != lanes["B"].lane


def test_back_to_back_intervals_share_lane() -> None:
    lanes = compute_lanes(
        [_interval("A", "2024-01-01", "2024-01-05"), _interval("B", "2024-01-06", "2024-01-10")],
        WINDOW_START,
        WINDOW_END,
    )
    assert lanes["A"].lane == 0
    assert lanes["B"].lane == 0
    assert lanes["A"].total_lanes == 1


def test_shared_boundary_day_counts_as_overlap() -> None:
    lanes = compute_lanes(
        [_interval("A", "2024-01-01", "2024-01-05"), _interval("B", "2024-01-05", "2024-01-10")],
        WINDOW_START,
        WINDOW_END,
    )
    assert lanes["A"].total_lanes == 2
    assert lanes["A"].lane == 0
    assert lanes["B"].lane == 1


def test_interval_outside_window_is_excluded() -> None:
    lanes = compute_lanes(
        [
            _interval("A", "2024-01-01", "2024-01-05"),
            _interval("C", "2024-02-01", "2024-02-05"),
        ],
        WINDOW_START,
        WINDOW_END,
    )
    assert "C" not in lanes
    assert lanes["A"].total_lanes == 1


def test_three_intervals_on_same_day() -> None:
    lanes = compute_lanes(
        [
            _interval("A", "2024-01-10", "2024-01-10"),
            _interval("B", "2024-01-10", "2024-01-10"),
            _interval("C", "2024-01-10", "2024-01-10"),
        ],
        WINDOW_START,
        WINDOW_END,
    )
    assert {item.total_lanes for item in lanes.values()} == {3}
    # Ties keep input order.
    assert [lanes[key].lane for key in "ABC"] == [0, 1, 2]


def test_empty_input_returns_empty_map() -> None:
    assert compute_lanes([], WINDOW_START, WINDOW_END) == {}


# --- edge cases ---


def test_nothing_visible_returns_empty_map() -> None:
    lanes = compute_lanes(
        [_interval("late", "2024-03-01", "2024-03-02")],
        WINDOW_START,
        WINDOW_END,
    )
    assert lanes == {}


def test_partially_visible_intervals_are_packed() -> None:
    lanes = compute_lanes(
        [
            _interval("before", "2023-12-20", "2024-01-02"),
            _interval("after", "2024-01-30", "2024-02-10"),
        ],
        WINDOW_START,
        WINDOW_END,
    )
    assert set(lanes) == {"before", "after"}
    assert lanes["before"].total_lanes == 1


def test_invisible_interval_does_not_reserve_lane() -> None:
    lanes = compute_lanes(
        [
            _interval("hidden", "2023-12-01", "2023-12-31"),
            _interval("shown", "2024-01-01", "2024-01-03"),
        ],
        WINDOW_START,
        WINDOW_END,
    )
    assert lanes == {"shown": lanes["shown"]}
    assert lanes["shown"].lane == 0


def test_intervals_touching_window_edges_are_visible() -> None:
    lanes = compute_lanes(
        [
            _interval("ends_on_first_day", "2023-12-20", WINDOW_START),
            _interval("starts_on_last_day", WINDOW_END, "2024-02-10"),
            _interval("day_before", "2023-12-20", "2023-12-31"),
            _interval("day_after", "2024-02-01", "2024-02-10"),
        ],
        WINDOW_START,
        WINDOW_END,
    )
    assert set(lanes) == {"ends_on_first_day", "starts_on_last_day"}
    assert lanes["ends_on_first_day"].lane == 0
    assert lanes["starts_on_last_day"].lane == 0
    assert lanes["starts_on_last_day"].total_lanes == 1


def test_malformed_interval_is_excluded() -> None:
    lanes = compute_lanes(
        [
            _interval("bad", "2024-01-10", "2024-01-05"),
            _interval("good", "2024-01-04", "2024-01-08"),
        ],
        WINDOW_START,
        WINDOW_END,
    )
    assert "bad" not in lanes
    assert lanes["good"].total_lanes == 1


def test_freed_lane_is_reused_lowest_first() -> None:
    lanes = compute_lanes(
        [
            _interval("A", "2024-01-01", "2024-01-03"),
            _interval("B", "2024-01-01", "2024-01-10"),
            _interval("C", "2024-01-04", "2024-01-06"),
        ],
        WINDOW_START,
        WINDOW_END,
    )
    assert lanes["A"].lane == 0
    assert lanes["B"].lane == 1
    assert lanes["C"].lane == 0
    assert lanes["C"].total_lanes == 2


def test_input_is_not_mutated() -> None:
    intervals = [
        _interval("B", "2024-01-05", "2024-01-09"),
        _interval("A", "2024-01-01", "2024-01-06"),
    ]
    snapshot = list(intervals)
    compute_lanes(intervals, WINDOW_START, WINDOW_END)
    assert intervals == snapshot


# --- invariants over random layouts ---


def test_random_layouts_never_overlap_within_lane() -> None:
    rng = random.Random(7)
    for _ in range(50):
        intervals = _random_intervals(rng, rng.randint(1, 12))
        lanes = compute_lanes(intervals, WINDOW_START, WINDOW_END)
        placed = [interval for interval in intervals if interval.interval_id in lanes]
        for index, first in enumerate(placed):
            for second in placed[index + 1:]:
                if lanes[first.interval_id].lane == lanes[second.interval_id].lane:
                    assert not dates_overlap(
                        first.start_date,
                        first.end_date,
                        second.start_date,
                        second.end_date,
                    )


def test_random_layouts_use_minimal_lane_count() -> None:
    rng = random.Random(11)
    for _ in range(50):
        intervals = _random_intervals(rng, rng.randint(1, 12))
        lanes = compute_lanes(intervals, WINDOW_START, WINDOW_END)
        placed = [interval for interval in intervals if interval.interval_id in lanes]
        if not placed:
            assert lanes == {}
            continue
        totals = {item.total_lanes for item in lanes.values()}
        assert totals == {_max_depth(placed)}
        assert all(0 <= item.lane < item.total_lanes for item in lanes.values())


def test_repeated_calls_are_deterministic() -> None:
    rng = random.Random(3)
    intervals = _random_intervals(rng, 15)
    first = compute_lanes(intervals, WINDOW_START, WINDOW_END)
    second = compute_lanes(intervals, WINDOW_START, WINDOW_END)
    assert first == second


def test_input_order_does_not_matter_with_distinct_starts() -> None:
    base = date(2024, 1, 1)
    intervals = [
        _interval(
            f"i{offset}",
            (base + timedelta(days=offset)).isoformat(),
            (base + timedelta(days=offset + (offset * 5) % 7)).isoformat(),
        )
        for offset in range(20)
    ]
    expected = compute_lanes(intervals, WINDOW_START, WINDOW_END)
    rng = random.Random(5)
    for _ in range(10):
        shuffled = list(intervals)
        rng.shuffle(shuffled)
        assert compute_lanes(shuffled, WINDOW_START, WINDOW_END) == expected
