"""
Test Suite for the Rotation Generator

Covers the day-by-day assignment rules, the rest day after night shifts,
Sunday staffing, leave synthesis and degenerate inputs.
"""

import pytest
import random
from datetime import date, timedelta
import sys
from pathlib import Path

# Setup import path for src
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rotation_scheduler.data_manager import Worker, ShiftType
from rotation_scheduler.scheduler_logic import (
    ScheduleGenerator, generate_schedule, SCHEDULE_DAYS
)

MONDAY = date(2024, 1, 1)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)


def make_workers(count):
    names = ["Alice", "Bob", "Charlie", "Diana", "Eve", "Frank"]
    return [Worker(id=i + 1, name=names[i]) for i in range(count)]


def real_entries_on(schedule, day):
    return [e for e in schedule if e.date == day and e.shift.is_real]


def leave_dates_for(schedule, worker_id):
    return {e.date for e in schedule if e.worker_id == worker_id and e.shift is ShiftType.LEAVE}


@pytest.fixture
def workers():
    return make_workers(4)


@pytest.mark.parametrize("seed", range(10))
@pytest.mark.parametrize("count", [2, 3, 4, 6])
@pytest.mark.parametrize("start", [MONDAY, SATURDAY, SUNDAY])
def test_rotation_rules_hold_for_every_day(seed, count, start):
    """Property check across seeds, team sizes and start weekdays."""
    schedule = generate_schedule(make_workers(count), start, random.Random(seed))

    earliest = start - timedelta(days=1) if start.weekday() == 6 else start
    assert all(earliest <= e.date <= start + timedelta(days=31) for e in schedule)

    for offset in range(SCHEDULE_DAYS):
        day = start + timedelta(days=offset)
        real = real_entries_on(schedule, day)
        shifts = [e.shift for e in real]

        # A worker holds at most one real shift per day
        assert len({e.worker_id for e in real}) == len(real)

        if day.weekday() == 6:
            assert len(real) <= 3
            assert len(set(shifts)) == len(shifts)
        elif len(real) >= 2:
            assert shifts.count(ShiftType.EVENING) == 1
            assert shifts.count(ShiftType.NIGHT) == 1
        else:
            assert all(s is ShiftType.MORNING for s in shifts)

        # Nobody works the day after a night shift
        night_workers = {e.worker_id for e in real if e.shift is ShiftType.NIGHT}
        next_day_workers = {e.worker_id for e in real_entries_on(schedule, day + timedelta(days=1))}
        assert not night_workers & next_day_workers


@pytest.mark.parametrize("seed", range(10))
def test_night_shift_leave_entries(seed, workers):
    """
    Why this is important: leave entries are the only record a worker gets of
    their rest days, so every night shift must produce them.
    """
    schedule = generate_schedule(workers, MONDAY, random.Random(seed))

    for entry in schedule:
        if entry.shift is not ShiftType.NIGHT:
            continue
        leave_dates = leave_dates_for(schedule, entry.worker_id)
        next_day = entry.date + timedelta(days=1)
        assert next_day in leave_dates
        if entry.date.weekday() in (5, 6):
            assert entry.date + timedelta(days=2) in leave_dates


def test_saturday_night_gets_sunday_and_monday_leave(workers):
    schedule = generate_schedule(workers, SATURDAY, random.Random(3))
    night = [e for e in real_entries_on(schedule, SATURDAY) if e.shift is ShiftType.NIGHT]
    assert len(night) == 1

    leave_dates = leave_dates_for(schedule, night[0].worker_id)
    assert date(2024, 1, 7) in leave_dates
    assert date(2024, 1, 8) in leave_dates


def test_sunday_start_covers_each_shift_and_synthesizes_leave():
    """Sunday with three workers: one per shift, leave on both sides of the day."""
    workers = make_workers(3)
    schedule = generate_schedule(workers, SUNDAY, random.Random(11))

    # Three real entries, two leave days for the night worker, two Saturday leaves
    day_one = schedule[:7]
    real = [e for e in day_one if e.shift.is_real]
    assert len(real) == 3
    assert sorted(e.shift.value for e in real) == ["evening", "morning", "night"]
    assert {e.worker_id for e in real} == {w.id for w in workers}
    assert all(e.date == SUNDAY and e.day == "Sunday" for e in real)

    by_shift = {e.shift: e.worker_id for e in real}
    leave = [(e.worker_id, e.date) for e in day_one if e.shift is ShiftType.LEAVE]
    assert sorted(leave) == sorted([
        (by_shift[ShiftType.NIGHT], date(2024, 1, 8)),
        (by_shift[ShiftType.NIGHT], date(2024, 1, 9)),
        (by_shift[ShiftType.MORNING], date(2024, 1, 6)),
        (by_shift[ShiftType.EVENING], date(2024, 1, 6)),
    ])
    saturday_leave = [e for e in day_one if e.date == date(2024, 1, 6)]
    assert all(e.day == "Saturday" for e in saturday_leave)


def test_sunday_leaves_extra_workers_unassigned():
    schedule = generate_schedule(make_workers(5), SUNDAY, random.Random(0))
    real = real_entries_on(schedule, SUNDAY)
    assert len(real) == 3

    day_one = schedule[:7]
    unassigned = {w.id for w in make_workers(5)} - {e.worker_id for e in real}
    assert len(unassigned) == 2
    for worker_id in unassigned:
        assert not [e for e in day_one if e.worker_id == worker_id]
    assert schedule[7].date == SUNDAY + timedelta(days=1)


def test_two_workers_starting_monday():
    """Day 1 splits evening/night; day 2 rests the night worker."""
    workers = make_workers(2)
    schedule = generate_schedule(workers, MONDAY, random.Random(5))

    day_one = real_entries_on(schedule, MONDAY)
    by_shift = {e.shift: e.worker_id for e in day_one}
    assert set(by_shift) == {ShiftType.EVENING, ShiftType.NIGHT}

    day_two = real_entries_on(schedule, MONDAY + timedelta(days=1))
    assert [e.worker_id for e in day_two] == [by_shift[ShiftType.EVENING]]
    assert day_two[0].shift is ShiftType.MORNING


def test_seeded_rng_gives_exact_permutation(workers):
    """The first shuffle of the run decides day one on a weekday."""
    expected = list(workers)
    random.Random(99).shuffle(expected)

    schedule = generate_schedule(workers, MONDAY, random.Random(99))
    day_one = real_entries_on(schedule, MONDAY)

    assert [(e.worker_id, e.shift) for e in day_one] == [
        (expected[0].id, ShiftType.EVENING),
        (expected[1].id, ShiftType.NIGHT),
        (expected[2].id, ShiftType.MORNING),
        (expected[3].id, ShiftType.MORNING),
    ]


def test_same_seed_reproduces_schedule(workers):
    first = generate_schedule(workers, MONDAY, random.Random(2024))
    second = generate_schedule(workers, MONDAY, random.Random(2024))
    assert first == second


def test_each_run_starts_with_fresh_history():
    """A reused generator must not carry rest days over from the previous run."""
    generator = ScheduleGenerator(make_workers(2), random.Random(1))
    generator.generate_monthly_schedule(MONDAY)

    # The previous run ended on 2024-01-30; a night shift there must not
    # exclude anyone from 2024-01-31.
    schedule = generator.generate_monthly_schedule(date(2024, 1, 31))
    assert len(real_entries_on(schedule, date(2024, 1, 31))) == 2


def test_no_workers_returns_empty_schedule():
    assert generate_schedule([], MONDAY) == []


@pytest.mark.parametrize("start", [MONDAY, SUNDAY])
def test_single_worker_degrades_without_error(start):
    worker = make_workers(1)
    schedule = generate_schedule(worker, start, random.Random(0))

    assert schedule
    assert all(e.worker_id == 1 for e in schedule)
    real = [e for e in schedule if e.shift.is_real]
    assert len(real) == SCHEDULE_DAYS
    assert all(e.shift is ShiftType.MORNING for e in real)


def test_leave_and_real_shift_can_share_a_date():
    """
    Why this is important: Sunday leave is dated the previous Saturday and a
    Saturday night worker's Monday leave does not stop them being rostered on
    Monday. Both overlaps are part of the rotation's behaviour.
    """
    workers = make_workers(3)
    schedule = generate_schedule(workers, SATURDAY, random.Random(8))

    saturday = {e.shift: e.worker_id for e in real_entries_on(schedule, SATURDAY)}
    sunday = real_entries_on(schedule, SUNDAY)
    assert {e.worker_id for e in sunday} == {saturday[ShiftType.MORNING], saturday[ShiftType.EVENING]}

    for entry in sunday:
        assert SATURDAY in leave_dates_for(schedule, entry.worker_id)

    night_worker = saturday[ShiftType.NIGHT]
    monday = date(2024, 1, 8)
    assert monday in leave_dates_for(schedule, night_worker)
    assert night_worker in {e.worker_id for e in real_entries_on(schedule, monday)}


def test_leave_entries_follow_their_day_in_output_order(workers):
    """Leave rows come right after the real assignments of the day that produced them."""
    schedule = generate_schedule(workers, MONDAY, random.Random(4))
    first_leave = next(i for i, e in enumerate(schedule) if e.shift is ShiftType.LEAVE)

    assert all(e.date == MONDAY for e in schedule[:first_leave])
    assert schedule[first_leave].date == MONDAY + timedelta(days=1)


def test_worker_name_is_snapshotted():
    workers = [Worker(id="w-1", name="Alice"), Worker(id="w-2", name="Bob")]
    schedule = generate_schedule(workers, MONDAY, random.Random(0))
    names = {e.worker_id: e.worker_name for e in schedule}
    assert names == {"w-1": "Alice", "w-2": "Bob"}
