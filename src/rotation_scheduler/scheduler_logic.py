"""
Scheduler Logic for Rotation Scheduler

Generates a 30-day rotation day by day: workers are shuffled across morning,
evening and night shifts, night workers are rested the following day,
Sundays follow their own staffing rule, and leave entries are derived from
each day's assignments.
"""

from datetime import date, timedelta
from typing import Dict, List, Optional, Any, Sequence
from dataclasses import dataclass, field
import calendar
import logging
import random
import time

from .data_manager import WorkerRegistry, Worker, ScheduleEntry, ShiftType

logger = logging.getLogger(__name__)

SCHEDULE_DAYS = 30
MIN_WORKERS = 2

SCHEDULING_RULES = {
    "Shift Distribution": [
        "One worker per evening shift (except Sunday)",
        "One worker per night shift (except Sunday)",
        "Sunday: only one worker in morning shift",
        "Regular days: all others work morning shift",
    ],
    "Leave Rules": [
        "Night shift workers get next day off",
        "Saturday night workers get Sunday + Monday off",
        "Sunday night workers get Monday + Tuesday off",
        "Sunday morning/evening workers get Saturday off",
    ],
}


@dataclass
class LastShiftRecord:
    """Most recent real (non-leave) assignment of a worker"""
    date: date
    shift: ShiftType


@dataclass
class ScheduleResult:
    """Result of schedule generation"""
    success: bool
    entries: List[ScheduleEntry]
    start_date: date
    end_date: date
    message: str
    statistics: Dict[str, Any] = field(default_factory=dict)


def schedule_end_date(start_date: date, days: int = SCHEDULE_DAYS) -> date:
    """Last day of the rotation window starting at ``start_date``"""
    return start_date + timedelta(days=days - 1)


def date_range(start_date: date, end_date: date) -> List[date]:
    """Every date from ``start_date`` to ``end_date`` inclusive"""
    return [start_date + timedelta(days=i) for i in range((end_date - start_date).days + 1)]


def group_entries_by_date(entries: Sequence[ScheduleEntry],
                          start_date: Optional[date] = None,
                          end_date: Optional[date] = None) -> Dict[date, Dict[ShiftType, List[str]]]:
    """
    Group entries by calendar date, then by shift type.

    Dates come back in ascending order. With a window, only dates inside it
    are kept and every date of the window is present, even with no entries.
    """
    def empty_groups() -> Dict[ShiftType, List[str]]:
        return {shift: [] for shift in ShiftType}

    grouped: Dict[date, Dict[ShiftType, List[str]]] = {}
    if start_date is not None and end_date is not None:
        for day in date_range(start_date, end_date):
            grouped[day] = empty_groups()

    for entry in entries:
        if start_date is not None and entry.date < start_date:
            continue
        if end_date is not None and entry.date > end_date:
            continue
        grouped.setdefault(entry.date, empty_groups())[entry.shift].append(entry.worker_name)

    return dict(sorted(grouped.items()))


class ScheduleGenerator:
    """Greedy day-by-day rotation generator.

    A generator instance may be reused; every call to
    ``generate_monthly_schedule`` starts from an empty shift history.
    """

    def __init__(self, workers: Sequence[Worker], rng: Optional[random.Random] = None):
        self.workers = list(workers)
        # Unseeded Random() draws its seed from the OS
        self.rng = rng if rng is not None else random.Random()

    def generate_monthly_schedule(self, start_date: date, days: int = SCHEDULE_DAYS) -> List[ScheduleEntry]:
        """Generate ``days`` consecutive days of entries starting at ``start_date``"""
        schedule: List[ScheduleEntry] = []
        last_shifts: Dict[Any, LastShiftRecord] = {}

        for offset in range(days):
            current = start_date + timedelta(days=offset)
            schedule.extend(self._generate_day_schedule(current, last_shifts))

        return schedule

    def _is_available(self, worker: Worker, current: date,
                      last_shifts: Dict[Any, LastShiftRecord]) -> bool:
        last = last_shifts.get(worker.id)
        if last is None:
            return True
        # The day after a night shift is always off
        return not (last.shift is ShiftType.NIGHT and (current - last.date).days == 1)

    def _generate_day_schedule(self, current: date,
                               last_shifts: Dict[Any, LastShiftRecord]) -> List[ScheduleEntry]:
        entries: List[ScheduleEntry] = []
        is_sunday = current.weekday() == calendar.SUNDAY

        available = [w for w in self.workers if self._is_available(w, current, last_shifts)]
        if not available:
            logger.debug(f"{current}: no workers available")
            return entries

        def assign(worker: Worker, shift: ShiftType):
            entries.append(_make_entry(worker.id, worker.name, current, shift))
            last_shifts[worker.id] = LastShiftRecord(current, shift)

        if is_sunday:
            shuffled = list(available)
            self.rng.shuffle(shuffled)
            # Workers past the third get nothing on a Sunday
            for worker, shift in zip(shuffled, (ShiftType.MORNING, ShiftType.EVENING, ShiftType.NIGHT)):
                assign(worker, shift)
        else:
            if len(available) < MIN_WORKERS:
                logger.debug(f"{current}: only {len(available)} available, assigning morning shifts")
                for worker in available:
                    assign(worker, ShiftType.MORNING)
                return entries

            shuffled = list(available)
            self.rng.shuffle(shuffled)
            assign(shuffled[0], ShiftType.EVENING)
            assign(shuffled[1], ShiftType.NIGHT)
            for worker in shuffled[2:]:
                assign(worker, ShiftType.MORNING)

        entries.extend(self._synthesize_leave(entries, current))
        return entries

    def _synthesize_leave(self, entries: List[ScheduleEntry], current: date) -> List[ScheduleEntry]:
        """Derive leave entries from the day's real assignments"""
        weekday = current.weekday()
        leave: List[ScheduleEntry] = []

        for entry in entries:
            if entry.shift is not ShiftType.NIGHT:
                continue
            if weekday in (calendar.SATURDAY, calendar.SUNDAY):
                offsets = (1, 2)
            else:
                offsets = (1,)
            for offset in offsets:
                leave.append(_make_entry(entry.worker_id, entry.worker_name,
                                         current + timedelta(days=offset), ShiftType.LEAVE))

        if weekday == calendar.SUNDAY:
            for entry in entries:
                if entry.shift in (ShiftType.MORNING, ShiftType.EVENING):
                    leave.append(_make_entry(entry.worker_id, entry.worker_name,
                                             current - timedelta(days=1), ShiftType.LEAVE))

        return leave


def _make_entry(worker_id, worker_name: str, day: date, shift: ShiftType) -> ScheduleEntry:
    return ScheduleEntry(
        worker_id=worker_id,
        worker_name=worker_name,
        date=day,
        day=day.strftime("%A"),
        shift=shift
    )


def generate_schedule(workers: Sequence[Worker], start_date: date,
                      rng: Optional[random.Random] = None) -> List[ScheduleEntry]:
    """Generate a 30-day rotation for ``workers`` starting at ``start_date``.

    Never raises for degenerate input: no workers gives an empty list, and days
    where everyone is resting produce no entries.
    """
    return ScheduleGenerator(workers, rng).generate_monthly_schedule(start_date)


class ShiftScheduler:
    """Runs the generator against the registry and stores the outcome"""

    def __init__(self, registry: WorkerRegistry):
        self.registry = registry

    def generate_schedule(self, rng: Optional[random.Random] = None) -> ScheduleResult:
        """
        Generate a schedule for the registry's workers and start date.

        Args:
            rng: Random source for the shuffles; a fresh OS-seeded one when omitted
        """
        start_time = time.time()
        workers = self.registry.get_workers()
        start_date = self.registry.start_date
        end_date = schedule_end_date(start_date, self.registry.schedule_days)

        if len(workers) < MIN_WORKERS:
            logger.warning(f"Schedule generation refused: {len(workers)} worker(s) registered")
            return ScheduleResult(
                success=False,
                entries=self.registry.get_schedule(),
                start_date=start_date,
                end_date=end_date,
                message=f"You need at least {MIN_WORKERS} workers to generate a schedule"
            )

        logger.info(f"Starting schedule generation for {start_date} - {end_date} with {len(workers)} workers")
        try:
            generator = ScheduleGenerator(workers, rng)
            entries = generator.generate_monthly_schedule(start_date, self.registry.schedule_days)
        except Exception as e:
            logger.error(f"Schedule generation failed: {e}", exc_info=True)
            return ScheduleResult(
                success=False,
                entries=self.registry.get_schedule(),
                start_date=start_date,
                end_date=end_date,
                message="Failed to generate schedule. Please try again."
            )

        self.registry.set_schedule(entries)
        duration = time.time() - start_time
        logger.info(f"Generated {len(entries)} schedule entries in {duration:.3f}s")

        return ScheduleResult(
            success=True,
            entries=entries,
            start_date=start_date,
            end_date=end_date,
            message="Monthly schedule has been created successfully",
            statistics=self.registry.calculate_worker_stats()
        )
