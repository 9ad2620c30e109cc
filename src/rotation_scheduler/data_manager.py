"""
Data Manager for Rotation Scheduler

Holds the session state in memory: the registered workers, the currently
generated schedule, the rotation start date and application settings.
Nothing is persisted; a new session starts empty.
"""

import logging
from datetime import datetime, date, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


class DataManagerError(Exception):
    """Base exception for DataManager operations"""
    pass


class WorkerValidationError(DataManagerError):
    """Raised when a worker name is rejected"""
    pass


class DuplicateWorkerError(WorkerValidationError):
    """Raised when a worker with the same name is already registered"""
    pass


class WorkerNotFoundError(DataManagerError):
    """Raised when a worker id is not registered"""
    pass


class ShiftType(Enum):
    MORNING = "morning"
    EVENING = "evening"
    NIGHT = "night"
    LEAVE = "leave"

    @property
    def is_real(self) -> bool:
        """Leave is derived, every other shift is worked"""
        return self is not ShiftType.LEAVE

    @property
    def label(self) -> str:
        if self is ShiftType.LEAVE:
            return "On Leave"
        return f"{self.value.capitalize()} Shift"


@dataclass(frozen=True)
class Worker:
    """A registered worker"""
    id: int
    name: str


@dataclass(frozen=True)
class ScheduleEntry:
    """One row of a generated schedule.

    ``worker_name`` is a snapshot taken at generation time and ``day`` is the
    English weekday name of ``date``.
    """
    worker_id: int
    worker_name: str
    date: date
    day: str
    shift: ShiftType


class WorkerRegistry:
    """In-memory registry of workers and the schedule generated for them"""

    def __init__(self, start_date: Optional[date] = None, schedule_days: int = 30):
        if start_date is None:
            today = date.today()
            start_date = date(today.year, today.month, 1)
        self.schedule_days = schedule_days
        self.data = self._create_default_data(start_date)

    def _create_default_data(self, start_date: date) -> Dict[str, Any]:
        """Create the empty session structure"""
        return {
            "settings": {
                "appVersion": APP_VERSION,
                "lastGeneratedAt": None
            },
            "workers": [],
            "startDate": start_date,
            "schedule": []  # List[ScheduleEntry]
        }

    # Worker Management
    def get_workers(self) -> List[Worker]:
        """Get workers in registration order"""
        return list(self.data["workers"])

    def get_worker_by_id(self, worker_id: int) -> Optional[Worker]:
        for worker in self.data["workers"]:
            if worker.id == worker_id:
                return worker
        return None

    def get_worker_by_name(self, name: str) -> Optional[Worker]:
        """Get worker by name, ignoring case and surrounding whitespace"""
        wanted = name.strip().lower()
        for worker in self.data["workers"]:
            if worker.name.lower() == wanted:
                return worker
        return None

    def require_worker(self, worker_id: int) -> Worker:
        worker = self.get_worker_by_id(worker_id)
        if worker is None:
            raise WorkerNotFoundError(f"No worker registered with id {worker_id}")
        return worker

    def add_worker(self, name: str) -> Worker:
        """Register a new worker.

        Raises:
            WorkerValidationError: the name is empty.
            DuplicateWorkerError: a worker with the same name exists.
        """
        name = (name or "").strip()
        if not name:
            raise WorkerValidationError("Please enter a worker name")
        if self.get_worker_by_name(name) is not None:
            raise DuplicateWorkerError("Worker with this name already exists")

        existing_ids = [worker.id for worker in self.data["workers"]]
        next_id = max(existing_ids, default=0) + 1

        worker = Worker(id=next_id, name=name)
        self.data["workers"].append(worker)
        logger.info(f"Worker '{name}' added with ID {next_id}")
        return worker

    def remove_worker(self, worker_id: int) -> bool:
        """Remove a worker and every schedule entry that references them"""
        worker = self.get_worker_by_id(worker_id)
        if worker is None:
            return False

        self.data["workers"].remove(worker)

        schedule = self.data["schedule"]
        remaining = [entry for entry in schedule if entry.worker_id != worker_id]
        purged = len(schedule) - len(remaining)
        self.data["schedule"] = remaining

        logger.info(f"Worker '{worker.name}' (ID: {worker_id}) removed, {purged} schedule entries purged")
        return True

    # Schedule Management
    @property
    def start_date(self) -> date:
        return self.data["startDate"]

    def set_start_date(self, start_date: date):
        """Move the rotation window; the held schedule no longer applies"""
        if start_date != self.data["startDate"]:
            self.data["startDate"] = start_date
            self.clear_schedule()

    def get_end_date(self) -> date:
        return self.start_date + timedelta(days=self.schedule_days - 1)

    def get_schedule(self) -> List[ScheduleEntry]:
        return list(self.data["schedule"])

    def set_schedule(self, entries: List[ScheduleEntry]):
        """Replace the held schedule"""
        self.data["schedule"] = list(entries)
        self.set_setting("lastGeneratedAt", datetime.now().isoformat(timespec="seconds"))

    def clear_schedule(self):
        self.data["schedule"] = []

    def has_schedule(self) -> bool:
        return bool(self.data["schedule"])

    # Settings
    def get_setting(self, key: str, default=None):
        return self.data["settings"].get(key, default)

    def set_setting(self, key: str, value):
        self.data["settings"][key] = value

    # Statistics
    def calculate_worker_stats(self) -> Dict[str, Dict[str, Any]]:
        """Per-worker shift counts for the held schedule, keyed by worker name"""
        stats = {}
        for worker in self.data["workers"]:
            stats[worker.name] = {
                "id": worker.id,
                "name": worker.name,
                "morning_shifts": 0,
                "evening_shifts": 0,
                "night_shifts": 0,
                "leave_days": 0,
                "total_shifts": 0
            }

        by_id = {s["id"]: s for s in stats.values()}
        for entry in self.data["schedule"]:
            worker_stats = by_id.get(entry.worker_id)
            if worker_stats is None:
                continue
            if entry.shift.is_real:
                worker_stats[f"{entry.shift.value}_shifts"] += 1
                worker_stats["total_shifts"] += 1
            else:
                worker_stats["leave_days"] += 1

        return stats

    def get_team_stats(self) -> Dict[str, Any]:
        """Summary figures shown alongside the schedule"""
        schedule = self.data["schedule"]
        shift_counts = {shift.value: 0 for shift in ShiftType}
        for entry in schedule:
            shift_counts[entry.shift.value] += 1

        return {
            "total_workers": len(self.data["workers"]),
            "schedule_entries": len(schedule),
            "period_days": self.schedule_days,
            "start_date": self.start_date,
            "end_date": self.get_end_date(),
            "shift_counts": shift_counts
        }
