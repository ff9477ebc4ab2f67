from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple

from .base import ShopfloorProvider
from ..models import DowntimeLog, Machine, ProductionCounts, ProductionStat


class InMemoryProvider(ShopfloorProvider):
    """Dict-backed provider. Records are copied in and out so callers never
    mutate stored state by accident."""

    def __init__(self):
        self._lock = threading.Lock()
        self._machines: Dict[str, Machine] = {}
        self._counts: Dict[Tuple[str, str, str], ProductionCounts] = {}
        self._downtime: Dict[str, DowntimeLog] = {}
        self._stats: Dict[Tuple[str, str, str], ProductionStat] = {}

    # --- seeding helpers (collaborator-owned data) ---
    def add_machine(self, machine: Machine) -> Machine:
        with self._lock:
            self._machines[machine.id] = machine.model_copy()
        return machine

    def set_production_counts(self, machine_id: str, shift: str, date: str, counts: ProductionCounts) -> None:
        with self._lock:
            self._counts[(machine_id, date, shift)] = counts.model_copy()

    # --- machines ---
    def get_machine(self, machine_id: str) -> Optional[Machine]:
        m = self._machines.get(machine_id)
        return m.model_copy() if m else None

    def list_machines(self) -> List[Machine]:
        return [m.model_copy() for m in self._machines.values()]

    def get_production_counts(self, machine_id: str, shift: str, date: str) -> Optional[ProductionCounts]:
        c = self._counts.get((machine_id, date, shift))
        return c.model_copy() if c else None

    # --- downtime ---
    def get_downtime_log(self, log_id: str) -> Optional[DowntimeLog]:
        log = self._downtime.get(log_id)
        return log.model_copy() if log else None

    def list_downtime_logs(self, machine_id: Optional[str] = None) -> List[DowntimeLog]:
        with self._lock:
            logs = list(self._downtime.values())
        if machine_id:
            logs = [log for log in logs if log.machine_id == machine_id]
        return [log.model_copy() for log in logs]

    def add_downtime_log(self, log: DowntimeLog) -> DowntimeLog:
        with self._lock:
            if log.id in self._downtime:
                raise KeyError(f"downtime log already exists: {log.id}")
            self._downtime[log.id] = log.model_copy()
        return log

    def update_downtime_log(self, log: DowntimeLog) -> DowntimeLog:
        with self._lock:
            if log.id not in self._downtime:
                raise KeyError(f"downtime log not found: {log.id}")
            self._downtime[log.id] = log.model_copy()
        return log

    # --- production stats ---
    def save_production_stat(self, stat: ProductionStat) -> ProductionStat:
        with self._lock:
            self._stats[(stat.machine_id, stat.date, stat.shift)] = stat.model_copy()
        return stat

    def list_production_stats(self, machine_id: Optional[str] = None) -> List[ProductionStat]:
        with self._lock:
            stats = list(self._stats.values())
        if machine_id:
            stats = [s for s in stats if s.machine_id == machine_id]
        return [s.model_copy() for s in stats]

    def delete_production_stats(self, machine_id: str, date: str, shift: Optional[str] = None) -> int:
        with self._lock:
            keys = [
                k for k in self._stats
                if k[0] == machine_id and k[1] == date and (shift is None or k[2] == shift)
            ]
            for k in keys:
                del self._stats[k]
        return len(keys)
