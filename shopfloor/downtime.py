from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import uuid4

from . import taxonomy
from .errors import Conflict, InvalidInput, NotFound
from .models import DowntimeLog
from .providers.base import ShopfloorProvider
from .timeutil import Clock, parse_date, parse_timestamp, utcnow

logger = logging.getLogger(__name__)


class DowntimeManager:
    """
    Downtime log lifecycle: Open -> Resolved, no way back.

    resolve() holds a per-record lock across read, check and write so two
    concurrent resolves of the same log cannot both succeed. Locks exist only
    for records that are known and still open.
    """

    def __init__(
        self,
        provider: ShopfloorProvider,
        clock: Clock = utcnow,
        reject_future_times: bool = True,
        future_tolerance: timedelta = timedelta(seconds=60),
    ):
        self.provider = provider
        self.clock = clock
        self.reject_future_times = reject_future_times
        self.future_tolerance = future_tolerance
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, log_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(log_id)
            if lock is None:
                lock = self._locks[log_id] = threading.Lock()
            return lock

    def _forget(self, log_id: str) -> None:
        with self._locks_guard:
            self._locks.pop(log_id, None)

    def _check_not_future(self, ts: datetime, field: str) -> None:
        if self.reject_future_times and ts > self.clock() + self.future_tolerance:
            raise InvalidInput(f"{field} cannot be in the future", field=field)

    def open(
        self,
        machine_id: str,
        reason_code: str,
        start_time: Any,
        description: Optional[str] = None,
        reported_by: Optional[str] = None,
        reason_category: Optional[str] = None,
    ) -> DowntimeLog:
        if not machine_id:
            raise InvalidInput("machine_id is required", field="machine_id")
        category = taxonomy.resolve_category(reason_code, claimed=reason_category)
        start = parse_timestamp(start_time, "start_time")
        self._check_not_future(start, "start_time")

        log = DowntimeLog(
            id=str(uuid4()),
            machine_id=machine_id,
            reason_code=reason_code,
            reason_category=category,
            description=description or None,
            start_time=start,
            reported_by=reported_by or None,
            created_at=self.clock(),
        )
        self.provider.add_downtime_log(log)
        logger.info("downtime opened: %s on %s (%s)", log.id, machine_id, reason_code)
        return log

    def resolve(
        self,
        log_id: str,
        end_time: Any,
        resolved_by: Optional[str] = None,
        description: Optional[str] = None,
    ) -> DowntimeLog:
        if self.provider.get_downtime_log(log_id) is None:
            raise NotFound("downtime log", log_id)

        with self._lock_for(log_id):
            log = self.provider.get_downtime_log(log_id)
            if log is None:
                raise NotFound("downtime log", log_id)
            if not log.is_open:
                self._forget(log_id)
                logger.warning("resolve rejected, log %s already resolved at %s", log_id, log.end_time)
                raise Conflict(f"Downtime log {log_id} is already resolved")
            end = parse_timestamp(end_time, "end_time")
            if end < log.start_time:
                raise InvalidInput("end_time must not be before start_time", field="end_time")
            self._check_not_future(end, "end_time")

            duration_ms = (end - log.start_time) // timedelta(milliseconds=1)
            resolved = log.model_copy(update={
                "end_time": end,
                "duration": duration_ms // 60000,
                "resolved_by": resolved_by or None,
                "description": description if description else log.description,
            })
            self.provider.update_downtime_log(resolved)
            # resolved is terminal; its lock is no longer needed
            self._forget(log_id)

        logger.info("downtime resolved: %s after %d min", log_id, resolved.duration)
        return resolved

    def get(self, log_id: str) -> DowntimeLog:
        log = self.provider.get_downtime_log(log_id)
        if log is None:
            raise NotFound("downtime log", log_id)
        return log

    def list_logs(
        self,
        machine_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[DowntimeLog]:
        """Logs filtered by machine and start-date range, most recent first."""
        logs = self.provider.list_downtime_logs(machine_id)
        if start_date:
            lo = parse_date(start_date, "start_date")
            logs = [log for log in logs if log.start_time.date() >= lo]
        if end_date:
            hi = parse_date(end_date, "end_date")
            logs = [log for log in logs if log.start_time.date() <= hi]
        return sorted(logs, key=lambda log: log.start_time, reverse=True)

    def active_logs(self) -> List[DowntimeLog]:
        return [log for log in self.list_logs() if log.is_open]
