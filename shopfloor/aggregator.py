from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional
from uuid import uuid4

from .config_loader import CoreSettings, ShiftDef
from .errors import InvalidInput, NotFound
from .models import DowntimeLog, ProductionCounts, ProductionStat, ShiftWindow
from .oee import compute_oee
from .providers.base import ShopfloorProvider
from .timeutil import Clock, parse_date, utcnow

logger = logging.getLogger(__name__)


def shift_window(shifts: Dict[str, ShiftDef], shift: str, date: str) -> ShiftWindow:
    sd = shifts.get(shift)
    if sd is None:
        raise InvalidInput(f"Unknown shift: {shift}", field="shift")
    day = parse_date(date)
    start = datetime.combine(day, sd.start)
    end = datetime.combine(day, sd.end)
    if end <= start:
        end += timedelta(days=1)
    return ShiftWindow(shift=shift, start=start, end=end)


def overlap_seconds(log: DowntimeLog, window_start: datetime, window_end: datetime, now: datetime) -> float:
    # an open log counts as ongoing through `now`
    log_end = log.end_time if log.end_time is not None else now
    lo = max(log.start_time, window_start)
    hi = min(log_end, window_end)
    return max(0.0, (hi - lo).total_seconds())


def overlap_minutes(log: DowntimeLog, window_start: datetime, window_end: datetime, now: datetime) -> float:
    return overlap_seconds(log, window_start, window_end, now) / 60.0


def total_downtime_minutes(
    logs: Iterable[DowntimeLog], window_start: datetime, window_end: datetime, now: datetime
) -> int:
    seconds = sum(overlap_seconds(log, window_start, window_end, now) for log in logs)
    return int(seconds // 60)


class ProductionStatsAggregator:
    def __init__(self, provider: ShopfloorProvider, settings: CoreSettings, clock: Clock = utcnow):
        self.provider = provider
        self.settings = settings
        self.clock = clock

    def window(self, shift: str, date: str) -> ShiftWindow:
        return shift_window(self.settings.shift_map(), shift, date)

    def aggregate(self, machine_id: str, shift: str, date: str, created_by: Optional[str] = None) -> ProductionStat:
        """Snapshot one (machine, date, shift). The machine's assigned operator is credited when set."""
        machine = self.provider.get_machine(machine_id)
        if machine is None:
            raise NotFound("machine", machine_id)
        win = self.window(shift, date)
        day = parse_date(date).isoformat()

        counts = self.provider.get_production_counts(machine_id, shift, day)
        if counts is None:
            # no per-window counts recorded; fall back to the machine's running counters
            counts = ProductionCounts(
                units_produced=machine.units_produced,
                target_units=machine.target_units,
                good_parts_ran=machine.good_parts_ran,
                scrap_parts=machine.scrap_parts,
            )

        now = self.clock()
        logs = self.provider.list_downtime_logs(machine_id)
        downtime = total_downtime_minutes(logs, win.start, win.end, now)
        logger.debug("machine %s %s %s: %d logs, %d overlap min", machine_id, day, shift, len(logs), downtime)

        ideal_cycle_time = machine.ideal_cycle_time or machine.cycle_time or 0.0
        result = compute_oee(
            win.minutes,
            downtime,
            counts.good_parts_ran,
            counts.scrap_parts,
            ideal_cycle_time,
            clamp=self.settings.oee.clamp_outputs,
        )
        efficiency = counts.units_produced / counts.target_units if counts.target_units > 0 else 0.0

        stat = ProductionStat(
            id=str(uuid4()),
            machine_id=machine_id,
            shift=shift,
            date=day,
            units_produced=counts.units_produced,
            target_units=counts.target_units,
            downtime=downtime,
            planned_production_time=win.minutes,
            good_parts_ran=counts.good_parts_ran,
            scrap_parts=counts.scrap_parts,
            ideal_cycle_time=ideal_cycle_time,
            efficiency=efficiency,
            availability=result.availability,
            performance=result.performance,
            quality=result.quality,
            oee=result.oee,
            created_at=now,
            created_by=machine.operator_id or created_by,
        )
        self.provider.save_production_stat(stat)
        logger.info("production stat stored: %s %s %s oee=%.4f", machine_id, day, shift, stat.oee)
        return stat
