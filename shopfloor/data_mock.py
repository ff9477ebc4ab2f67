from __future__ import annotations

from datetime import datetime, date, time, timedelta
from typing import List

from .models import DowntimeLog, Machine, ProductionCounts
from .providers.memory import InMemoryProvider
from . import taxonomy

def _day_shift_start(day: date) -> datetime:
    return datetime.combine(day, time(6, 0))

def get_mock_machines() -> List[Machine]:
    return [
        Machine(
            id="m-mill-1",
            name="Milling machine",
            machine_id="CNC-MILL-1",
            status="running",
            units_produced=412,
            target_units=450,
            cycle_time=60.0,
            ideal_cycle_time=55.0,
            good_parts_ran=400,
            scrap_parts=12,
        ),
        Machine(
            id="m-lathe-1",
            name="Lathe",
            machine_id="CNC-LATHE-1",
            status="idle",
            units_produced=280,
            target_units=320,
            cycle_time=80.0,
            good_parts_ran=277,
            scrap_parts=3,
        ),
        Machine(
            id="m-cut-1",
            name="Metal cutting machine",
            machine_id="CNC-CUT-1",
            status="down",
            units_produced=95,
            target_units=200,
            cycle_time=120.0,
            ideal_cycle_time=110.0,
            good_parts_ran=90,
            scrap_parts=5,
        ),
    ]

def get_mock_stops(day: date) -> List[DowntimeLog]:
    """
    Day-shift stops:
    - mill: tool change and a door sensor fault, both resolved
    - lathe: one changeover
    - cutter: repair still open (machine is down)
    """
    s = _day_shift_start(day)

    def stop(log_id, machine, code, start, end=None, note=None):
        duration = None if end is None else int((end - start).total_seconds() // 60)
        return DowntimeLog(
            id=log_id,
            machine_id=machine,
            reason_code=code,
            reason_category=taxonomy.lookup(code).category,
            description=note,
            start_time=start,
            end_time=end,
            duration=duration,
            reported_by="demo",
            resolved_by="demo" if end else None,
            created_at=start,
        )

    return [
        stop("dt-mill-1", "m-mill-1", "MECH_TOOLING",
             s + timedelta(hours=3, minutes=35), s + timedelta(hours=3, minutes=55), "Tool change"),
        stop("dt-mill-2", "m-mill-1", "ELEC_SENSOR",
             s + timedelta(hours=6, minutes=5), s + timedelta(hours=6, minutes=15), "Door sensor"),
        stop("dt-lathe-1", "m-lathe-1", "OP_SETUP",
             s + timedelta(hours=4), s + timedelta(hours=4, minutes=25), "Changeover"),
        stop("dt-cut-1", "m-cut-1", "MECH_BREAKDOWN",
             s + timedelta(hours=4, minutes=20), None, "Belt replacement / feed adjustment"),
    ]

def seed_demo(provider: InMemoryProvider, day: date | None = None) -> InMemoryProvider:
    day = day or date.today()
    for m in get_mock_machines():
        provider.add_machine(m)
        provider.set_production_counts(m.id, "Day", day.isoformat(), ProductionCounts(
            units_produced=m.units_produced,
            target_units=m.target_units,
            good_parts_ran=m.good_parts_ran,
            scrap_parts=m.scrap_parts,
        ))
    for log in get_mock_stops(day):
        provider.add_downtime_log(log)
    return provider
