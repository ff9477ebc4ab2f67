from __future__ import annotations

import math
from typing import Any, Dict, Mapping

from .errors import InvalidInput
from .models import OeeResult

OEE_FIELDS = (
    "planned_production_time",
    "downtime",
    "good_parts_ran",
    "scrap_parts",
    "ideal_cycle_time",
)


def _coerce(name: str, value: Any) -> float:
    # absent -> 0; anything present must be a finite, non-negative number
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be numeric, got a boolean", field=name)
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            raise InvalidInput(f"{name} must be numeric, got {value!r}", field=name) from None
    else:
        raise InvalidInput(f"{name} must be numeric, got {type(value).__name__}", field=name)

    if not math.isfinite(num):
        raise InvalidInput(f"{name} must be finite", field=name)
    if num < 0:
        raise InvalidInput(f"{name} must not be negative", field=name)
    return num


def coerce_inputs(inputs: Mapping[str, Any]) -> Dict[str, float]:
    return {name: _coerce(name, inputs.get(name)) for name in OEE_FIELDS}


def _clamp(x: float) -> float:
    return max(0.0, min(1.0, x))


def compute_oee(
    planned_production_time: Any,
    downtime: Any,
    good_parts_ran: Any,
    scrap_parts: Any,
    ideal_cycle_time: Any,
    clamp: bool = False,
) -> OeeResult:
    """
    Times in minutes, ideal_cycle_time in seconds per part.

    actual runtime = planned - downtime, deliberately not floored at 0, so a
    downtime larger than the planned time yields a negative availability unless
    `clamp` is set.
    """
    v = coerce_inputs({
        "planned_production_time": planned_production_time,
        "downtime": downtime,
        "good_parts_ran": good_parts_ran,
        "scrap_parts": scrap_parts,
        "ideal_cycle_time": ideal_cycle_time,
    })
    planned = v["planned_production_time"]
    good = v["good_parts_ran"]

    actual_runtime = planned - v["downtime"]
    total_parts = good + v["scrap_parts"]

    availability = actual_runtime / planned if planned > 0 else 0.0

    actual_runtime_seconds = actual_runtime * 60
    if total_parts > 0 and actual_runtime_seconds > 0:
        performance = (total_parts * v["ideal_cycle_time"]) / actual_runtime_seconds
    else:
        performance = 0.0

    quality = good / total_parts if total_parts > 0 else 0.0

    if clamp:
        availability, performance, quality = _clamp(availability), _clamp(performance), _clamp(quality)

    return OeeResult(
        availability=availability,
        performance=performance,
        quality=quality,
        oee=availability * performance * quality,
    )


def compute_oee_from(inputs: Mapping[str, Any], clamp: bool = False) -> OeeResult:
    unknown = set(inputs) - set(OEE_FIELDS)
    if unknown:
        raise InvalidInput(f"Unknown OEE inputs: {', '.join(sorted(unknown))}")
    return compute_oee(*(inputs.get(name) for name in OEE_FIELDS), clamp=clamp)
