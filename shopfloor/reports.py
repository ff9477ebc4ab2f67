from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

import pandas as pd

from .models import DowntimeLog, Machine
from .taxonomy import category_label

_SUMMARY_EMPTY = {
    "total_incidents": 0,
    "total_downtime_minutes": 0,
    "total_downtime_hours": 0.0,
    "active_incidents": 0,
    "today_downtime_minutes": 0,
    "today_downtime_hours": 0.0,
    "avg_duration_minutes": 0.0,
}


def _group(df: pd.DataFrame, key: str) -> Dict[str, Dict[str, Any]]:
    g = df.groupby(key).agg(count=("id", "size"), total_minutes=("minutes", "sum"))
    return {
        str(k): {"count": int(row["count"]), "total_minutes": int(row["total_minutes"])}
        for k, row in g.iterrows()
    }


def downtime_summary(logs: List[DowntimeLog], machines: List[Machine], now: datetime) -> Dict[str, Any]:
    """
    Downtime totals plus breakdowns by reason code, category and machine.
    Minutes only count resolved logs (open ones have no duration yet).
    """
    if not logs:
        return {"summary": dict(_SUMMARY_EMPTY), "by_reason_code": {}, "by_category": {}, "by_machine": {}}

    df = pd.DataFrame([
        {
            "id": log.id,
            "machine_id": log.machine_id,
            "reason_code": log.reason_code,
            "reason_category": log.reason_category,
            "start_time": log.start_time,
            "duration": log.duration,
        }
        for log in logs
    ])
    df["minutes"] = df["duration"].fillna(0).astype(int)

    total = int(df["minutes"].sum())
    today = df[df["start_time"].dt.date == now.date()]
    today_total = int(today["minutes"].sum())
    resolved = df[df["duration"].notna()]
    avg = float(resolved["minutes"].mean()) if not resolved.empty else 0.0

    by_category = _group(df, "reason_category")
    for category, entry in by_category.items():
        entry["label"] = category_label(category)

    names = {m.id: m.name for m in machines}
    by_machine = _group(df, "machine_id")
    for machine_id, entry in by_machine.items():
        entry["machine_name"] = names.get(machine_id, "Unknown")

    return {
        "summary": {
            "total_incidents": int(len(df)),
            "total_downtime_minutes": total,
            "total_downtime_hours": round(total / 60, 1),
            "active_incidents": int(df["duration"].isna().sum()),
            "today_downtime_minutes": today_total,
            "today_downtime_hours": round(today_total / 60, 1),
            "avg_duration_minutes": round(avg, 1),
        },
        "by_reason_code": _group(df, "reason_code"),
        "by_category": by_category,
        "by_machine": by_machine,
    }
