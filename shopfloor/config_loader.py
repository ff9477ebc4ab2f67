from __future__ import annotations
import os
from datetime import time
from pathlib import Path
from typing import Dict, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = "config/default.yaml"

class ShiftDef(BaseModel):
    name: str
    start: time
    end: time  # end <= start means the shift crosses midnight

class DowntimeSettings(BaseModel):
    reject_future_times: bool = True
    future_tolerance_seconds: int = 60

class OeeSettings(BaseModel):
    clamp_outputs: bool = False

class CoreSettings(BaseModel):
    provider: str = "memory"
    log_level: str = "INFO"
    seed_demo: bool = False
    downtime: DowntimeSettings = Field(default_factory=DowntimeSettings)
    oee: OeeSettings = Field(default_factory=OeeSettings)
    shifts: List[ShiftDef] = Field(default_factory=lambda: [
        ShiftDef(name="Day", start=time(6, 0), end=time(14, 0)),
        ShiftDef(name="Afternoon", start=time(14, 0), end=time(22, 0)),
        ShiftDef(name="Midnight", start=time(22, 0), end=time(6, 0)),
    ])

    def shift_map(self) -> Dict[str, ShiftDef]:
        return {s.name: s for s in self.shifts}

def load_config(config_path: str) -> dict:
    p = Path(config_path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}

def build_settings(cfg: dict | None) -> CoreSettings:
    cfg = cfg or {}
    data = {
        "provider": cfg.get("provider", "memory"),
        "log_level": (cfg.get("logging", {}) or {}).get("level", "INFO"),
        "seed_demo": bool((cfg.get("demo", {}) or {}).get("seed", False)),
        "downtime": cfg.get("downtime", {}) or {},
        "oee": cfg.get("oee", {}) or {},
    }
    if cfg.get("shifts"):
        data["shifts"] = cfg["shifts"]

    # env wins over the file
    env_level = os.environ.get("OEE_LOG_LEVEL")
    if env_level:
        data["log_level"] = env_level

    return CoreSettings.model_validate(data)

def load_settings(config_path: str | None = None) -> CoreSettings:
    load_dotenv()
    path = config_path or os.environ.get("OEE_CONFIG", DEFAULT_CONFIG_PATH)
    return build_settings(load_config(path))
