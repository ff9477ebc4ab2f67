from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal
from datetime import datetime

ReasonCategory = Literal["mechanical", "electrical", "material", "operator", "quality", "other"]
MachineStatus = Literal["running", "idle", "maintenance", "down", "setup"]

class Session(BaseModel):
    token: str
    operator_id: str
    issued_at: datetime
    expires_at: datetime

class ReasonCode(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    label: str
    category: ReasonCategory

class DowntimeLog(BaseModel):
    id: str
    machine_id: str
    reason_code: str
    reason_category: ReasonCategory
    description: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # minutes
    reported_by: Optional[str] = None
    resolved_by: Optional[str] = None
    created_at: datetime

    @property
    def is_open(self) -> bool:
        return self.end_time is None

class DowntimeOpenIn(BaseModel):
    machine_id: str
    reason_code: str
    start_time: str | datetime
    # advisory only, the taxonomy decides
    reason_category: Optional[str] = None
    description: Optional[str] = None
    reported_by: Optional[str] = None

class DowntimeResolveIn(BaseModel):
    end_time: str | datetime
    resolved_by: Optional[str] = None
    description: Optional[str] = None

class Machine(BaseModel):
    id: str
    name: str
    machine_id: str  # floor tag, e.g. "CNC-MILL-1"
    status: MachineStatus = "idle"
    operator_id: Optional[str] = None
    units_produced: int = 0
    target_units: int = 100
    cycle_time: Optional[float] = None
    ideal_cycle_time: Optional[float] = None  # seconds per part
    good_parts_ran: int = 0
    scrap_parts: int = 0

class ProductionCounts(BaseModel):
    units_produced: int = 0
    target_units: int = 0
    good_parts_ran: int = 0
    scrap_parts: int = 0

class OeeResult(BaseModel):
    availability: float
    performance: float
    quality: float
    oee: float

class ProductionStat(BaseModel):
    id: str
    machine_id: str
    shift: str
    date: str  # YYYY-MM-DD
    units_produced: int
    target_units: int
    downtime: int = 0  # minutes
    planned_production_time: int
    good_parts_ran: int = 0
    scrap_parts: int = 0
    ideal_cycle_time: float = 0.0
    efficiency: float = 0.0
    availability: float = 0.0
    performance: float = 0.0
    quality: float = 0.0
    oee: float = 0.0
    created_at: datetime
    created_by: Optional[str] = None

class ShiftWindow(BaseModel):
    shift: str
    start: datetime
    end: datetime

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

class SessionIn(BaseModel):
    operator_id: str = Field(..., min_length=1)

class AggregateIn(BaseModel):
    machine_id: str
    shift: str
    date: str
