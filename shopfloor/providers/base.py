from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional
from ..models import DowntimeLog, Machine, ProductionCounts, ProductionStat

class ShopfloorProvider(ABC):
    """Persistence collaborator the core reads from and writes to."""

    @abstractmethod
    def get_machine(self, machine_id: str) -> Optional[Machine]:
        ...

    @abstractmethod
    def list_machines(self) -> List[Machine]:
        ...

    @abstractmethod
    def get_production_counts(self, machine_id: str, shift: str, date: str) -> Optional[ProductionCounts]:
        ...

    @abstractmethod
    def get_downtime_log(self, log_id: str) -> Optional[DowntimeLog]:
        ...

    @abstractmethod
    def list_downtime_logs(self, machine_id: Optional[str] = None) -> List[DowntimeLog]:
        ...

    @abstractmethod
    def add_downtime_log(self, log: DowntimeLog) -> DowntimeLog:
        ...

    @abstractmethod
    def update_downtime_log(self, log: DowntimeLog) -> DowntimeLog:
        ...

    @abstractmethod
    def save_production_stat(self, stat: ProductionStat) -> ProductionStat:
        """Store `stat`, replacing any snapshot for the same machine/date/shift."""

    @abstractmethod
    def list_production_stats(self, machine_id: Optional[str] = None) -> List[ProductionStat]:
        ...

    @abstractmethod
    def delete_production_stats(self, machine_id: str, date: str, shift: Optional[str] = None) -> int:
        ...
