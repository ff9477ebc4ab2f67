from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from .aggregator import ProductionStatsAggregator
from .config_loader import CoreSettings
from .downtime import DowntimeManager
from .errors import InvalidInput
from .models import DowntimeLog, DowntimeOpenIn, OeeResult, ProductionStat
from .oee import compute_oee_from
from .providers import get_provider
from .providers.base import ShopfloorProvider
from .reports import downtime_summary
from .sessions import KeyValueStore, SessionStore
from .timeutil import Clock, parse_date, utcnow

logger = logging.getLogger(__name__)


class ShopfloorService:
    """Entry point the transport layer calls. Mutating calls require a valid token."""

    def __init__(
        self,
        settings: Optional[CoreSettings] = None,
        provider: Optional[ShopfloorProvider] = None,
        session_backend: Optional[KeyValueStore] = None,
        clock: Clock = utcnow,
    ):
        self.settings = settings or CoreSettings()
        self.provider = provider or get_provider(self.settings.provider)
        self.clock = clock
        self.sessions = SessionStore(store=session_backend, clock=clock)
        self.downtime = DowntimeManager(
            self.provider,
            clock=clock,
            reject_future_times=self.settings.downtime.reject_future_times,
            future_tolerance=timedelta(seconds=self.settings.downtime.future_tolerance_seconds),
        )
        self.aggregator = ProductionStatsAggregator(self.provider, self.settings, clock=clock)

    # --- sessions ---
    def issue_session(self, operator_id: str) -> str:
        return self.sessions.issue(operator_id)

    def validate_session(self, token: Optional[str]) -> str:
        return self.sessions.validate(token)

    def revoke_session(self, token: str) -> bool:
        return self.sessions.revoke(token)

    # --- downtime ---
    def open_downtime(self, token: Optional[str], data: DowntimeOpenIn | Mapping[str, Any]) -> DowntimeLog:
        operator_id = self.validate_session(token)
        if not isinstance(data, DowntimeOpenIn):
            try:
                data = DowntimeOpenIn.model_validate(dict(data))
            except ValidationError as e:
                first = e.errors()[0]
                field = ".".join(str(p) for p in first["loc"]) or None
                raise InvalidInput(first["msg"], field=field) from None
        return self.downtime.open(
            machine_id=data.machine_id,
            reason_code=data.reason_code,
            start_time=data.start_time,
            description=data.description,
            reported_by=data.reported_by or operator_id,
            reason_category=data.reason_category,
        )

    def resolve_downtime(
        self,
        token: Optional[str],
        log_id: str,
        end_time: Any,
        resolved_by: Optional[str] = None,
        description: Optional[str] = None,
    ) -> DowntimeLog:
        operator_id = self.validate_session(token)
        return self.downtime.resolve(log_id, end_time, resolved_by=resolved_by or operator_id, description=description)

    def downtime_stats(self) -> Dict[str, Any]:
        return downtime_summary(self.provider.list_downtime_logs(), self.provider.list_machines(), self.clock())

    # --- OEE ---
    def compute_oee(self, inputs: Mapping[str, Any]) -> OeeResult:
        return compute_oee_from(inputs, clamp=self.settings.oee.clamp_outputs)

    def aggregate_production_stat(self, token: Optional[str], machine_id: str, shift: str, date: str) -> ProductionStat:
        operator_id = self.validate_session(token)
        return self.aggregator.aggregate(machine_id, shift, date, created_by=operator_id)

    def delete_production_stats(self, token: Optional[str], machine_id: str, date: str, shift: Optional[str] = None) -> int:
        self.validate_session(token)
        date = parse_date(date).isoformat()
        deleted = self.provider.delete_production_stats(machine_id, date, shift)
        logger.info("deleted %d production stats for %s %s %s", deleted, machine_id, date, shift or "*")
        return deleted
