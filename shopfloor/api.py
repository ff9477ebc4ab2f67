from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import taxonomy
from .config_loader import load_settings
from .data_mock import seed_demo
from .errors import ShopfloorError
from .models import AggregateIn, DowntimeOpenIn, DowntimeResolveIn, SessionIn
from .providers.memory import InMemoryProvider
from .service import ShopfloorService

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    "UNAUTHORIZED": 401,
    "NOT_FOUND": 404,
    "INVALID_INPUT": 400,
    "CONFLICT": 409,
}


def _bearer(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    if not authorization:
        return None
    return authorization.replace("Bearer ", "", 1).strip() or None


def build_service() -> ShopfloorService:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    service = ShopfloorService(settings)
    if settings.seed_demo and isinstance(service.provider, InMemoryProvider):
        seed_demo(service.provider)
        logger.info("demo floor seeded")
    return service


def create_app(service: Optional[ShopfloorService] = None) -> FastAPI:
    """`uvicorn shopfloor.api:create_app --factory`"""
    svc = service or build_service()
    app = FastAPI(title="Shopfloor OEE API", version="0.1")
    app.state.service = svc

    @app.exception_handler(ShopfloorError)
    def _core_error(_request: Request, exc: ShopfloorError):
        return JSONResponse(status_code=STATUS_BY_CATEGORY[exc.category], content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    def _bad_request(_request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:]) or None
        return JSONResponse(status_code=400, content={
            "error": "INVALID_INPUT",
            "message": first.get("msg", "Invalid request"),
            "field": field,
        })

    @app.get("/health")
    def health():
        return {"ok": True, "ts": datetime.now().isoformat(timespec="seconds")}

    # --- sessions ---
    @app.post("/api/sessions", status_code=201)
    def create_session(body: SessionIn):
        token = svc.issue_session(body.operator_id)
        return {"token": token, "operator_id": body.operator_id}

    @app.get("/api/sessions/me")
    def whoami(token: Optional[str] = Depends(_bearer)):
        return {"operator_id": svc.validate_session(token)}

    @app.delete("/api/sessions")
    def logout(token: Optional[str] = Depends(_bearer)):
        svc.validate_session(token)
        return {"ok": svc.revoke_session(token)}

    # --- reason codes ---
    @app.get("/api/reason-codes")
    def reason_codes(category: Optional[str] = None):
        codes = taxonomy.codes_by_category(category) if category else list(taxonomy.REASON_CODES.values())
        return [{**rc.model_dump(), "category_label": taxonomy.category_label(rc.category)} for rc in codes]

    # --- downtime ---
    @app.get("/api/downtime")
    def list_downtime(machine_id: Optional[str] = None, start_date: Optional[str] = None, end_date: Optional[str] = None):
        logs = svc.downtime.list_logs(machine_id=machine_id, start_date=start_date, end_date=end_date)
        return [log.model_dump(mode="json") for log in logs]

    @app.get("/api/downtime/active")
    def active_downtime():
        return [log.model_dump(mode="json") for log in svc.downtime.active_logs()]

    @app.get("/api/downtime/stats")
    def downtime_stats() -> Dict[str, Any]:
        return svc.downtime_stats()

    @app.get("/api/downtime/{log_id}")
    def get_downtime(log_id: str):
        return svc.downtime.get(log_id).model_dump(mode="json")

    @app.post("/api/downtime", status_code=201)
    def open_downtime(body: DowntimeOpenIn, token: Optional[str] = Depends(_bearer)):
        return svc.open_downtime(token, body).model_dump(mode="json")

    @app.patch("/api/downtime/{log_id}/resolve")
    def resolve_downtime(log_id: str, body: DowntimeResolveIn, token: Optional[str] = Depends(_bearer)):
        log = svc.resolve_downtime(token, log_id, body.end_time, resolved_by=body.resolved_by, description=body.description)
        return log.model_dump(mode="json")

    # --- OEE / production stats ---
    @app.post("/api/oee")
    def oee(body: Dict[str, Any]):
        return svc.compute_oee(body).model_dump()

    @app.post("/api/production-stats/aggregate", status_code=201)
    def aggregate(body: AggregateIn, token: Optional[str] = Depends(_bearer)):
        stat = svc.aggregate_production_stat(token, body.machine_id, body.shift, body.date)
        return stat.model_dump(mode="json")

    @app.get("/api/production-stats")
    def production_stats(machine_id: Optional[str] = None):
        return [s.model_dump(mode="json") for s in svc.provider.list_production_stats(machine_id)]

    @app.delete("/api/production-stats/by-date")
    def delete_stats(machine_id: str, date: str, shift: Optional[str] = None, token: Optional[str] = Depends(_bearer)):
        return {"deleted": svc.delete_production_stats(token, machine_id, date, shift)}

    return app
