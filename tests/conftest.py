"""
Shared fixtures: a controllable clock, an in-memory floor and a service wired to both.
"""
import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient

from shopfloor.api import create_app
from shopfloor.config_loader import CoreSettings
from shopfloor.models import Machine, ProductionCounts
from shopfloor.providers.memory import InMemoryProvider
from shopfloor.service import ShopfloorService


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 18, 0))


@pytest.fixture
def settings():
    return CoreSettings()


@pytest.fixture
def provider():
    p = InMemoryProvider()
    p.add_machine(Machine(
        id="m1",
        name="Press 1",
        machine_id="PRESS-1",
        status="running",
        units_produced=400,
        target_units=500,
        cycle_time=1.0,
        good_parts_ran=380,
        scrap_parts=20,
    ))
    p.set_production_counts("m1", "Day", "2024-01-01", ProductionCounts(
        units_produced=400, target_units=500, good_parts_ran=380, scrap_parts=20,
    ))
    return p


@pytest.fixture
def service(settings, provider, clock):
    return ShopfloorService(settings, provider=provider, clock=clock)


@pytest.fixture
def token(service):
    return service.issue_session("op-1")


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


@pytest.fixture
def auth(token):
    return {"Authorization": f"Bearer {token}"}
