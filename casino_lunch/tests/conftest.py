"""
Test configuration
Shared fixtures: in-memory DuckDB, gateways, a scripted fake gateway and the
HTTP test client
"""

import asyncio
import uuid
from collections import deque
from datetime import datetime
from typing import List

import pytest
from fastapi.testclient import TestClient

from ..app import create_app
from ..config.environments import TestingSettings
from ..core.database import DatabaseManager
from ..core.exceptions import DuplicateKeyError
from ..core.security import SecurityManager
from ..gateways import DuckDBPersistenceGateway, LocalIdentityGateway
from ..models import MenuType, Reservation, ReservationFilter, ReservationStatus

# 2025-06-01 is a Sunday; 2025-06-10 a Tuesday well outside the lockout
NOW = datetime(2025, 6, 1, 9, 0)


class FakePersistenceGateway:
    """
    Scripted in-memory PersistenceGateway

    - ``select_results``: queued row lists returned by successive selects; a
      queued exception is raised instead
    - ``select_gates``: queued events each select waits on before returning
    - ``insert_gates``: queued events each insert waits on before writing
    - ``select_error``: raised by every select while set
    - ``calls``: method names in call order
    """

    def __init__(self):
        self.rows: List[Reservation] = []
        self.profiles = {}
        self.logs = []
        self.calls = []
        self.select_results = deque()
        self.select_gates = deque()
        self.insert_gates = deque()
        self.select_error = None

    async def select_reservations(self, owner_id):
        self.calls.append("select_reservations")
        if self.select_error is not None:
            raise self.select_error
        if self.select_results:
            result = self.select_results.popleft()
        else:
            result = [r for r in self.rows if r.owner_id == owner_id]
        if self.select_gates:
            await self.select_gates.popleft().wait()
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def insert_reservations(self, rows):
        self.calls.append("insert_reservations")
        if self.insert_gates:
            await self.insert_gates.popleft().wait()
        existing = {(r.owner_id, r.date) for r in self.rows}
        for row in rows:
            if (row.owner_id, row.date) in existing:
                raise DuplicateKeyError()
        for row in rows:
            self.rows.append(Reservation(
                id=str(uuid.uuid4()),
                owner_id=row.owner_id,
                date=row.date,
                menu_type=row.menu_type,
                status=row.status,
            ))

    def _matches(self, row: Reservation, filter: ReservationFilter) -> bool:
        return (
            row.owner_id == filter.owner_id
            and (filter.ids is None or row.id in filter.ids)
            and (filter.dates is None or row.date in filter.dates)
            and (filter.statuses is None or row.status in filter.statuses)
            and (filter.date_from is None or row.date >= filter.date_from)
            and (filter.date_to is None or row.date <= filter.date_to)
        )

    def _update(self, filter, changes) -> int:
        affected = 0
        for i, row in enumerate(self.rows):
            if self._matches(row, filter):
                self.rows[i] = row.model_copy(update=changes)
                affected += 1
        return affected

    async def update_reservation_status(self, filter, new_status, menu_type=None):
        self.calls.append("update_reservation_status")
        changes = {"status": ReservationStatus(new_status)}
        if menu_type is not None:
            changes["menu_type"] = MenuType(menu_type)
        return self._update(filter, changes)

    async def update_reservation_menu(self, filter, new_menu_type):
        self.calls.append("update_reservation_menu")
        return self._update(filter, {"menu_type": MenuType(new_menu_type)})

    async def upsert_profile(self, row):
        self.calls.append("upsert_profile")
        self.profiles[row.owner_id] = row

    async def get_profile(self, owner_id):
        return self.profiles.get(owner_id)

    async def log_action(self, owner_id, action, detail):
        self.logs.append((owner_id, action, detail))


def run(coro):
    """Drive a coroutine from a synchronous test"""
    return asyncio.run(coro)


@pytest.fixture
def test_settings():
    return TestingSettings()


@pytest.fixture
def test_db():
    """In-memory database"""
    db = DatabaseManager(":memory:")
    db.init_database()
    yield db
    db.close()


@pytest.fixture
def security(test_settings):
    return SecurityManager(test_settings.jwt_secret_key, test_settings.jwt_algorithm, 1)


@pytest.fixture
def persistence(test_db):
    return DuckDBPersistenceGateway(test_db)


@pytest.fixture
def identity(test_db, security):
    return LocalIdentityGateway(test_db, security)


@pytest.fixture
def fake_gateway():
    return FakePersistenceGateway()


@pytest.fixture
def client(test_settings, test_db):
    """HTTP client over an app bound to the in-memory database"""
    app = create_app(test_settings, test_db)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    """Headers of a freshly registered employee"""
    response = client.post("/api/v1/auth/signup", json={
        "email": "juan.perez@usm.cl",
        "password": "secreto123",
        "full_name": "Juan Pérez",
        "employee_id": "EMP001",
        "department": "Finanzas",
    })
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
