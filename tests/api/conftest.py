# tests/api/conftest.py
import pytest
import pytest_asyncio
from datetime import datetime
from typing import AsyncIterator
from unittest.mock import AsyncMock
from httpx import AsyncClient, ASGITransport

from rollcall.backend.main import app
from rollcall.backend.models.db_models import AdminUser
from rollcall.backend.api.auth import get_current_admin
from rollcall.backend.api import dependencies

# ----- Fixtures shared by the API tests -----

@pytest.fixture
def admin_user() -> AdminUser:
    return AdminUser(id="a1", name="Discipline Master", email="dm@example.com", department="Discipline",
                     employee_id="E001", created_at=datetime(2025, 1, 1))

@pytest.fixture
def mock_service() -> AsyncMock:
    """Stands in for whichever service the endpoint under test depends on."""
    return AsyncMock()

@pytest_asyncio.fixture(scope="function")
async def http_client(admin_user, mock_service) -> AsyncIterator[AsyncClient]:
    """
    HTTP client against the app with authentication and every service
    dependency replaced by the test doubles.
    """
    app.dependency_overrides[get_current_admin] = lambda: admin_user
    for getter in (
        dependencies.get_rollcall_service,
        dependencies.get_timetable_service,
        dependencies.get_roster_service,
        dependencies.get_report_service,
        dependencies.get_admin_service,
    ):
        app.dependency_overrides[getter] = lambda: mock_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
