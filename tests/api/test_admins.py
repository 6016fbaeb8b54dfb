import pytest
from datetime import datetime
from httpx import AsyncClient

from rollcall.backend.models.db_models import AdminUser
from rollcall.backend.services.errors import AuthorizationError

CREATE_BODY = {
    "name": "Lecturer One", "email": "lecturer@example.com", "password": "long-password",
    "department": "CS", "employee_id": "E002", "role": "lecturer",
}


@pytest.mark.asyncio
async def test_create_admin_never_returns_password(http_client: AsyncClient, mock_service):
    mock_service.create_admin.return_value = AdminUser(
        id="a2", name="Lecturer One", email="lecturer@example.com", department="CS",
        role="lecturer", employee_id="E002", created_at=datetime(2025, 1, 2)
    )

    response = await http_client.post("/api/v1/admins", json=CREATE_BODY)

    assert response.status_code == 201
    assert "password" not in response.json()
    assert mock_service.create_admin.call_args.kwargs["password"] == "long-password"


@pytest.mark.asyncio
async def test_short_password_is_rejected(http_client: AsyncClient, mock_service):
    response = await http_client.post("/api/v1/admins", json={**CREATE_BODY, "password": "short"})

    assert response.status_code == 422
    mock_service.create_admin.assert_not_called()


@pytest.mark.asyncio
async def test_deleting_self_returns_403(http_client: AsyncClient, mock_service, admin_user):
    mock_service.delete_admin.side_effect = AuthorizationError("You cannot delete your own account.")

    response = await http_client.delete("/api/v1/admins/a1")

    assert response.status_code == 403
    assert mock_service.delete_admin.call_args.kwargs["current_admin"] == admin_user


@pytest.mark.asyncio
async def test_health_check(http_client: AsyncClient):
    response = await http_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
