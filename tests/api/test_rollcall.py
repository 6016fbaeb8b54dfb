import pytest
from datetime import date
from httpx import AsyncClient

from rollcall.backend.models.db_models import Student
from rollcall.backend.models.rollcall_models import Session, SessionAttendanceResult, AbsenteeNotice
from rollcall.backend.services.errors import ServiceError, DataUnavailableError

SESSION_ID = "CS-Level-200-Monday-08:00---10:00"

SESSION_BODY = {
    "course_title": "Database Systems", "course_code": "DS", "field_name": "CS", "level": "Level 200",
    "room": "101", "start_time": "08:00", "end_time": "10:00", "day": "Monday", "lecturer": "Dr. Codd",
}

def sample_session() -> Session:
    return Session(id=SESSION_ID, students=[
        Student(id="s1", name="Jane Doe", matricule="CS001", field="CS", level="Level 200",
                parent_name="Mr. Doe", parent_phone="+237600000001")
    ], **SESSION_BODY)


@pytest.mark.asyncio
async def test_list_current_sessions(http_client: AsyncClient, mock_service):
    mock_service.get_current_sessions.return_value = [sample_session()]

    response = await http_client.get("/api/v1/rollcall/sessions", params={"field": "CS"})

    assert response.status_code == 200
    body = response.json()
    assert body[0]["id"] == SESSION_ID
    assert body[0]["students"][0]["matricule"] == "CS001"
    assert mock_service.get_current_sessions.call_args.kwargs["field"] == "CS"


@pytest.mark.asyncio
async def test_sessions_unavailable_returns_503(http_client: AsyncClient, mock_service):
    mock_service.get_current_sessions.side_effect = DataUnavailableError("The timetable is currently unavailable.")

    response = await http_client.get("/api/v1/rollcall/sessions")

    assert response.status_code == 503
    assert response.json()["detail"] == "The timetable is currently unavailable."


@pytest.mark.asyncio
async def test_completed_sessions_for_date(http_client: AsyncClient, mock_service):
    mock_service.get_completed_sessions.return_value = {"b", "a"}

    response = await http_client.get("/api/v1/rollcall/completed", params={"date": "2025-03-03"})

    assert response.status_code == 200
    assert response.json() == {"date": "2025-03-03", "session_ids": ["a", "b"]}
    mock_service.get_completed_sessions.assert_awaited_once_with(date(2025, 3, 3))


@pytest.mark.asyncio
async def test_submit_session_attendance(http_client: AsyncClient, mock_service, admin_user):
    mock_service.submit_session_attendance.return_value = SessionAttendanceResult(
        session_id=SESSION_ID, saved=1, failed=0, completed=True,
        message="Attendance saved for 1 students.",
        absentees=[AbsenteeNotice(student_id="s1", student_name="Jane Doe", matricule="CS001",
                                  parent_name="Mr. Doe", parent_phone="+237600000001", sms_message="Hello Mr. Doe")]
    )

    response = await http_client.post(
        f"/api/v1/rollcall/sessions/{SESSION_ID}/attendance",
        json={"session": SESSION_BODY, "marks": [{"student_id": "s1", "is_present": False}]}
    )

    assert response.status_code == 201
    assert response.json()["absentees"][0]["sms_message"] == "Hello Mr. Doe"
    kwargs = mock_service.submit_session_attendance.call_args.kwargs
    assert kwargs["session_id"] == SESSION_ID
    assert kwargs["submitted_by"] == admin_user
    assert kwargs["marks"][0].is_present is False


@pytest.mark.asyncio
async def test_submit_completed_session_returns_400(http_client: AsyncClient, mock_service):
    mock_service.submit_session_attendance.side_effect = ServiceError("This session has already been completed today.")

    response = await http_client.post(
        f"/api/v1/rollcall/sessions/{SESSION_ID}/attendance",
        json={"session": SESSION_BODY, "marks": [{"student_id": "s1", "is_present": True}]}
    )

    assert response.status_code == 400
    assert "already been completed" in response.json()["detail"]


@pytest.mark.asyncio
async def test_submit_single_attendance(http_client: AsyncClient, mock_service):
    mock_service.submit_attendance.return_value = "inserted"

    response = await http_client.post("/api/v1/attendance", json={
        "session_id": SESSION_ID, "student_id": "s1", "is_present": True,
        "timestamp": "2025-03-03T08:05:00+01:00", "course_title": "Database Systems",
    })

    assert response.status_code == 200
    assert response.json() == {"success": True, "action": "inserted"}
    record = mock_service.submit_attendance.call_args[0][0]
    assert record.attendance_date == date(2025, 3, 3)
    assert record.timestamp.tzinfo is None


@pytest.mark.asyncio
async def test_submit_single_attendance_requires_ids(http_client: AsyncClient, mock_service):
    response = await http_client.post("/api/v1/attendance", json={"is_present": True, "timestamp": "2025-03-03T08:05:00"})

    assert response.status_code == 422
    mock_service.submit_attendance.assert_not_called()
