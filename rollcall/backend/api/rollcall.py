from fastapi import APIRouter, Depends, Query, Request, status
from typing import List, Optional
from datetime import date

from ..services.rollcall_service import RollcallService
from ..services.errors import ServiceError
from ..models.db_models import AdminUser, AttendanceRecord
from ..models.rollcall_models import Session, SessionAttendanceResult
from ..modules.clock import local_now, to_local_naive
from .schemas.attendance import (
    AttendanceSubmitRequest,
    AttendanceSubmitResponse,
    SessionAttendanceRequest,
    CompletedSessionsResponse
)
from .auth import get_current_admin
from .dependencies import get_rollcall_service
from .utilities.limiter import limiter
from .utilities.service_errors import http_error_from

router = APIRouter(tags=["Rollcall"])


@router.get("/rollcall/sessions", response_model=List[Session], summary="List the sessions open for attendance right now")
@limiter.limit("120/minute")
async def get_current_sessions(request: Request, field: Optional[str] = None, admin: AdminUser = Depends(get_current_admin), service: RollcallService = Depends(get_rollcall_service)):
    try:
        return await service.get_current_sessions(local_now(), field=field)
    except ServiceError as e:
        raise http_error_from(e)


@router.get("/rollcall/completed", response_model=CompletedSessionsResponse, summary="List session ids already completed on a date")
@limiter.limit("120/minute")
async def get_completed_sessions(request: Request, on_date: Optional[date] = Query(None, alias="date"), admin: AdminUser = Depends(get_current_admin), service: RollcallService = Depends(get_rollcall_service)):
    session_date = on_date or local_now().date()
    try:
        session_ids = await service.get_completed_sessions(session_date)
        return CompletedSessionsResponse(date=session_date, session_ids=sorted(session_ids))
    except ServiceError as e:
        raise http_error_from(e)


@router.post("/rollcall/sessions/{session_id}/attendance", response_model=SessionAttendanceResult, status_code=status.HTTP_201_CREATED, summary="Submit attendance for a whole session")
@limiter.limit("30/minute")
async def submit_session_attendance(request: Request, session_id: str, submit_request: SessionAttendanceRequest, admin: AdminUser = Depends(get_current_admin), service: RollcallService = Depends(get_rollcall_service)):
    try:
        return await service.submit_session_attendance(
            session_id=session_id, session=submit_request.session, marks=submit_request.marks,
            submitted_by=admin, now=local_now()
        )
    except ServiceError as e:
        raise http_error_from(e)


@router.post("/attendance", response_model=AttendanceSubmitResponse, summary="Insert or update a single attendance record")
@limiter.limit("300/minute")
async def submit_attendance(request: Request, submit_request: AttendanceSubmitRequest, admin: AdminUser = Depends(get_current_admin), service: RollcallService = Depends(get_rollcall_service)):
    timestamp = to_local_naive(submit_request.timestamp)
    record = AttendanceRecord(
        **submit_request.model_dump(exclude={"date", "timestamp"}),
        timestamp=timestamp,
        attendance_date=submit_request.date or timestamp.date()
    )
    try:
        action = await service.submit_attendance(record)
        return AttendanceSubmitResponse(success=True, action=action)
    except ServiceError as e:
        raise http_error_from(e)
