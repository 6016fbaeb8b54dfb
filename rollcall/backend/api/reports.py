from fastapi import APIRouter, Depends, Request
from typing import List, Optional
from datetime import date

from ..services.report_service import ReportService
from ..services.errors import ServiceError
from ..models.db_models import AdminUser, AbsenteeRecord, DashboardStats, FieldAttendanceSummary, StudentAbsenteeHours
from ..modules.report_ranges import ReportType
from ..modules.clock import local_now
from .auth import get_current_admin
from .dependencies import get_report_service
from .utilities.limiter import limiter
from .utilities.service_errors import http_error_from

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/absentees", response_model=List[AbsenteeRecord], summary="Absent students in a date range")
@limiter.limit("30/minute")
async def absentee_report(request: Request, report_type: ReportType = "daily", date_from: Optional[date] = None, date_to: Optional[date] = None,
                          field: Optional[str] = None, level: Optional[str] = None, course: Optional[str] = None,
                          student_name: Optional[str] = None, matricule: Optional[str] = None,
                          admin: AdminUser = Depends(get_current_admin), service: ReportService = Depends(get_report_service)):
    try:
        return await service.absentee_report(
            local_now().date(), report_type, date_from, date_to,
            field=field, level=level, course=course, student_name=student_name, matricule=matricule
        )
    except ServiceError as e:
        raise http_error_from(e)


@router.get("/dashboard", response_model=DashboardStats, summary="Headline attendance figures")
@limiter.limit("30/minute")
async def dashboard_stats(request: Request, admin: AdminUser = Depends(get_current_admin), service: ReportService = Depends(get_report_service)):
    try:
        return await service.dashboard_stats(local_now().date())
    except ServiceError as e:
        raise http_error_from(e)


@router.get("/field-summary", response_model=List[FieldAttendanceSummary], summary="Attendance rate per field")
@limiter.limit("30/minute")
async def field_attendance_summary(request: Request, report_type: ReportType = "daily", date_from: Optional[date] = None, date_to: Optional[date] = None,
                                   admin: AdminUser = Depends(get_current_admin), service: ReportService = Depends(get_report_service)):
    try:
        return await service.field_attendance_summary(local_now().date(), report_type, date_from, date_to)
    except ServiceError as e:
        raise http_error_from(e)


@router.get("/student-absentee-hours", response_model=List[StudentAbsenteeHours], summary="Absence hours per student")
@limiter.limit("30/minute")
async def student_absentee_hours(request: Request, report_type: ReportType = "monthly", date_from: Optional[date] = None, date_to: Optional[date] = None,
                                 admin: AdminUser = Depends(get_current_admin), service: ReportService = Depends(get_report_service)):
    try:
        return await service.student_absentee_hours(local_now().date(), report_type, date_from, date_to)
    except ServiceError as e:
        raise http_error_from(e)
