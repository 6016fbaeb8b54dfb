from fastapi import APIRouter, Depends, Response, Request, status
from typing import List, Optional

from ..services.roster_service import RosterService
from ..services.errors import ServiceError
from ..models.db_models import AdminUser, Student
from ..models.rollcall_models import StudentImportResult
from .schemas.roster import StudentRequest, StudentImportRequest
from .auth import get_current_admin
from .dependencies import get_roster_service
from .utilities.limiter import limiter
from .utilities.service_errors import http_error_from

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=List[Student], summary="List students")
@limiter.limit("60/minute")
async def list_students(request: Request, field: Optional[str] = None, level: Optional[str] = None, search: Optional[str] = None,
                        admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        return await service.list_students(field, level, search)
    except ServiceError as e:
        raise http_error_from(e)


@router.post("/import", response_model=StudentImportResult, summary="Import many students at once")
@limiter.limit("5/minute")
async def import_students(request: Request, import_request: StudentImportRequest, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        return await service.import_students(import_request.students)
    except ServiceError as e:
        raise http_error_from(e)


@router.get("/{student_id}", response_model=Student, summary="Get one student")
@limiter.limit("60/minute")
async def get_student(request: Request, student_id: str, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        return await service.get_student(student_id)
    except ServiceError as e:
        raise http_error_from(e)


@router.post("", response_model=Student, status_code=status.HTTP_201_CREATED, summary="Add a student")
@limiter.limit("30/minute")
async def add_student(request: Request, student_request: StudentRequest, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        return await service.add_student(**student_request.model_dump())
    except ServiceError as e:
        raise http_error_from(e)


@router.put("/{student_id}", response_model=Student, summary="Replace a student")
@limiter.limit("30/minute")
async def update_student(request: Request, student_id: str, student_request: StudentRequest, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        return await service.update_student(student_id, **student_request.model_dump())
    except ServiceError as e:
        raise http_error_from(e)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a student")
@limiter.limit("30/minute")
async def delete_student(request: Request, student_id: str, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        await service.delete_student(student_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise http_error_from(e)
