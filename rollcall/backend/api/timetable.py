from fastapi import APIRouter, Depends, Response, Request, status
from typing import List, Optional

from ..services.timetable_service import TimetableService
from ..services.errors import ServiceError
from ..models.db_models import AdminUser, TimetableEntry
from .schemas.timetable import TimetableEntryRequest
from .auth import get_current_admin
from .dependencies import get_timetable_service
from .utilities.limiter import limiter
from .utilities.service_errors import http_error_from

router = APIRouter(prefix="/timetable", tags=["Timetable"])


@router.get("", response_model=List[TimetableEntry], summary="List timetable entries")
@limiter.limit("60/minute")
async def list_timetable(request: Request, field: Optional[str] = None, admin: AdminUser = Depends(get_current_admin), service: TimetableService = Depends(get_timetable_service)):
    try:
        return await service.list_entries(field)
    except ServiceError as e:
        raise http_error_from(e)


@router.post("", response_model=TimetableEntry, status_code=status.HTTP_201_CREATED, summary="Add a timetable entry")
@limiter.limit("30/minute")
async def add_timetable_entry(request: Request, entry_request: TimetableEntryRequest, admin: AdminUser = Depends(get_current_admin), service: TimetableService = Depends(get_timetable_service)):
    try:
        return await service.add_entry(**entry_request.model_dump())
    except ServiceError as e:
        raise http_error_from(e)


@router.put("/{entry_id}", response_model=TimetableEntry, summary="Replace a timetable entry")
@limiter.limit("30/minute")
async def update_timetable_entry(request: Request, entry_id: str, entry_request: TimetableEntryRequest, admin: AdminUser = Depends(get_current_admin), service: TimetableService = Depends(get_timetable_service)):
    try:
        return await service.update_entry(entry_id, **entry_request.model_dump())
    except ServiceError as e:
        raise http_error_from(e)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a timetable entry")
@limiter.limit("30/minute")
async def delete_timetable_entry(request: Request, entry_id: str, admin: AdminUser = Depends(get_current_admin), service: TimetableService = Depends(get_timetable_service)):
    try:
        await service.delete_entry(entry_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise http_error_from(e)
