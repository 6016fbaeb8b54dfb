from fastapi import APIRouter, Depends, Response, Request, status
from typing import List

from ..services.roster_service import RosterService
from ..services.errors import ServiceError
from ..models.db_models import AdminUser, Field
from .schemas.roster import FieldRequest
from .auth import get_current_admin
from .dependencies import get_roster_service
from .utilities.limiter import limiter
from .utilities.service_errors import http_error_from

router = APIRouter(prefix="/fields", tags=["Fields"])


@router.get("", response_model=List[Field], summary="List academic fields with their student counts")
@limiter.limit("60/minute")
async def list_fields(request: Request, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        return await service.list_fields()
    except ServiceError as e:
        raise http_error_from(e)


@router.post("", response_model=Field, status_code=status.HTTP_201_CREATED, summary="Add a field")
@limiter.limit("30/minute")
async def add_field(request: Request, field_request: FieldRequest, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        return await service.add_field(**field_request.model_dump())
    except ServiceError as e:
        raise http_error_from(e)


@router.put("/{field_id}", response_model=Field, summary="Replace a field")
@limiter.limit("30/minute")
async def update_field(request: Request, field_id: str, field_request: FieldRequest, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        return await service.update_field(field_id, **field_request.model_dump())
    except ServiceError as e:
        raise http_error_from(e)


@router.delete("/{field_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a field")
@limiter.limit("30/minute")
async def delete_field(request: Request, field_id: str, admin: AdminUser = Depends(get_current_admin), service: RosterService = Depends(get_roster_service)):
    try:
        await service.delete_field(field_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise http_error_from(e)
