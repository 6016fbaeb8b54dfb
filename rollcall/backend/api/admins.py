from fastapi import APIRouter, Depends, Response, Request, status
from typing import List

from ..services.admin_service import AdminService
from ..services.errors import ServiceError
from ..models.db_models import AdminUser
from .schemas.admin import AdminCreateRequest, AdminResponse
from .auth import get_current_admin
from .dependencies import get_admin_service
from .utilities.limiter import limiter
from .utilities.service_errors import http_error_from

router = APIRouter(prefix="/admins", tags=["Admins"])


@router.get("", response_model=List[AdminResponse], summary="List admin accounts")
@limiter.limit("30/minute")
async def list_admins(request: Request, admin: AdminUser = Depends(get_current_admin), service: AdminService = Depends(get_admin_service)):
    try:
        return await service.list_admins()
    except ServiceError as e:
        raise http_error_from(e)


@router.post("", response_model=AdminResponse, status_code=status.HTTP_201_CREATED, summary="Create an admin account")
@limiter.limit("10/minute")
async def create_admin(request: Request, create_request: AdminCreateRequest, admin: AdminUser = Depends(get_current_admin), service: AdminService = Depends(get_admin_service)):
    try:
        return await service.create_admin(**create_request.model_dump())
    except ServiceError as e:
        raise http_error_from(e)


@router.delete("/{admin_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an admin account")
@limiter.limit("10/minute")
async def delete_admin(request: Request, admin_id: str, admin: AdminUser = Depends(get_current_admin), service: AdminService = Depends(get_admin_service)):
    try:
        await service.delete_admin(admin_id, current_admin=admin)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise http_error_from(e)
