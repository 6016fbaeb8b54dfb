import logging
from typing import List, Optional
from uuid import uuid4
from datetime import datetime

from ..db.redis_client import RedisClient
from ..db.db_client import AsyncPostgresClient, affected_rows
from ..models.db_models import AdminUser
from ..modules.passwords import hash_password, verify_password
from ..modules.clock import local_now
from .errors import ServiceError, NotFoundError, AuthorizationError

logger = logging.getLogger(__name__)


class AdminService:
    """
    Administrator accounts: credential checks and account management.
    """
    def __init__(self, redis_client: RedisClient, db_client: AsyncPostgresClient):
        self.redis_client = redis_client
        self.db_client = db_client

    async def authenticate(self, email: str, password: str) -> AdminUser:
        """Returns the admin for valid credentials, raises AuthorizationError otherwise."""
        try:
            found = await self.db_client.get_admin_with_password_hash(email.strip().lower())
        except Exception as e:
            logger.error(f"Database error while authenticating '{email}'.", exc_info=True)
            raise ServiceError("A server error occurred during login.") from e

        if found is None:
            logger.warning(f"Login attempt for unknown admin '{email}'.")
            raise AuthorizationError("Invalid email or password.")
        admin, password_hash = found
        if not verify_password(password, password_hash):
            logger.warning(f"Wrong password for admin '{email}'.")
            raise AuthorizationError("Invalid email or password.")
        return admin

    async def list_admins(self) -> List[AdminUser]:
        try:
            return await self.db_client.get_admins()
        except Exception as e:
            logger.error("Error reading admin accounts.", exc_info=True)
            raise ServiceError("A server error occurred while reading admin accounts.") from e

    async def create_admin(self, name: str, email: str, password: str, department: str, employee_id: str,
                           role: str = "admin", phone: Optional[str] = None, created_at: Optional[datetime] = None) -> AdminUser:
        admin = AdminUser(
            id=str(uuid4()), name=name, email=email.strip().lower(), phone=phone, department=department,
            role=role, employee_id=employee_id, created_at=created_at or local_now()
        )
        try:
            added = await self.db_client.add_admin(admin, hash_password(password))
        except Exception as e:
            logger.error(f"Error creating admin '{admin.email}'.", exc_info=True)
            raise ServiceError("A server error occurred while creating the admin.") from e
        if not added:
            raise ServiceError(f"An admin with email '{admin.email}' already exists.")
        logger.info(f"Admin {admin.id} ({admin.email}) created.")
        return admin

    async def delete_admin(self, admin_id: str, current_admin: AdminUser):
        if admin_id == current_admin.id:
            raise AuthorizationError("You cannot delete your own account.")
        try:
            result = await self.db_client.delete_admin(admin_id)
        except Exception as e:
            logger.error(f"Error deleting admin {admin_id}.", exc_info=True)
            raise ServiceError("A server error occurred while deleting the admin.") from e
        if affected_rows(result) == 0:
            raise NotFoundError("Admin not found.")

        try:
            await self.redis_client.delete_admin_session(admin_id)
        except Exception:
            logger.error(f"Admin {admin_id} deleted but their Redis session could not be removed.", exc_info=True)
        logger.info(f"Admin {admin_id} deleted by {current_admin.id}.")
