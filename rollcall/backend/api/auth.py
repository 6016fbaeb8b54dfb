import logging
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from datetime import datetime, timedelta, timezone
from uuid import uuid4
import jwt
import redis.asyncio as redis
from pydantic import ValidationError

from .schemas.admin import Token, TokenData, LoginRequest, AdminResponse, LoginResponse
from ..models.db_models import AdminUser
from ..models.redis_models import AdminSessionRedis
from ..db.redis_client import RedisClient
from ..services.admin_service import AdminService
from ..services.errors import ServiceError, AuthorizationError
from ..config.config import settings
from .dependencies import get_redis_pool, get_admin_service
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


def create_access_token(data: dict, expires_delta: timedelta):
    """Creates a signed JWT carrying `data` that expires after `expires_delta`."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


async def get_current_admin(
    token: str = Depends(oauth2_scheme),
    redis_pool: redis.ConnectionPool = Depends(get_redis_pool)
) -> AdminUser:
    """
    Decodes the token, validates its payload with pydantic and requires a live
    admin session in Redis. Returns the admin as stored in that session.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenData.model_validate(payload)

        if token_data.admin_id is None:
            logger.warning(f"Token is valid but missing 'admin_id': {payload}")
            raise credentials_exception

        redis_client = RedisClient(pool=redis_pool)
        admin_session = await redis_client.get_admin_session(token_data.admin_id)

        if admin_session is None:
            logger.warning(f"Admin '{token_data.admin_id}' has a valid token but no active session in Redis. Denying access.")
            raise credentials_exception

        return admin_session.user_data

    except (jwt.PyJWTError, ValidationError) as e:
        logger.warning(f"Token validation error: {e}")
        raise credentials_exception


async def _perform_login(email: str, password: str, service: AdminService, redis_pool: redis.ConnectionPool) -> LoginResponse:
    """Shared login flow for the JSON and the OAuth2 form endpoints."""
    logger.info(f"Login attempt for admin '{email}'.")
    try:
        admin = await service.authenticate(email, password)
    except AuthorizationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except ServiceError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    try:
        ttl = settings.ADMIN_SESSION_TTL_SECONDS
        now = datetime.now(timezone.utc)
        redis_session = AdminSessionRedis(
            user_data=admin, session_id=uuid4(),
            session_start_time=now, session_end_time=now + timedelta(seconds=ttl)
        )
        await RedisClient(pool=redis_pool).save_admin_session(redis_session, ttl=ttl)
        logger.info(f"Redis session created for admin '{admin.id}' with a TTL of {ttl} seconds.")
    except Exception as e:
        logger.error(f"Could not create a session for admin '{admin.id}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="An unexpected server error occurred during login.")

    access_token = create_access_token(
        data={"admin_id": admin.id},
        expires_delta=timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES)
    )
    logger.info(f"Admin '{admin.email}' logged in successfully.")
    return LoginResponse(token=Token(access_token=access_token, token_type="bearer"), user=AdminResponse.model_validate(admin))


@router.post("/token", response_model=Token)
@limiter.limit("20/minute")
async def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AdminService = Depends(get_admin_service),
    redis_pool: redis.ConnectionPool = Depends(get_redis_pool)
):
    """Standard OAuth2 endpoint for Swagger UI. The username is the admin's email."""
    login_response = await _perform_login(form_data.username, form_data.password, service, redis_pool)
    return login_response.token


@router.post("/login", response_model=LoginResponse)
@limiter.limit("20/minute")
async def login(
    request: Request,
    login_request: LoginRequest,
    service: AdminService = Depends(get_admin_service),
    redis_pool: redis.ConnectionPool = Depends(get_redis_pool)
):
    """Login endpoint for the web client."""
    return await _perform_login(login_request.email, login_request.password, service, redis_pool)


@router.get("/me", response_model=AdminResponse)
async def read_current_admin(current_admin: AdminUser = Depends(get_current_admin)):
    return current_admin


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("60/minute")
async def logout(
    request: Request,
    redis_pool: redis.ConnectionPool = Depends(get_redis_pool),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """Deletes the admin's session from Redis."""
    logger.info(f"Admin '{current_admin.id}' logging out.")
    try:
        redis_client = RedisClient(pool=redis_pool)
        await redis_client.delete_admin_session(current_admin.id)
        logger.info(f"Session for admin '{current_admin.id}' successfully deleted from Redis.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        logger.error(f"Error during logout for admin '{current_admin.id}'.", exc_info=True)
        raise HTTPException(status_code=500, detail="An error occurred during logout.")
