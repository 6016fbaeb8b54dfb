# rollcall/backend/api/utilities/limiter.py

from fastapi import Request
import jwt

from slowapi import Limiter
from slowapi.util import get_remote_address

from ...config.config import settings

def get_limiter_key(request: Request) -> str:
    """
    Returns the rate limit key for a request.
    Authenticated requests are limited per admin id taken from the JWT,
    everything else per client IP address.
    """
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ")[1]
        try:
            # Expiry is irrelevant here, only the identity is needed.
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                options={"verify_exp": False}
            )
            admin_id: str = payload.get("admin_id")
            if admin_id:
                return admin_id
        except jwt.PyJWTError:
            pass

    return get_remote_address(request)

# Counters live in their own Redis database, separate from application data.
limiter = Limiter(
    key_func=get_limiter_key,
    storage_uri=settings.RATE_LIMITER_REDIS_URL or "memory://",
    enabled=settings.RATE_LIMIT_ENABLED
)
