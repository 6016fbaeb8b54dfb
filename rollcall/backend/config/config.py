import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """
    Holds the application settings read straight from environment variables.
    """
    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL")

    # Redis
    APPLICATION_REDIS_URL: str = os.environ.get("APPLICATION_REDIS_URL")
    RATE_LIMITER_REDIS_URL: str = os.environ.get("RATE_LIMITER_REDIS_URL")
    RATE_LIMIT_ENABLED: bool = os.environ.get("RATE_LIMIT_ENABLED", "true").lower() == "true"

    # JWT and admin sessions
    SECRET_KEY: str = os.environ.get("SECRET_KEY")
    ALGORITHM: str = os.environ.get("ALGORITHM", "HS256")
    ADMIN_TOKEN_EXPIRE_MINUTES: int = int(os.environ.get("ADMIN_TOKEN_EXPIRE_MINUTES", 8 * 60))
    ADMIN_SESSION_TTL_SECONDS: int = int(os.environ.get("ADMIN_SESSION_TTL_SECONDS", 8 * 3600))

    # Rollcall
    LOCAL_UTC_OFFSET_HOURS: int = int(os.environ.get("LOCAL_UTC_OFFSET_HOURS", 1))
    SNAPSHOT_TTL_SECONDS: int = int(os.environ.get("SNAPSHOT_TTL_SECONDS", 7 * 24 * 3600))
    SNAPSHOT_REFRESH_MINUTES: int = int(os.environ.get("SNAPSHOT_REFRESH_MINUTES", 5))
    SCHOOL_NAME: str = os.environ.get("SCHOOL_NAME", "IME Business and Engineering School")
    SMS_SIGNATURE: str = os.environ.get("SMS_SIGNATURE", "IME Discipline Master")

    # Logging
    LOG_DIR: str = os.environ.get("LOG_DIR", "logs")

# Single importable settings instance
settings = Config()
