# tests/conftest.py
import asyncio
import os
import sys

# Settings are read at import time, so these must be set before any rollcall module is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-rollcall-tests")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOCAL_UTC_OFFSET_HOURS", "1")
os.environ.setdefault("LOG_DIR", "logs")

# This is the crucial fix for Windows asyncio issues with pytest.
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
