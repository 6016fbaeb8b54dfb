# rollcall/backend/modules/passwords.py

from werkzeug.security import generate_password_hash, check_password_hash

ITERATIONS = 260000


def hash_password(password: str, iterations: int = ITERATIONS) -> str:
    """Returns 'pbkdf2:sha256:<iterations>$<salt>$<hex digest>'."""
    return generate_password_hash(password, method=f"pbkdf2:sha256:{iterations}")


def verify_password(password: str, stored_hash: str) -> bool:
    if not isinstance(stored_hash, str):
        return False
    try:
        return check_password_hash(stored_hash, password)
    except ValueError:
        # unknown hash method
        return False
