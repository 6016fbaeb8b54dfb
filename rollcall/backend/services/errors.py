# --- Service layer exception classes ---

class ServiceError(Exception):
    """General exception class for the service layer."""
    pass

class NotFoundError(ServiceError):
    """The requested record does not exist."""
    pass

class AuthorizationError(ServiceError):
    """Exception class for authorization-related errors."""
    pass

class TimetableConflictError(ServiceError):
    """A timetable save would double-book a room or a field. The message names the conflict."""
    pass

class DataUnavailableError(ServiceError):
    """Neither the database nor the cached snapshot could supply the requested data."""
    pass
