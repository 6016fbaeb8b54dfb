# rollcall/backend/api/utilities/service_errors.py

from fastapi import HTTPException, status

from ...services.errors import (
    ServiceError, NotFoundError, AuthorizationError, TimetableConflictError, DataUnavailableError
)


def http_error_from(error: ServiceError) -> HTTPException:
    """Maps a service layer exception to the HTTP error returned to the client."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, TimetableConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, DataUnavailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, AuthorizationError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
