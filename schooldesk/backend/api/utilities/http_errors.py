# schooldesk/backend/api/utilities/http_errors.py
from fastapi import HTTPException, status

from ...services.errors import ServiceError, AuthorizationError, NotFoundError, ConflictError

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
)


def to_http_exception(error: ServiceError) -> HTTPException:
    """Maps a service error to its HTTP status; anything unrecognised is a 400."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
