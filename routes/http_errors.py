from fastapi import HTTPException, status

from services.errors import (
    RecordNotFoundError,
    RemoteReadError,
    RemoteWriteError,
    SeatUnavailableError,
    StudyHallError,
    ValidationError,
)


def to_http_exception(exc: StudyHallError) -> HTTPException:
    """Map a service error onto the status code the dashboard expects."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_detail())
    if isinstance(exc, SeatUnavailableError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, RecordNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{exc.table.rstrip('s').capitalize()} not found")
    if isinstance(exc, RemoteWriteError):
        code = status.HTTP_409_CONFLICT if exc.conflict else status.HTTP_500_INTERNAL_SERVER_ERROR
        return HTTPException(status_code=code, detail=str(exc))
    if isinstance(exc, RemoteReadError):
        # distinct from an empty list so clients can show "failed to load"
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
