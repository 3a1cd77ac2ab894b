"""HTTP error types raised by the reservation services"""

from fastapi import HTTPException, status


class BadRequestError(HTTPException):
    """Validation failure on identifiers, phone, dates, status or queries"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Invalid basic auth credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Basic"},
        )


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Reservation not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """An active reservation already exists for the guest and day"""

    def __init__(self, detail: str = "You already have an active reservation for this date"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InternalError(HTTPException):
    """A write that should have succeeded returned nothing"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
