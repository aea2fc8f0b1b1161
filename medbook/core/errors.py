"""Domain errors raised by the booking core.

Every error carries the HTTP status it maps to, so the single handler
registered in ``medbook.main`` can render it without knowing the call site.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class BookingError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Internal server error.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request.'


class InvalidDate(InvalidInput):
    default_message = 'Invalid date. Use the YYYY-MM-DD format.'


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found.'


class Unauthorized(BookingError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Authentication required.'


class Forbidden(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You are not allowed to perform this action.'


class DoctorUnavailable(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Doctor is not available right now.'


class SlotConflict(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'This slot is already booked.'


class InvalidTransition(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'This status change is not allowed.'


class InternalError(BookingError):
    pass


def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={'success': False, 'message': exc.message},
    )
