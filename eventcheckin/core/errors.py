"""
Typed failures of the attendance check-in flow.

Each error carries the HTTP status it maps to so the transport layer can
translate it without knowing about individual kinds.
"""

from starlette import status


class AttendanceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Attendance request rejected"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class EventNotFound(AttendanceError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Event not found or no longer available"


class EventUnavailable(AttendanceError):
    detail = "The event is no longer active"


class MalformedToken(AttendanceError):
    detail = "Invalid check-in code: payload could not be read"


class TokenInactiveOrUnknown(AttendanceError):
    detail = "Invalid or inactive check-in code"


class ActiveTokenNotFound(AttendanceError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "There is no active check-in code for this event"


class NotInscribed(AttendanceError):
    detail = "You are not registered for this event"


class AlreadyVerified(AttendanceError):
    status_code = status.HTTP_409_CONFLICT
    detail = "You have already verified your attendance at this event"
