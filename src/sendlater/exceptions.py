from fastapi import Request
from fastapi.responses import JSONResponse


class SendLaterException(Exception):
    """Base sendlater exception"""


class ConfigException(SendLaterException):
    """The active configuration can't be used for what was asked of it"""


class SchedulingError(SendLaterException):
    """Base class for errors raised by the scheduling engine to its callers"""


class InvalidScheduleTime(ValueError, SchedulingError):
    """A job was scheduled or rescheduled for a time that is not in the future"""


class AlreadyCompleted(SchedulingError):
    """A job can't be rescheduled because the backing store has already completed it"""


class InFlight(SchedulingError):
    """A job can't be rescheduled because it is executing right now"""


class SchedulingBackendError(SchedulingError):
    """The backing store of the scheduler is unreachable or misbehaving"""


class SchedulerNotRunningError(SchedulingError):
    """A scheduling operation was requested before the scheduler was started"""


class EmailNotFound(LookupError, SendLaterException):
    """No email with the requested id exists"""


class EmailAlreadySent(SendLaterException):
    """A sent email can't be modified or rescheduled"""


_STATUS_CODES: dict[type[SendLaterException], int] = {
    InvalidScheduleTime: 400,
    EmailAlreadySent: 400,
    EmailNotFound: 404,
    AlreadyCompleted: 409,
    InFlight: 409,
    SchedulingBackendError: 503,
    SchedulerNotRunningError: 503,
}


async def sendlater_exception_handler(request: Request, exc: SendLaterException) -> JSONResponse:
    """
    Map domain exceptions that escape an endpoint to an http response
    with the same ``{"detail": ...}`` shape as fastapi's own errors.
    """
    status_code = 500
    for exc_type in type(exc).__mro__:
        if exc_type in _STATUS_CODES:
            status_code = _STATUS_CODES[exc_type]
            break
    return JSONResponse({"detail": str(exc)}, status_code=status_code)
