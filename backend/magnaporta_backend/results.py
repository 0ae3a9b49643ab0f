# magnaporta_backend/results.py
"""
Typed outcome of a command.

Commands never raise for expected business failures (missing rows,
duplicates, upstream refusals). They return a CommandResult and the view
maps ``kind`` to an HTTP status, so every endpoint reports errors the same
way.
"""

from rest_framework import status


class ErrorKind:
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    UPSTREAM = "upstream"


HTTP_STATUS_BY_KIND = {
    ErrorKind.INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.UPSTREAM: status.HTTP_502_BAD_GATEWAY,
}


class CommandResult:
    def __init__(self, success: bool, data=None, error: str = None, kind: str = None, message: str = ""):
        self.success = success
        self.data = data
        self.error = error
        self.kind = kind
        self.message = message

    @classmethod
    def ok(cls, data=None, message: str = ""):
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str, kind: str = ErrorKind.INVALID):
        return cls(success=False, error=error, kind=kind)

    @classmethod
    def not_found(cls, error: str):
        return cls.fail(error, ErrorKind.NOT_FOUND)

    @classmethod
    def conflict(cls, error: str):
        return cls.fail(error, ErrorKind.CONFLICT)

    @property
    def http_status(self) -> int:
        if self.success:
            return status.HTTP_200_OK
        return HTTP_STATUS_BY_KIND.get(self.kind, status.HTTP_400_BAD_REQUEST)

    def __repr__(self):
        if self.success:
            return f"<CommandResult ok data={self.data!r}>"
        return f"<CommandResult fail kind={self.kind} error={self.error!r}>"
