"""
Error taxonomy shared by the services.

Each error knows its HTTP status and which envelope the endpoint answers
with: {"errors": [{"msg": ...}]} or the bare {"msg": ...}.
"""
from typing import List, Optional

ERRORS = "errors"
MSG = "msg"


class ApiError(Exception):
    status_code = 500
    envelope = ERRORS

    def __init__(self, status_code: Optional[int] = None, msg: str = "", envelope: Optional[str] = None,
                 errors: Optional[List[dict]] = None):
        super().__init__(msg)
        if status_code is not None:
            self.status_code = status_code
        if envelope is not None:
            self.envelope = envelope
        self.msg = msg
        self.errors = errors if errors is not None else [{"msg": msg}]

    def to_content(self) -> dict:
        if self.envelope == MSG:
            return {"msg": self.msg}
        return {"errors": self.errors}


class ValidationError(ApiError):
    """One or more required fields are missing or malformed."""

    status_code = 400

    def __init__(self, errors: List[dict]):
        super().__init__(msg=errors[0]["msg"] if errors else "", errors=errors)


class NotFound(ApiError):
    status_code = 404

    def __init__(self, msg: str, status_code: Optional[int] = None, envelope: Optional[str] = None):
        super().__init__(status_code, msg, envelope)


class BadRequest(ApiError):
    status_code = 400

    def __init__(self, msg: str):
        super().__init__(msg=msg)


class Unauthorized(ApiError):
    """The requester does not own the resource."""

    status_code = 401

    def __init__(self, msg: str):
        super().__init__(msg=msg)


class Unauthenticated(ApiError):
    status_code = 401
    envelope = MSG

    def __init__(self, msg: str):
        super().__init__(msg=msg)
