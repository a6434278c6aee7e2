"""
Field-presence checks for request bodies.

Failures are collected per field and raised together as a ValidationError,
rendered as {"errors": [{"value", "msg", "param", "location"}]}.
"""
from typing import Any, List, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError

_email_adapter = TypeAdapter(EmailStr)


def is_empty(value: Any) -> bool:
    return value is None or value == ""


class Checker:
    def __init__(self, body: dict):
        self.body = body
        self.errors: List[dict] = []

    def _fail(self, field: str, msg: str):
        entry = {"msg": msg, "param": field, "location": "body"}
        value = self.body.get(field)
        if value is not None:
            entry = {"value": value, **entry}
        self.errors.append(entry)

    def required(self, field: str, msg: str) -> "Checker":
        if is_empty(self.body.get(field)):
            self._fail(field, msg)
        return self

    def exists(self, field: str, msg: str) -> "Checker":
        if self.body.get(field) is None:
            self._fail(field, msg)
        return self

    def email(self, field: str, msg: str) -> "Checker":
        try:
            _email_adapter.validate_python(self.body.get(field))
        except PydanticValidationError:
            self._fail(field, msg)
        return self

    def min_length(self, field: str, length: int, msg: str) -> "Checker":
        value: Optional[str] = self.body.get(field)
        if value is None or len(value) < length:
            self._fail(field, msg)
        return self

    def validate(self):
        if self.errors:
            raise ValidationError(self.errors)


def check(body: dict) -> Checker:
    return Checker(body)
