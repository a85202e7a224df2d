# fleet_admin/errors.py
"""
Error taxonomy shared by the store, the upload adapter and the routers.
main.py maps each class to its HTTP status; anything else becomes a 500.
"""

from typing import Any, Optional


class FleetError(Exception):
    """Base exception for all fleet admin errors."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None, **extra: Any) -> None:
        self.message = message
        self.details = details
        self.extra = extra
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


class ValidationError(FleetError):
    """Schema, enum, range or required-field violation. `details` maps field → reason."""

    def __init__(self, details: dict) -> None:
        super().__init__("Validation failed.", details)

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Collapse a pydantic ValidationError into {wire field: reason}, first reason per field."""
        details = {}
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else "body"
            if err["type"] == "missing":
                reason = f"{field} is required"
            else:
                reason = err["msg"].removeprefix("Value error, ")
            details.setdefault(field, reason)
        return cls(details)


class DuplicateKeyError(FleetError):
    """Unique identification field collides with an existing record."""

    def __init__(self, key_value: dict, entity: str = "vehicle") -> None:
        fields = ", ".join(key_value) or "key"
        super().__init__(f"Duplicate key error. A {entity} with this {fields} already exists.", key_value)


class NotFound(FleetError):
    status_code = 404

    def __init__(self, entity: str = "Vehicle") -> None:
        super().__init__(f"{entity} not found")


class BadRequest(FleetError):
    """Missing request field, bad date ordering, decreasing mileage, etc."""


class UploadRejected(BadRequest):
    """Raised by the upload adapter only: disallowed type, size or count."""
