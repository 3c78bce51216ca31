"""
Storefront exceptions.

Raised by the service layer. The API layer catches these and translates
them into HTTP responses with a structured error body.
"""


class StorefrontError(Exception):
    """Base class for every error surfaced by the services."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class InvalidInput(StorefrontError):
    """Request rejected before any store access. Never retried."""

    kind = "invalid_input"


class NotFound(StorefrontError):
    """The targeted order or product does not exist."""

    kind = "not_found"


class StorageFailure(StorefrontError):
    """A statement against the backing store failed.

    The original driver error is kept as ``__cause__``.
    """

    kind = "storage_failure"


def describe_errors(errors) -> str:
    """Flatten pydantic/FastAPI error dicts into one readable message."""
    parts = []
    for detail in errors:
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)
