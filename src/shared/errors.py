"""Error taxonomy shared by the catalogue and ordering contexts.

Every failure a caller can observe is one of these classes. Each carries a
stable machine-readable ``code`` and the HTTP status the transport layer
answers with, so routes never have to know which component raised it.
"""


class StoreError(Exception):
    """Base class for all failures surfaced to callers."""

    code = "STORE_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInput(StoreError):
    """A required field is missing or malformed. Not retryable."""

    code = "INVALID_INPUT"
    status_code = 400


class InvalidStatus(InvalidInput):
    code = "INVALID_STATUS"


class DuplicateOrderNumber(InvalidInput):
    code = "DUPLICATE_ORDER_NUMBER"
    status_code = 409


class NotFound(StoreError):
    code = "NOT_FOUND"
    status_code = 404


class UnsupportedMediaType(StoreError):
    code = "UNSUPPORTED_MEDIA_TYPE"
    status_code = 415


class PayloadTooLarge(StoreError):
    code = "PAYLOAD_TOO_LARGE"
    status_code = 413


class StorageUnavailable(StoreError):
    """The store is unreachable or the pool is exhausted. Retryable."""

    code = "STORAGE_UNAVAILABLE"
    status_code = 503


class InternalFailure(StoreError):
    """Unexpected fault during a write.

    The message is safe to show to untrusted callers; the underlying storage
    error is chained as ``__cause__`` and logged, never rendered.
    """

    code = "INTERNAL_FAILURE"
    status_code = 500


def field_errors(exc) -> dict:
    """Flatten a pydantic ``ValidationError`` into ``{"field.path": "message"}``."""
    errors = {}
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
        errors[loc] = err.get("msg", "Invalid value")
    return errors


def summarize(exc: BaseException) -> str:
    """First line of an exception's text, for log fields."""
    lines = str(exc).splitlines()
    return lines[0] if lines else type(exc).__name__
