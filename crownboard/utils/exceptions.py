"""
Custom exceptions for Crownboard.

These exceptions carry a stable error code so the API layer can map them to
HTTP responses without inspecting messages.
"""


class CrownboardError(Exception):
    """Base exception for all Crownboard errors."""

    status_code = 500

    def __init__(self, message: str, code: str = "CROWNBOARD_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(CrownboardError):
    """Invalid input data."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = "INVALID_FIELD" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class InvalidSessionError(CrownboardError):
    """The iframe session token is missing or lacks actor/company identity."""

    status_code = 401

    def __init__(self, message: str = "Invalid Whop session", code: str = "INVALID_SESSION"):
        super().__init__(message, code)


class EmptyPoolError(CrownboardError):
    """A winner draw was requested from a pool with no candidates."""

    status_code = 409

    def __init__(self, message: str = "No eligible entries to pick a winner from"):
        super().__init__(message, "EMPTY_POOL")


class MalformedRecordError(CrownboardError):
    """A raw API record is not a keyed structure at all."""

    status_code = 422

    def __init__(self, kind: str, record):
        self.kind = kind
        self.record_type = type(record).__name__
        message = f"Malformed {kind} record: expected a mapping, got {self.record_type}"
        super().__init__(message, "MALFORMED_RECORD")


class WhopAPIError(CrownboardError):
    """Error communicating with the Whop API."""

    status_code = 502

    def __init__(self, message: str, status: int = None, original_error: Exception = None):
        self.status = status
        self.original_error = original_error
        super().__init__(message, "WHOP_ERROR")


class ConfigurationError(CrownboardError):
    """Application configuration error."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")
