"""
Utility modules for Crownboard.
"""
from .logging_config import setup_logging
from .errors import (
    ErrorCode,
    error_response,
    from_exception,
    bad_request,
    bad_gateway,
    internal_error
)
from .exceptions import (
    CrownboardError,
    ValidationError,
    InvalidSessionError,
    EmptyPoolError,
    MalformedRecordError,
    WhopAPIError,
    ConfigurationError
)
from .fields import (
    resolve_path,
    first_present,
    parse_decimal,
    parse_int,
    parse_timestamp
)
