"""Package-wide exception hierarchy.

Every error raised by mailsmith derives from MailsmithError and carries an
``error_type`` tag, which is attached to log records so failures can be
grouped regardless of where they surface.
"""


class MailsmithError(Exception):
    """Base exception for all mailsmith errors."""

    error_type: str = "internal_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)


class NotFoundError(MailsmithError):
    """Base class for missing files and resources."""

    error_type = "not_found"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ParseError(MailsmithError):
    """Base class for markup and stylesheet parse failures."""

    error_type = "parse_error"

    def __init__(self, message: str = "Could not parse input"):
        super().__init__(message)


class ValidationError(MailsmithError):
    """Base class for malformed author input."""

    error_type = "validation_error"

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)
