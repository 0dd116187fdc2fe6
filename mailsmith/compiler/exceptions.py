"""Compiler domain exceptions.

Errors are grouped by how far they reach: source errors abort a compile,
a template error falls back to the un-templated document, include errors
drop a single reference tag and selector errors drop a single style rule.
"""

from mailsmith.core.exceptions import (
    MailsmithError,
    NotFoundError,
    ParseError,
    ValidationError,
)


# Source document (fatal)
class SourceNotFoundError(NotFoundError):
    """Raised when the document being compiled cannot be read."""

    error_type = "source_not_found"

    def __init__(self, message: str = "Source document could not be read"):
        super().__init__(message)


class SourceParseError(ParseError):
    """Raised when the document being compiled cannot be parsed."""

    error_type = "source_parse_error"

    def __init__(self, message: str = "Source document could not be parsed"):
        super().__init__(message)


# Template inheritance
class TemplateLoadError(MailsmithError):
    """Raised when the template named by ``ui:template`` cannot be loaded."""

    error_type = "template_load_error"

    def __init__(self, message: str = "Template could not be loaded"):
        super().__init__(message)


# Reference tags
class IncludeError(MailsmithError):
    """Base class for failures resolving a single ``<link>`` reference."""

    error_type = "include_error"

    def __init__(self, message: str = "Reference could not be resolved"):
        super().__init__(message)


class MissingHrefError(IncludeError):
    """Raised when a reference tag has no ``href``."""

    error_type = "missing_href"

    def __init__(self, message: str = "Missing required 'href' attribute"):
        super().__init__(message)


class IncludeNotFoundError(IncludeError):
    """Raised when a referenced stylesheet or fragment cannot be read."""

    error_type = "include_not_found"

    def __init__(self, message: str = "Referenced file could not be read"):
        super().__init__(message)


class IncludeParseError(IncludeError):
    """Raised when a referenced fragment cannot be parsed."""

    error_type = "include_parse_error"

    def __init__(self, message: str = "Referenced fragment could not be parsed"):
        super().__init__(message)


class IncludeCycleError(IncludeError):
    """Raised when a fragment (transitively) imports itself."""

    error_type = "include_cycle"

    def __init__(self, message: str = "Fragment imports itself"):
        super().__init__(message)


# Style rules
class InvalidSelectorError(ValidationError):
    """Raised when a stylesheet selector cannot be matched."""

    error_type = "invalid_selector"

    def __init__(self, message: str = "Invalid selector"):
        super().__init__(message)
