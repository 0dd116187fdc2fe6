"""Compile HTML email templates into self-contained, minified documents.

Sources may inherit from layouts, include parameterised fragments and pull
in stylesheets; stylesheets marked ``ui:inline`` end up as per-element
``style`` attributes.
"""

from mailsmith.compiler.context import Dependency, DependencyType, ProcessingContext
from mailsmith.compiler.exceptions import (
    IncludeError,
    SourceNotFoundError,
    SourceParseError,
    TemplateLoadError,
)
from mailsmith.compiler.processor import TemplateProcessor
from mailsmith.core.exceptions import MailsmithError

__all__ = [
    "Dependency",
    "DependencyType",
    "IncludeError",
    "MailsmithError",
    "ProcessingContext",
    "SourceNotFoundError",
    "SourceParseError",
    "TemplateLoadError",
    "TemplateProcessor",
]
