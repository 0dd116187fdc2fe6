from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from mailsmith.core.settings import get_settings


@lru_cache
def get_compiled_environment(compiled_dir: Path | None = None) -> Environment:
    """Jinja2 environment rooted at the compiled templates directory."""
    if compiled_dir is None:
        compiled_dir = get_settings().compiled_dir
    return Environment(
        loader=FileSystemLoader(str(compiled_dir)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_template(
    template_name: str, compiled_dir: Path | None = None, **context: str
) -> str:
    """Render a pre-compiled email template.

    Templates are pre-compiled with CSS inlined and HTML minified.
    Run `python scripts/compile_emails.py` after modifying source templates.

    Args:
        template_name: Name of the compiled template file
        compiled_dir: Directory to load from (default: settings.compiled_dir)
        **context: Template variables

    Returns:
        Rendered HTML
    """
    template = get_compiled_environment(compiled_dir).get_template(template_name)
    return template.render(**context)
