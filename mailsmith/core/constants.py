"""
Markup vocabulary and filesystem defaults.

Single source of truth for the tag and attribute names the compiler
recognises in source documents, templates and fragments.
"""

from pathlib import Path

# Reference tags
LINK_TAG = "link"
LINK_REL_ATTR = "rel"
LINK_HREF_ATTR = "href"
LINK_INLINE_ATTR = "ui:inline"


class LinkRel:
    """Values of ``rel`` the compiler resolves."""

    STYLESHEET = "stylesheet"
    IMPORT = "import"

    ALL = frozenset({STYLESHEET, IMPORT})


# Include parameters
PARAMETER_TAG = "parameter"
PARAMETER_NAME_ATTR = "name"
PARAMETER_TARGET_ATTR = "attr"

# Template inheritance
TEMPLATE_ATTR = "ui:template"
SECTION_TAG = "ui:section"
SECTION_NAME_ATTR = "name"
INCLUDE_TAG = "ui:include"
INCLUDE_SECTION_ATTR = "section"

STYLE_TAG = "style"
META_TAG = "meta"

# Tags whose character data is emitted verbatim
RAW_TEXT_TAGS = frozenset({"style", "script"})

# HTML elements that never have content
VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "basefont",
        "bgsound",
        "br",
        "col",
        "command",
        "embed",
        "frame",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "menuitem",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Every element name the HTML vocabulary defines. Anything else (Outlook
# o:p, VML v:rect, leftover ui:include markers) is an XML-style element
# and may be written in self-closing form.
HTML_TAGS = VOID_TAGS | frozenset(
    """
    a abbr acronym address article aside audio b bdi bdo big blockquote body
    button canvas caption center cite code colgroup data datalist dd del
    details dfn dialog div dl dt em fieldset figcaption figure font footer
    form frameset h1 h2 h3 h4 h5 h6 head header hgroup html i iframe ins kbd
    label legend li main map mark math menu meter nav noframes noscript
    object ol optgroup option output p picture plaintext pre progress q rp rt
    ruby s samp script section select small span strike strong style sub
    summary sup svg table tbody td template textarea tfoot th thead time
    title tr tt u ul var video
    """.split()
)

# Filesystem defaults
DEFAULT_TEMPLATES_DIR = Path("templates") / "emails"
COMPILED_DIR_NAME = "compiled"
MANIFEST_FILE_NAME = ".dependencies.json"
