"""Markup front end.

Documents, templates and fragments are parsed with BeautifulSoup's lxml XML
builder, so tag and attribute names keep their case (``viewBox``,
``linearGradient``) and ``<tag/>`` closes any element. ``<link>`` is an
ordinary container, which is how an include site carries its
``<parameter>`` children.

Email markup is not quite XML, so the text is normalised first:

- the input is wrapped in a synthetic root, so fragments may have several
  top-level nodes; a leading doctype stays in front of it
- every namespace prefix in use (``ui:``, ``o:``, ``v:``) is declared on
  that root
- HTML void start tags (``<br>``, ``<meta ...>``) are self-closed; a
  ``<link>`` is self-closed unless a matching ``</link>`` follows
- HTML named entities become character references, stray ``&`` becomes
  ``&amp;``
- downlevel-revealed markers (``<![if !mso]>``, ``<![endif]>``) survive as
  :class:`~bs4.element.Declaration` nodes

Comments and CDATA sections are left exactly as written.
"""

import re
from html.entities import html5

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import (
    Declaration,
    PageElement,
    PreformattedString,
    ProcessingInstruction,
)

from mailsmith.core.constants import LINK_TAG, VOID_TAGS

ROOT_TAG = "mailsmith-root"
NAMESPACE_URN = "urn:mailsmith:ns:"
DECLARATION_TARGET = "mailsmith-declaration"

_XML_ENTITIES = frozenset({"amp", "lt", "gt", "quot", "apos"})
_RESERVED_PREFIXES = frozenset({"xml", "xmlns"})

_PROLOG = re.compile(
    r"\A\s*(?:<\?xml[^>]*\?>\s*)?(?:<!DOCTYPE(?P<doctype>[^>]*)>)?", re.IGNORECASE
)
_PREFIXED_NAME = re.compile(
    r"</?([A-Za-z_][\w.-]*):[A-Za-z_]|\s([A-Za-z_][\w.-]*):[A-Za-z_][\w.-]*\s*="
)
_ATTRIBUTES = r"""(?:\s(?:[^>"'/]|/(?!>)|"[^"]*"|'[^']*')*)?"""
_VOID_NAMES = "|".join(sorted(VOID_TAGS - {LINK_TAG}))
_LEXICAL = re.compile(
    r"(?P<verbatim><!--.*?-->|<!\[CDATA\[.*?\]\]>)"
    rf"|<(?P<void>(?:{_VOID_NAMES}){_ATTRIBUTES})>"
    r"|<!\[(?P<marker>if\b[^\]]*|endif)\]>"
    r"|&(?P<entity>[A-Za-z][A-Za-z0-9]*);"
    r"|&(?!#[0-9]+;|#[xX][0-9A-Fa-f]+;)",
    re.DOTALL,
)


def _normalize(match: re.Match[str]) -> str:
    if match["verbatim"] is not None:
        return match["verbatim"]
    if match["marker"] is not None:
        return f"<?{DECLARATION_TARGET} [{match['marker']}]?>"
    if match["void"] is not None:
        return f"<{match['void']}/>"

    name = match["entity"]
    if name is None:
        return "&amp;"
    if name in _XML_ENTITIES:
        return match.group(0)
    text = html5.get(f"{name};")
    if text is None:
        return f"&amp;{name};"
    return "".join(f"&#{ord(char)};" for char in text)


_LINK_TOKEN = re.compile(
    r"<!--.*?-->|<!\[CDATA\[.*?\]\]>"
    rf"|(?P<start><{LINK_TAG}(?=[\s/>])(?:[^>\"']|\"[^\"]*\"|'[^']*')*>)"
    rf"|(?P<end></{LINK_TAG}\s*>)",
    re.DOTALL,
)


def _close_links(markup: str) -> str:
    """Self-close every ``<link>`` start tag that has no matching end tag."""
    unclosed: list[re.Match[str]] = []
    for match in _LINK_TOKEN.finditer(markup):
        if match["start"] is not None and not match["start"].endswith("/>"):
            unclosed.append(match)
        elif match["end"] is not None and unclosed:
            unclosed.pop()

    pieces = []
    position = 0
    for match in unclosed:
        pieces.append(markup[position : match.end() - 1])
        pieces.append("/>")
        position = match.end()
    pieces.append(markup[position:])
    return "".join(pieces)


def _prefixes(markup: str) -> list[str]:
    found = {first or second for first, second in _PREFIXED_NAME.findall(markup)}
    return sorted(found - _RESERVED_PREFIXES)


def _restore_declarations(soup: BeautifulSoup) -> None:
    for node in list(soup.descendants):
        if not isinstance(node, ProcessingInstruction):
            continue
        target, _, data = str(node).partition(" ")
        if target == DECLARATION_TARGET:
            node.replace_with(Declaration(data.strip()))


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse a document or fragment into a mutable tree.

    Attribute values are kept as plain strings (``class`` is not split).

    Raises:
        bs4.ParserRejectedMarkup: if the backend cannot tokenise the input
    """
    prolog = _PROLOG.match(markup)
    body = markup[prolog.end() :]
    doctype = prolog["doctype"]

    declarations = "".join(
        f' xmlns:{prefix}="{NAMESPACE_URN}{prefix}"' for prefix in _prefixes(body)
    )
    document = (
        (f"<!DOCTYPE{doctype}>" if doctype is not None else "")
        + f"<{ROOT_TAG}{declarations}>"
        + _LEXICAL.sub(_normalize, _close_links(body))
        + f"</{ROOT_TAG}>"
    )

    soup = BeautifulSoup(document, "xml")
    root = soup.find(ROOT_TAG, recursive=False)
    if isinstance(root, Tag):
        root.unwrap()
    _restore_declarations(soup)
    return soup


def qualified_name(tag: Tag) -> str:
    """Tag name with its namespace prefix (``o:p``, ``ui:include``)."""
    if tag.prefix:
        return f"{tag.prefix}:{tag.name}"
    return tag.name


def splice_after(anchor: PageElement, container: Tag) -> None:
    """Move every child of ``container`` to directly after ``anchor``.

    Children keep their order; ``container`` is left empty. ``anchor`` must
    be attached to a tree.
    """
    for node in list(container.contents):
        node.extract()
        anchor.insert_after(node)
        anchor = node


def text_content(tag: Tag) -> str:
    """Character data below ``tag``, without comments or declarations."""
    return "".join(
        str(node)
        for node in tag.descendants
        if isinstance(node, NavigableString)
        and not isinstance(node, PreformattedString)
    )


def ensure_head(soup: BeautifulSoup) -> Tag:
    """Return the document's ``<head>``, creating it if missing."""
    head = soup.find("head")
    if isinstance(head, Tag):
        return head

    head = soup.new_tag("head")
    html = soup.find("html")
    (html if isinstance(html, Tag) else soup).insert(0, head)
    return head
