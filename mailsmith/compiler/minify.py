"""Minifying serializer.

Walks a resolved tree once and emits compact markup: no indentation or
line breaks, every whitespace run in text and comments collapsed to a
single space.
"""

import re

from bs4 import BeautifulSoup, CData, Comment, Doctype, NavigableString, Tag
from bs4.element import Declaration, PageElement, ProcessingInstruction

from mailsmith.compiler.parser import qualified_name
from mailsmith.core.constants import HTML_TAGS, RAW_TEXT_TAGS, VOID_TAGS

# ASCII whitespace only: \xa0 from &nbsp; is content, not layout.
_WHITESPACE = re.compile(r"[ \t\n\r\f\v]+")
_QUOTED = re.compile(r"\"([^\"]*)\"|'([^']*)'")


def collapse_whitespace(text: str) -> str:
    """Collapse every run of whitespace to one space (no trimming)."""
    return _WHITESPACE.sub(" ", text)


def escape_text(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace("\xa0", "&nbsp;")
    )


def escape_attribute(value: str) -> str:
    return escape_text(value).replace('"', "&quot;")


def doctype_declaration(doctype: str) -> str:
    """Rebuild an XHTML/HTML doctype from the identifiers it declares."""
    identifiers = [
        first or second
        for first, second in _QUOTED.findall(doctype)
        if first or second
    ]
    keyword = doctype.upper()

    if "PUBLIC" in keyword and identifiers:
        quoted = " ".join(f'"{identifier}"' for identifier in identifiers[:2])
        return f"<!DOCTYPE html PUBLIC {quoted}>"
    if "SYSTEM" in keyword and identifiers:
        return f'<!DOCTYPE html SYSTEM "{identifiers[0]}">'
    return "<!DOCTYPE html>"


def is_self_closing(tag: Tag) -> bool:
    """Whether ``tag`` is written without a closing tag."""
    name = qualified_name(tag)
    return not tag.contents and (name in VOID_TAGS or name not in HTML_TAGS)


class HtmlMinifier:
    """Serialize a tree to minified markup.

    Args:
        remove_comments: drop comment nodes (conditional comments included)
    """

    def __init__(self, remove_comments: bool = False):
        self.remove_comments = remove_comments

    def minify(self, node: PageElement) -> str:
        out: list[str] = []
        self._visit(node, out)
        return "".join(out)

    def _visit(self, node: PageElement, out: list[str]) -> None:
        if isinstance(node, Doctype):
            out.append(doctype_declaration(str(node)))
        elif isinstance(node, Comment):
            if not self.remove_comments:
                out.append(f"<!--{collapse_whitespace(str(node))}-->")
        elif isinstance(node, CData):
            out.append(f"<![CDATA[{node}]]>")
        elif isinstance(node, Declaration):
            # Marked sections such as <![if !mso]> keep their brackets.
            out.append(f"<!{node}>")
        elif isinstance(node, ProcessingInstruction):
            # Dropped.
            pass
        elif isinstance(node, NavigableString):
            out.append(self._text(node))
        elif isinstance(node, BeautifulSoup):
            # Synthetic document root: children only.
            for child in node.contents:
                self._visit(child, out)
        elif isinstance(node, Tag):
            self._element(node, out)

    def _text(self, node: NavigableString) -> str:
        text = collapse_whitespace(str(node))
        parent = node.parent
        if isinstance(parent, Tag) and qualified_name(parent) in RAW_TEXT_TAGS:
            return text
        return escape_text(text)

    def _element(self, tag: Tag, out: list[str]) -> None:
        name = qualified_name(tag)
        out.append(f"<{name}")
        for attribute, value in tag.attrs.items():
            if isinstance(value, list):
                value = " ".join(value)
            out.append(f' {attribute}="{escape_attribute(value or "")}"')

        if is_self_closing(tag):
            out.append(">" if name in VOID_TAGS else " />")
            return

        out.append(">")
        for child in tag.contents:
            self._visit(child, out)
        out.append(f"</{name}>")
