"""Style collection and inlining.

Email clients largely ignore ``<style>`` blocks, so rules from stylesheets
marked ``ui:inline`` are folded into each matching element's ``style``
attribute:

- rules apply in source order; a later rule overrides an earlier one for
  the same property, keeping the property's original position
- selectors containing ``:`` (pseudo-classes, pseudo-elements) are skipped
- an element's pre-existing inline style is appended last, so it wins
- ``class`` is removed from every styled element
"""

import logging
from collections.abc import Iterator

import cssutils
import soupsieve
from bs4 import BeautifulSoup, Tag

from mailsmith.compiler.exceptions import InvalidSelectorError
from mailsmith.compiler.parser import text_content
from mailsmith.core.constants import LINK_INLINE_ATTR, STYLE_TAG

logger = logging.getLogger(__name__)

# Keep author values (#ffffff stays #ffffff).
cssutils.ser.prefs.minimizeColorHash = False


class StyleMap:
    """Per-element declarations, keyed by element identity.

    Two elements with identical markup compare equal in BeautifulSoup, so
    elements are tracked by ``id()``; the element is held alongside its
    declarations to keep that id valid.
    """

    def __init__(self) -> None:
        self._entries: dict[int, tuple[Tag, dict[str, str]]] = {}

    def declarations(self, element: Tag) -> dict[str, str]:
        """Declarations for ``element``, created empty on first access."""
        entry = self._entries.get(id(element))
        if entry is None:
            entry = (element, {})
            self._entries[id(element)] = entry
        return entry[1]

    def get(self, element: Tag) -> dict[str, str] | None:
        entry = self._entries.get(id(element))
        return entry[1] if entry else None

    def __iter__(self) -> Iterator[tuple[Tag, dict[str, str]]]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def extract_inline_styles(soup: BeautifulSoup) -> str:
    """Remove every ``<style ui:inline>`` block and return their combined text."""
    chunks = []
    for style in soup.find_all(STYLE_TAG):
        if style.has_attr(LINK_INLINE_ATTR):
            chunks.append(text_content(style))
            style.extract()
    return "".join(chunks)


def select(root: Tag, selector: str) -> list[Tag]:
    try:
        return root.select(selector)
    except soupsieve.SelectorSyntaxError as exc:
        raise InvalidSelectorError(f"Invalid selector {selector!r}: {exc}") from exc


def collect_styles(root: Tag, css: str) -> StyleMap:
    """Match every style rule in ``css`` against ``root``."""
    styles = StyleMap()
    sheet = cssutils.parseString(css, validate=False)

    for rule in sheet.cssRules:
        if rule.type != rule.STYLE_RULE:
            continue

        selector = rule.selectorText
        if ":" in selector:
            logger.debug("Skipping pseudo selector %s", selector)
            continue

        try:
            matched = select(root, selector)
        except InvalidSelectorError as exc:
            logger.warning(
                "%s",
                exc.message,
                extra={"selector": selector, "error_type": exc.error_type},
            )
            continue

        properties = rule.style.getProperties(all=True)
        for element in matched:
            declarations = styles.declarations(element)
            for prop in properties:
                declarations[prop.name] = prop.value

    return styles


def apply_styles(styles: StyleMap) -> int:
    """Write collected declarations back as inline ``style`` attributes.

    Returns:
        Number of elements styled
    """
    styled = 0
    for element, declarations in styles:
        if not declarations:
            continue
        generated = "".join(f"{name}:{value};" for name, value in declarations.items())
        element["style"] = generated + element.get("style", "")
        if element.has_attr("class"):
            del element["class"]
        styled += 1
    return styled


def inline_styles(soup: BeautifulSoup) -> int:
    """Inline every ``ui:inline`` stylesheet in ``soup`` and drop the blocks."""
    css = extract_inline_styles(soup)
    if not css.strip():
        return 0
    return apply_styles(collect_styles(soup, css))
