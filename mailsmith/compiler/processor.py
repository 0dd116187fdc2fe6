"""HTML email template processor.

Compiles a source document into a single self-contained, minified HTML
body. Sources may:

- inherit from a base template (``<html ui:template="layout.html">``),
  filling its ``<ui:include section="x"/>`` markers with
  ``<ui:section name="x">`` blocks
- include fragments (``<link rel="import" href="...">``), optionally passing
  ``<parameter name="...">`` values
- pull in stylesheets (``<link rel="stylesheet" href="...">``); those marked
  ``ui:inline`` are folded into per-element ``style`` attributes

Paths in the source and in its template resolve against the source's
directory; paths in a fragment resolve against the fragment's directory.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import IO, Self

from bs4 import BeautifulSoup, ParserRejectedMarkup, Tag

from mailsmith.compiler.conditional import rewrite_conditional_comments
from mailsmith.compiler.context import DependencyType, ProcessingContext
from mailsmith.compiler.exceptions import (
    IncludeCycleError,
    IncludeError,
    IncludeNotFoundError,
    IncludeParseError,
    MissingHrefError,
    SourceNotFoundError,
    SourceParseError,
    TemplateLoadError,
)
from mailsmith.compiler.minify import HtmlMinifier
from mailsmith.compiler.parameters import apply_parameters
from mailsmith.compiler.parser import (
    ensure_head,
    parse_markup,
    splice_after,
    text_content,
)
from mailsmith.compiler.styles import inline_styles
from mailsmith.core.constants import (
    INCLUDE_SECTION_ATTR,
    INCLUDE_TAG,
    LINK_HREF_ATTR,
    LINK_INLINE_ATTR,
    LINK_REL_ATTR,
    LINK_TAG,
    META_TAG,
    PARAMETER_NAME_ATTR,
    PARAMETER_TAG,
    SECTION_NAME_ATTR,
    SECTION_TAG,
    STYLE_TAG,
    TEMPLATE_ATTR,
    LinkRel,
)
from mailsmith.core.exceptions import MailsmithError
from mailsmith.core.settings import Settings

logger = logging.getLogger(__name__)


def resolve_path(base: Path, href: str) -> Path:
    """Absolute, normalized path of ``href`` relative to ``base``."""
    return Path(os.path.normpath((base / href).absolute()))


def _read(path: Path, error: type[MailsmithError]) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise error(f"Could not read {path}: {exc}") from exc


def _parse(markup: str, error: type[MailsmithError]) -> BeautifulSoup:
    try:
        return parse_markup(markup)
    except ParserRejectedMarkup as exc:
        raise error(f"Could not parse markup: {exc}") from exc


def _href(link: Tag) -> str:
    href = link.get(LINK_HREF_ATTR)
    if not href:
        rel = link.get(LINK_REL_ATTR)
        raise MissingHrefError(
            f"Missing required 'href' attribute on <link rel=\"{rel}\">"
        )
    return href


def _has_pending_reference(link: Tag) -> bool:
    """Whether an import still wraps unresolved stylesheet/import links."""
    return any(
        inner.get(LINK_REL_ATTR) in LinkRel.ALL for inner in link.find_all(LINK_TAG)
    )


def _collect_parameters(link: Tag, href: str) -> dict[str, str]:
    parameters: dict[str, str] = {}
    for child in link.find_all(PARAMETER_TAG, recursive=False):
        name = child.get(PARAMETER_NAME_ATTR)
        if name is None:
            logger.warning(
                "Missing 'name' attribute for include parameter in %s",
                href,
                extra={"href": href},
            )
            continue
        parameters[name] = child.decode_contents()
    return parameters


def _find_marker(template: BeautifulSoup, section: str | None) -> Tag | None:
    if section is None:
        return None
    for marker in template.find_all(INCLUDE_TAG):
        if marker.get(INCLUDE_SECTION_ATTR) == section:
            return marker
    return None


def _merge_head(source: BeautifulSoup, template: BeautifulSoup) -> None:
    """Move the source ``<head>`` children to the front of the template's."""
    head = source.find("head")
    if not isinstance(head, Tag) or not head.contents:
        return

    target = ensure_head(template)
    for index, node in enumerate(list(head.contents)):
        node.extract()
        target.insert(index, node)


def _fill_sections(source: BeautifulSoup, template: BeautifulSoup) -> None:
    for section in source.find_all(SECTION_TAG):
        name = section.get(SECTION_NAME_ATTR)
        marker = _find_marker(template, name)
        if marker is None:
            logger.warning(
                "Template has no insertion marker for section %s",
                name,
                extra={"section": name},
            )
            continue
        splice_after(marker, section)
        marker.extract()

    for marker in template.find_all(INCLUDE_TAG):
        name = marker.get(INCLUDE_SECTION_ATTR)
        if name is not None:
            logger.warning(
                "No section supplied for template marker %s",
                name,
                extra={"section": name},
            )


def _extract_meta(soup: BeautifulSoup, context: ProcessingContext) -> None:
    for meta in soup.find_all(META_TAG):
        if meta.has_attr("name") and meta.has_attr("content"):
            context.add_meta(meta["name"], meta["content"])


def _title_of(soup: BeautifulSoup) -> str:
    title = soup.find("title")
    if not isinstance(title, Tag):
        return ""
    return " ".join(text_content(title).split())


class TemplateProcessor:
    """Compile email templates into self-contained, minified HTML.

    A processor only holds immutable configuration; each call to
    :meth:`process` works on its own tree and :class:`ProcessingContext`.

    Args:
        meta: extra ``<meta name content>`` entries appended to every head
        remove_comments: drop HTML comments from the output
    """

    def __init__(
        self,
        meta: Mapping[str, str] | None = None,
        remove_comments: bool = False,
    ):
        self.meta = dict(meta or {})
        self.remove_comments = remove_comments
        self._minifier = HtmlMinifier(remove_comments=remove_comments)

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        return cls(meta=settings.extra_meta, remove_comments=settings.remove_comments)

    def process(
        self, source: Path, destination: Path | None = None
    ) -> ProcessingContext:
        """Compile a source file, optionally writing the result.

        Args:
            source: path of the document to compile
            destination: file to write the minified HTML to

        Returns:
            Context holding the HTML, title, meta data and dependencies

        Raises:
            SourceNotFoundError: if the source cannot be read
            SourceParseError: if the source cannot be parsed
        """
        source = Path(os.path.normpath(Path(source).absolute()))
        markup = _read(source, SourceNotFoundError)
        context = self._compile(markup, source.parent, origin=source)

        if destination is not None:
            destination = Path(destination)
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(context.html or "", encoding="utf-8")

        return context

    def process_stream(
        self, stream: IO[bytes] | IO[str], relative: Path | None = None
    ) -> ProcessingContext:
        """Compile markup read from ``stream``.

        Referenced files resolve against ``relative`` (default: the current
        working directory).
        """
        return self.process_markup(stream.read(), relative)

    def process_markup(
        self, markup: str | bytes, relative: Path | None = None
    ) -> ProcessingContext:
        """Compile in-memory markup; see :meth:`process_stream`."""
        if isinstance(markup, bytes):
            try:
                markup = markup.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise SourceParseError(f"Source is not valid UTF-8: {exc}") from exc

        base = Path(relative) if relative is not None else Path.cwd()
        return self._compile(markup, base.absolute())

    def get_title(self, source: Path) -> str:
        """Title of a source document without compiling it ("" if unreadable)."""
        try:
            soup = parse_markup(Path(source).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ParserRejectedMarkup):
            return ""
        return _title_of(soup)

    def _compile(
        self, markup: str, relative: Path, origin: Path | None = None
    ) -> ProcessingContext:
        context = ProcessingContext()
        chain = (origin,) if origin is not None else ()

        soup = _parse(markup, SourceParseError)
        self._resolve_references(soup, relative, context, chain)
        soup = self._apply_template(soup, relative, context, chain)

        inline_styles(soup)

        if self.meta:
            head = ensure_head(soup)
            for name, content in self.meta.items():
                attrs = {"name": name, "content": content}
                head.append(soup.new_tag(META_TAG, attrs=attrs))

        _extract_meta(soup, context)
        context.title = _title_of(soup)
        context.html = self._minifier.minify(soup)

        logger.debug(
            "Compiled %s (%d dependencies)",
            origin or "<markup>",
            len(context.dependencies),
            extra={"path": str(origin or relative)},
        )
        return context

    def _apply_template(
        self,
        soup: BeautifulSoup,
        relative: Path,
        context: ProcessingContext,
        chain: tuple[Path, ...],
    ) -> BeautifulSoup:
        """Substitute the document into its ``ui:template``, if it names one."""
        html = soup.find("html")
        if not isinstance(html, Tag) or not html.has_attr(TEMPLATE_ATTR):
            return soup

        path = resolve_path(relative, html[TEMPLATE_ATTR])
        del html[TEMPLATE_ATTR]

        try:
            template = _parse(_read(path, TemplateLoadError), TemplateLoadError)
        except TemplateLoadError as exc:
            logger.warning(
                "Template %s could not be loaded, compiling without it: %s",
                path,
                exc.message,
                extra={"path": str(path), "error_type": exc.error_type},
            )
            return soup

        context.add_dependency(path, DependencyType.TEMPLATE)
        _merge_head(soup, template)
        _fill_sections(soup, template)

        # The template may carry includes of its own.
        self._resolve_references(template, relative, context, chain)
        return template

    def _resolve_references(
        self,
        root: BeautifulSoup,
        base: Path,
        context: ProcessingContext,
        chain: tuple[Path, ...],
    ) -> None:
        """Resolve reference tags until none are left.

        Including a fragment can surface references that were nested inside
        the include site, so passes repeat until one changes nothing.
        """
        while self._process_links(root, base, context, chain):
            pass

    def _process_links(
        self,
        root: BeautifulSoup,
        base: Path,
        context: ProcessingContext,
        chain: tuple[Path, ...],
    ) -> bool:
        processed = False

        for link in root.find_all(LINK_TAG):
            rel = link.get(LINK_REL_ATTR)
            if rel not in LinkRel.ALL:
                continue

            # Imports resolve inside-out: wait until nested references are gone.
            if rel == LinkRel.IMPORT and _has_pending_reference(link):
                continue

            try:
                if rel == LinkRel.STYLESHEET:
                    self._include_stylesheet(root, link, base, context)
                else:
                    self._include_fragment(link, base, context, chain)
            except IncludeError as exc:
                href = link.get(LINK_HREF_ATTR)
                logger.warning(
                    "Dropping <link rel=%s href=%s>: %s",
                    rel,
                    href,
                    exc.message,
                    extra={"href": href, "error_type": exc.error_type},
                )
                link.extract()

            processed = True

        return processed

    def _include_stylesheet(
        self,
        root: BeautifulSoup,
        link: Tag,
        base: Path,
        context: ProcessingContext,
    ) -> None:
        path = resolve_path(base, _href(link))
        css = _read(path, IncludeNotFoundError)

        attrs = {
            name: value
            for name, value in link.attrs.items()
            if name not in (LINK_REL_ATTR, LINK_HREF_ATTR)
        }
        style = root.new_tag(STYLE_TAG, attrs=attrs)
        style.string = css
        link.replace_with(style)

        if LINK_INLINE_ATTR in attrs:
            context.add_dependency(path, DependencyType.STYLE_INLINE)
        else:
            context.add_dependency(path, DependencyType.STYLE)

    def _include_fragment(
        self,
        link: Tag,
        base: Path,
        context: ProcessingContext,
        chain: tuple[Path, ...],
    ) -> None:
        href = _href(link)
        path = resolve_path(base, href)
        if path in chain:
            trail = " -> ".join(str(p) for p in (*chain, path))
            raise IncludeCycleError(f"Include cycle: {trail}")

        parameters = _collect_parameters(link, href)
        fragment = _parse(_read(path, IncludeNotFoundError), IncludeParseError)

        apply_parameters(fragment, parameters)
        rewrite_conditional_comments(fragment, parameters)
        self._resolve_references(fragment, path.parent, context, (*chain, path))

        splice_after(link, fragment)
        link.extract()
        context.add_dependency(path, DependencyType.FRAGMENT)
