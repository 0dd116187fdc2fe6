"""Conditional comment rewriting.

Conditional comments are used to hand Outlook its own markup::

    <!--[if mso]><td width="600"><parameter name="title"/></td><![endif]-->

To generic parsers the body is inert comment text, so placeholders inside
it would never be substituted. Each comment is split into its opener
(through the first ``>``), body and closer (from the first ``<!``); the
body is parsed, parameters applied, and the comment rebuilt around the
re-serialized body.
"""

import logging

from bs4 import Comment, ParserRejectedMarkup, Tag
from bs4.element import PageElement

from mailsmith.compiler.minify import HtmlMinifier
from mailsmith.compiler.parameters import (
    Parameters,
    apply_parameters,
    find_placeholders,
)
from mailsmith.compiler.parser import parse_markup

logger = logging.getLogger(__name__)

_serializer = HtmlMinifier()


def split_conditional(comment: str) -> tuple[str, str, str] | None:
    """Split a conditional comment into opener, body and closer.

    Returns None when the comment is not a conditional block.
    """
    open_end = comment.find(">")
    close_start = comment.find("<!")
    if open_end < 0 or close_start <= open_end:
        return None
    return (
        comment[: open_end + 1],
        comment[open_end + 1 : close_start],
        comment[close_start:],
    )


def rewrite_conditional_comments(node: PageElement, parameters: Parameters) -> int:
    """Apply ``parameters`` inside every conditional comment below ``node``.

    Comments without placeholders in their body, and comments that are not
    conditional blocks, are left untouched.

    Returns:
        Number of comments rewritten
    """
    if not isinstance(node, Tag):
        return 0

    rewritten = 0
    for child in list(node.contents):
        if isinstance(child, Comment):
            replacement = _rewrite(str(child), parameters)
            if replacement is not None:
                child.replace_with(Comment(replacement))
                rewritten += 1
        else:
            rewritten += rewrite_conditional_comments(child, parameters)
    return rewritten


def _rewrite(comment: str, parameters: Parameters) -> str | None:
    parts = split_conditional(comment)
    if parts is None:
        return None

    opener, body, closer = parts
    try:
        fragment = parse_markup(body)
    except ParserRejectedMarkup as exc:
        logger.warning("Leaving unparseable conditional comment %s: %s", opener, exc)
        return None
    if not find_placeholders(fragment):
        return None

    apply_parameters(fragment, parameters)
    logger.debug("Rewrote conditional comment %s", opener)
    return f"{opener}{_serializer.minify(fragment)}{closer}"
