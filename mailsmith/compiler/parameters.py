"""Include parameter substitution.

A fragment marks where caller-supplied values go with placeholder tags::

    <td><parameter name="title"/></td>
    <a href="#"><parameter name="link_class" attr="class"/>Go</a>

The first form is replaced by the value's markup, the second appends the
value to an attribute of the placeholder's parent.
"""

import logging
from collections.abc import Mapping

from bs4 import Tag

from mailsmith.compiler.parser import (
    parse_markup,
    qualified_name,
    splice_after,
    text_content,
)
from mailsmith.core.constants import (
    LINK_REL_ATTR,
    LINK_TAG,
    PARAMETER_NAME_ATTR,
    PARAMETER_TAG,
    PARAMETER_TARGET_ATTR,
    LinkRel,
)

logger = logging.getLogger(__name__)

type Parameters = Mapping[str, str]


def is_parameter_definition(tag: Tag) -> bool:
    """Whether ``tag`` supplies a value to an include rather than consuming one."""
    parent = tag.parent
    return (
        parent is not None
        and qualified_name(parent) == LINK_TAG
        and parent.get(LINK_REL_ATTR) == LinkRel.IMPORT
    )


def find_placeholders(root: Tag) -> list[Tag]:
    """Placeholder tags below ``root``, in document order."""
    return [
        tag
        for tag in root.find_all(PARAMETER_TAG)
        if tag.has_attr(PARAMETER_NAME_ATTR) and not is_parameter_definition(tag)
    ]


def apply_parameters(root: Tag, parameters: Parameters) -> int:
    """Substitute ``parameters`` into every placeholder below ``root``.

    Placeholders naming a parameter that was not supplied are logged and
    left in the tree.

    Returns:
        Number of placeholders substituted
    """
    applied = 0

    for placeholder in find_placeholders(root):
        # A previous substitution may have discarded this placeholder.
        if not any(parent is root for parent in placeholder.parents):
            continue

        name = placeholder[PARAMETER_NAME_ATTR]
        if name not in parameters:
            logger.warning("No value for parameter %s", name, extra={"parameter": name})
            continue

        value = parameters[name]
        target = placeholder.get(PARAMETER_TARGET_ATTR)
        if target:
            _contribute_to_attribute(placeholder, target, value)
        else:
            splice_after(placeholder, parse_markup(value))
        placeholder.extract()
        applied += 1

    return applied


def _contribute_to_attribute(placeholder: Tag, attribute: str, value: str) -> None:
    parent = placeholder.parent
    contribution = " ".join(text_content(parse_markup(value)).split())
    existing = parent.get(attribute)
    if existing:
        parent[attribute] = f"{existing} {contribution}"
    else:
        parent[attribute] = contribution
