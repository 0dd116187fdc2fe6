"""Tests for mailsmith/compiler/parameters.py - include parameter substitution."""

import logging

from mailsmith.compiler.minify import HtmlMinifier
from mailsmith.compiler.parameters import (
    apply_parameters,
    find_placeholders,
    is_parameter_definition,
)
from mailsmith.compiler.parser import parse_markup

serialize = HtmlMinifier().minify


def test_replaces_placeholder_with_text():
    fragment = parse_markup('<td><parameter name="title"/></td>')

    applied = apply_parameters(fragment, {"title": "Welcome"})

    assert applied == 1
    assert serialize(fragment) == "<td>Welcome</td>"


def test_replaces_placeholder_with_markup():
    fragment = parse_markup('<td><parameter name="body"/>!</td>')

    apply_parameters(fragment, {"body": "<b>Hi</b> there"})

    assert serialize(fragment) == "<td><b>Hi</b> there!</td>"


def test_same_parameter_used_twice():
    fragment = parse_markup('<p><parameter name="x"/></p><p><parameter name="x"/></p>')

    assert apply_parameters(fragment, {"x": "1"}) == 2
    assert serialize(fragment) == "<p>1</p><p>1</p>"


def test_attribute_target_sets_attribute():
    fragment = parse_markup('<a href="#"><parameter name="cls" attr="class"/>Go</a>')

    apply_parameters(fragment, {"cls": "primary"})

    assert serialize(fragment) == '<a href="#" class="primary">Go</a>'


def test_attribute_target_appends_to_existing_value():
    fragment = parse_markup('<a class="btn"><parameter name="cls" attr="class"/>Go</a>')

    apply_parameters(fragment, {"cls": "<i>large</i>"})

    assert serialize(fragment) == '<a class="btn large">Go</a>'


def test_attribute_contribution_is_trimmed():
    fragment = parse_markup('<a class="btn"><parameter name="cls" attr="class"/>Go</a>')

    apply_parameters(fragment, {"cls": "\n  primary\t wide \n"})

    assert serialize(fragment) == '<a class="btn primary wide">Go</a>'


def test_missing_value_is_logged_and_left(caplog):
    fragment = parse_markup('<p><parameter name="missing"/></p>')

    with caplog.at_level(logging.WARNING):
        applied = apply_parameters(fragment, {})

    assert applied == 0
    assert fragment.find("parameter") is not None
    record = next(r for r in caplog.records if "missing" in r.getMessage())
    assert record.parameter == "missing"


def test_definitions_are_not_substituted():
    fragment = parse_markup(
        '<p><parameter name="x"/></p>'
        '<link rel="import" href="b.html"><parameter name="x">inner</parameter></link>'
    )

    apply_parameters(fragment, {"x": "outer"})

    definition = fragment.find("link").find("parameter")
    assert definition.get_text() == "inner"
    assert fragment.find("p").get_text() == "outer"


def test_is_parameter_definition():
    fragment = parse_markup(
        '<link rel="import" href="a.html"><parameter name="a">1</parameter></link>'
        '<link rel="stylesheet" href="a.css"><parameter name="b"/></link>'
    )
    first, second = fragment.find_all("parameter")

    assert is_parameter_definition(first)
    assert not is_parameter_definition(second)


def test_find_placeholders_requires_name():
    fragment = parse_markup('<parameter/><parameter name="a"/>')
    assert [tag["name"] for tag in find_placeholders(fragment)] == ["a"]
