"""Tests for mailsmith/compiler/context.py - per-compile context."""

from pathlib import Path

from mailsmith.compiler.context import Dependency, DependencyType, ProcessingContext


def test_dependencies_are_deduplicated():
    context = ProcessingContext()

    context.add_dependency(Path("/t/a.css"), DependencyType.STYLE)
    context.add_dependency(Path("/t/a.css"), DependencyType.STYLE)
    context.add_dependency(Path("/t/a.css"), DependencyType.STYLE_INLINE)

    assert context.dependencies == {
        Dependency(Path("/t/a.css"), DependencyType.STYLE),
        Dependency(Path("/t/a.css"), DependencyType.STYLE_INLINE),
    }


def test_dependencies_of_filters_by_type():
    context = ProcessingContext()
    context.add_dependency(Path("/t/layout.html"), DependencyType.TEMPLATE)
    context.add_dependency(Path("/t/button.html"), DependencyType.FRAGMENT)
    context.add_dependency(Path("/t/card.html"), DependencyType.FRAGMENT)

    assert context.dependencies_of(DependencyType.FRAGMENT) == {
        Path("/t/button.html"),
        Path("/t/card.html"),
    }
    assert context.dependencies_of(DependencyType.STYLE) == set()


def test_later_meta_value_wins():
    context = ProcessingContext()
    context.add_meta("subject", "First")
    context.add_meta("subject", "Second")
    assert context.meta == {"subject": "Second"}


def test_contexts_do_not_share_state():
    first = ProcessingContext()
    first.add_meta("a", "1")
    assert ProcessingContext().meta == {}
