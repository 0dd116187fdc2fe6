"""Tests for mailsmith/compiler/minify.py - minifying serializer."""

import pytest
from hypothesis import given
from hypothesis import settings as hypothesis_settings
from hypothesis import strategies as st

from mailsmith.compiler.minify import (
    HtmlMinifier,
    collapse_whitespace,
    doctype_declaration,
)
from mailsmith.compiler.parser import parse_markup


def minify(markup: str, **kwargs) -> str:
    return HtmlMinifier(**kwargs).minify(parse_markup(markup))


class TestCollapseWhitespace:
    def test_collapses_runs_to_single_space(self):
        assert collapse_whitespace("a \n\t b") == "a b"

    def test_does_not_trim(self):
        assert collapse_whitespace("\n a \n") == " a "

    def test_keeps_non_breaking_space(self):
        assert collapse_whitespace("a\xa0\xa0b") == "a\xa0\xa0b"

    @hypothesis_settings(max_examples=100)
    @given(text=st.text(alphabet=st.sampled_from(list("ab \t\n\r\f\v\xa0"))))
    def test_no_whitespace_runs_property(self, text):
        """Property: output never holds two adjacent ASCII whitespace chars."""
        result = collapse_whitespace(text)

        for pair in zip(result, result[1:], strict=False):
            assert not (pair[0] in " \t\n\r\f\v" and pair[1] in " \t\n\r\f\v")
        assert collapse_whitespace(result) == result


class TestHtmlMinifier:
    def test_removes_layout_whitespace(self):
        markup = "<table>\n  <tr>\n    <td>Hi</td>\n  </tr>\n</table>"
        assert minify(markup) == "<table> <tr> <td>Hi</td> </tr> </table>"

    def test_unclosed_void_element(self):
        assert minify("<p>a<br>b</p>") == "<p>a<br>b</p>"

    def test_void_element_has_no_close_tag(self):
        assert minify('<p>a<br/><img src="x.png"/></p>') == (
            '<p>a<br><img src="x.png"></p>'
        )

    def test_unknown_empty_element_is_self_closing(self):
        assert minify("<p><o:p></o:p></p>") == "<p><o:p /></p>"

    def test_empty_html_element_keeps_close_tag(self):
        assert minify('<div class="x"></div>') == '<div class="x"></div>'

    def test_escapes_text(self):
        assert minify("<p>a &amp; b &lt; c</p>") == "<p>a &amp; b &lt; c</p>"

    def test_non_breaking_space_written_as_entity(self):
        assert minify("<p>a&nbsp;b</p>") == "<p>a&nbsp;b</p>"

    def test_escapes_quotes_in_attributes(self):
        assert minify("<a title='say \"hi\"'>x</a>") == (
            '<a title="say &quot;hi&quot;">x</a>'
        )

    def test_script_text_is_raw(self):
        markup = "<script>if (a > b && c) {}</script>"
        assert minify(markup) == markup

    def test_keeps_template_expressions(self):
        markup = '<a href="{{ reset_url }}">{{ label }}</a>'
        assert minify(markup) == markup

    def test_comments_are_collapsed(self):
        assert minify("<p><!--  a\n  b --></p>") == "<p><!-- a b --></p>"

    def test_remove_comments(self):
        assert minify("<p>x<!-- note --></p>", remove_comments=True) == "<p>x</p>"

    def test_conditional_comment_kept_verbatim(self):
        markup = "<div><!--[if mso]><td>x</td><![endif]--></div>"
        assert minify(markup) == markup

    def test_processing_instruction_dropped(self):
        assert minify('<?xml version="1.0"?><p>x</p>') == "<p>x</p>"

    def test_processing_instruction_in_body_dropped(self):
        assert minify("<p><?php echo 1 ?>x</p>") == "<p>x</p>"

    def test_downlevel_revealed_markers_kept(self):
        markup = "<div><![if !mso]><p>web</p><![endif]></div>"
        assert minify(markup) == markup

    def test_mixed_case_names_kept(self):
        markup = '<svg viewBox="0 0 1 1"><linearGradient></linearGradient></svg>'
        assert minify(markup) == (
            '<svg viewBox="0 0 1 1"><linearGradient /></svg>'
        )

    def test_doctype(self):
        assert minify("<!DOCTYPE html><html></html>") == (
            "<!DOCTYPE html><html></html>"
        )


class TestDoctypeDeclaration:
    @pytest.mark.parametrize(
        ("doctype", "expected"),
        [
            ("html", "<!DOCTYPE html>"),
            (
                'html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
                '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd"',
                '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
                '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">',
            ),
            (
                'html SYSTEM "about:legacy-compat"',
                '<!DOCTYPE html SYSTEM "about:legacy-compat">',
            ),
            ("html PUBLIC", "<!DOCTYPE html>"),
        ],
    )
    def test_rebuilds_identifiers(self, doctype, expected):
        assert doctype_declaration(doctype) == expected
