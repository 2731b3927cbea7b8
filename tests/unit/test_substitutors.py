#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the substitution pipeline."""

import pytest

from adoc2ast import AsciiDocOptions, Document
from adoc2ast.substitutors import NORMAL_SUBS, VERBATIM_SUBS, SubstitutionPipeline


@pytest.fixture
def document() -> Document:
    return Document.create(AsciiDocOptions(attributes={"product": "Widget"}))


@pytest.fixture
def subs(document) -> SubstitutionPipeline:
    return document.substitutor


@pytest.mark.unit
class TestAttributeReferences:
    """Tests for attribute reference substitution and missing-attribute policies."""

    def test_defined_reference(self, subs) -> None:
        """Test replacing a defined attribute."""
        assert subs.sub_attributes("Buy {product} now") == "Buy Widget now"

    def test_reference_is_case_insensitive(self, subs) -> None:
        """Test that attribute names are looked up in lower case."""
        assert subs.sub_attributes("{Product}") == "Widget"

    def test_intrinsic_attribute(self, subs) -> None:
        """Test the built-in character attributes."""
        assert subs.sub_attributes("a{empty}b{sp}c") == "ab c"

    def test_escaped_reference(self, subs) -> None:
        """Test that a backslash keeps the reference."""
        assert subs.sub_attributes("\\{product}") == "{product}"

    def test_skip_policy(self, subs) -> None:
        """Test that missing references are left in place by default."""
        assert subs.sub_attributes("Hello {nope} world") == "Hello {nope} world"

    def test_drop_policy(self, subs) -> None:
        """Test that a dropped reference removes only itself."""
        assert subs.sub_attributes("Hello {nope} world", attribute_missing="drop") == "Hello  world"

    def test_drop_line_policy(self, subs) -> None:
        """Test that drop-line removes the whole line."""
        text = "keep\nHello {nope}\nalso keep"

        assert subs.sub_attributes(text, attribute_missing="drop-line") == "keep\nalso keep"
        assert subs.sub_attributes("Hello {nope}", attribute_missing="drop-line") == ""

    def test_warn_policy(self, subs, warnings_log) -> None:
        """Test that warn keeps the reference and reports it."""
        assert subs.sub_attributes("Hello {nope}", attribute_missing="warn") == "Hello {nope}"
        assert "skipping reference to missing attribute: nope" in warnings_log.text

    def test_policy_from_document_attribute(self) -> None:
        """Test that the option sets the document-wide policy."""
        document = Document.create(AsciiDocOptions(attribute_missing="drop"))

        assert document.doc_attr("attribute-missing") == "drop"
        assert document.substitutor.sub_attributes("x{nope}y") == "xy"

    def test_set_directive(self, document, subs) -> None:
        """Test that an inline set assigns the attribute and leaves no text."""
        assert subs.sub_attributes("{set:edition:2}") == ""
        assert document.doc_attr("edition") == "2"

    def test_counter_directives(self, document, subs) -> None:
        """Test the counter and counter2 references."""
        assert subs.sub_attributes("{counter:step}") == "1"
        assert subs.sub_attributes("{counter:step}") == "2"
        assert subs.sub_attributes("{counter2:step}") == ""
        assert document.doc_attr("step") == "3"

    def test_letter_counter(self, subs) -> None:
        """Test a counter seeded with a letter."""
        assert subs.sub_attributes("{counter:appendix-letter:A}") == "A"
        assert subs.sub_attributes("{counter:appendix-letter}") == "B"


@pytest.mark.unit
class TestInlineFormatting:
    """Tests for special characters, quotes, replacements and breaks."""

    def test_special_characters(self, subs) -> None:
        """Test escaping of markup characters."""
        assert subs.sub_specialchars("<a & b>") == "&lt;a &amp; b&gt;"

    def test_constrained_quotes(self, subs) -> None:
        """Test strong, emphasis and monospace marks around words."""
        result = subs.apply("*bold* and _em_ and `code`")

        assert result == "<strong>bold</strong> and <em>em</em> and <code>code</code>"

    def test_unconstrained_quotes(self, subs) -> None:
        """Test doubled marks inside a word."""
        assert subs.apply("**un**constrained") == "<strong>un</strong>constrained"

    def test_constrained_marks_need_word_boundaries(self, subs) -> None:
        """Test that single marks inside a word are left alone."""
        assert subs.apply("a*b*c") == "a*b*c"

    def test_role_on_quoted_text(self, subs) -> None:
        """Test a role attached to highlighted text."""
        assert subs.apply("[.big]#large#") == '<span class="big">large</span>'

    def test_replacements(self, subs) -> None:
        """Test typographic replacements."""
        assert subs.sub_replacements("Copyright (C) 2025") == "Copyright &#169; 2025"
        assert subs.sub_replacements("Wait...") == "Wait&#8230;&#8203;"
        assert subs.sub_replacements("it's") == "it&#8217;s"

    def test_escaped_replacement(self, subs) -> None:
        """Test that a backslash suppresses a replacement."""
        assert subs.sub_replacements("\\(C)") == "(C)"

    def test_hard_line_break(self, subs) -> None:
        """Test a trailing plus at the end of a line."""
        assert subs.apply("line one +\nline two") == "line one<br>\nline two"


@pytest.mark.unit
class TestPassthroughs:
    """Tests for passthrough extraction and restoration."""

    def test_single_plus_only_escapes(self, subs) -> None:
        """Test that single plus text gets special characters only."""
        assert subs.apply("+*not bold* <b>+ and *bold*") == "*not bold* &lt;b&gt; and <strong>bold</strong>"

    def test_triple_plus_is_raw(self, subs) -> None:
        """Test that triple plus text is passed through untouched."""
        assert subs.apply("+++<b>*raw*</b>+++") == "<b>*raw*</b>"

    def test_pass_macro(self, subs) -> None:
        """Test the pass macro with and without substitutions."""
        assert subs.apply("pass:[<u>*x*</u>]") == "<u>*x*</u>"
        assert subs.apply("pass:q[*x*]") == "<strong>x</strong>"

    def test_placeholders_do_not_leak(self, subs) -> None:
        """Test that no placeholder characters remain after substitution."""
        result = subs.apply("+a+ +++b+++ pass:[c]")

        assert result == "a b c"
        assert "\u0096" not in result
        assert "\u0097" not in result


@pytest.mark.unit
class TestMacros:
    """Tests for links, footnotes and anchors."""

    def test_bare_url(self, document, subs) -> None:
        """Test that a bare URL becomes a link."""
        result = subs.apply("see https://example.org now")

        assert result == 'see <a href="https://example.org" class="bare">https://example.org</a> now'
        assert "https://example.org" in document.catalog.links

    def test_url_with_text(self, subs) -> None:
        """Test a URL followed by link text."""
        assert subs.apply("https://example.org[Example]") == '<a href="https://example.org">Example</a>'

    def test_link_macro(self, subs) -> None:
        """Test the link macro for relative targets."""
        assert subs.apply("link:guide.html[Guide]") == '<a href="guide.html">Guide</a>'

    def test_footnote(self, document, subs) -> None:
        """Test that a footnote is numbered and cataloged."""
        result = subs.apply("Text.footnote:[A note.]")

        assert result == 'Text.<sup class="footnote">[<a href="#_footnotedef_1">1</a>]</sup>'
        assert document.footnotes[0].text == "A note."
        assert document.footnotes[0].index == 1

    def test_inline_anchor(self, subs) -> None:
        """Test an inline anchor."""
        assert subs.apply("[[here]]text") == '<a id="here"></a>text'


@pytest.mark.unit
class TestResolveSubs:
    """Tests for resolving a subs attribute value."""

    def test_group(self, subs) -> None:
        """Test that a group name expands to its members."""
        assert subs.resolve_subs("normal") == list(NORMAL_SUBS)

    def test_append_and_remove(self, subs) -> None:
        """Test modifiers applied to the default set."""
        appended = subs.resolve_subs("+callouts", defaults=NORMAL_SUBS)
        removed = subs.resolve_subs("-quotes", defaults=NORMAL_SUBS)

        assert appended == [*NORMAL_SUBS, "callouts"]
        assert "quotes" not in removed
        assert len(removed) == len(NORMAL_SUBS) - 1

    def test_prepend(self, subs) -> None:
        """Test a trailing plus that prepends."""
        assert subs.resolve_subs("attributes+", defaults=VERBATIM_SUBS) == [
            "attributes",
            "specialcharacters",
            "callouts",
        ]

    def test_inline_hints(self, subs) -> None:
        """Test single letter hints for inline passthroughs."""
        assert subs.resolve_subs("q,a", scope="inline") == ["quotes", "attributes"]

    def test_invalid_names_warn(self, subs, warnings_log) -> None:
        """Test that unknown names are dropped and reported."""
        assert subs.resolve_subs("bogus,quotes", subject="listing") == ["quotes"]
        assert "invalid substitution type for listing: bogus" in warnings_log.text

    def test_empty_value(self, subs) -> None:
        """Test that an empty value resolves to nothing."""
        assert subs.resolve_subs("") is None


@pytest.mark.unit
class TestAttributeValues:
    """Tests for substitution of attribute entry values."""

    def test_header_subs(self, document) -> None:
        """Test that values get special characters and attribute references."""
        assert document.set_attribute("label", "{product} <1>") == "Widget &lt;1&gt;"

    def test_pass_wrapper(self, document) -> None:
        """Test that a pass wrapper selects the substitutions."""
        assert document.set_attribute("raw", "pass:[<b>]") == "<b>"
        assert document.set_attribute("fmt", "pass:q[*x*]") == "<strong>x</strong>"
