#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for attribute list parsing."""

import pytest

from adoc2ast.attribute_list import AttributeList


@pytest.mark.unit
class TestPositionalAttributes:
    """Tests for positional values and their names."""

    def test_positional_values_are_indexed(self) -> None:
        """Test that positional values are keyed from 1."""
        attrs = AttributeList("source,python,linenums").parse()

        assert attrs == {1: "source", 2: "python", 3: "linenums"}

    def test_positional_names(self) -> None:
        """Test that names given for positions are assigned as well."""
        attrs = AttributeList('quote, Albert Einstein, title="Relativity"').parse(["style", "attribution"])

        assert attrs["style"] == "quote"
        assert attrs[1] == "quote"
        assert attrs["attribution"] == "Albert Einstein"
        assert attrs[2] == "Albert Einstein"
        assert attrs["title"] == "Relativity"

    def test_empty_positional_value(self) -> None:
        """Test that an empty leading position still counts."""
        attrs = AttributeList(",python").parse()

        assert attrs[1] == ""
        assert attrs[2] == "python"

    def test_rekey_attributes(self) -> None:
        """Test naming positional attributes after parsing."""
        attrs = AttributeList("source,ruby").parse()

        AttributeList.rekey_attributes(attrs, [None, "language", "linenums"])

        assert attrs["language"] == "ruby"
        assert "linenums" not in attrs
        assert "style" not in attrs

    def test_rekey(self) -> None:
        """Test parsing and naming positions in one step."""
        attrs = AttributeList("image.png,Logo").rekey([None, "alt"])

        assert attrs[1] == "image.png"
        assert attrs["alt"] == "Logo"

    def test_parse_into_merges(self) -> None:
        """Test merging parsed attributes into an existing mapping."""
        existing = {"role": "lead"}

        AttributeList("width=100").parse_into(existing)

        assert existing == {"role": "lead", "width": "100"}


@pytest.mark.unit
class TestNamedAttributes:
    """Tests for named values and quoting."""

    def test_double_quoted_value_keeps_commas(self) -> None:
        """Test that a quoted value may contain the separator."""
        attrs = AttributeList('caption="One, Two",width=50').parse()

        assert attrs["caption"] == "One, Two"
        assert attrs["width"] == "50"

    def test_escaped_quote(self) -> None:
        """Test that an escaped quote is unescaped in the value."""
        attrs = AttributeList(r'title="say \"hi\""').parse()

        assert attrs["title"] == 'say "hi"'

    def test_empty_quoted_value(self) -> None:
        """Test an empty quoted value."""
        assert AttributeList('alt=""').parse()["alt"] == ""

    def test_options_fan_out(self) -> None:
        """Test that options become individual option flags."""
        attrs = AttributeList('options="header,footer"').parse()

        assert attrs["header-option"] == ""
        assert attrs["footer-option"] == ""
        assert attrs["options"] == "header,footer"

    def test_opts_alias(self) -> None:
        """Test that opts is an alias of options."""
        attrs = AttributeList("opts=autowidth").parse()

        assert attrs["autowidth-option"] == ""
        assert attrs["options"] == "autowidth"

    def test_none_value_is_skipped(self) -> None:
        """Test that a value of None leaves the attribute unset."""
        attrs = AttributeList("role=None,id=intro").parse()

        assert "role" not in attrs
        assert attrs["id"] == "intro"

    def test_single_quoted_values_are_substituted(self) -> None:
        """Test that single-quoted values go through the supplied substitutions."""
        attrs = AttributeList("'*bold*',caption='*c*'", normal_subs=str.upper).parse()

        assert attrs[1] == "*BOLD*"
        assert attrs["caption"] == "*C*"

    def test_single_quoted_title_is_not_substituted(self) -> None:
        """Test that the title value is kept as written."""
        attrs = AttributeList("title='*t*'", normal_subs=str.upper).parse()

        assert attrs["title"] == "*t*"

    def test_unterminated_quote_degrades(self) -> None:
        """Test that an unterminated quote keeps its opening quote."""
        attrs = AttributeList('"open,next').parse()

        assert attrs[1] == '"open'
        assert attrs[2] == "next"

    def test_parse_is_cached(self) -> None:
        """Test that parsing twice returns the same mapping."""
        attribute_list = AttributeList("a,b")

        assert attribute_list.parse() is attribute_list.parse()
