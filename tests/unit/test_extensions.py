#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for extension processors and their registry."""

import pytest

from adoc2ast import load
from adoc2ast.ast.nodes import Block, BlockContext, ContentModel
from adoc2ast.extensions import (
    BlockMacroProcessor,
    BlockProcessor,
    ExtensionRegistry,
    InlineMacroProcessor,
    inline_macro_pattern,
)
from adoc2ast.inline import InlineNode


class ShoutBlock:
    name = "shout"
    contexts = ("paragraph", "example")
    content_model = "simple"
    positional_attributes = ("volume",)

    def process(self, parent, reader, attributes):
        lines = [line.upper() for line in reader.read_lines()]
        return Block(
            context=BlockContext.PARAGRAPH,
            content_model=ContentModel.SIMPLE,
            lines=lines,
            attributes=attributes,
        )


class DropBlock:
    name = "drop"
    contexts = ("paragraph",)
    content_model = "simple"
    positional_attributes = ()

    def process(self, parent, reader, attributes):
        return None


class GistMacro:
    name = "gist"
    positional_attributes = ("lang",)

    def process(self, parent, target, attributes):
        return Block(
            context=BlockContext.LISTING,
            content_model=ContentModel.VERBATIM,
            lines=[f"gist {target}"],
            attributes={**attributes, "target": target},
        )


class IssueMacro:
    name = "issue"
    regexp = inline_macro_pattern("issue")
    content_model = "text"
    positional_attributes = ()

    def process(self, parent, target, attributes):
        return InlineNode("anchor", attributes.get("text") or f"#{target}", type="link", target=f"/issues/{target}")


@pytest.fixture
def registry() -> ExtensionRegistry:
    registry = ExtensionRegistry()
    registry.register_block(ShoutBlock())
    registry.register_block(DropBlock())
    registry.register_block_macro(GistMacro())
    registry.register_inline_macro(IssueMacro())
    return registry


@pytest.mark.unit
class TestExtensionRegistry:
    """Tests for registering and looking up processors."""

    def test_processors_satisfy_protocols(self) -> None:
        """Test that the sample processors match the runtime protocols."""
        assert isinstance(ShoutBlock(), BlockProcessor)
        assert isinstance(GistMacro(), BlockMacroProcessor)
        assert isinstance(IssueMacro(), InlineMacroProcessor)

    def test_find_block_checks_context(self, registry) -> None:
        """Test that a block processor is only found for its contexts."""
        assert registry.find_block("shout", "paragraph") is not None
        assert registry.find_block("shout", "sidebar") is None
        assert registry.find_block(None, "paragraph") is None
        assert registry.has_block("shout")
        assert not registry.has_block("whisper")

    def test_inline_macro_is_replaced_by_name(self, registry) -> None:
        """Test that registering an inline macro twice keeps one entry."""
        registry.register_inline_macro(IssueMacro())

        assert len(registry.inline_macros) == 1
        assert registry.has_inline_macros()

    def test_unregister(self, registry) -> None:
        """Test removing processors by name."""
        assert registry.unregister("gist")
        assert registry.find_block_macro("gist") is None
        assert not registry.unregister("gist")

    def test_inline_macro_pattern(self) -> None:
        """Test the long and short macro forms."""
        long_form = inline_macro_pattern("issue").match("issue:42[Crash]")
        short_form = inline_macro_pattern("kbd", short_form=True).match("kbd:[Ctrl]")

        assert long_form.group(1) == "42"
        assert long_form.group(2) == "Crash"
        assert short_form.group(2) == "Ctrl"


@pytest.mark.unit
class TestExtensionsInDocuments:
    """Tests for processors invoked while parsing and substituting."""

    def test_styled_paragraph(self, registry) -> None:
        """Test that a paragraph with a registered style goes to the processor."""
        doc = load("[shout,loud]\nhello there", extensions=registry)

        block = doc.blocks[0]
        assert block.lines == ["HELLO THERE"]
        assert block.attributes["volume"] == "loud"

    def test_styled_delimited_block(self, registry) -> None:
        """Test that a delimited block can be claimed by style."""
        doc = load("[shout]\n====\nquiet words\n====", extensions=registry)

        assert doc.blocks[0].lines == ["QUIET WORDS"]

    def test_processor_may_drop_block(self, registry) -> None:
        """Test that returning None removes the block."""
        doc = load("[drop]\ngone\n\nkept", extensions=registry)

        assert [block.lines for block in doc.blocks] == [["kept"]]

    def test_unregistered_style_warns(self, warnings_log) -> None:
        """Test that an unknown paragraph style is reported and ignored."""
        doc = load("[shout]\nhello")

        assert doc.blocks[0].context is BlockContext.PARAGRAPH
        assert doc.blocks[0].lines == ["hello"]
        assert "invalid style for paragraph: shout" in warnings_log.text

    def test_block_macro(self, registry) -> None:
        """Test that a registered block macro builds a block."""
        doc = load("gist::12345[ruby]", extensions=registry)

        block = doc.blocks[0]
        assert block.context is BlockContext.LISTING
        assert block.lines == ["gist 12345"]
        assert block.attributes["target"] == "12345"
        assert block.attributes["lang"] == "ruby"

    def test_unknown_block_macro_is_paragraph(self) -> None:
        """Test that an unregistered macro line is kept as text."""
        doc = load("gist::12345[]")

        assert doc.blocks[0].context is BlockContext.PARAGRAPH

    def test_inline_macro(self, registry) -> None:
        """Test that an inline macro is converted during substitution."""
        doc = load("", extensions=registry)

        result = doc.substitutor.apply("See issue:42[the crash] and issue:7[].")

        assert result == 'See <a href="/issues/42">the crash</a> and <a href="/issues/7">#7</a>.'

    def test_escaped_inline_macro(self, registry) -> None:
        """Test that a backslash keeps the macro text."""
        doc = load("", extensions=registry)

        assert doc.substitutor.apply("\\issue:42[x]") == "issue:42[x]"
