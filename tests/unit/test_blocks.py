#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for paragraph, delimited block and block macro parsing."""

import pytest

from adoc2ast import load
from adoc2ast.ast.nodes import BlockContext, ContentModel
from adoc2ast.exceptions import NestingDepthError


@pytest.mark.unit
class TestParagraphs:
    """Tests for paragraphs and their variants."""

    def test_paragraph_lines(self) -> None:
        """Test that adjacent lines form one paragraph."""
        doc = load("first line\nsecond line\n\nnext paragraph")

        assert [block.lines for block in doc.blocks] == [["first line", "second line"], ["next paragraph"]]
        assert doc.blocks[0].content_model is ContentModel.SIMPLE

    def test_indented_paragraph_is_literal(self) -> None:
        """Test that an indented paragraph keeps its text verbatim."""
        doc = load("  $ make\n    all")

        block = doc.blocks[0]
        assert block.context is BlockContext.LITERAL
        assert block.lines == ["$ make", "  all"]

    def test_normal_style_unindents(self) -> None:
        """Test that the normal style turns an indented paragraph back into text."""
        doc = load("[normal]\n  plain text")

        assert doc.blocks[0].context is BlockContext.PARAGRAPH
        assert doc.blocks[0].lines == ["plain text"]

    def test_admonition_paragraph(self) -> None:
        """Test the label prefix form of an admonition."""
        doc = load("NOTE: Remember this.")

        block = doc.blocks[0]
        assert block.context is BlockContext.ADMONITION
        assert block.lines == ["Remember this."]
        assert block.style == "NOTE"
        assert block.attributes["name"] == "note"
        assert block.attributes["textlabel"] == "Note"

    def test_admonition_style_on_paragraph(self) -> None:
        """Test an admonition given by a style."""
        doc = load("[TIP]\nTry this.")

        assert doc.blocks[0].context is BlockContext.ADMONITION
        assert doc.blocks[0].attributes["name"] == "tip"

    def test_markdown_quote(self) -> None:
        """Test a quote written with leading angle brackets."""
        doc = load("> Quoted text.\n> -- Abe Lincoln")

        quote = doc.blocks[0]
        assert quote.context is BlockContext.QUOTE
        assert quote.blocks[0].lines == ["Quoted text."]
        assert quote.attributes["attribution"] == "Abe Lincoln"

    def test_air_quote(self) -> None:
        """Test a quoted paragraph followed by an attribution line."""
        doc = load('"I hold it."\n-- Thomas Jefferson, Papers')

        quote = doc.blocks[0]
        assert quote.context is BlockContext.QUOTE
        assert quote.lines == ["I hold it."]
        assert quote.attributes["attribution"] == "Thomas Jefferson"
        assert quote.attributes["citetitle"] == "Papers"

    def test_invalid_style_warns(self, warnings_log) -> None:
        """Test that an unknown paragraph style is dropped."""
        doc = load("[unknown]\ntext")

        assert doc.blocks[0].context is BlockContext.PARAGRAPH
        assert "invalid style for paragraph: unknown" in warnings_log.text


@pytest.mark.unit
class TestDelimitedBlocks:
    """Tests for blocks enclosed by delimiter lines."""

    def test_listing(self) -> None:
        """Test that a listing block keeps its lines."""
        doc = load("----\ndef f():\n    return 1\n----")

        block = doc.blocks[0]
        assert block.context is BlockContext.LISTING
        assert block.style == "listing"
        assert block.lines == ["def f():", "    return 1"]

    def test_source_block(self) -> None:
        """Test the source style and its language."""
        doc = load("[source,python]\n----\nprint(1)\n----")

        block = doc.blocks[0]
        assert block.context is BlockContext.LISTING
        assert block.style == "source"
        assert block.attributes["language"] == "python"

    def test_source_language_default(self) -> None:
        """Test that source-language applies to source blocks without a language."""
        doc = load(":source-language: ruby\n\n[source]\n----\nputs 1\n----")

        assert doc.blocks[0].attributes["language"] == "ruby"

    def test_fenced_code(self) -> None:
        """Test a fenced code block with a language."""
        doc = load("```js\nlet x = 1;\n```")

        block = doc.blocks[0]
        assert block.context is BlockContext.LISTING
        assert block.style == "source"
        assert block.attributes["language"] == "js"
        assert block.lines == ["let x = 1;"]

    def test_literal_block(self) -> None:
        """Test that a literal block keeps indentation."""
        doc = load("....\n  indented\n....")

        assert doc.blocks[0].context is BlockContext.LITERAL
        assert doc.blocks[0].lines == ["  indented"]

    def test_longer_delimiter_must_match(self) -> None:
        """Test that a block only closes on its own delimiter length."""
        doc = load("------\ninner\n----\nstill inner\n------")

        assert doc.blocks[0].lines == ["inner", "----", "still inner"]

    def test_compound_blocks(self) -> None:
        """Test that example, sidebar and open blocks hold child blocks."""
        doc = load("====\nin example\n====\n\n****\nin sidebar\n****\n\n--\nin open\n--")

        contexts = [block.context for block in doc.blocks]
        assert contexts == [BlockContext.EXAMPLE, BlockContext.SIDEBAR, BlockContext.OPEN]
        assert [block.blocks[0].lines for block in doc.blocks] == [["in example"], ["in sidebar"], ["in open"]]

    def test_delimited_admonition(self) -> None:
        """Test an admonition written as an example block with a style."""
        doc = load("[WARNING]\n====\nCareful.\n\nVery careful.\n====")

        block = doc.blocks[0]
        assert block.context is BlockContext.ADMONITION
        assert block.content_model is ContentModel.COMPOUND
        assert block.attributes["textlabel"] == "Warning"
        assert len(block.blocks) == 2

    def test_quote_block_attribution(self) -> None:
        """Test the positional attribution and citation of a quote block."""
        doc = load("[quote, Jane Doe, Collected Works]\n____\nWise words.\n____")

        quote = doc.blocks[0]
        assert quote.context is BlockContext.QUOTE
        assert quote.attributes["attribution"] == "Jane Doe"
        assert quote.attributes["citetitle"] == "Collected Works"

    def test_verse_block(self) -> None:
        """Test that a verse block keeps its line breaks."""
        doc = load("[verse, Poet]\n____\nRoses are red\n  violets are blue\n____")

        verse = doc.blocks[0]
        assert verse.context is BlockContext.VERSE
        assert verse.lines == ["Roses are red", "  violets are blue"]

    def test_pass_block(self) -> None:
        """Test that a passthrough block is raw."""
        doc = load("++++\n<b>raw</b>\n++++")

        assert doc.blocks[0].context is BlockContext.PASS
        assert doc.blocks[0].lines == ["<b>raw</b>"]

    def test_stem_block(self) -> None:
        """Test that the stem style resolves to a notation."""
        doc = load("[stem]\n++++\nsqrt(4)\n++++\n\n[latexmath]\n++++\n\\frac{1}{2}\n++++")

        stem, latex = doc.blocks
        assert stem.context is BlockContext.STEM
        assert stem.style == "asciimath"
        assert latex.style == "latexmath"

    def test_invalid_block_style_warns(self, warnings_log) -> None:
        """Test that a style a delimited block cannot take is reported."""
        doc = load("[verse]\n****\ntext\n****")

        assert doc.blocks[0].context is BlockContext.SIDEBAR
        assert "invalid style for sidebar block: verse" in warnings_log.text

    def test_nesting_limit(self) -> None:
        """Test that blocks nested beyond the limit raise."""
        source = "====\n======\n========\ntoo deep\n========\n======\n===="

        with pytest.raises(NestingDepthError) as exc_info:
            load(source, max_nesting_depth=2)

        assert exc_info.value.limit == 2

    def test_nesting_within_limit(self) -> None:
        """Test that nesting up to the limit is accepted."""
        doc = load("====\n======\ndeep\n======\n====", max_nesting_depth=2)

        assert doc.blocks[0].blocks[0].blocks[0].lines == ["deep"]


@pytest.mark.unit
class TestBlockMetadata:
    """Tests for titles, ids, roles, options and comments above blocks."""

    def test_style_shorthand(self) -> None:
        """Test the id, role and option shorthand in the style position."""
        doc = load("[quote#q1.lead.big%collapsible]\n____\nText\n____")

        block = doc.blocks[0]
        assert block.style == "quote"
        assert block.id == "q1"
        assert block.roles == ["lead", "big"]
        assert block.option("collapsible")

    def test_block_anchor_and_reftext(self) -> None:
        """Test an anchor line with reference text."""
        doc = load("[[para1,First Paragraph]]\nSome text.")

        assert doc.blocks[0].id == "para1"
        assert doc.catalog.ids["para1"] == "First Paragraph"

    def test_block_title_is_default_reftext(self) -> None:
        """Test that an anchored block without reftext is referenced by its title."""
        doc = load("[#ex1]\n.My Example\n====\ncontent\n====\n")

        assert doc.catalog.ids["ex1"] == "My Example"

    def test_duplicate_block_id_warns(self, warnings_log) -> None:
        """Test that a reused block id is reported."""
        load("[#dup]\nOne\n\n[#dup]\nTwo")

        assert "id assigned to block already in use: dup" in warnings_log.text

    def test_title_without_caption(self) -> None:
        """Test that a titled paragraph gets no caption."""
        doc = load(".A title\nText.")

        assert doc.blocks[0].title == "A title"
        assert doc.blocks[0].caption is None

    def test_example_captions_are_numbered(self) -> None:
        """Test that titled examples are numbered in order."""
        doc = load(".First\n====\none\n====\n\n.Second\n====\ntwo\n====")

        assert [block.caption for block in doc.blocks] == ["Example 1. ", "Example 2. "]
        assert doc.blocks[1].numeral == "2"

    def test_explicit_caption(self) -> None:
        """Test that a caption attribute replaces the numbered caption."""
        doc = load('[caption="Listing A: "]\n.Sample\n====\nbody\n====')

        assert doc.blocks[0].caption == "Listing A: "

    def test_untitled_example_not_counted(self) -> None:
        """Test that only titled blocks advance the caption counter."""
        doc = load("====\nuntitled\n====\n\n.Titled\n====\nbody\n====")

        assert doc.blocks[0].caption is None
        assert doc.blocks[1].caption == "Example 1. "

    def test_comments_are_dropped(self) -> None:
        """Test that line and block comments produce no blocks."""
        doc = load("// a note to self\nvisible\n\n////\nhidden\n////\n\nalso visible")

        assert [block.lines for block in doc.blocks] == [["visible"], ["also visible"]]

    def test_comment_style_paragraph(self) -> None:
        """Test that the comment style drops a paragraph."""
        doc = load("[comment]\nnot rendered\n\nrendered")

        assert [block.lines for block in doc.blocks] == [["rendered"]]


@pytest.mark.unit
class TestBlockMacros:
    """Tests for media, table of contents and break lines."""

    def test_image(self) -> None:
        """Test the positional attributes of an image macro."""
        doc = load("image::sunset.jpg[Sunset,300,200]")

        image = doc.blocks[0]
        assert image.context is BlockContext.IMAGE
        assert image.attributes["target"] == "sunset.jpg"
        assert image.attributes["alt"] == "Sunset"
        assert image.attributes["width"] == "300"
        assert image.attributes["height"] == "200"
        assert doc.catalog.images == ["sunset.jpg"]

    def test_image_default_alt(self) -> None:
        """Test that the alt text falls back to the file name."""
        doc = load("image::my_photo-1.png[]")

        assert doc.blocks[0].attributes["alt"] == "my photo 1"
        assert "default-alt" in doc.blocks[0].attributes

    def test_image_figure_caption(self) -> None:
        """Test that a titled image is captioned as a figure."""
        doc = load(".A sunset\nimage::sunset.jpg[]")

        assert doc.blocks[0].caption == "Figure 1. "

    def test_image_target_attribute(self) -> None:
        """Test an attribute reference in the target."""
        doc = load(":logo: brand.svg\n\nimage::{logo}[]")

        assert doc.blocks[0].attributes["target"] == "brand.svg"

    def test_video(self) -> None:
        """Test the video macro's positional attributes."""
        doc = load("video::intro.mp4[cover.png,640,360]")

        video = doc.blocks[0]
        assert video.context is BlockContext.VIDEO
        assert video.attributes["poster"] == "cover.png"
        assert video.attributes["width"] == "640"

    def test_audio(self) -> None:
        """Test the audio macro."""
        doc = load("audio::theme.ogg[options=autoplay]")

        audio = doc.blocks[0]
        assert audio.context is BlockContext.AUDIO
        assert audio.attributes["target"] == "theme.ogg"
        assert audio.option("autoplay")

    def test_empty_target_drops_macro(self) -> None:
        """Test that a target emptied by a missing attribute drops the macro."""
        doc = load("image::{nope}[]\n\ntext", attribute_missing="drop-line")

        assert [block.lines for block in doc.blocks] == [["text"]]

    def test_empty_target_kept_as_text_under_skip(self) -> None:
        """Test that a macro whose target resolves to nothing stays a paragraph by default."""
        doc = load("image::{nope}[]")

        paragraph = doc.blocks[0]
        assert paragraph.context is BlockContext.PARAGRAPH
        assert paragraph.lines == ["image::{nope}[]"]

    def test_partly_missing_target_drops_macro(self) -> None:
        """Test that a missing reference anywhere in the target drops the macro under drop."""
        doc = load("image::{nope}.png[]", attribute_missing="drop")

        assert doc.blocks == []
        assert doc.catalog.images == []

    def test_toc_macro(self) -> None:
        """Test the table of contents placement macro."""
        doc = load("toc::[]")

        assert doc.blocks[0].context is BlockContext.TOC

    def test_breaks(self) -> None:
        """Test thematic and page breaks."""
        doc = load("'''\n\n<<<\n\n---")

        assert [block.context for block in doc.blocks] == [
            BlockContext.THEMATIC_BREAK,
            BlockContext.PAGE_BREAK,
            BlockContext.THEMATIC_BREAK,
        ]
