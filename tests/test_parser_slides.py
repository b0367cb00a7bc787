"""
Dispatch, slide assembly and deck assembly tests

Tests ordered choice between productions, '---' dividers as slide breaks
and background declarations, and the Presentation builder.
"""

from pathlib import Path

import pytest

from aqaprez.config import AppSettings
from aqaprez.lib.parser import NODE_PARSERS, Parser, presentation_load, presentation_parse
from aqaprez.models import (
    CodeBlock,
    Comment,
    DraftState,
    Header,
    HeaderSize,
    Image,
    ImageNode,
    NumberedList,
    Slide,
    SlideDraft,
    Text,
    UnnumberedList,
)


class TestDispatchOrder:
    """Test ordered choice in slideNode_parse()"""

    def test_priority_order(self):
        """Productions are tried in a fixed order, text last"""
        assert [attempt.__name__ for attempt in NODE_PARSERS] == [
            "header_parse",
            "unnumberedList_parse",
            "numberedList_parse",
            "codeBlock_parse",
            "imageNode_parse",
            "comment_parse",
            "textSection_parse",
        ]

    @pytest.mark.parametrize(
        "source, node_type",
        [
            ("# Title\n\n", Header),
            ("- item\n\n", UnnumberedList),
            ("1. item\n\n", NumberedList),
            ("```rust\nx\n```\n\n", CodeBlock),
            ("| font_size: 20\n```rust\nx\n```\n\n", CodeBlock),
            ("![alt](a.png)\n\n", ImageNode),
            ("// comment\n\n", Comment),
            ("Just a paragraph\n\n", Text),
        ],
    )
    def test_classification(self, source, node_type):
        """Each construct is classified as its own node type"""
        assert isinstance(Parser(source).slideNode_parse(), node_type)

    def test_failed_header_falls_back_to_text(self):
        """Six '#' is not a header, so it becomes text"""
        assert Parser("###### deep\n\n").slideNode_parse() == Text("###### deep")

    def test_malformed_image_falls_back_to_text(self):
        """Broken image syntax becomes text"""
        assert Parser("![alt](a.png\n\n").slideNode_parse() == Text("![alt](a.png")

    def test_nothing_to_parse(self):
        """With no input no production matches"""
        with pytest.raises(SyntaxError, match="Expected a slide node"):
            Parser("").slideNode_parse()


class TestSlideDraft:
    """Test the two-state slide draft"""

    def test_states(self):
        """EMPTY until the first node, ACCUMULATING after"""
        draft = SlideDraft()
        assert draft.state is DraftState.EMPTY

        draft = draft.node_append(Text("x"))
        assert draft.state is DraftState.ACCUMULATING

    def test_drafts_are_values(self):
        """Steps return new drafts and leave the old one alone"""
        empty = SlideDraft()
        empty.node_append(Text("x"))
        assert empty.nodes == ()

    def test_background_set_none_keeps_background(self):
        """A divider without image does not clear a background"""
        image = Image(path="bg.png")
        draft = SlideDraft().background_set(image).background_set(None)
        assert draft.slide_build() == Slide(nodes=(), background=image)


class TestSlideAssembly:
    """Test dividers as slide breaks and background declarations"""

    def test_divider_after_nodes_starts_next_slide(self):
        """Background on a divider after nodes belongs to the next slide"""
        slides = Parser("# first\n\n---![](bg.jpg)\n\nHello\n\n").parse()

        assert slides == [
            Slide(nodes=(Header(HeaderSize.ONE, "first"),), background=None),
            Slide(nodes=(Text("Hello"),), background=Image(path="bg.jpg")),
        ]

    def test_divider_first_sets_own_background(self):
        """A divider before any node sets the current slide's background"""
        slides = Parser("---![](bg.png)\n\n# Title\n\nBody\n\n").parse()

        assert len(slides) == 1
        assert slides[0].background == Image(path="bg.png")
        assert slides[0].nodes == (Header(HeaderSize.ONE, "Title"), Text("Body"))

    def test_slide_parse_leaves_divider(self):
        """A slide-ending divider is not consumed"""
        parser = Parser("# A\n\n---![](b.png)\n\nB")
        slide = parser.slide_parse()

        assert slide.nodes == (Header(HeaderSize.ONE, "A"),)
        assert parser.source[parser.position:].startswith("---")

    def test_divider_without_image(self):
        """Plain '---' separates slides without backgrounds"""
        slides = Parser("# A\n\n---\n\n# B\n\n").parse()

        assert [slide.nodes for slide in slides] == [
            (Header(HeaderSize.ONE, "A"),),
            (Header(HeaderSize.ONE, "B"),),
        ]
        assert all(slide.background is None for slide in slides)

    def test_image_on_next_line_is_a_node(self):
        """Only an image right after '---' is a background"""
        slides = Parser("---\n![](a.png)\n\n").parse()

        assert slides[0].background is None
        assert slides[0].nodes == (ImageNode(Image(path="a.png")),)

    def test_background_only_slide(self):
        """A slide may have a background and no nodes"""
        slides = Parser("# A\n\n---![](end.png)").parse()

        assert slides[1] == Slide(nodes=(), background=Image(path="end.png"))

    def test_trailing_divider_gives_empty_slide(self):
        """A final divider yields a final empty slide"""
        slides = Parser("# A\n\n---\n\n").parse()

        assert len(slides) == 2
        assert slides[1] == Slide()

    def test_consecutive_dividers(self):
        """Dividers on an empty slide keep it open; the last image wins"""
        slides = Parser("---![](a.png)\n\n---![](b.png)\n\nHi\n\n").parse()

        assert len(slides) == 1
        assert slides[0].background == Image(path="b.png")

    def test_extra_blank_lines_skipped(self):
        """Blank-line padding never becomes empty text"""
        slides = Parser("\n\n# A\n\n\n\n\nB\n\n\n").parse()
        assert slides[0].nodes == (Header(HeaderSize.ONE, "A"), Text("B"))

    def test_comment_kept_but_not_displayed(self):
        """Comments stay in the slide, display skips them"""
        slide = Parser("# A\n\n// speaker note\n\nB\n\n").parse()[0]

        assert Comment("speaker note") in slide.nodes
        assert slide.nodes_displayed() == (Header(HeaderSize.ONE, "A"), Text("B"))

    def test_node_order_follows_source(self):
        """Nodes appear in source order"""
        source = "## T\n\n- a\n- b\n\n1. x\n\n```rust\ny\n```\n\n![i](i.png)\n\nend\n\n"
        kinds = [node.kind for node in Parser(source).parse()[0].nodes]

        assert kinds == ["header", "unnumbered_list", "numbered_list", "code_block", "image", "text"]


class TestDeckAssembly:
    """Test slides_parse() over whole documents"""

    def test_empty_document(self):
        """No input, no slides"""
        assert Parser("").parse() == []

    def test_whitespace_document(self):
        """Whitespace only, no slides"""
        assert Parser("\n\n   \n\t\n").parse() == []

    def test_no_trailing_blank_line(self):
        """End of input closes the last node"""
        slides = Parser("# A\n\nlast line").parse()
        assert slides[0].nodes[-1] == Text("last line")

    def test_many_slides(self):
        """Slides come out in document order"""
        source = "\n\n---\n\n".join(f"# Slide {n}" for n in range(1, 6))
        slides = Parser(source).parse()

        assert [slide.nodes[0].text for slide in slides] == [f"Slide {n}" for n in range(1, 6)]

    def test_code_block_with_divider_inside(self):
        """'---' inside a fence is code, not a divider"""
        slides = Parser("```text\na\n---\nb\n```\n\nAfter\n\n").parse()

        assert len(slides) == 1
        assert slides[0].nodes[0].code == "a\n---\nb"


class TestPresentationBuilder:
    """Test presentation_parse() and presentation_load()"""

    SOURCE = "## Intro\n\nMaciej\n\n---![](bg.png){ scale: 50%; }\n\n# Rust\n\n- one\n- two\n\n"

    def test_metadata_from_caller(self):
        """Title and path are caller-supplied"""
        presentation = presentation_parse(self.SOURCE, title="Talk", path=Path("talk.prez"))

        assert presentation.title == "Talk"
        assert presentation.path == Path("talk.prez")
        assert len(presentation.slides) == 2
        assert isinstance(presentation.slides, tuple)

    def test_default_title(self):
        """Without a title the configured default is used"""
        assert presentation_parse("x").title == "Presentation"

    def test_idempotent(self):
        """Parsing the same text twice gives equal decks"""
        assert presentation_parse(self.SOURCE, "T") == presentation_parse(self.SOURCE, "T")

    def test_crlf_normalized(self):
        """Windows line endings parse like Unix ones"""
        unix = presentation_parse(self.SOURCE, "T")
        windows = presentation_parse(self.SOURCE.replace("\n", "\r\n"), "T")
        assert unix == windows

    def test_failure_is_single_error(self):
        """Any failure below surfaces as one SyntaxError, no partial deck"""
        source = "# A\n\n![](a.png){ scale: -5%; }\n\n"
        settings = AppSettings(scale_policy="reject")

        with pytest.raises(SyntaxError, match="Failed to parse presentation 'Broken'") as excinfo:
            presentation_parse(source, "Broken", settings=settings)

        assert isinstance(excinfo.value.__cause__, SyntaxError)
        assert "Line 3" in str(excinfo.value)

    def test_load_from_file(self, tmp_path):
        """File name is the default title"""
        deck = tmp_path / "talk.prez"
        deck.write_text(self.SOURCE, encoding="utf-8")

        presentation = presentation_load(deck)

        assert presentation.title == "talk.prez"
        assert presentation.path == deck
        assert presentation == presentation_parse(self.SOURCE, "talk.prez", path=deck)

    def test_load_utf8(self, tmp_path):
        """Documents are read as UTF-8"""
        deck = tmp_path / "pl.prez"
        deck.write_text("## Wprowadzenie do Rusta, dla tych, którzy już trochę umieją\n\n", encoding="utf-8")

        header = presentation_load(deck, title="PL").slides[0].nodes[0]
        assert header.text.endswith("którzy już trochę umieją")

    def test_load_missing_file(self, tmp_path):
        """Read errors are not parse errors"""
        with pytest.raises(OSError):
            presentation_load(tmp_path / "missing.prez")

    def test_load_invalid_utf8(self, tmp_path):
        """Undecodable bytes are reported as a parse error"""
        deck = tmp_path / "bad.prez"
        deck.write_bytes(b"# bad \xff\xfe\n\n")

        with pytest.raises(SyntaxError, match="not valid UTF-8"):
            presentation_load(deck)
