"""
Parser for the aqaprez slide markup

Transforms deck source text into a Presentation: an ordered tuple of Slides,
each holding typed slide nodes.

The parser is layered, leaves first:
1. Delimiter scanning: split at the next literal delimiter (lib.scanner)
2. Leaf productions: header, lists, code block, image, comment, text
3. Node dispatch: ordered choice over the leaf productions
4. Slide assembly: nodes and '---' dividers grouped into one Slide
5. Deck assembly: slides collected until the input is exhausted

Key features:
- Ordered choice: the first production that matches wins (NODE_PARSERS)
- Local failure: a production that does not match returns None and leaves
  the cursor where it was, so the next alternative can try
- End of input is an implicit blank line; the scanner never fails
- Dividers double as background declarations ('---![](bg.png)')
- Line number tracking for error reporting

Example:
    >>> parser = Parser("# Hello\\n\\nWorld\\n\\n")
    >>> slides = parser.parse()
    >>> slides[0].nodes
    (Header(level=<HeaderSize.ONE: 1>, text='Hello'), Text(text='World'))
"""

import re
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, NoReturn, Optional, Tuple, Union

from ..config import AppSettings, appsettings
from ..models.deck import (
    CodeBlock,
    CodeBlockParams,
    Comment,
    FontStyle,
    Header,
    HeaderSize,
    Image,
    ImageNode,
    ImageParams,
    Language,
    NumberedList,
    Presentation,
    Slide,
    SlideNode,
    Text,
    UnnumberedList,
)
from ..models.parser import DelimiterMatch, Divider, DraftState, SlideDraft
from .log import LOG, WARN
from .scanner import delimiter_find

BLANK_LINE = "\n\n"
FENCE = "```"
DIVIDER = "---"
COMMENT_PREFIX = "//"

HEADER_RE = re.compile(r'(#{1,5})[ \t]+')
BULLET_RE = re.compile(r'-[ \t]+')
NUMBER_RE = re.compile(r'\d+\.?[ \t]+')
PADDING_RE = re.compile(r'(?:[ \t]*\n)+')
TRAILING_RE = re.compile(r'\s*\Z')

FONT_SIZE_RE = re.compile(r'\|[ \t]+font_size:[ \t]+(\d+)[ \t]*\n')
FONT_STYLE_RE = re.compile(
    r'\|[ \t]+font_style:[ \t]+('
    + '|'.join(re.escape(style.value) for style in FontStyle)
    + r')[ \t]*\n'
)
BLOCK_TERMINATOR_RE = re.compile(r'\|[ \t]+block_terminator:[ \t]+(\S[^\n]*)\n')

IMAGE_RE = re.compile(r'!\[([^\]\n]*)\]\(([^)\n]+)\)')
IMAGE_PARAMS_RE = re.compile(
    r'[ \t]*\{\s*scale:\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*%\s*;?\s*\}'
)


class Parser:
    """
    Parser for aqaprez deck markup

    Handles:
    - Headers (# to #####), paragraphs and comments
    - Unnumbered ('- ') and numbered ('1. ') lists
    - Fenced code blocks with '| key: value' parameter lines
    - Images with an optional { scale: N%; } block
    - '---' slide dividers with optional background images
    - Error reporting with line numbers
    """

    def __init__(self, source: str, debug: bool = False, settings: Optional[AppSettings] = None):
        """
        Initialize parser with source text

        Args:
            source: Deck source text, with '\\n' line endings
            debug: Trace every parsed node (at verbosity 3)
            settings: Settings to validate image scales against; defaults
                      to the application settings singleton

        Attributes:
            source: Source text being parsed
            position: Current cursor position in source
        """
        self.source = source
        self.debug = debug
        self.settings = settings or appsettings
        self.position = 0

    @property
    def line_number(self) -> int:
        """Line number of the cursor (1-based)"""
        return self.source.count("\n", 0, self.position) + 1

    def exhausted(self) -> bool:
        return self.position >= len(self.source)

    def until_take(self, delimiter: str) -> DelimiterMatch:
        """Consume input up to and including the next delimiter (or to the end)"""
        match = delimiter_find(self.source, delimiter, self.position)
        self.position = match.end
        return match

    def padding_skip(self) -> None:
        """
        Skip whitespace-only lines before the next node or divider

        Trailing whitespace at the very end of the input is skipped too, so
        that it never turns into an empty Text node.
        """
        match = PADDING_RE.match(self.source, self.position)
        if match:
            self.position = match.end()
        if TRAILING_RE.match(self.source, self.position):
            self.position = len(self.source)

    # ------------------------------------------------------------------
    # Leaf productions
    # ------------------------------------------------------------------

    def header_parse(self) -> Optional[Header]:
        """
        Parse '#'..'#####', whitespace, then text up to the next blank line

        More than five '#' is not a header at all (no clamping).
        """
        match = HEADER_RE.match(self.source, self.position)
        if not match:
            return None
        level = HeaderSize.count_map(len(match.group(1)))
        self.position = match.end()
        text = self.until_take(BLANK_LINE).span.strip()
        return Header(level=level, text=text)

    def listItems_parse(self, marker: re.Pattern) -> Optional[Tuple[str, ...]]:
        """
        Parse one or more lines that start with marker

        Accumulation stops at the first line that does not match. A single
        newline after the last item closes the list.

        Returns:
            Stripped item texts, or None if not even one line matched
        """
        items: List[str] = []
        while True:
            match = marker.match(self.source, self.position)
            if not match:
                break
            self.position = match.end()
            items.append(self.until_take("\n").span.strip())

        if not items:
            return None
        if self.source.startswith("\n", self.position):
            self.position += 1
        return tuple(items)

    def unnumberedList_parse(self) -> Optional[UnnumberedList]:
        items = self.listItems_parse(BULLET_RE)
        return UnnumberedList(items) if items is not None else None

    def numberedList_parse(self) -> Optional[NumberedList]:
        """Markers are '<digits>.' or '<digits>'; their values are dropped"""
        items = self.listItems_parse(NUMBER_RE)
        return NumberedList(items) if items is not None else None

    def codeBlockParams_parse(self) -> CodeBlockParams:
        """
        Parse zero or more '| key: value' lines above a code fence

        The first line that is not a recognized parameter ends the section.
        That is not an error: the cursor is left at the start of that line.
        """
        params = CodeBlockParams()
        while True:
            match = FONT_SIZE_RE.match(self.source, self.position)
            if match:
                params = replace(params, font_size=int(match.group(1)))
                self.position = match.end()
                continue

            match = FONT_STYLE_RE.match(self.source, self.position)
            if match:
                params = replace(params, font_style=FontStyle(match.group(1)))
                self.position = match.end()
                continue

            match = BLOCK_TERMINATOR_RE.match(self.source, self.position)
            if match:
                params = replace(params, block_terminator=match.group(1).strip())
                self.position = match.end()
                continue

            return params

    def codeBlock_parse(self) -> Optional[CodeBlock]:
        """
        Parse optional parameter lines, a ``` fence, a language and the code

        The code runs up to '\\n```' or, when block_terminator T is set, up
        to '\\n```T'. The latter lets the code itself contain ``` lines.
        """
        start = self.position
        params = self.codeBlockParams_parse()
        if not self.source.startswith(FENCE, self.position):
            self.position = start
            return None
        self.position += len(FENCE)

        language_line = self.until_take("\n")
        language = self.language_resolve(language_line.span)
        if not language_line.found:
            return CodeBlock(language=language, params=params, code="")

        # Search from the newline ending the language line so an empty body closes at once
        closing = "\n" + FENCE + (params.block_terminator or "")
        body_start = self.position
        match = delimiter_find(self.source, closing, body_start - 1)
        if match.found:
            code = self.source[body_start:match.end - len(closing)]
        else:
            code = self.source[body_start:]
        self.position = match.end

        self.until_take(BLANK_LINE)
        return CodeBlock(language=language, params=params, code=code)

    def language_resolve(self, token: str) -> Language:
        """Resolve a fence language token, falling back to plain text"""
        language = Language.token_lookup(token)
        if language is None:
            WARN(
                f"Unknown code block language '{token.strip()}' "
                f"at line {self.line_number}, using plain text"
            )
            return Language.PLAIN_TEXT
        return language

    def imageParams_parse(self) -> ImageParams:
        """Parse an optional { scale: N%; } block right after an image"""
        match = IMAGE_PARAMS_RE.match(self.source, self.position)
        if not match:
            return ImageParams()
        scale = self.scale_validate(float(match.group(1)))
        self.position = match.end()
        return ImageParams(scale=scale)

    def scale_validate(self, scale: float) -> float:
        """
        Apply the configured policy to an image scale percentage

        Raises:
            SyntaxError: If the scale is out of range and the policy is 'reject'
        """
        if self.settings.scale_inRange(scale):
            return scale
        if self.settings.scale_policy == "reject":
            self.error(
                f"Image scale {scale}% outside "
                f"[{self.settings.scale_min}%, {self.settings.scale_max}%]"
            )
        clamped = self.settings.scale_clamp(scale)
        WARN(f"Image scale {scale}% at line {self.line_number} clamped to {clamped}%")
        return clamped

    def image_parse(self) -> Optional[Image]:
        """
        Parse '![alt](path)', an optional parameter block, then up to the next blank line
        """
        match = IMAGE_RE.match(self.source, self.position)
        if not match:
            return None
        self.position = match.end()
        params = self.imageParams_parse()
        self.until_take(BLANK_LINE)
        return Image(path=match.group(2).strip(), alt_text=match.group(1), params=params)

    def imageNode_parse(self) -> Optional[ImageNode]:
        image = self.image_parse()
        return ImageNode(image) if image is not None else None

    def comment_parse(self) -> Optional[Comment]:
        if not self.source.startswith(COMMENT_PREFIX, self.position):
            return None
        self.position += len(COMMENT_PREFIX)
        return Comment(self.until_take(BLANK_LINE).span.strip())

    def textSection_parse(self) -> Optional[Text]:
        """Fallback: everything up to the next blank line is a paragraph"""
        if self.exhausted():
            return None
        return Text(self.until_take(BLANK_LINE).span.strip())

    # ------------------------------------------------------------------
    # Dispatch and assembly
    # ------------------------------------------------------------------

    def slideNode_parse(self) -> SlideNode:
        """
        Parse the next slide node by ordered choice over NODE_PARSERS

        Raises:
            SyntaxError: If no production matches
        """
        line = self.line_number
        for attempt in NODE_PARSERS:
            node = attempt(self)
            if node is not None:
                if self.debug:
                    LOG(f"Line {line}: {type(node).__name__}", level=3)
                return node
        self.error("Expected a slide node")

    def divider_parse(self) -> Optional[Divider]:
        """Parse '---' optionally followed at once by an image"""
        if not self.source.startswith(DIVIDER, self.position):
            return None
        self.position += len(DIVIDER)
        return Divider(background=self.image_parse())

    def slide_parse(self) -> Slide:
        """
        Parse nodes into one slide until a divider ends it or input runs out

        A divider seen while the draft is EMPTY is consumed and may set the
        slide's background. A divider seen while ACCUMULATING is left in
        place: it starts (and sets the background of) the next slide.
        """
        draft = SlideDraft()
        while True:
            self.padding_skip()
            if self.exhausted():
                break

            if self.source.startswith(DIVIDER, self.position):
                if draft.state is DraftState.ACCUMULATING:
                    break
                divider = self.divider_parse()
                if divider is not None:
                    draft = draft.background_set(divider.background)
                continue

            draft = draft.node_append(self.slideNode_parse())

        return draft.slide_build()

    def slides_parse(self) -> List[Slide]:
        """
        Parse slides until the input is exhausted

        Raises:
            SyntaxError: If a slide parse fails or makes no progress
        """
        slides: List[Slide] = []
        self.padding_skip()
        while not self.exhausted():
            start = self.position
            slide = self.slide_parse()
            if self.position == start:
                self.error("Slide parser made no progress")
            slides.append(slide)
            LOG(f"Slide {len(slides)}: {len(slide.nodes)} nodes", level=3)
        return slides

    def parse(self) -> List[Slide]:
        """
        Parse the entire source into slides

        Returns:
            List of Slides in document order

        Raises:
            SyntaxError: If the source cannot be parsed
        """
        self.position = 0
        return self.slides_parse()

    def error(self, message: str) -> NoReturn:
        """
        Report parser error with source context

        Raises SyntaxError with the message, line number, cursor position,
        the source around the cursor and a caret pointing at it.

        Example output:
            SyntaxError:
            Image scale -5.0% outside [1.0%, 1000.0%]
            Line 3, position 42
            Context: ...---![](bg.png){ scale: -5%; }...
                                     ^
        """
        context_start = max(0, self.position - 40)
        context_end = min(len(self.source), self.position + 40)
        context = self.source[context_start:context_end].replace("\n", " ")

        raise SyntaxError(
            f"\n{message}\n"
            f"Line {self.line_number}, position {self.position}\n"
            f"Context: ...{context}...\n"
            f"         {' ' * (self.position - context_start + 3)}^"
        )


# Ordered choice: first match wins. Text must stay last, it matches anything.
NODE_PARSERS: Tuple[Callable[[Parser], Optional[SlideNode]], ...] = (
    Parser.header_parse,
    Parser.unnumberedList_parse,
    Parser.numberedList_parse,
    Parser.codeBlock_parse,
    Parser.imageNode_parse,
    Parser.comment_parse,
    Parser.textSection_parse,
)


def presentation_parse(
    source: str,
    title: Optional[str] = None,
    path: Optional[Path] = None,
    settings: Optional[AppSettings] = None,
    debug: bool = False,
) -> Presentation:
    """
    Parse deck source into a Presentation

    Title and path are caller-supplied metadata; nothing is derived from
    the document content. Line endings are normalized to '\\n' first.

    Raises:
        SyntaxError: One error for any failure below; there is no partial deck
    """
    settings = settings or appsettings
    title = title or settings.default_title
    text = source.replace("\r\n", "\n").replace("\r", "\n")

    parser = Parser(text, debug=debug, settings=settings)
    try:
        slides = parser.parse()
    except SyntaxError as e:
        raise SyntaxError(f"Failed to parse presentation '{title}': {e.msg}") from e

    LOG(f"Parsed {len(slides)} slides for '{title}'", level=2)
    return Presentation(title=title, path=path, slides=tuple(slides))


def presentation_load(
    path: Union[str, Path],
    title: Optional[str] = None,
    settings: Optional[AppSettings] = None,
    debug: bool = False,
) -> Presentation:
    """
    Read a deck file (UTF-8) and parse it

    The title defaults to the file name.

    Raises:
        OSError: If the file cannot be read
        SyntaxError: If the file is not valid UTF-8 or cannot be parsed
    """
    path = Path(path)
    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SyntaxError(f"Failed to read presentation '{path.name}': not valid UTF-8 ({e.reason} at byte {e.start})") from e
    LOG(f"Read {len(source)} characters from {path.name}", level=2)
    return presentation_parse(source, title=title or path.name, path=path, settings=settings, debug=debug)
