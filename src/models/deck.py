"""
Deck data model

Value types produced by the parser: a Presentation owns an ordered tuple of
Slides, each Slide owns an ordered tuple of slide nodes and an optional
background Image.

All node types are frozen dataclasses. The one mutable field in the model is
Image.handle, which the image enrichment pass fills in after parsing and
which is excluded from equality.
"""

from enum import Enum, IntEnum
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Tuple, Union


class HeaderSize(IntEnum):
    """
    Header level, derived from the number of leading '#' characters

    Maps to a display font size: 90, 80, 70, 60, 50 for levels 1..5.
    """
    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5

    @classmethod
    def count_map(cls, count: int) -> "HeaderSize":
        """
        Map a count of '#' characters to a HeaderSize

        Raises:
            ValueError: If count is outside 1..5
        """
        if not 1 <= count <= 5:
            raise ValueError(f"Header level must be between 1 and 5, got {count}")
        return cls(count)

    @property
    def font_size(self) -> int:
        return round(100 * (1 - self.value * 10 / 100))


class FontStyle(Enum):
    """Code block font styles, spelled exactly as in the markup"""
    REGULAR = "Regular"
    BOLD = "Bold"
    SEMI_BOLD = "SemiBold"
    LIGHT = "Light"
    SEMI_LIGHT = "SemiLight"
    EXTRA_LIGHT = "ExtraLight"


class Language(Enum):
    """
    Supported code block languages

    Values are Pygments lexer aliases so that the display layer can look up
    a highlighter directly. PLAIN_TEXT is the fallback for anything else.
    """
    PLAIN_TEXT = "text"
    AQAPREZ = "aqaprez"
    RUST = "rust"
    PYTHON = "python"
    C = "c"
    CPP = "cpp"
    CSHARP = "csharp"
    JAVA = "java"
    GO = "go"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    BASH = "bash"
    JSON = "json"
    TOML = "toml"
    YAML = "yaml"
    HTML = "html"
    SQL = "sql"

    @classmethod
    def token_lookup(cls, token: str) -> Optional["Language"]:
        """
        Look up a code fence language token

        Matching is case-insensitive and accepts the aliases in
        LANGUAGE_ALIASES. An empty token means plain text.

        Returns:
            Matching Language, or None if the token is not recognized
        """
        key = token.strip().lower()
        if not key:
            return cls.PLAIN_TEXT
        try:
            return cls(key)
        except ValueError:
            return LANGUAGE_ALIASES.get(key)

    def lexer_get(self) -> Any:
        """
        Get a Pygments lexer for this language

        Never raises: languages Pygments does not know get a TextLexer.
        """
        from pygments.lexers import get_lexer_by_name, TextLexer
        from pygments.util import ClassNotFound

        if self is Language.AQAPREZ:
            from ..lib.lexer import AqaprezLexer
            return AqaprezLexer()
        try:
            return get_lexer_by_name(self.value)
        except ClassNotFound:
            return TextLexer()


LANGUAGE_ALIASES: Dict[str, Language] = {
    "plaintext": Language.PLAIN_TEXT,
    "txt": Language.PLAIN_TEXT,
    "prez": Language.AQAPREZ,
    "rs": Language.RUST,
    "py": Language.PYTHON,
    "python3": Language.PYTHON,
    "c++": Language.CPP,
    "cxx": Language.CPP,
    "cs": Language.CSHARP,
    "c#": Language.CSHARP,
    "golang": Language.GO,
    "js": Language.JAVASCRIPT,
    "ts": Language.TYPESCRIPT,
    "sh": Language.BASH,
    "shell": Language.BASH,
    "yml": Language.YAML,
}


@dataclass(frozen=True)
class ImageParams:
    """Optional image parameters from a { scale: N%; } block"""
    scale: Optional[float] = None


@dataclass(frozen=True)
class CodeBlockParams:
    """
    Parameters declared by '| key: value' lines above a code fence

    Attributes:
        font_size: Font size override for the code text
        font_style: Font style override
        block_terminator: Custom tag T; the block then closes at a
                          newline followed by ```T instead of plain ```
    """
    font_size: Optional[int] = None
    font_style: Optional[FontStyle] = None
    block_terminator: Optional[str] = None


@dataclass(unsafe_hash=True)
class Image:
    """
    An image reference, used both as a slide node and as a slide background

    Attributes:
        path: Source path, relative to the document
        alt_text: Alternative text (may be empty)
        params: Parsed image parameters
        handle: Renderable handle attached by the enrichment pass; never
                set by the parser and excluded from equality and hashing
    """
    path: str
    alt_text: str = ""
    params: ImageParams = field(default_factory=ImageParams)
    handle: Any = field(default=None, compare=False, hash=False, repr=False)


@dataclass(frozen=True)
class Header:
    kind: ClassVar[str] = "header"
    displayed: ClassVar[bool] = True

    level: HeaderSize
    text: str


@dataclass(frozen=True)
class Text:
    kind: ClassVar[str] = "text"
    displayed: ClassVar[bool] = True

    text: str


@dataclass(frozen=True)
class UnnumberedList:
    kind: ClassVar[str] = "unnumbered_list"
    displayed: ClassVar[bool] = True

    items: Tuple[str, ...]


@dataclass(frozen=True)
class NumberedList:
    """Numbered list; display numbering is by index, source markers are dropped"""
    kind: ClassVar[str] = "numbered_list"
    displayed: ClassVar[bool] = True

    items: Tuple[str, ...]


@dataclass(frozen=True)
class CodeBlock:
    kind: ClassVar[str] = "code_block"
    displayed: ClassVar[bool] = True

    language: Language
    params: CodeBlockParams
    code: str


@dataclass(frozen=True)
class ImageNode:
    kind: ClassVar[str] = "image"
    displayed: ClassVar[bool] = True

    image: Image


@dataclass(frozen=True)
class Comment:
    """Comment node: kept in the deck, skipped by any display pass"""
    kind: ClassVar[str] = "comment"
    displayed: ClassVar[bool] = False

    text: str


SlideNode = Union[Header, Text, UnnumberedList, NumberedList, CodeBlock, ImageNode, Comment]


@dataclass(frozen=True)
class Slide:
    """
    One slide: nodes in display order plus an optional background image
    """
    nodes: Tuple[SlideNode, ...] = ()
    background: Optional[Image] = None

    def nodes_displayed(self) -> Tuple[SlideNode, ...]:
        """Nodes a display pass should render (everything but comments)"""
        return tuple(node for node in self.nodes if node.displayed)


@dataclass(frozen=True)
class Presentation:
    """
    A parsed deck with its caller-supplied metadata

    Attributes:
        title: Presentation title (not derived from document content)
        path: Source location of the document, if any
        slides: Slides in display order
    """
    title: str
    path: Optional[Path]
    slides: Tuple[Slide, ...]


@dataclass(frozen=True)
class PresentationState:
    """
    Position within a presentation

    Index arithmetic only; keyboard handling belongs to the display layer.
    """
    slide_idx: int = 0

    def slide_next(self, slide_count: int) -> "PresentationState":
        """Advance one slide, stopping at the last one"""
        if slide_count <= 0:
            return replace(self, slide_idx=0)
        return replace(self, slide_idx=min(self.slide_idx + 1, slide_count - 1))

    def slide_previous(self) -> "PresentationState":
        """Go back one slide, stopping at the first one"""
        return replace(self, slide_idx=max(self.slide_idx - 1, 0))

    def slide_clamp(self, slide_count: int) -> "PresentationState":
        """Keep the index valid after a reload changed the slide count"""
        if slide_count <= 0:
            return replace(self, slide_idx=0)
        return replace(self, slide_idx=min(max(self.slide_idx, 0), slide_count - 1))
