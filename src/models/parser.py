"""
Parser-specific data models

Type-safe structures for parser operations and return values.
"""

from enum import Enum
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .deck import Image, Slide, SlideNode


@dataclass(frozen=True)
class DelimiterSplit:
    """
    Result of splitting text at the first occurrence of a delimiter

    Returned by delimiter_split(). When the delimiter is absent the whole
    input is the span and the tail is empty: end of input acts as an
    implicit closing delimiter.

    Attributes:
        span: Text before the delimiter (or all of it)
        tail: Text after the delimiter (empty if not found)
        found: Whether the delimiter actually occurred

    Example:
        delimiter_split("Hello\\n\\nWorld", "\\n\\n")
        → DelimiterSplit(span="Hello", tail="World", found=True)
    """
    span: str
    tail: str
    found: bool


@dataclass(frozen=True)
class DelimiterMatch:
    """
    Position-based form of DelimiterSplit used by the Parser cursor

    Attributes:
        span: Text from the start position up to the delimiter
        end: Cursor position just past the delimiter, or len(source)
        found: Whether the delimiter actually occurred
    """
    span: str
    end: int
    found: bool


@dataclass(frozen=True)
class Divider:
    """
    A '---' slide divider, optionally followed at once by an image

    Attributes:
        background: The image that followed the divider, if any
    """
    background: Optional[Image] = None


class DraftState(Enum):
    """States of a slide under construction"""
    EMPTY = "empty"                  # no nodes yet: a divider sets the background
    ACCUMULATING = "accumulating"    # has nodes: a divider ends the slide


@dataclass(frozen=True)
class SlideDraft:
    """
    Slide under construction, passed by value through the Slide Assembler

    Each step returns a new draft; nothing is mutated in place.

    Example:
        draft = SlideDraft()                        # EMPTY
        draft = draft.background_set(img)           # still EMPTY
        draft = draft.node_append(Text("Hello"))    # ACCUMULATING
        slide = draft.slide_build()
    """
    nodes: Tuple[SlideNode, ...] = ()
    background: Optional[Image] = None

    @property
    def state(self) -> DraftState:
        return DraftState.ACCUMULATING if self.nodes else DraftState.EMPTY

    def node_append(self, node: SlideNode) -> "SlideDraft":
        return replace(self, nodes=self.nodes + (node,))

    def background_set(self, image: Optional[Image]) -> "SlideDraft":
        """Apply a divider's background; a divider without an image leaves it as is"""
        if image is None:
            return self
        return replace(self, background=image)

    def slide_build(self) -> Slide:
        return Slide(nodes=self.nodes, background=self.background)
