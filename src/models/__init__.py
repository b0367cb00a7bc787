"""
Models package for aqaprez

Contains the deck data model and the structures used by the parser and the
CLI pipeline.
"""

from .state import ProgramState, pipeline
from .deck import (
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
    PresentationState,
    Slide,
    SlideNode,
    Text,
    UnnumberedList,
)
from .parser import DelimiterMatch, DelimiterSplit, Divider, DraftState, SlideDraft

__all__ = [
    "ProgramState",
    "pipeline",
    "CodeBlock",
    "CodeBlockParams",
    "Comment",
    "FontStyle",
    "Header",
    "HeaderSize",
    "Image",
    "ImageNode",
    "ImageParams",
    "Language",
    "NumberedList",
    "Presentation",
    "PresentationState",
    "Slide",
    "SlideNode",
    "Text",
    "UnnumberedList",
    "DelimiterMatch",
    "DelimiterSplit",
    "Divider",
    "DraftState",
    "SlideDraft",
]
