"""
aqaprez - Plain-text slide deck parser and viewer core

Parses a small Markdown-like deck markup into an ordered deck of slides.
"""

__version__ = "1.0.0"

from .parser import Parser, presentation_parse, presentation_load
from .scanner import delimiter_split
from .images import images_resolve, presentation_loadResolved
from .reload import PresentationSlot, FileWatch
from .export import deck_toDict
from .log import LOG, WARN, state_connectToLogger

__all__ = [
    "Parser",
    "presentation_parse",
    "presentation_load",
    "delimiter_split",
    "images_resolve",
    "presentation_loadResolved",
    "PresentationSlot",
    "FileWatch",
    "deck_toDict",
    "LOG",
    "WARN",
    "state_connectToLogger",
    "__version__",
]
