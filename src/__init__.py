"""
aqaprez - Plain-text slide deck parser and viewer core

Parses a small Markdown-like deck markup (headers, lists, fenced code,
images with backgrounds, comments) into an ordered deck of slides.
"""

__version__ = "1.0.0"

from .lib import (
    Parser,
    presentation_parse,
    presentation_load,
    images_resolve,
    presentation_loadResolved,
    PresentationSlot,
    FileWatch,
    deck_toDict,
    LOG,
    state_connectToLogger,
)
from .models import Presentation, Slide

__all__ = [
    "Parser",
    "presentation_parse",
    "presentation_load",
    "images_resolve",
    "presentation_loadResolved",
    "PresentationSlot",
    "FileWatch",
    "deck_toDict",
    "Presentation",
    "Slide",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
