"""
Image enrichment pass

Walks an already-parsed Presentation and attaches a renderable handle to
every Image (slide nodes and slide backgrounds). The parser never looks at
image files; a missing file is not a parse error, the image simply keeps
handle=None and the display layer falls back to its alt text.

The handle itself is whatever the supplied loader returns. The default
loader resolves the path against the document directory and returns the
Path when the file exists.
"""

from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from ..config import AppSettings
from ..models.deck import Image, ImageNode, Presentation
from .log import LOG, WARN
from .parser import presentation_load

ImageLoader = Callable[[Path], Any]


def path_loader(path: Path) -> Optional[Path]:
    """Default loader: the resolved path if the file exists, else None"""
    return path if path.is_file() else None


def image_iterate(presentation: Presentation) -> Iterator[Image]:
    """
    Yield every Image in the presentation in display order

    For each slide the background (if any) comes first, then image nodes.
    """
    for slide in presentation.slides:
        if slide.background is not None:
            yield slide.background
        for node in slide.nodes:
            if isinstance(node, ImageNode):
                yield node.image


def images_resolve(
    presentation: Presentation,
    base_dir: Optional[Path] = None,
    loader: Optional[ImageLoader] = None,
) -> int:
    """
    Attach handles to all images of a presentation

    Only the handle field of each Image is written; nothing else in the
    deck is touched.

    Args:
        presentation: Parsed presentation
        base_dir: Directory image paths are relative to. Defaults to the
                  directory of presentation.path, or the working directory.
        loader: Callable mapping a resolved Path to a handle (or None)

    Returns:
        Number of images that received a handle
    """
    if base_dir is None:
        base_dir = presentation.path.parent if presentation.path else Path(".")
    loader = loader or path_loader

    resolved = 0
    for image in image_iterate(presentation):
        image_path = Path(image.path)
        if not image_path.is_absolute():
            image_path = base_dir / image_path

        image.handle = loader(image_path)
        if image.handle is None:
            WARN(f"Image not found: {image.path} (expected at {image_path})")
            continue
        resolved += 1
        LOG(f"Resolved image {image.path}", level=3)

    LOG(f"Resolved {resolved} images", level=2)
    return resolved


def presentation_loadResolved(
    path: Union[str, Path],
    title: Optional[str] = None,
    settings: Optional[AppSettings] = None,
    loader: Optional[ImageLoader] = None,
) -> Presentation:
    """
    Read and parse a deck file, then attach image handles

    The returned Presentation is fully enriched before any caller sees it,
    which makes this a drop-in loader for PresentationSlot.

    Raises:
        OSError: If the file cannot be read
        SyntaxError: If the file is not valid UTF-8 or cannot be parsed
    """
    presentation = presentation_load(path, title=title, settings=settings)
    images_resolve(presentation, Path(path).parent, loader=loader)
    return presentation
