"""
Deck export

Turns a Presentation into plain JSON-ready dicts for tooling and for the
CLI's deck.json output. Serialization of each dataclass is delegated to a
pydantic TypeAdapter; every node dict is tagged with its 'kind'. Image
handles are runtime data and are never exported.
"""

from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import TypeAdapter

from ..models.deck import Image, ImageNode, ImageParams, Presentation, Slide, SlideNode


@lru_cache(maxsize=None)
def adapter_get(cls: type) -> TypeAdapter:
    return TypeAdapter(cls)


def image_toDict(image: Optional[Image]) -> Optional[Dict[str, Any]]:
    if image is None:
        return None
    return {
        "path": image.path,
        "alt_text": image.alt_text,
        "params": adapter_get(ImageParams).dump_python(image.params, mode="json"),
    }


def node_toDict(node: SlideNode) -> Dict[str, Any]:
    """
    Convert one slide node to a dict

    Example:
        node_toDict(Header(HeaderSize.TWO, "Intro"))
        → {"kind": "header", "level": 2, "text": "Intro"}
    """
    if isinstance(node, ImageNode):
        return {"kind": node.kind, "image": image_toDict(node.image)}
    data = adapter_get(type(node)).dump_python(node, mode="json")
    return {"kind": node.kind, **data}


def slide_toDict(slide: Slide) -> Dict[str, Any]:
    return {
        "background": image_toDict(slide.background),
        "nodes": [node_toDict(node) for node in slide.nodes],
    }


def deck_toDict(presentation: Presentation) -> Dict[str, Any]:
    """Convert a whole presentation to a JSON-ready dict"""
    return {
        "title": presentation.title,
        "path": str(presentation.path) if presentation.path else None,
        "slides": [slide_toDict(slide) for slide in presentation.slides],
    }
