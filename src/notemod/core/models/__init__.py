"""
Core Models Package

Immutable data models for the document editing state.

All models in this package are frozen dataclasses holding tuples, so every
edit produces a new value. A document snapshot can be handed to an exporter,
a serializer or a background task without copying and without locking.
"""

from .images import ImageData, blank_page
from .regions import Region, PixelBox, MIN_REGION_SIZE
from .versions import GeneratedImage
from .pages import Page
from .document import Document, ResolutionSetting

__all__ = [
    "ImageData",
    "blank_page",
    "Region",
    "PixelBox",
    "MIN_REGION_SIZE",
    "GeneratedImage",
    "Page",
    "Document",
    "ResolutionSetting",
]
