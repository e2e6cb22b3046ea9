"""
NoteMod Core Package

Shared data models, errors and serialization used by every other module.

**DESIGN NOTES:**

1. **Immutable Data Models**
   - Frozen dataclasses holding tuples; edits return new values
   - A whole-document replace is the only way state changes

2. **Identity, Not Position**
   - Pages carry a stable id; the active page is tracked by that id
   - Numeric indices are derived views, recomputed after every change

3. **Resolution-Independent Regions**
   - Regions are stored in percent of the page size
   - Pixel boxes are computed on demand for the image at hand
"""

from .models import Document, GeneratedImage, ImageData, Page, Region, ResolutionSetting

__all__ = [
    "Document",
    "GeneratedImage",
    "ImageData",
    "Page",
    "Region",
    "ResolutionSetting",
]
