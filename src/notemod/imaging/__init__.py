"""
Module: imaging

Purpose:
    Pixel-level operations on page images.

Key Functions:
    - inpaint(): Border-colour fill of a normalized rect
"""

from .inpaint import inpaint, inpaint_image, border_fill_color

__all__ = [
    "inpaint",
    "inpaint_image",
    "border_fill_color",
]
