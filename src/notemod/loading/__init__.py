"""
Module: loading

Purpose:
    Input adapters that produce new Documents from external files.
"""

from .rasterizer import RasterPage, document_from_pdf, rasterize_pdf

__all__ = ["RasterPage", "document_from_pdf", "rasterize_pdf"]
