"""
Utils Package

Serialization helpers for the core models.
"""

from .serialization import serialize_document, deserialize_document

__all__ = [
    "serialize_document",
    "deserialize_document",
]
