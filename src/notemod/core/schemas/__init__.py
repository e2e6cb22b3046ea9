"""
Schemas Package

Structural validation for persisted workspace records.
"""

from .validator import validate_workspace, WORKSPACE_SCHEMA_VERSION

__all__ = [
    "validate_workspace",
    "WORKSPACE_SCHEMA_VERSION",
]
