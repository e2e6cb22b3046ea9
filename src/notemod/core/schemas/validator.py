"""
Workspace Record Validation

Structural checks for the JSON record stored inside a workspace archive.

Only structure is checked here (required keys and their JSON types). Value
invariants such as "the selected version exists" are enforced by the model
constructors during deserialization; both failure kinds surface to callers
as CorruptWorkspaceError.
"""

from __future__ import annotations

import math
from typing import Any

from ..errors import CorruptWorkspaceError

# Current record version written by save_workspace()
WORKSPACE_SCHEMA_VERSION = 1

_PAGE_REQUIRED = ("originalBase64", "width", "height")
_RECT_REQUIRED = ("id", "x", "y", "w", "h")
_VERSION_REQUIRED = ("id", "base64", "timestamp")


def validate_workspace(data: Any) -> None:
    """
    Validate a workspace record before deserialization.

    Args:
        data: Parsed JSON value

    Raises:
        CorruptWorkspaceError: If the record is not an object, has no
            `pages` list, or any page is structurally malformed
    """
    if not isinstance(data, dict):
        raise CorruptWorkspaceError("Workspace record must be a JSON object")

    pages = data.get("pages")
    if not isinstance(pages, list):
        raise CorruptWorkspaceError("Invalid workspace data format: missing pages", path="pages")

    version = data.get("schemaVersion", WORKSPACE_SCHEMA_VERSION)
    if not isinstance(version, int) or version > WORKSPACE_SCHEMA_VERSION:
        raise CorruptWorkspaceError(
            f"Unsupported workspace schema version: {version!r} "
            f"(newest supported {WORKSPACE_SCHEMA_VERSION})",
            path="schemaVersion",
        )

    active = data.get("activePageIndex", 0)
    if not isinstance(active, int) or isinstance(active, bool):
        raise CorruptWorkspaceError("activePageIndex must be an integer", path="activePageIndex")

    for i, page in enumerate(pages):
        _validate_page(page, f"pages[{i}]")


def _validate_page(page: Any, path: str) -> None:
    """Validate one page entry."""
    if not isinstance(page, dict):
        raise CorruptWorkspaceError(f"{path} must be an object", path=path)
    _require(page, _PAGE_REQUIRED, path)

    for key in ("width", "height"):
        value = page[key]
        if (
            not isinstance(value, (int, float)) or isinstance(value, bool)
            or not math.isfinite(value) or value <= 0
        ):
            raise CorruptWorkspaceError(f"{path}.{key} must be a positive finite number", path=f"{path}.{key}")

    rects = page.get("rects", [])
    if not isinstance(rects, list):
        raise CorruptWorkspaceError(f"{path}.rects must be a list", path=f"{path}.rects")
    for j, rect in enumerate(rects):
        rect_path = f"{path}.rects[{j}]"
        if not isinstance(rect, dict):
            raise CorruptWorkspaceError(f"{rect_path} must be an object", path=rect_path)
        _require(rect, _RECT_REQUIRED, rect_path)

    versions = page.get("generatedImages", [])
    if not isinstance(versions, list):
        raise CorruptWorkspaceError(
            f"{path}.generatedImages must be a list", path=f"{path}.generatedImages"
        )
    for j, version in enumerate(versions):
        version_path = f"{path}.generatedImages[{j}]"
        if not isinstance(version, dict):
            raise CorruptWorkspaceError(f"{version_path} must be an object", path=version_path)
        _require(version, _VERSION_REQUIRED, version_path)


def _require(obj: dict, keys: tuple[str, ...], path: str) -> None:
    missing = [k for k in keys if k not in obj]
    if missing:
        raise CorruptWorkspaceError(f"{path} is missing fields: {missing}", path=path)
