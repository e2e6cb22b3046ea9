"""
Document Serialization

to/from JSON-ready dictionaries for the document models.

The record layout uses the camelCase keys of the NoteMod workspace format
(`pdfName`, `originalBase64`, `rects`, `generatedImages`, ...) so that
workspaces written by earlier versions of the editor still load. Images are
embedded as base64 data URLs and timestamps as epoch milliseconds.
"""

from __future__ import annotations

from typing import Any

from ..errors import CorruptWorkspaceError
from ..models.document import Document, ResolutionSetting
from ..models.images import ImageData, optional_image_from_data_url
from ..models.pages import Page
from ..models.regions import Region, new_id
from ..models.versions import GeneratedImage, from_epoch_ms, to_epoch_ms
from ..schemas.validator import WORKSPACE_SCHEMA_VERSION, validate_workspace


# ─────────────────────────────────────────────────────────────────────────────
# Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_document(document: Document) -> dict[str, Any]:
    """
    Serialize a Document to a dictionary.

    The output round-trips through `deserialize_document()` to an equal
    Document.
    """
    return {
        "schemaVersion": WORKSPACE_SCHEMA_VERSION,
        "pdfName": document.name,
        "activePageIndex": document.active_page_index,
        "imageResolution": document.resolution.value,
        "enhanceText": document.enhance_text,
        "pages": [_serialize_page(page, i) for i, page in enumerate(document.pages)],
    }


def _serialize_page(page: Page, index: int) -> dict[str, Any]:
    return {
        "id": page.id,
        "pageIndex": index,
        "originalBase64": page.original_image.data_url,
        "width": page.width,
        "height": page.height,
        "rects": [_serialize_region(r) for r in page.regions],
        "generatedImages": [_serialize_version(v) for v in page.versions],
        "selectedImageId": page.selected_version_id,
        "isGenerating": page.is_generating,
    }


def _serialize_region(region: Region) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": region.id,
        "x": region.x,
        "y": region.y,
        "w": region.w,
        "h": region.h,
        "prompt": region.prompt,
    }
    if region.reference_image is not None:
        data["referenceImage"] = region.reference_image.data_url
    return data


def _serialize_version(version: GeneratedImage) -> dict[str, Any]:
    return {
        "id": version.id,
        "base64": version.image.data_url,
        "timestamp": to_epoch_ms(version.created_at),
        "promptUsed": version.prompt_used,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Deserialization
# ─────────────────────────────────────────────────────────────────────────────

def deserialize_document(data: Any, *, validate: bool = True) -> Document:
    """
    Deserialize a Document from a dictionary.

    Args:
        data: Parsed JSON record
        validate: Run structural validation first

    Returns:
        New Document

    Raises:
        CorruptWorkspaceError: If the record is structurally invalid or any
            value breaks a model invariant (bad image payload, dangling
            selection, duplicate ids, ...)
    """
    if validate:
        validate_workspace(data)

    try:
        pages = tuple(_deserialize_page(p) for p in data["pages"])
        resolution = ResolutionSetting(data.get("imageResolution", ResolutionSetting.STANDARD.value))
        active_index = int(data.get("activePageIndex", 0))
        return Document.from_pages(
            data.get("pdfName", "") or "",
            pages,
            active_index=active_index,
            resolution=resolution,
            enhance_text=bool(data.get("enhanceText", False)),
        )
    except CorruptWorkspaceError:
        raise
    except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
        raise CorruptWorkspaceError(f"Invalid workspace data: {e}") from e


def _deserialize_page(data: dict[str, Any]) -> Page:
    regions = tuple(_deserialize_region(r) for r in data.get("rects", []))
    versions = tuple(_deserialize_version(v) for v in data.get("generatedImages", []))
    return Page(
        # Workspaces from older editors carry no page id
        id=data.get("id") or new_id(),
        original_image=ImageData.from_data_url(data["originalBase64"]),
        width=int(round(data["width"])),
        height=int(round(data["height"])),
        regions=regions,
        versions=versions,
        selected_version_id=data.get("selectedImageId"),
        # No request survives a reload, so a stored in-flight flag is dropped
        is_generating=False,
    )


def _deserialize_region(data: dict[str, Any]) -> Region:
    return Region(
        id=data["id"],
        x=float(data["x"]),
        y=float(data["y"]),
        w=float(data["w"]),
        h=float(data["h"]),
        prompt=data.get("prompt", "") or "",
        reference_image=optional_image_from_data_url(data.get("referenceImage")),
    )


def _deserialize_version(data: dict[str, Any]) -> GeneratedImage:
    return GeneratedImage(
        id=data["id"],
        image=ImageData.from_data_url(data["base64"]),
        created_at=from_epoch_ms(data["timestamp"]),
        prompt_used=data.get("promptUsed", "") or "",
    )
