"""
Module: output.workspace

Purpose:
    Save and load the whole document as a NoteMod workspace (.nmw): a zip
    archive with a single JSON entry, `workspace.json`, describing every
    page, region, version and setting. Images travel inside the JSON as
    base64 data URLs, so one entry is the complete state.

Key Functions:
    - save_workspace(): Document -> archive bytes
    - load_workspace(): Archive bytes -> Document
    - write_workspace() / read_workspace(): File variants
    - workspace_filename(): "<name>.nmw"

Dependencies:
    - zipfile (std)
    - json (std)
    - core.utils.serialization

Used By:
    - cli
"""

from __future__ import annotations

import io
import json
import logging
import zipfile
from pathlib import Path
from typing import Optional, Union

from notemod.core.errors import CorruptWorkspaceError
from notemod.core.models import Document
from notemod.core.utils.serialization import deserialize_document, serialize_document

logger = logging.getLogger(__name__)

WORKSPACE_ENTRY = "workspace.json"
WORKSPACE_SUFFIX = ".nmw"


def save_workspace(document: Document) -> bytes:
    """
    Serialize the document into workspace archive bytes.

    Args:
        document: Snapshot to save (not modified)

    Returns:
        Zip archive bytes containing WORKSPACE_ENTRY
    """
    record = serialize_document(document)
    payload = json.dumps(record, ensure_ascii=False, separators=(",", ":"))

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(WORKSPACE_ENTRY, payload)

    data = buf.getvalue()
    logger.info(f"Saved workspace {document.name!r}: {document.page_count} pages, {len(data)} bytes")
    return data


def load_workspace(data: Union[bytes, bytearray]) -> Document:
    """
    Parse workspace archive bytes into a new Document.

    Nothing outside the returned value is touched, so a failed load leaves
    the caller's current document as it was.

    Raises:
        CorruptWorkspaceError: If the archive is unreadable, lacks
            WORKSPACE_ENTRY, holds invalid JSON, has no `pages` list, or
            describes an invalid document
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            try:
                raw = zf.read(WORKSPACE_ENTRY)
            except KeyError:
                raise CorruptWorkspaceError(
                    f"Invalid NoteMod Workspace file: Missing {WORKSPACE_ENTRY}",
                    path=WORKSPACE_ENTRY,
                ) from None
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError) as e:
        raise CorruptWorkspaceError(f"Workspace archive is not readable: {e}") from e

    try:
        record = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptWorkspaceError(f"Workspace record is not valid JSON: {e}") from e

    document = deserialize_document(record)
    logger.info(f"Loaded workspace {document.name!r}: {document.page_count} pages")
    return document


def write_workspace(document: Document, output_path: Optional[Path] = None) -> Path:
    """
    Save to a file (default: workspace_filename(document.name)).

    The archive is written to a temporary sibling and renamed into place, so
    an existing workspace is never left half-written.
    """
    if output_path is None:
        output_path = Path(workspace_filename(document.name))
    data = save_workspace(document)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = output_path.with_name(output_path.name + ".tmp")
    tmp_path.write_bytes(data)
    tmp_path.replace(output_path)
    return output_path


def read_workspace(path: Path) -> Document:
    """
    Load a workspace file.

    Raises:
        FileNotFoundError: If path does not exist
        CorruptWorkspaceError: See load_workspace()
    """
    if not path.exists():
        raise FileNotFoundError(f"Workspace file not found: {path}")
    try:
        return load_workspace(path.read_bytes())
    except CorruptWorkspaceError as e:
        raise CorruptWorkspaceError(
            f"Failed to load workspace file {path.name}. "
            f"Please ensure it is a valid {WORKSPACE_SUFFIX} file. ({e})",
            path=str(path),
        ) from e


def workspace_filename(name: str) -> str:
    """Default workspace name: "report.pdf" -> "report.nmw", "" -> "project.nmw"."""
    base = name[:-4] if name.lower().endswith(".pdf") else name
    return f"{base or 'project'}{WORKSPACE_SUFFIX}"
