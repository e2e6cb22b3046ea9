"""
Module: output

Purpose:
    Read-only consumers of a document snapshot: the PDF export and the
    workspace archive codec.

Key Functions:
    - export_pdf() / write_pdf(): Final PDF via ReportLab
    - save_workspace() / load_workspace(): Lossless .nmw archive
"""

from .pdf_exporter import export_pdf, write_pdf, export_filename
from .workspace import (
    WORKSPACE_ENTRY,
    load_workspace,
    read_workspace,
    save_workspace,
    workspace_filename,
    write_workspace,
)

__all__ = [
    "export_pdf",
    "write_pdf",
    "export_filename",
    "WORKSPACE_ENTRY",
    "load_workspace",
    "read_workspace",
    "save_workspace",
    "workspace_filename",
    "write_workspace",
]
