"""
Module: core.errors

Purpose:
    Exception taxonomy shared by every NoteMod module. Callers catch the
    specific subclasses; `NoteModError` exists so a UI or CLI can catch
    anything raised by the package in one place.

Key Classes:
    - LoadFailure: Input could not be rasterized or read
    - CorruptWorkspaceError: Workspace archive is missing data or malformed
    - GenerationFailure: Image generation failed (generic or permission)
    - ExportOnEmptyDocumentError: Export requested for a document with no pages
    - BatchRemovalError: All-or-nothing watermark removal saw a page failure
    - NothingToGenerateError: Page has no region with an instruction
    - AuthenticationError: Credentials rejected or auth not configured

Dependencies:
    - enum (std)

Used By:
    - loading.rasterizer, output.workspace, output.pdf_exporter
    - editing.removal, generation.service, session
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class NoteModError(Exception):
    """Base class for all NoteMod errors."""


class LoadFailure(NoteModError):
    """Raised when a source document or workspace cannot be loaded."""


class CorruptWorkspaceError(LoadFailure):
    """Raised when a workspace archive is missing its record or is malformed."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class FailureKind(str, Enum):
    """Why an image generation request failed."""

    GENERIC = "generic"
    PERMISSION = "permission"


class GenerationFailure(NoteModError):
    """
    Raised when the image generation service does not return an image.

    Attributes:
        kind: GENERIC for ordinary failures, PERMISSION for
            permission/billing rejections.
        page_id: Page the request was made for, when known.
    """

    def __init__(
        self,
        message: str,
        kind: FailureKind = FailureKind.GENERIC,
        page_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.page_id = page_id

    @property
    def requires_reauth(self) -> bool:
        """True when the user must re-select credentials for the service."""
        return self.kind is FailureKind.PERMISSION


class ExportOnEmptyDocumentError(NoteModError):
    """Raised when exporting a document that has no pages."""


class BatchRemovalError(NoteModError):
    """Raised when all-or-nothing watermark removal fails on any page."""

    def __init__(self, message: str, failures: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.failures = failures or {}


class NothingToGenerateError(NoteModError):
    """Raised when a page has no region carrying an edit instruction."""


class AuthenticationError(NoteModError):
    """Raised when credentials are rejected or authentication is misconfigured."""
