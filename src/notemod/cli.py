"""
Module: cli

Purpose:
    Command-line entry point. Every command works on a workspace file
    (.nmw): it is opened into a DocumentStore, edited through the store, and
    written back. Page numbers on the command line are 1-based.

Key Functions:
    - main(): Parse arguments and dispatch
    - build_parser(): The argparse parser

Dependencies:
    - argparse (std)
    - asyncio (std): Drives the async generation service

Used By:
    - `notemod` console script
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from notemod import __version__
from notemod.config import EditorConfig
from notemod.core.errors import AuthenticationError, GenerationFailure, NoteModError
from notemod.core.models import ImageData, Region, ResolutionSetting
from notemod.editing.title_page import create_title_page
from notemod.generation import GeminiImageClient, GenerationService, TitlePageData
from notemod.loading import document_from_pdf
from notemod.output import write_pdf, write_workspace
from notemod.output.workspace import workspace_filename
from notemod.session import AuthSession
from notemod.store import DocumentStore
from notemod.utils import configure_logging, quiet_third_party

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_AUTH = 2

# Commands that work without a logged-in session
_UNGATED = {"login", "logout"}


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _open(path: Path) -> DocumentStore:
    store = DocumentStore()
    store.open_workspace(path)
    return store


def _save(store: DocumentStore, path: Path) -> None:
    write_workspace(store.snapshot(), path)
    print(f"Saved {path}")


def _page_index(store: DocumentStore, number: Optional[int]) -> int:
    """1-based page number (None = active page) -> 0-based index."""
    document = store.snapshot()
    if number is None:
        return document.active_page_index
    if not 1 <= number <= document.page_count:
        raise NoteModError(f"Page {number} does not exist (document has {document.page_count} pages)")
    return number - 1


def _activate(store: DocumentStore, number: Optional[int]) -> None:
    if store.snapshot().is_empty:
        raise NoteModError("Document has no pages")
    store.set_active_page(_page_index(store, number))


def _page_id(store: DocumentStore, number: Optional[int]) -> str:
    """Resolve a page without changing which page is active."""
    document = store.snapshot()
    if document.is_empty:
        raise NoteModError("Document has no pages")
    return document.page_at(_page_index(store, number)).id


def _rect(values: Sequence[float]) -> Region:
    x, y, w, h = values
    region = Region.create(x, y, w, h)
    if region.is_degenerate():
        raise NoteModError("Region is too small")
    return region


def _service(store: DocumentStore, config: EditorConfig) -> GenerationService:
    if not config.has_api_key:
        raise NoteModError("Set GEMINI_API_KEY to use image generation")
    return GenerationService(store, GeminiImageClient.from_config(config))


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────

def cmd_import_pdf(args: argparse.Namespace, config: EditorConfig) -> int:
    scale = args.scale or config.render_scale
    document = document_from_pdf(args.pdf, scale=scale, quality=config.jpeg_quality)
    output = args.output or args.pdf.with_name(workspace_filename(args.pdf.name))
    write_workspace(document, output)
    print(f"Imported {document.page_count} pages into {output}")
    return EXIT_OK


def cmd_info(args: argparse.Namespace, config: EditorConfig) -> int:
    document = _open(args.workspace).snapshot()
    print(f"Name:        {document.name or '(untitled)'}")
    print(f"Pages:       {document.page_count}")
    print(f"Active page: {document.active_page_index + 1 if document.pages else '-'}")
    print(f"Resolution:  {document.resolution.value}")
    print(f"Enhance:     {'on' if document.enhance_text else 'off'}")
    for number, page in enumerate(document.pages, start=1):
        marker = "*" if page.id == document.active_page_id else " "
        selected = page.selected_version.id[:8] if page.selected_version else "original"
        print(
            f"{marker}{number:>3}  {page.width}x{page.height}  "
            f"regions={len(page.regions)}  versions={len(page.versions)}  showing={selected}"
        )
    return EXIT_OK


def cmd_settings(args: argparse.Namespace, config: EditorConfig) -> int:
    store = _open(args.workspace)
    changes = {}
    if args.name is not None:
        changes["name"] = args.name
    if args.resolution is not None:
        changes["resolution"] = ResolutionSetting(args.resolution)
    if args.enhance_text is not None:
        changes["enhance_text"] = args.enhance_text
    if changes:
        store.set_settings(**changes)
        _save(store, args.workspace)
    return EXIT_OK


def cmd_page(args: argparse.Namespace, config: EditorConfig) -> int:
    store = _open(args.workspace)
    action = args.action
    if action == "insert-blank":
        index = store.snapshot().page_count if args.at is None else args.at - 1
        store.insert_blank_page(
            index, default_size=config.default_page_size, quality=config.jpeg_quality
        )
    elif action == "copy":
        store.copy_page(_page_index(store, args.page))
    elif action == "delete":
        store.delete_page(_page_index(store, args.page))
    elif action == "move":
        if args.to is None:
            raise NoteModError("page move requires --to")
        store.reorder_pages(_page_index(store, args.page), _page_index(store, args.to))
    elif action == "activate":
        _activate(store, args.page)
    _save(store, args.workspace)
    return EXIT_OK


def cmd_add_region(args: argparse.Namespace, config: EditorConfig) -> int:
    store = _open(args.workspace)
    _activate(store, args.page)
    reference = None
    if args.reference is not None:
        reference = ImageData(args.reference.read_bytes(), _guess_mime(args.reference))
    region = Region.create(*args.rect, prompt=args.prompt, reference_image=reference)
    if region.is_degenerate():
        raise NoteModError("Region is too small")
    store.draw_region(region)
    _save(store, args.workspace)
    return EXIT_OK


def cmd_remove_region(args: argparse.Namespace, config: EditorConfig) -> int:
    store = _open(args.workspace)
    page_id = _page_id(store, args.page)
    if store.snapshot().find_page(page_id).find_region(args.region_id) is None:
        raise NoteModError(f"Region {args.region_id} not found")
    store.remove_region(args.region_id, page_id)
    _save(store, args.workspace)
    return EXIT_OK


def cmd_version(args: argparse.Namespace, config: EditorConfig) -> int:
    store = _open(args.workspace)
    page_id = _page_id(store, args.page)
    if args.action == "select":
        version_id = None if args.version_id == "original" else args.version_id
        try:
            store.select_version(version_id, page_id)
        except ValueError as e:
            raise NoteModError(str(e)) from e
    else:
        store.delete_version(args.version_id, page_id)
    _save(store, args.workspace)
    return EXIT_OK


def cmd_remove_watermark(args: argparse.Namespace, config: EditorConfig) -> int:
    store = _open(args.workspace)
    outcome = store.remove_watermark(
        _rect(args.rect),
        all_or_nothing=args.strict,
        max_workers=config.removal_workers,
        quality=config.jpeg_quality,
    )
    for page_id, reason in outcome.failures.items():
        logger.warning(f"Page {page_id}: {reason}")
    _save(store, args.workspace)
    print(f"Removed watermark on {len(outcome.versions)} pages")
    return EXIT_OK if outcome.ok else EXIT_ERROR


def cmd_generate(args: argparse.Namespace, config: EditorConfig) -> int:
    store = _open(args.workspace)
    service = _service(store, config)
    document = store.snapshot()
    if document.is_empty:
        raise NoteModError("Document has no pages")
    if args.all:
        page_ids = [p.id for p in document.pages if p.has_instructions()]
    else:
        page_ids = [document.page_at(_page_index(store, args.page)).id]

    async def run():
        async with service.client:
            return await service.generate_pages(page_ids)

    results = asyncio.run(run())
    failed = 0
    for page_id, result in results.items():
        number = store.snapshot().page_index(page_id) + 1
        if isinstance(result, BaseException):
            failed += 1
            print(f"Page {number}: {result}", file=sys.stderr)
            if isinstance(result, GenerationFailure) and result.requires_reauth:
                print("Check the API key permissions and try again.", file=sys.stderr)
        else:
            print(f"Page {number}: new version {result.id if result else '-'}")
    _save(store, args.workspace)
    return EXIT_ERROR if failed else EXIT_OK


def cmd_title_page(args: argparse.Namespace, config: EditorConfig) -> int:
    store = _open(args.workspace)
    service = _service(store, config)
    data = TitlePageData(
        title=args.title,
        subtitle=args.subtitle,
        recipient=args.recipient,
        date=args.date,
        affiliation=args.affiliation,
        name=args.author,
        reference_page_number=args.reference_page,
        additional_instructions=args.instructions,
    )

    async def run():
        async with service.client:
            return await create_title_page(
                service, data, default_size=config.default_page_size
            )

    asyncio.run(run())
    _save(store, args.workspace)
    return EXIT_OK


def cmd_export(args: argparse.Namespace, config: EditorConfig) -> int:
    document = _open(args.workspace).snapshot()
    path = write_pdf(document, args.output)
    print(f"Exported {document.page_count} pages to {path}")
    return EXIT_OK


def cmd_login(args: argparse.Namespace, config: EditorConfig) -> int:
    session = AuthSession(config)
    if session.init():
        print("Already logged in")
        return EXIT_OK
    username = args.username or input("Username: ")
    password = getpass.getpass("Password: ")
    session.login(username, password)
    print("Logged in")
    return EXIT_OK


def cmd_logout(args: argparse.Namespace, config: EditorConfig) -> int:
    AuthSession(config).teardown()
    print("Logged out")
    return EXIT_OK


def _guess_mime(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".png":
        return "image/png"
    if suffix == ".webp":
        return "image/webp"
    return "image/jpeg"


# ─────────────────────────────────────────────────────────────────────────────
# Parser
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notemod",
        description="Annotate PDF pages, apply AI edits and export the result.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import-pdf", help="Rasterize a PDF into a new workspace")
    p.add_argument("pdf", type=Path)
    p.add_argument("-o", "--output", type=Path, help="Workspace path (default: <pdf>.nmw)")
    p.add_argument("--scale", type=float, help="Render zoom relative to 72 dpi")
    p.set_defaults(func=cmd_import_pdf)

    p = sub.add_parser("info", help="Summarize a workspace")
    p.add_argument("workspace", type=Path)
    p.set_defaults(func=cmd_info)

    p = sub.add_parser("settings", help="Change document settings")
    p.add_argument("workspace", type=Path)
    p.add_argument("--name")
    p.add_argument("--resolution", choices=[r.value for r in ResolutionSetting])
    p.add_argument("--enhance-text", dest="enhance_text", action="store_true", default=None)
    p.add_argument("--no-enhance-text", dest="enhance_text", action="store_false")
    p.set_defaults(func=cmd_settings)

    p = sub.add_parser("page", help="Insert, copy, delete, move or activate pages")
    p.add_argument("workspace", type=Path)
    p.add_argument("action", choices=["insert-blank", "copy", "delete", "move", "activate"])
    p.add_argument("--page", type=int, help="Page number (default: active page)")
    p.add_argument("--at", type=int, help="Insert position for insert-blank (default: end)")
    p.add_argument("--to", type=int, help="Target position for move")
    p.set_defaults(func=cmd_page)

    p = sub.add_parser("add-region", help="Add an instruction region to a page")
    p.add_argument("workspace", type=Path)
    p.add_argument("--page", type=int, help="Page number; it becomes the active page")
    p.add_argument("--rect", type=float, nargs=4, required=True, metavar=("X", "Y", "W", "H"),
                   help="Percent of page width/height")
    p.add_argument("--prompt", default="")
    p.add_argument("--reference", type=Path, help="Reference image file")
    p.set_defaults(func=cmd_add_region)

    p = sub.add_parser("remove-region", help="Remove a region from a page")
    p.add_argument("workspace", type=Path)
    p.add_argument("region_id")
    p.add_argument("--page", type=int, help="Page number (default: active page, which stays active)")
    p.set_defaults(func=cmd_remove_region)

    p = sub.add_parser("version", help="Select or delete a page version")
    p.add_argument("workspace", type=Path)
    p.add_argument("action", choices=["select", "delete"])
    p.add_argument("version_id", help="Version id, or 'original' with select")
    p.add_argument("--page", type=int, help="Page number (default: active page, which stays active)")
    p.set_defaults(func=cmd_version)

    p = sub.add_parser("remove-watermark", help="Fill a rect on every page from its border")
    p.add_argument("workspace", type=Path)
    p.add_argument("--rect", type=float, nargs=4, required=True, metavar=("X", "Y", "W", "H"))
    p.add_argument("--strict", action="store_true", help="Apply nothing if any page fails")
    p.set_defaults(func=cmd_remove_watermark)

    p = sub.add_parser("generate", help="Generate new versions from page regions")
    p.add_argument("workspace", type=Path)
    group = p.add_mutually_exclusive_group()
    group.add_argument("--page", type=int)
    group.add_argument("--all", action="store_true", help="Every page with instructions")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("title-page", help="Generate and insert a cover page")
    p.add_argument("workspace", type=Path)
    p.add_argument("--title", required=True)
    p.add_argument("--subtitle", default="")
    p.add_argument("--recipient", default="")
    p.add_argument("--date", default="")
    p.add_argument("--affiliation", default="")
    p.add_argument("--author", default="")
    p.add_argument("--reference-page", type=int)
    p.add_argument("--instructions", default="")
    p.set_defaults(func=cmd_title_page)

    p = sub.add_parser("export", help="Export the active images as a PDF")
    p.add_argument("workspace", type=Path)
    p.add_argument("-o", "--output", type=Path)
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("login", help="Log in when authentication is required")
    p.add_argument("--username")
    p.set_defaults(func=cmd_login)

    p = sub.add_parser("logout", help="Clear the stored login")
    p.set_defaults(func=cmd_logout)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    quiet_third_party()

    try:
        config = EditorConfig.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_ERROR

    if args.command not in _UNGATED and not AuthSession(config).init():
        logger.error("Login required: run `notemod login` first")
        return EXIT_AUTH

    try:
        return args.func(args, config)
    except AuthenticationError as e:
        logger.error(str(e))
        return EXIT_AUTH
    except (NoteModError, FileNotFoundError) as e:
        logger.error(str(e))
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
