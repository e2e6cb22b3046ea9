"""
Module: editing

Purpose:
    Pure document edits. Every function takes a Document (or Page) and
    returns a new one.

Key Functions:
    - regions: add_region, remove_region, update_prompt, update_reference_image
    - pages: insert_blank_page, copy_page, delete_page, reorder_pages
    - history: select_version, append_version, delete_version
    - removal: remove_watermark

Note:
    `editing.title_page` depends on the generation service and is imported
    directly rather than re-exported here.
"""

from .regions import (
    EditMode,
    add_region,
    remove_region,
    update_prompt,
    update_reference_image,
)
from .pages import (
    DEFAULT_PAGE_SIZE,
    copy_page,
    delete_page,
    insert_blank_page,
    insert_page,
    reorder_pages,
    set_active_page,
)
from .history import (
    append_version,
    begin_generation,
    complete_generation,
    delete_version,
    fail_generation,
    select_version,
)
from .removal import REMOVAL_PROMPT, RemovalOutcome, remove_watermark

__all__ = [
    "EditMode",
    "add_region",
    "remove_region",
    "update_prompt",
    "update_reference_image",
    "DEFAULT_PAGE_SIZE",
    "copy_page",
    "delete_page",
    "insert_blank_page",
    "insert_page",
    "reorder_pages",
    "set_active_page",
    "append_version",
    "begin_generation",
    "complete_generation",
    "delete_version",
    "fail_generation",
    "select_version",
    "REMOVAL_PROMPT",
    "RemovalOutcome",
    "remove_watermark",
]
