"""
Module: generation.prompts

Purpose:
    Build generation requests from document state.

Key Functions:
    - build_page_edit_request(): Instruction text + page image + references
    - build_title_page_request(): Cover page from metadata + style references
    - summarize_prompts(): prompt_used text recorded on the new version

Dependencies:
    - core.models: Page, ImageData
    - generation.models: TextPart, ImagePart

Used By:
    - generation.service
    - editing.title_page
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from notemod.core.errors import NothingToGenerateError
from notemod.core.models import ImageData, Page

from .models import GenerationRequest, ImagePart, TextPart

EDIT_PREAMBLE = (
    "Edit this document page image. "
    "Maintain the original layout and style as much as possible. "
)

EDIT_CLOSING = (
    "\n\nI have provided the main page image first. Any subsequent images are "
    "the reference images mentioned above. Output the full modified page image."
)

ENHANCE_TEXT_INSTRUCTION = (
    "\nRender all text sharply and legibly, correcting blurred or broken glyphs."
)


def build_page_edit_request(page: Page, *, enhance_text: bool = False) -> GenerationRequest:
    """
    Build the request for editing a page.

    Each region becomes one numbered instruction with its approximate
    location. Regions with a reference image point at "Reference Image N",
    numbered in region order; the reference images follow the page image in
    that same order.

    Args:
        page: Page whose regions describe the edits
        enhance_text: Append the text-sharpening instruction

    Returns:
        (TextPart, ImagePart(original page), *ImagePart(references))

    Raises:
        NothingToGenerateError: If no region carries a non-blank prompt
    """
    if not page.has_instructions():
        raise NothingToGenerateError(
            f"Page {page.id} has no region with an edit instruction"
        )

    text = EDIT_PREAMBLE
    references: list[ImageData] = []
    for idx, region in enumerate(page.regions, start=1):
        location = (
            f"Region {idx} (approximate location: x={round(region.x)}%, "
            f"y={round(region.y)}%, width={round(region.w)}%, height={round(region.h)}%)"
        )
        instruction = f"\n- In {location}: {region.prompt}"
        if region.reference_image is not None:
            references.append(region.reference_image)
            instruction += (
                f' Use "Reference Image {len(references)}" provided below as '
                "visual reference for this change."
            )
        text += instruction

    if enhance_text:
        text += ENHANCE_TEXT_INSTRUCTION
    text += EDIT_CLOSING

    parts = [TextPart(text), ImagePart.from_image(page.original_image)]
    parts.extend(ImagePart.from_image(image) for image in references)
    return tuple(parts)


def summarize_prompts(page: Page) -> str:
    """prompt_used for a version generated from this page's regions."""
    return "; ".join(r.prompt for r in page.regions)


# ─────────────────────────────────────────────────────────────────────────────
# Title Page
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TitlePageData:
    """
    Metadata entered for a generated cover page.

    Attributes:
        title: Main title
        subtitle: Optional subtitle
        recipient: Addressee, e.g. a client or course name
        date: Display date
        affiliation: Author's organisation
        name: Author name
        reference_page_number: 1-based page whose active image sets the style
        additional_instructions: Free-form extra guidance
    """

    title: str
    subtitle: str = ""
    recipient: str = ""
    date: str = ""
    affiliation: str = ""
    name: str = ""
    reference_page_number: Optional[int] = None
    additional_instructions: str = ""


def build_title_page_request(
    data: TitlePageData,
    reference_images: Sequence[ImageData] = (),
) -> GenerationRequest:
    """
    Build the request for a cover page.

    Args:
        data: Cover page metadata
        reference_images: Style references, in the order they are cited

    Returns:
        (TextPart, *ImagePart(references))
    """
    fields = [
        ("Recipient", data.recipient),
        ("Title", data.title),
        ("Subtitle", data.subtitle),
        ("Date", data.date),
        ("Affiliation", data.affiliation),
        ("Name", data.name),
    ]
    lines = [
        "Create a professional title page for a document as a single full-page image.",
        "Lay out the following information clearly, with the title most prominent:",
    ]
    lines.extend(f"- {label}: {value}" for label, value in fields if value.strip())

    if reference_images:
        lines.append(
            "Match the colour scheme, typography and overall design of the "
            "attached reference page image(s)."
        )
    else:
        lines.append("Use a clean, modern design with generous whitespace.")

    if data.additional_instructions.strip():
        lines.append(f"Additional instructions: {data.additional_instructions.strip()}")

    parts = [TextPart("\n".join(lines))]
    parts.extend(ImagePart.from_image(image) for image in reference_images)
    return tuple(parts)
