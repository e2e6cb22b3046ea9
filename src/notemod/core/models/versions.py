"""
Module: versions

Purpose:
    Provides the GeneratedImage dataclass - one immutable version of a page
    produced by inpainting or by the generation service.

Key Functions:
    - GeneratedImage.create(image, prompt_used): New version stamped now
    - utc_now_ms(): Current UTC time truncated to milliseconds

Dependencies:
    - dataclasses (std)
    - datetime (std)
    - .images.ImageData

Used By:
    - core.models.pages.Page
    - editing.history, editing.removal
    - generation.service
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from .images import ImageData
from .regions import new_id


def utc_now_ms() -> datetime:
    """
    Current UTC time at millisecond precision.

    Workspaces store timestamps as epoch milliseconds, so versions are
    stamped at that precision to survive a save/load round trip unchanged.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    return int(round(moment.timestamp() * 1000))


def from_epoch_ms(value: float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class GeneratedImage:
    """
    One produced image for a page (immutable).

    Attributes:
        id: Unique identifier
        image: Encoded image
        created_at: Creation time (aware, UTC)
        prompt_used: Instruction that produced this version
    """

    id: str
    image: ImageData
    created_at: datetime
    prompt_used: str = ""

    def __post_init__(self) -> None:
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware")

    @classmethod
    def create(
        cls,
        image: ImageData,
        prompt_used: str,
        *,
        created_at: Optional[datetime] = None,
    ) -> GeneratedImage:
        return cls(
            id=new_id(),
            image=image,
            created_at=created_at or utc_now_ms(),
            prompt_used=prompt_used,
        )

    def with_new_id(self) -> GeneratedImage:
        return replace(self, id=new_id())

    def __repr__(self) -> str:
        return f"GeneratedImage({self.id[:8]}, {self.prompt_used!r})"
