import pytest
import sys
from pathlib import Path
from PIL import Image

# Add src to sys.path so we can import notemod
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from notemod.core.models import Document, GeneratedImage, ImageData, Page  # noqa: E402


def make_image(width: int = 40, height: int = 20, color=(255, 255, 255), format: str = "PNG") -> ImageData:
    """Encode a solid-colour image (PNG by default so pixels are exact)."""
    return ImageData.from_pil(Image.new("RGB", (width, height), color=color), format=format)


def make_page(width: int = 40, height: int = 20, color=(255, 255, 255), **changes) -> Page:
    """Create a page whose original image matches its size."""
    page = Page.create(make_image(width, height, color), width, height)
    return page.evolve(**changes) if changes else page


def make_version(prompt: str = "edit", color=(0, 0, 0), width: int = 40, height: int = 20) -> GeneratedImage:
    return GeneratedImage.create(make_image(width, height, color), prompt)


def make_document(count: int = 3, active_index: int = 0, **kwargs) -> Document:
    pages = [make_page() for _ in range(count)]
    return Document.from_pages("notes.pdf", pages, active_index=active_index, **kwargs)


# Common test fixtures
@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image file."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def page() -> Page:
    return make_page()


@pytest.fixture
def document() -> Document:
    """Three white 40x20 pages, first page active."""
    return make_document(3)


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Two-page PDF: 100x200 pt portrait, then 300x150 pt landscape."""
    import fitz

    doc = fitz.open()
    doc.new_page(width=100, height=200)
    page = doc.new_page(width=300, height=150)
    page.insert_text((20, 50), "Hello")
    data = doc.tobytes()
    doc.close()
    return data
