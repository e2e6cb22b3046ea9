"""Top-level package for NoteMod.

Provides subpackages:
- notemod.core – immutable document model, errors and the workspace record
- notemod.editing – pure page, region, version and removal operations
- notemod.imaging – border-sampling inpaint
- notemod.generation – AI page edits through an image client
- notemod.loading / notemod.output – PDF import, PDF export and workspaces
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
        except OSError:
            content = ""
        for line in content.splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.1.0"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("notemod")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__copyright__ = "Copyright 2026 The NoteMod authors. Licensed under the MIT License."
__all__: list[str] = ["__version__"]
