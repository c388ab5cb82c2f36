from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

PDF_EXTENSION = ".pdf"


def iter_pdfs(directory: Path) -> Iterable[Path]:
    """Yield every PDF under the directory tree, matching the extension case-insensitively."""
    for path in directory.rglob("*"):
        if path.is_file() and path.suffix.lower() == PDF_EXTENSION:
            yield path


def collect_pdfs(directory: Path) -> List[Path]:
    """Return the PDFs discovered under the directory in a stable order."""
    if not directory.exists():
        return []
    return sorted(iter_pdfs(directory))


def ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
