from __future__ import annotations

import io
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

DownloadFormat = Literal["pdf", "txt"]

TITLE = "Test Paper Generator"
FALLBACK_SLUG = "questions"
SLUG_LIMIT = 60
ACTION_VERBS = (
    "make",
    "generate",
    "produce",
    "create",
    "give",
    "write",
    "please",
    "build",
    "compose",
    "form",
)
_LEADING_VERB_RES = [re.compile(rf"^{verb}\s+", re.IGNORECASE) for verb in ACTION_VERBS]

MEDIA_TYPES = {"pdf": "application/pdf", "txt": "text/plain; charset=utf-8"}

MARGIN = 40
TOP = 60
LINE_HEIGHT = 14


@dataclass
class DownloadArtifact:
    filename: str
    data: bytes
    media_type: str


def make_filename_from_prompt(query: Optional[str]) -> str:
    """Turn a prompt into a filename slug, dropping leading verbs like "generate" or "please"."""
    text = (query or "").strip()
    if not text:
        return FALLBACK_SLUG
    changed = True
    while changed:
        changed = False
        for pattern in _LEADING_VERB_RES:
            if pattern.match(text):
                text = pattern.sub("", text, count=1).strip()
                changed = True
    text = re.sub(r"^['\"]+|['\"]+$", "", text).strip()
    slug = text[:SLUG_LIMIT].lower()
    slug = re.sub(r"[^a-z0-9\s_-]", "", slug)
    slug = re.sub(r"\s+", "_", slug.strip())
    return slug or FALLBACK_SLUG


def timestamp_suffix(moment: Optional[datetime] = None) -> str:
    """UTC ISO timestamp with millisecond precision and filename-safe separators."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
    return re.sub(r"[:.]", "-", iso)


def build_download_name(query: Optional[str], extension: str, moment: Optional[datetime] = None) -> str:
    return f"{make_filename_from_prompt(query)}_{timestamp_suffix(moment)}.{extension}"


def render_pdf(result: str, query: str = "") -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    page_width, page_height = A4
    usable_width = page_width - MARGIN * 2
    y = page_height - TOP

    pdf.setTitle(TITLE)
    pdf.setFont("Helvetica-Bold", 22)
    pdf.drawCentredString(page_width / 2, y, TITLE)
    y -= 30

    pdf.setFont("Helvetica", 12)
    for header_line in simpleSplit(f"Query: {query.strip()}", "Helvetica", 12, usable_width) or [""]:
        pdf.drawString(MARGIN, y, header_line)
        y -= 20

    pdf.setFont("Helvetica", 11)
    for line in result.split("\n"):
        for piece in simpleSplit(line, "Helvetica", 11, usable_width) or [""]:
            if y < MARGIN:
                pdf.showPage()
                pdf.setFont("Helvetica", 11)
                y = page_height - MARGIN
            pdf.drawString(MARGIN, y, piece)
            y -= LINE_HEIGHT

    pdf.save()
    return buffer.getvalue()


def render_text(result: str, query: str = "") -> bytes:
    return f"{TITLE}\nQuery: {query.strip()}\n\n{result}\n".encode("utf-8")


def build_download(
    result: str,
    query: str = "",
    fmt: DownloadFormat = "pdf",
    moment: Optional[datetime] = None,
) -> DownloadArtifact:
    if fmt == "pdf":
        data = render_pdf(result, query)
    elif fmt == "txt":
        data = render_text(result, query)
    else:
        raise ValueError(f"Unsupported download format: {fmt}")
    return DownloadArtifact(
        filename=build_download_name(query, fmt, moment),
        data=data,
        media_type=MEDIA_TYPES[fmt],
    )
