from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from paper_gen.config.schema import UploadConfig
from paper_gen.data_models import PDF_MIME, UploadedPdf
from paper_gen.errors import FileTooLarge, SubmissionRejected

logger = logging.getLogger(__name__)


def is_pdf(filename: str, content_type: Optional[str]) -> bool:
    """A file counts as PDF when either its MIME type or its extension says so."""
    return content_type == PDF_MIME or filename.lower().endswith(".pdf")


def validate_upload(upload: UploadedPdf, max_bytes: int) -> UploadedPdf:
    if not is_pdf(upload.filename, upload.content_type):
        raise SubmissionRejected("Please upload a valid PDF file.", title="Invalid file")
    if upload.size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise FileTooLarge(f"PDF exceeds {limit_mb}MB limit.", title="File too large")
    return upload


def validate_query(query: Optional[str]) -> str:
    cleaned = (query or "").strip()
    if not cleaned:
        raise SubmissionRejected("Enter a query.", title="Missing query")
    return cleaned


@dataclass
class ValidatedSubmission:
    query: str
    upload: Optional[UploadedPdf]


class SubmissionGuard:
    """Runs every pre-flight check so nothing reaches the network unvalidated."""

    def __init__(self, config: UploadConfig):
        self.config = config

    def check_file(self, upload: UploadedPdf) -> UploadedPdf:
        return validate_upload(upload, self.config.max_bytes)

    def check(self, upload: Optional[UploadedPdf], query: Optional[str]) -> ValidatedSubmission:
        if upload is None:
            if self.config.require_pdf:
                raise SubmissionRejected("Attach a PDF file first.", title="Missing PDF")
        else:
            self.check_file(upload)
        cleaned = validate_query(query)
        logger.debug("Submission accepted (file=%s, query_chars=%d)", bool(upload), len(cleaned))
        return ValidatedSubmission(query=cleaned, upload=upload)
