from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .results import ApiResult

PDF_MIME = "application/pdf"


class UploadedPdf(BaseModel):
    """A document held in memory, ready to be attached to a request."""

    filename: str
    content_type: Optional[str] = PDF_MIME
    data: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path, content_type: Optional[str] = None) -> "UploadedPdf":
        """Read a file from disk; the MIME type is guessed from its name unless given."""
        if content_type is None:
            content_type = mimetypes.guess_type(path.name)[0]
        return cls(filename=path.name, content_type=content_type, data=path.read_bytes())

    def as_multipart(self):
        """Return the (filename, bytes, mime) triple `requests` expects for a file field."""
        return (self.filename, self.data, self.content_type or PDF_MIME)


class Submission(BaseModel):
    """In-flight state of the generate form. Never persisted."""

    file: Optional[UploadedPdf] = None
    query: str = ""
    loading: bool = False
    error: Optional[str] = None
    result: Optional[ApiResult] = None

    @property
    def result_text(self) -> Optional[str]:
        return self.result.text if self.result is not None else None
