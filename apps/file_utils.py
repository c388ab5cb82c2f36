from __future__ import annotations

from typing import Any, Optional

from paper_gen.data_models import UploadedPdf


def to_uploaded_pdf(upload: Any) -> Optional[UploadedPdf]:
	"""Read a Streamlit UploadedFile into an in-memory `UploadedPdf`."""
	if upload is None:
		return None
	try:
		upload.seek(0)
	except AttributeError:
		pass
	data = upload.read()
	return UploadedPdf(
		filename=upload.name,
		content_type=getattr(upload, "type", None),
		data=data or b"",
	)


def describe_size(num_bytes: int) -> str:
	"""Human-readable size for the upload caption."""
	if num_bytes < 1024:
		return f"{num_bytes} B"
	if num_bytes < 1024 * 1024:
		return f"{num_bytes / 1024:.1f} KB"
	return f"{num_bytes / (1024 * 1024):.1f} MB"


__all__ = [
	"describe_size",
	"to_uploaded_pdf",
]
