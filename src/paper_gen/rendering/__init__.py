from .download import (
    DownloadArtifact,
    build_download,
    build_download_name,
    make_filename_from_prompt,
    render_pdf,
    render_text,
    timestamp_suffix,
)
from .formatting import format_result_html

__all__ = [
    "DownloadArtifact",
    "build_download",
    "build_download_name",
    "format_result_html",
    "make_filename_from_prompt",
    "render_pdf",
    "render_text",
    "timestamp_suffix",
]
