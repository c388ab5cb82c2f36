from .results import ApiResult, JsonResult, TextResult
from .settings import DEFAULT_SETTINGS, MIN_TIMEOUT_MS, AppSettings
from .submission import PDF_MIME, Submission, UploadedPdf

__all__ = [
    "ApiResult",
    "AppSettings",
    "DEFAULT_SETTINGS",
    "JsonResult",
    "MIN_TIMEOUT_MS",
    "PDF_MIME",
    "Submission",
    "TextResult",
    "UploadedPdf",
]
