from .validators import SubmissionGuard, ValidatedSubmission, is_pdf, validate_query, validate_upload

__all__ = [
    "SubmissionGuard",
    "ValidatedSubmission",
    "is_pdf",
    "validate_query",
    "validate_upload",
]
