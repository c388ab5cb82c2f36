"""Exceptions surfaced to the CLI, UI and relay."""

from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from paper_gen.delivery.orchestrator import AttemptRecord


class PaperGenError(Exception):
    """Base class for every error a front end is expected to display."""

    title = "Request failed"


class SubmissionRejected(PaperGenError):
    """Input failed validation; no request was sent."""

    def __init__(self, message: str, title: str = "Invalid input"):
        super().__init__(message)
        self.message = message
        self.title = title


class FileTooLarge(SubmissionRejected):
    pass


class MalformedResponseError(PaperGenError):
    """A backend answered 2xx but its body could not be decoded."""

    def __init__(self, url: str, detail: str):
        super().__init__(f"Malformed response from {url}: {detail}")
        self.url = url
        self.detail = detail


class HtmlResponseError(PaperGenError):
    """A host answered with an HTML page instead of the API (usually a static-site fallback)."""

    def __init__(self, url: str, status: int):
        super().__init__(f"{url} returned HTML (HTTP {status})")
        self.url = url
        self.status = status


REMEDIATION_HINT = (
    "Network or CORS error: no backend endpoint produced a usable response. "
    "Check that the relay is running (`paper-gen serve`) and that delivery.base_url points at it, "
    "or set delivery.proxy_paths to the proxy route your host exposes. "
    "Alternatively, enable CORS on the upstream API."
)


class DeliveryError(PaperGenError):
    """Every candidate endpoint failed. Carries the per-attempt record."""

    def __init__(self, attempts: List["AttemptRecord"]):
        self.attempts = list(attempts)
        super().__init__(self._compose())

    @property
    def last_upstream(self) -> Optional["AttemptRecord"]:
        for attempt in reversed(self.attempts):
            if attempt.status is not None and attempt.outcome in ("http_error", "no_text"):
                return attempt
        return None

    def _compose(self) -> str:
        message = REMEDIATION_HINT
        upstream = self.last_upstream
        if upstream is not None:
            detail = f": {upstream.detail}" if upstream.detail else ""
            message += f" Last upstream response: HTTP {upstream.status}{detail}"
        return message
