from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import requests

from paper_gen.data_models import ApiResult, AppSettings, JsonResult, UploadedPdf
from paper_gen.errors import DeliveryError, HtmlResponseError, MalformedResponseError
from paper_gen.utils.logging import get_logger

from .endpoints import CandidateEndpoint
from .payload import build_request
from .responses import classify_response, content_type_of, error_detail, looks_like_html

logger = get_logger(__name__)

DEFAULT_PROBE_TIMEOUT_MS = 2500


@dataclass
class AttemptRecord:
    """Outcome of one request (or probe) against one candidate."""

    url: str
    kind: str
    outcome: str
    status: Optional[int] = None
    detail: Optional[str] = None
    elapsed_ms: int = 0


@dataclass
class DeliveryResult:
    result: ApiResult
    endpoint: str
    attempts: List[AttemptRecord] = field(default_factory=list)

    @property
    def text(self) -> str:
        return self.result.text


class EndpointDelivery:
    """
    Deliver a query and optional PDF to the first candidate endpoint that works.

    Candidates are tried strictly in order, one at a time. Each attempt is bounded by a
    timeout: the first uses `initial_timeout_ms`, every later one `retry_timeout_ms`. When
    the first attempt times out and `auto_retry` is set, that candidate gets exactly one
    more try before the orchestrator moves on.

    Timeouts, connection failures, non-2xx statuses, HTML pages and JSON bodies with no
    usable text field (no string payload and no `questions`/`result`/`message`) all advance
    to the next candidate. A 2xx body that claims to be JSON but does not parse is raised
    immediately as `MalformedResponseError`. If every candidate fails, a single
    `DeliveryError` carrying all attempt records is raised.

    Parameters
    ----------
    candidates : Sequence[CandidateEndpoint]
        Ordered endpoints, usually from `build_candidates`.
    settings : AppSettings
        Timeout policy and retry switch, injected rather than read from global state.
    session : requests.Session, optional
        HTTP session; tests pass a fake with the same `post`/`options` surface.
    probe_timeout_ms : int
        Budget for the OPTIONS preflight sent to candidates flagged with `probe`.
    """

    def __init__(
        self,
        candidates: Sequence[CandidateEndpoint],
        settings: AppSettings,
        session: Optional[requests.Session] = None,
        probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
    ):
        if not candidates:
            raise ValueError("At least one candidate endpoint is required.")
        self.candidates = list(candidates)
        self.settings = settings
        self.session = session or requests.Session()
        self.probe_timeout_ms = probe_timeout_ms

    def deliver(self, query: str, upload: Optional[UploadedPdf] = None) -> DeliveryResult:
        attempts: List[AttemptRecord] = []
        first_attempt = True

        for candidate in self.candidates:
            if candidate.probe and not self.probe(candidate, attempts):
                continue

            timeout_ms = self.settings.initial_timeout_ms if first_attempt else self.settings.retry_timeout_ms
            response = self._send(candidate, query, upload, timeout_ms, attempts)
            if response is None and first_attempt and self.settings.auto_retry and attempts[-1].outcome == "timeout":
                logger.info("delivery.retry", url=candidate.url, timeout_ms=self.settings.retry_timeout_ms)
                response = self._send(candidate, query, upload, self.settings.retry_timeout_ms, attempts)
            first_attempt = False

            if response is None:
                continue
            result = self._accept(candidate, response, attempts)
            if result is not None:
                return DeliveryResult(result=result, endpoint=candidate.url, attempts=attempts)

        logger.warning("delivery.exhausted", attempts=len(attempts))
        raise DeliveryError(attempts)

    def probe(self, candidate: CandidateEndpoint, attempts: Optional[List[AttemptRecord]] = None) -> bool:
        """Send a cheap OPTIONS request so large payloads are not pushed at routes that do not exist."""
        started = time.monotonic()
        try:
            response = self.session.options(candidate.url, timeout=self.probe_timeout_ms / 1000)
            reachable = 200 <= response.status_code < 300
            status: Optional[int] = response.status_code
        except requests.RequestException:
            reachable = False
            status = None
        if not reachable and attempts is not None:
            attempts.append(
                AttemptRecord(
                    url=candidate.url,
                    kind=candidate.kind,
                    outcome="skipped",
                    status=status,
                    detail="probe failed",
                    elapsed_ms=_elapsed_ms(started),
                )
            )
        return reachable

    def _send(
        self,
        candidate: CandidateEndpoint,
        query: str,
        upload: Optional[UploadedPdf],
        timeout_ms: int,
        attempts: List[AttemptRecord],
    ) -> Optional[requests.Response]:
        request_kwargs = build_request(candidate, query, upload)
        url = request_kwargs.pop("url")
        logger.debug("delivery.attempt", url=url, kind=candidate.kind, has_file=upload is not None, timeout_ms=timeout_ms)
        started = time.monotonic()
        try:
            return self.session.post(url, timeout=timeout_ms / 1000, **request_kwargs)
        except requests.Timeout:
            outcome, detail = "timeout", f"no response within {timeout_ms} ms"
        except requests.RequestException as exc:
            outcome, detail = "network", str(exc)
        logger.warning("delivery.failed", url=candidate.url, outcome=outcome, detail=detail)
        attempts.append(
            AttemptRecord(
                url=candidate.url,
                kind=candidate.kind,
                outcome=outcome,
                detail=detail,
                elapsed_ms=_elapsed_ms(started),
            )
        )
        return None

    def _accept(
        self,
        candidate: CandidateEndpoint,
        response: requests.Response,
        attempts: List[AttemptRecord],
    ) -> Optional[ApiResult]:
        record = AttemptRecord(
            url=candidate.url,
            kind=candidate.kind,
            outcome="ok",
            status=response.status_code,
            elapsed_ms=int(response.elapsed.total_seconds() * 1000) if response.elapsed else 0,
        )
        attempts.append(record)

        if not 200 <= response.status_code < 300:
            detail = error_detail(response)
            record.outcome = "html" if looks_like_html(content_type_of(response), detail) else "http_error"
            record.detail = detail if record.outcome == "http_error" else "HTML error page"
            logger.warning("delivery.rejected", url=candidate.url, status=response.status_code, outcome=record.outcome)
            return None

        try:
            result = classify_response(response)
        except HtmlResponseError:
            record.outcome = "html"
            record.detail = "HTML page instead of API response"
            logger.warning("delivery.rejected", url=candidate.url, status=response.status_code, outcome="html")
            return None
        except MalformedResponseError as exc:
            record.outcome = "malformed"
            record.detail = exc.detail
            raise

        if isinstance(result, JsonResult) and result.usable_text is None:
            record.outcome = "no_text"
            record.detail = error_detail(response)
            logger.warning("delivery.rejected", url=candidate.url, status=response.status_code, outcome="no_text")
            return None

        logger.info("delivery.accepted", url=candidate.url, kind=candidate.kind, result_kind=result.kind)
        return result


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
