from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests

from paper_gen.config.schema import UpstreamConfig
from paper_gen.data_models import UploadedPdf
from paper_gen.delivery.endpoints import with_query_param
from paper_gen.delivery.responses import content_type_of, is_json_type
from paper_gen.utils.logging import get_logger

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Accept, Authorization",
}

DROPPED_REQUEST_HEADERS = {"host", "content-length", "connection", "accept-encoding"}
# requests already decoded the body, so the original framing no longer applies
DROPPED_RESPONSE_HEADERS = {"content-encoding", "content-length", "transfer-encoding", "connection", "keep-alive"}


@dataclass
class RelayReply:
    """Framework-neutral response: either a JSON payload or raw bytes."""

    status_code: int
    payload: Any = None
    content: Optional[bytes] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_json(self) -> bool:
        return self.content is None


class UpstreamRelay:
    """Forward browser submissions to the upstream generator and normalise what comes back."""

    def __init__(self, config: UpstreamConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def forward_generate(self, query: str, upload: Optional[UploadedPdf]) -> RelayReply:
        """
        Send a validated submission upstream.

        Multipart when a PDF is attached (single `pdf` field, to avoid doubling the
        payload), JSON otherwise. The query is also mirrored as a URL parameter.
        """
        url = with_query_param(self.config.url, query)
        request_kwargs: Dict[str, Any]
        if upload is not None:
            request_kwargs = {"files": {"pdf": upload.as_multipart()}}
            if query:
                request_kwargs["data"] = {"query": query}
        else:
            request_kwargs = {"json": {"query": query}}

        logger.info("relay.forward", url=self.config.url, has_file=upload is not None)
        try:
            upstream = self.session.post(url, timeout=self.config.timeout_seconds, **request_kwargs)
        except requests.Timeout:
            logger.warning("relay.timeout", url=self.config.url, timeout_seconds=self.config.timeout_seconds)
            return RelayReply(504, {"error": "Upstream timeout"})
        except requests.RequestException as exc:
            logger.warning("relay.unreachable", url=self.config.url, error=str(exc))
            return RelayReply(502, {"error": "Upstream unreachable", "detail": str(exc)})

        if not upstream.ok:
            detail = upstream.text or upstream.reason or ""
            logger.warning("relay.upstream_error", status=upstream.status_code)
            return RelayReply(upstream.status_code, {"error": "Upstream error", "detail": detail})

        if is_json_type(content_type_of(upstream)):
            try:
                return RelayReply(200, upstream.json())
            except ValueError:
                logger.warning("relay.malformed_json", url=self.config.url)
                return RelayReply(502, {"error": "Upstream error", "detail": "Upstream returned malformed JSON"})

        return RelayReply(200, {"result": upstream.text})

    def forward_raw(self, body: bytes, headers: Mapping[str, str]) -> RelayReply:
        """Pass a request body through untouched, keeping multipart boundaries intact."""
        forward_headers = {
            key.lower(): value
            for key, value in headers.items()
            if value and key.lower() not in DROPPED_REQUEST_HEADERS
        }
        try:
            upstream = self.session.post(
                self.config.url,
                data=body,
                headers=forward_headers,
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("relay.proxy_error", url=self.config.url, error=str(exc))
            return RelayReply(502, {"error": "Proxy error", "message": str(exc)}, headers=dict(CORS_HEADERS))

        mirrored = {
            key: value
            for key, value in upstream.headers.items()
            if key.lower() not in DROPPED_RESPONSE_HEADERS
        }
        mirrored["Access-Control-Allow-Origin"] = "*"
        logger.info("relay.proxied", status=upstream.status_code, bytes=len(upstream.content))
        return RelayReply(upstream.status_code, content=upstream.content, headers=mirrored)
