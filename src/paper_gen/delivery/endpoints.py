from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from paper_gen.config.schema import DeliveryConfig

EndpointKind = Literal["relay", "proxy", "external"]


@dataclass(frozen=True)
class CandidateEndpoint:
    url: str
    kind: EndpointKind
    probe: bool = False

    @property
    def is_external(self) -> bool:
        return self.kind == "external"


def join_url(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + path


def with_query_param(url: str, query: str) -> str:
    """Mirror the query into the URL for upstreams that read it from the query string."""
    if not query:
        return url
    parts = urlsplit(url)
    params = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != "query"]
    params.append(("query", query))
    return urlunsplit(parts._replace(query=urlencode(params)))


def build_candidates(config: DeliveryConfig, external_url: str) -> List[CandidateEndpoint]:
    """
    Order the endpoints a client should try.

    The local relay route comes first because it is the only one this project ships, the
    proxy routes cover hosts that expose a pass-through function instead, and the upstream
    itself is the last resort since browsers and some networks block it.
    """
    candidates: List[CandidateEndpoint] = [
        CandidateEndpoint(url=join_url(config.base_url, config.relay_path), kind="relay")
    ]
    for path in config.proxy_paths:
        candidates.append(
            CandidateEndpoint(
                url=join_url(config.base_url, path),
                kind="proxy",
                probe=config.probe_proxies,
            )
        )
    if config.include_external and external_url:
        candidates.append(CandidateEndpoint(url=external_url, kind="external"))
    return candidates
