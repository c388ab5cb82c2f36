from __future__ import annotations

from typing import Optional

import requests

from paper_gen.config.schema import ServiceConfig
from paper_gen.data_models import AppSettings

from .endpoints import CandidateEndpoint, build_candidates, with_query_param
from .orchestrator import AttemptRecord, DeliveryResult, EndpointDelivery
from .responses import classify_response


def create_delivery(
    config: ServiceConfig,
    settings: AppSettings,
    session: Optional[requests.Session] = None,
) -> EndpointDelivery:
    """Build an `EndpointDelivery` wired to the configured candidates and the user's timeouts."""
    candidates = build_candidates(config.delivery, config.upstream.url)
    return EndpointDelivery(
        candidates,
        settings,
        session=session,
        probe_timeout_ms=config.delivery.probe_timeout_ms,
    )


__all__ = [
    "AttemptRecord",
    "CandidateEndpoint",
    "DeliveryResult",
    "EndpointDelivery",
    "build_candidates",
    "classify_response",
    "create_delivery",
    "with_query_param",
]
