from __future__ import annotations

from typing import Any, Dict, Optional

from paper_gen.data_models import UploadedPdf

from .endpoints import CandidateEndpoint, with_query_param

JSON_ACCEPT = {"Accept": "application/json"}


def build_request(
    candidate: CandidateEndpoint,
    query: str,
    upload: Optional[UploadedPdf],
) -> Dict[str, Any]:
    """
    Build keyword arguments for `session.post` targeting one candidate.

    Without a file the body is JSON. With a file it is multipart with `pdf` and `query`
    fields; external upstreams also get the file under `file` and the query mirrored
    into the URL, which some deployments of the generator read instead.
    """
    url = with_query_param(candidate.url, query) if candidate.is_external else candidate.url

    if upload is None:
        return {
            "url": url,
            "json": {"query": query},
            "headers": dict(JSON_ACCEPT),
        }

    files = [("pdf", upload.as_multipart())]
    if candidate.is_external:
        files.append(("file", upload.as_multipart()))
    return {
        "url": url,
        "files": files,
        "data": {"query": query},
        "headers": dict(JSON_ACCEPT),
    }
