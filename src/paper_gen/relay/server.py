"""FastAPI relay exposing the generate route and the pass-through proxy routes."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Optional, Tuple

import requests
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from paper_gen.config.schema import ServiceConfig
from paper_gen.data_models import UploadedPdf
from paper_gen.errors import FileTooLarge, SubmissionRejected
from paper_gen.guardrails import validate_upload

from .upstream import CORS_HEADERS, RelayReply, UpstreamRelay

logger = logging.getLogger(__name__)

PROXY_PATHS = ("/api/proxy", "/proxy", "/.netlify/functions/proxy")
MISSING_PDF = "Missing PDF file. Use 'pdf' field."


def _to_response(reply: RelayReply) -> Response:
    if reply.is_json:
        return JSONResponse(reply.payload, status_code=reply.status_code, headers=reply.headers or None)
    return Response(content=reply.content, status_code=reply.status_code, headers=reply.headers)


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code)


async def _read_submission(request: Request) -> Tuple[str, Optional[UploadedPdf]]:
    """Pull query and optional PDF from a multipart, urlencoded or JSON request."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        body = await request.json()
        if not isinstance(body, dict):
            return "", None
        return str(body.get("query") or body.get("q") or ""), None

    form = await request.form()
    upload: Optional[UploadedPdf] = None
    for field_name in ("pdf", "file"):
        value = form.get(field_name)
        if value is not None and not isinstance(value, str):
            data = await value.read()
            upload = UploadedPdf(
                filename=value.filename or "document.pdf",
                content_type=value.content_type,
                data=data,
            )
            break
    query = form.get("query") or form.get("q") or ""
    return str(query), upload


def create_app(
    config: Optional[ServiceConfig] = None,
    relay: Optional[UpstreamRelay] = None,
    session: Optional[requests.Session] = None,
) -> FastAPI:
    """Build the relay application; `relay` or `session` can be injected for tests."""
    config = config or ServiceConfig()
    relay = relay or UpstreamRelay(config.upstream, session=session)

    app = FastAPI(
        title="Test Paper Generator Relay",
        description="Forwards PDF + query submissions to the question generation API",
        version="0.1.0",
    )
    app.state.config = config
    app.state.relay = relay

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.relay.allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/health", summary="Health check")
    async def health() -> JSONResponse:
        return JSONResponse({"ok": True}, headers={"Access-Control-Allow-Origin": "*"})

    @app.get("/api/ping")
    async def ping() -> dict:
        return {"message": os.getenv("PING_MESSAGE", config.relay.ping_message)}

    @app.post("/api/generate-questions", summary="Forward a PDF and query to the generator")
    async def generate_questions(request: Request) -> Response:
        try:
            query, upload = await _read_submission(request)
        except ValueError:
            return _error(400, "Invalid request body")

        query = query.strip()
        if upload is None and not query:
            return _error(400, MISSING_PDF)
        if upload is not None:
            try:
                validate_upload(upload, config.uploads.max_bytes)
            except FileTooLarge as exc:
                return _error(413, exc.message)
            except SubmissionRejected as exc:
                return _error(400, exc.message)

        try:
            reply = await asyncio.to_thread(app.state.relay.forward_generate, query, upload)
        except Exception as exc:
            logger.exception("Error while forwarding submission: %s", exc)
            return _error(500, "Internal server error", detail=str(exc))
        return _to_response(reply)

    async def proxy(request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        if request.method != "POST":
            return JSONResponse({"error": "Method Not Allowed"}, status_code=405, headers=CORS_HEADERS)
        body = await request.body()
        reply = await asyncio.to_thread(app.state.relay.forward_raw, body, dict(request.headers))
        return _to_response(reply)

    for path in PROXY_PATHS:
        app.add_api_route(
            path,
            proxy,
            methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            include_in_schema=False,
        )

    return app
