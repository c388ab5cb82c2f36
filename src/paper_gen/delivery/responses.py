from __future__ import annotations

import requests

from paper_gen.data_models import ApiResult, JsonResult, TextResult
from paper_gen.errors import HtmlResponseError, MalformedResponseError

DETAIL_LIMIT = 500


def content_type_of(response: requests.Response) -> str:
    return (response.headers.get("content-type") or "").lower()


def is_json_type(content_type: str) -> bool:
    media = content_type.split(";", 1)[0].strip()
    return media == "application/json" or media.endswith("+json")


def looks_like_html(content_type: str, body: str) -> bool:
    if "text/html" in content_type:
        return True
    head = body.lstrip()[:15].lower()
    return head.startswith("<!doctype") or head.startswith("<html")


def error_detail(response: requests.Response) -> str:
    """Short description of a failed response, preferring the body over the reason phrase."""
    try:
        text = response.text
    except (UnicodeDecodeError, LookupError):
        text = ""
    text = text.strip()
    if not text:
        return response.reason or f"HTTP {response.status_code}"
    if len(text) > DETAIL_LIMIT:
        return text[:DETAIL_LIMIT] + "..."
    return text


def classify_response(response: requests.Response) -> ApiResult:
    """
    Resolve a successful body to a JSON or text result exactly once.

    Raises `HtmlResponseError` for HTML pages served by misconfigured hosts and
    `MalformedResponseError` when a body declared as JSON does not parse.
    """
    content_type = content_type_of(response)
    if is_json_type(content_type):
        try:
            return JsonResult(value=response.json())
        except ValueError as exc:
            raise MalformedResponseError(response.url or "", f"invalid JSON body ({exc})") from exc

    body = response.text
    if looks_like_html(content_type, body):
        raise HtmlResponseError(response.url or "", response.status_code)
    return TextResult(value=body)
