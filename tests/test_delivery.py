"""Tests for the candidate-endpoint delivery orchestration."""

from __future__ import annotations

import pytest
import requests

from fakes import BASE_URL, UPSTREAM_URL, FakeSession, make_response
from paper_gen.config.schema import DeliveryConfig
from paper_gen.data_models import JsonResult, TextResult
from paper_gen.delivery import CandidateEndpoint, EndpointDelivery, build_candidates, with_query_param
from paper_gen.errors import DeliveryError, MalformedResponseError

RELAY = f"{BASE_URL}/api/generate-questions"
NETLIFY = f"{BASE_URL}/.netlify/functions/proxy"
API_PROXY = f"{BASE_URL}/api/proxy"
PROXY = f"{BASE_URL}/proxy"


@pytest.fixture
def candidates():
    return build_candidates(DeliveryConfig(base_url=BASE_URL), UPSTREAM_URL)


def test_candidates_are_relay_then_proxies_then_external(candidates):
    assert [c.url for c in candidates] == [RELAY, NETLIFY, API_PROXY, PROXY, UPSTREAM_URL]
    assert [c.kind for c in candidates] == ["relay", "proxy", "proxy", "proxy", "external"]
    assert [c.probe for c in candidates] == [False, True, True, True, False]


def test_external_candidate_can_be_disabled():
    config = DeliveryConfig(base_url=BASE_URL + "/", include_external=False, proxy_paths=[])
    assert [c.url for c in build_candidates(config, UPSTREAM_URL)] == [RELAY]


def test_with_query_param_replaces_existing_query():
    url = with_query_param("https://x.test/gen?query=old&lang=en", "ten mcqs")
    assert url == "https://x.test/gen?lang=en&query=ten+mcqs"


def test_falls_through_failures_until_a_candidate_returns_json(candidates, settings, pdf_upload):
    session = FakeSession(
        posts={
            RELAY: [requests.ConnectionError("refused")],
            NETLIFY: [requests.ReadTimeout("slow")],
            API_PROXY: [make_response(200, {"questions": "X"})],
        }
    )
    delivery = EndpointDelivery(candidates, settings.model_copy(update={"auto_retry": False}), session=session)

    outcome = delivery.deliver("Generate 5 questions", pdf_upload)

    assert outcome.text == "X"
    assert isinstance(outcome.result, JsonResult)
    assert outcome.endpoint == API_PROXY
    assert [a.outcome for a in outcome.attempts] == ["network", "timeout", "ok"]
    assert session.urls_called() == [RELAY, NETLIFY, API_PROXY]


def test_all_html_or_error_responses_raise_one_aggregate_error(candidates, settings):
    html_page = "<!DOCTYPE html><html><body>Not here</body></html>"
    session = FakeSession(
        posts={
            RELAY: [make_response(404, html_page, "text/html")],
            NETLIFY: [make_response(200, html_page, "text/html; charset=utf-8")],
            API_PROXY: [make_response(200, html_page, "text/plain")],
            PROXY: [make_response(405, {"error": "Method Not Allowed"})],
            UPSTREAM_URL: [make_response(500, "model crashed", "text/plain")],
        }
    )
    delivery = EndpointDelivery(candidates, settings, session=session)

    with pytest.raises(DeliveryError) as excinfo:
        delivery.deliver("questions please")

    error = excinfo.value
    assert len(error.attempts) == 5
    assert [a.outcome for a in error.attempts] == ["html", "html", "html", "http_error", "http_error"]
    message = str(error)
    assert message.count("Network or CORS") == 1
    assert "HTTP 500: model crashed" in message


def test_malformed_json_is_reported_without_further_fallback(candidates, settings):
    session = FakeSession(
        posts={
            RELAY: [make_response(200, "{not json", "application/json")],
            NETLIFY: [make_response(200, {"questions": "never reached"})],
        }
    )
    delivery = EndpointDelivery(candidates, settings, session=session)

    with pytest.raises(MalformedResponseError):
        delivery.deliver("anything")
    assert session.urls_called() == [RELAY]


def test_auto_retry_repeats_first_candidate_once_with_retry_timeout(candidates, settings):
    session = FakeSession(
        posts={RELAY: [requests.ReadTimeout("slow"), make_response(200, "Q1. What is a cell?", "text/plain")]}
    )
    delivery = EndpointDelivery(candidates, settings, session=session)

    outcome = delivery.deliver("cells")

    assert isinstance(outcome.result, TextResult)
    assert outcome.text == "Q1. What is a cell?"
    assert session.urls_called() == [RELAY, RELAY]
    assert [call["timeout"] for call in session.calls] == [25.0, 55.0]


def test_without_auto_retry_a_timeout_moves_to_the_next_candidate(candidates, settings):
    session = FakeSession(
        posts={
            RELAY: [requests.ReadTimeout("slow")],
            NETLIFY: [make_response(200, {"result": "ok"})],
        }
    )
    delivery = EndpointDelivery(candidates, settings.model_copy(update={"auto_retry": False}), session=session)

    outcome = delivery.deliver("cells")

    assert outcome.text == "ok"
    assert session.urls_called() == [RELAY, NETLIFY]
    assert [call["timeout"] for call in session.calls] == [25.0, 55.0]


def test_proxy_failing_its_probe_is_skipped(candidates, settings):
    session = FakeSession(
        posts={
            NETLIFY: [make_response(200, {"questions": "wrong"})],
            API_PROXY: [make_response(200, {"questions": "right"})],
        },
        options={NETLIFY: make_response(404, "", "text/html")},
    )
    delivery = EndpointDelivery(candidates, settings, session=session)

    outcome = delivery.deliver("cells")

    assert outcome.text == "right"
    assert NETLIFY not in session.urls_called()
    assert NETLIFY in session.option_calls
    assert "skipped" in [a.outcome for a in outcome.attempts]


def test_external_candidate_mirrors_query_and_duplicates_file(settings, pdf_upload):
    relay = CandidateEndpoint(url=RELAY, kind="relay")
    external = CandidateEndpoint(url=UPSTREAM_URL, kind="external")
    session = FakeSession(posts={UPSTREAM_URL: [make_response(200, {"questions": "done"})]})
    delivery = EndpointDelivery([relay, external], settings, session=session)

    delivery.deliver("ten mcqs", pdf_upload)

    relay_call, external_call = session.calls
    assert relay_call["url"] == RELAY
    assert [name for name, _ in relay_call["files"]] == ["pdf"]
    assert relay_call["data"] == {"query": "ten mcqs"}
    assert external_call["url"] == UPSTREAM_URL + "?query=ten+mcqs"
    assert [name for name, _ in external_call["files"]] == ["pdf", "file"]


def test_query_only_submission_is_sent_as_json(settings):
    session = FakeSession(posts={RELAY: [make_response(200, {"message": "hi"})]})
    delivery = EndpointDelivery([CandidateEndpoint(url=RELAY, kind="relay")], settings, session=session)

    outcome = delivery.deliver("just a question")

    assert outcome.text == "hi"
    call = session.calls[0]
    assert call["json"] == {"query": "just a question"}
    assert "files" not in call
    assert call["headers"]["Accept"] == "application/json"


def test_empty_candidate_list_is_rejected(settings):
    with pytest.raises(ValueError):
        EndpointDelivery([], settings)


def test_json_without_usable_text_moves_to_the_next_candidate(settings):
    relay = CandidateEndpoint(url=RELAY, kind="relay")
    proxy = CandidateEndpoint(url=API_PROXY, kind="proxy")
    session = FakeSession(
        posts={
            RELAY: [make_response(200, {"error": "quota exceeded"})],
            API_PROXY: [make_response(200, {"questions": "real"})],
        }
    )
    delivery = EndpointDelivery([relay, proxy], settings, session=session)

    outcome = delivery.deliver("q")

    assert outcome.text == "real"
    assert outcome.endpoint == API_PROXY
    assert [a.outcome for a in outcome.attempts] == ["no_text", "ok"]


def test_only_unusable_json_bodies_raise_with_the_last_body(settings):
    session = FakeSession(posts={RELAY: [make_response(200, {"error": "quota exceeded"})]})
    delivery = EndpointDelivery([CandidateEndpoint(url=RELAY, kind="relay")], settings, session=session)

    with pytest.raises(DeliveryError) as excinfo:
        delivery.deliver("q")

    assert 'HTTP 200: {"error": "quota exceeded"}' in str(excinfo.value)
