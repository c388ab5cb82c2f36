"""Tests for the form-level service driving validation, delivery and downloads."""

from __future__ import annotations

import pytest

from fakes import BASE_URL, FakeSession, make_response
from paper_gen.data_models import UploadedPdf
from paper_gen.errors import DeliveryError, FileTooLarge, PaperGenError, SubmissionRejected
from paper_gen.services import GenerationService
from paper_gen.system import PaperSystem

RELAY = f"{BASE_URL}/api/generate-questions"


def build_service(service_config, session):
    return GenerationService(PaperSystem(service_config, session=session, configure_logs=False))


def test_default_query_prefills_the_form(service_config):
    PaperSystem(service_config, session=FakeSession(), configure_logs=False).settings_store.save(
        {"defaultQuery": "Ten MCQs on the attached chapter"}
    )
    service = build_service(service_config, FakeSession())
    assert service.submission.query == "Ten MCQs on the attached chapter"


def test_successful_submit_stores_result(service_config, pdf_upload):
    session = FakeSession(posts={RELAY: [make_response(200, {"questions": "Q1. Define mass."})]})
    service = build_service(service_config, session)

    service.attach_file(pdf_upload)
    text = service.submit(query="mass and weight")

    assert text == "Q1. Define mass."
    assert service.submission.result_text == "Q1. Define mass."
    assert service.submission.error is None
    assert service.submission.loading is False
    assert service.last_delivery.endpoint == RELAY


def test_validation_runs_before_any_request(service_config, pdf_upload):
    session = FakeSession()
    service = build_service(service_config, session)

    with pytest.raises(SubmissionRejected):
        service.submit(query="no file attached")
    assert service.submission.error == "Attach a PDF file first."

    with pytest.raises(SubmissionRejected):
        service.submit(query="   ", upload=pdf_upload)
    assert service.submission.error == "Enter a query."
    assert session.calls == []
    assert session.option_calls == []


def test_rejected_file_clears_the_previous_one(service_config, pdf_upload):
    config = service_config.model_copy(
        update={"uploads": service_config.uploads.model_copy(update={"max_bytes": 8})}
    )
    service = build_service(config, FakeSession())

    with pytest.raises(FileTooLarge):
        service.attach_file(pdf_upload)
    assert service.submission.file is None
    assert service.submission.error.startswith("PDF exceeds")


def test_failed_delivery_is_recorded_on_the_submission(service_config, pdf_upload):
    service = build_service(service_config, FakeSession())

    with pytest.raises(DeliveryError):
        service.submit(query="anything", upload=pdf_upload)

    assert service.submission.error.startswith("Network or CORS error")
    assert service.submission.result is None
    assert service.submission.loading is False


def test_saved_settings_apply_to_the_next_submission(service_config, pdf_upload):
    session = FakeSession(posts={RELAY: [make_response(200, {"result": "ok"})]})
    service = build_service(service_config, session)

    service.save_settings({"initialTimeoutMs": 7000})
    service.submit(query="q", upload=pdf_upload)

    assert session.calls[0]["timeout"] == 7.0


def test_reset_clears_form_state(service_config, pdf_upload):
    session = FakeSession(posts={RELAY: [make_response(200, {"result": "ok"})]})
    service = build_service(service_config, session)
    service.submit(query="q", upload=pdf_upload)

    service.reset()

    assert service.submission.file is None
    assert service.submission.query == ""
    assert service.submission.result is None
    assert service.last_delivery is None


def test_generate_paper_sends_catalog_pdf_with_sectioned_prompt(service_config):
    class_dir = service_config.paths.catalog_dir / "10"
    class_dir.mkdir(parents=True)
    (class_dir / "Physics.pdf").write_bytes(b"%PDF-1.4 physics")
    session = FakeSession(posts={RELAY: [make_response(200, {"questions": "Section A - MCQs"})]})
    service = build_service(service_config, session)

    text = service.generate_paper("10", "physics", 150)

    assert text == "Section A - MCQs"
    call = session.calls[0]
    prompt = call["data"]["query"]
    assert prompt.startswith('Generate a complete exam-style question paper for Class 10 in the subject "Physics"')
    assert "of total 100 marks" in prompt
    assert call["files"][0][1][0] == "Physics.pdf"


def test_generate_paper_with_unknown_subject(service_config):
    service = build_service(service_config, FakeSession())
    with pytest.raises(SubmissionRejected, match="No PDF for subject"):
        service.generate_paper("10", "Chemistry", 50)


def test_download_requires_a_result(service_config):
    service = build_service(service_config, FakeSession())
    with pytest.raises(PaperGenError, match="Nothing to download"):
        service.build_download("txt")


def test_save_download_writes_into_downloads_dir(service_config, pdf_upload):
    session = FakeSession(posts={RELAY: [make_response(200, "Q1. Define speed.", "text/plain")]})
    service = build_service(service_config, session)
    service.submit(query="Generate speed questions", upload=pdf_upload)

    target = service.save_download("txt")

    assert target.parent == service_config.paths.downloads_dir
    assert target.name.startswith("speed_questions_")
    assert target.suffix == ".txt"
    assert "Q1. Define speed." in target.read_text(encoding="utf-8")


def test_file_read_from_disk_is_typed_by_its_name(service_config, tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("not a pdf", encoding="utf-8")
    session = FakeSession()
    service = build_service(service_config, session)

    with pytest.raises(SubmissionRejected, match="Please upload a valid PDF file."):
        service.attach_file(UploadedPdf.from_path(notes))

    assert service.submission.file is None
    assert session.calls == []
