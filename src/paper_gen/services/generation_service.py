"""Service layer for the generate form - keeps front ends away from delivery internals.

The CLI and the Streamlit page both drive a `GenerationService`: it owns the single
in-flight `Submission`, validates before anything touches the network, and records
errors on the submission so the caller can show them inline as well as in a toast.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from paper_gen.catalog import build_paper_prompt, clamp_total_marks
from paper_gen.data_models import AppSettings, Submission, UploadedPdf
from paper_gen.delivery import DeliveryResult
from paper_gen.errors import PaperGenError, SubmissionRejected
from paper_gen.rendering import DownloadArtifact, build_download
from paper_gen.rendering.download import DownloadFormat
from paper_gen.system import PaperSystem
from paper_gen.utils.files import ensure_parent

logger = logging.getLogger(__name__)


class GenerationService:
    """Drive one submission at a time against a `PaperSystem`."""

    def __init__(self, system: PaperSystem):
        self.system = system
        self.settings = system.load_settings()
        self.submission = Submission(query=self.settings.default_query)
        self.last_delivery: Optional[DeliveryResult] = None

    # settings

    def reload_settings(self) -> AppSettings:
        self.settings = self.system.load_settings()
        return self.settings

    def save_settings(self, values: Union[AppSettings, Mapping[str, Any]]) -> AppSettings:
        self.settings = self.system.settings_store.save(values)
        return self.settings

    def reset_settings(self) -> AppSettings:
        self.settings = self.system.settings_store.reset()
        return self.settings

    # form state

    def attach_file(self, upload: Optional[UploadedPdf]) -> None:
        """Validate and hold a file; a rejected file clears the previous one."""
        if upload is None:
            self.submission.file = None
            return
        try:
            self.system.guard.check_file(upload)
        except SubmissionRejected as exc:
            self.submission.file = None
            self.submission.error = exc.message
            raise
        self.submission.error = None
        self.submission.file = upload

    def set_query(self, query: str) -> None:
        self.submission.query = query

    def reset(self) -> None:
        self.submission = Submission()
        self.last_delivery = None

    def submit(self, query: Optional[str] = None, upload: Optional[UploadedPdf] = None) -> str:
        """
        Validate, deliver and store the generated text.

        `query` and `upload` override the held form values for this call. Any
        `PaperGenError` is recorded on the submission and re-raised.
        """
        state = self.submission
        state.error = None
        state.result = None
        if query is not None:
            state.query = query
        if upload is not None:
            state.file = upload

        try:
            validated = self.system.guard.check(state.file, state.query)
        except SubmissionRejected as exc:
            state.error = exc.message
            raise

        state.loading = True
        try:
            outcome = self.system.delivery(self.settings).deliver(validated.query, validated.upload)
        except PaperGenError as exc:
            state.error = str(exc)
            logger.warning("Generation failed: %s", exc)
            raise
        finally:
            state.loading = False

        state.result = outcome.result
        self.last_delivery = outcome
        logger.info("Generated %d characters via %s", len(outcome.text), outcome.endpoint)
        return outcome.text

    def generate_paper(self, class_name: str, subject: str, total_marks: float) -> str:
        """Load a catalog PDF, build the sectioned exam prompt for it, and submit both."""
        source = self.system.catalog.find(class_name, subject)
        if source is None:
            raise SubmissionRejected(
                f"No PDF for subject {subject!r} in class {class_name!r}.", title="Select PDF"
            )
        marks = clamp_total_marks(total_marks)
        prompt = build_paper_prompt(source.subject, class_name, marks)
        self.attach_file(self.system.catalog.load(source))
        return self.submit(query=prompt)

    # downloads

    def build_download(self, fmt: DownloadFormat = "pdf", moment: Optional[datetime] = None) -> DownloadArtifact:
        text = self.submission.result_text
        if not text:
            raise PaperGenError("Nothing to download yet.")
        return build_download(text, self.submission.query, fmt=fmt, moment=moment)

    def save_download(self, fmt: DownloadFormat = "pdf", directory: Optional[Path] = None) -> Path:
        artifact = self.build_download(fmt)
        target = ensure_parent((directory or self.system.config.paths.downloads_dir) / artifact.filename)
        target.write_bytes(artifact.data)
        logger.info("Saved %s", target)
        return target
