from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from paper_gen.data_models import PDF_MIME, UploadedPdf
from paper_gen.utils.files import collect_pdfs

MIN_TOTAL_MARKS = 20
MAX_TOTAL_MARKS = 100
UNSORTED_CLASS = "Other"


@dataclass(frozen=True)
class PaperSource:
    """One syllabus PDF in the catalog, filed under a class folder."""

    path: Path
    class_name: str

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def subject(self) -> str:
        return self.path.stem


class PaperCatalog:
    """Index of bundled syllabus PDFs laid out as `<root>/<class>/**/<subject>.pdf`."""

    def __init__(self, root: Path):
        self.root = root
        self._by_class: Optional[Dict[str, List[PaperSource]]] = None

    def _index(self) -> Dict[str, List[PaperSource]]:
        if self._by_class is None:
            grouped: Dict[str, List[PaperSource]] = {}
            for path in collect_pdfs(self.root):
                parts = path.relative_to(self.root).parts
                class_name = parts[0] if len(parts) > 1 else UNSORTED_CLASS
                grouped.setdefault(class_name, []).append(PaperSource(path=path, class_name=class_name))
            self._by_class = grouped
        return self._by_class

    def refresh(self) -> None:
        self._by_class = None

    def classes(self) -> List[str]:
        return sorted(self._index())

    def subjects(self, class_name: str) -> List[PaperSource]:
        return list(self._index().get(class_name, []))

    def find(self, class_name: str, subject: str) -> Optional[PaperSource]:
        wanted = subject.lower().removesuffix(".pdf")
        for source in self.subjects(class_name):
            if source.subject.lower() == wanted:
                return source
        return None

    def load(self, source: PaperSource) -> UploadedPdf:
        return UploadedPdf.from_path(source.path, content_type=PDF_MIME)


def clamp_total_marks(value: float) -> int:
    if math.isnan(value):
        raise ValueError("Total marks must be a number.")
    return min(MAX_TOTAL_MARKS, max(MIN_TOTAL_MARKS, math.floor(value)))


def build_paper_prompt(subject: str, class_name: str, total_marks: int) -> str:
    """Prompt asking the generator for a complete sectioned exam paper worth `total_marks`."""
    return (
        f'Generate a complete exam-style question paper for Class {class_name} in the subject "{subject}" '
        f"of total {total_marks} marks.\n\n"
        "Structure requirements:\n"
        "1) Section A - MCQs: allocate between 10% and 20% of total marks to MCQs. Each MCQ should be 1 mark "
        "and include four options labeled a), b), c), d). Number all MCQs sequentially (Q1, Q2, ...).\n"
        "2) Section B - Short Questions: allocate between 30% and 40% of total marks. Each short question "
        "should be 4 or 5 marks. Number questions sequentially continuing from MCQs.\n"
        "3) Section C - Long Questions: allocate between 30% and 40% of total marks. Each long question "
        "should be 8 to 10 marks. Number questions sequentially continuing from Section B.\n\n"
        "Content and formatting instructions:\n"
        "- Provide actual question text for every item (do NOT output only a scheme).\n"
        "- For MCQs include clear options (a/b/c/d) and ensure only one correct option logically exists "
        "(do NOT reveal answers).\n"
        "- Short and long questions should be clear, exam-style (descriptive, conceptual or numerical as "
        "appropriate), and require the indicated length of answer.\n"
        '- Use headings exactly: "Section A - MCQs", "Section B - Short Questions", "Section C - Long Questions".\n'
        "- Use numbering like Q1, Q2, Q3 ... across the paper.\n"
        f"- Ensure the marks per question and number of questions sum exactly to the total {total_marks} marks. "
        "If multiple valid distributions exist, choose a balanced distribution that fits the percentage ranges "
        "and explain the distribution briefly at the top in one line.\n"
        "- Do NOT provide answers or solutions.\n"
        "- Keep layout professional and easy to read (use line breaks, headings, and spacing similar to an "
        "exam paper).\n\n"
        "Output only the exam paper text (no metadata, no commentary)."
    )
