from __future__ import annotations

import html
import re

BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
SECTION_RE = re.compile(r"^[ \t]*(Section\s+[A-Z0-9\-–].*)$", re.IGNORECASE | re.MULTILINE)
QUESTION_RE = re.compile(r"^[ \t]*(Q\d+\.)[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE)
OPTION_RE = re.compile(r"^[ \t]*([a-d])\)[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE)


def format_result_html(text: str) -> str:
    """
    Render generated exam text as HTML for display.

    The text is escaped first, then `**bold**` spans, "Section ..." headings, `Q<n>.`
    question lines and `a)`-`d)` option lines are styled. Blank-line runs become paragraph
    breaks and single newlines become `<br />`.
    """
    if not text:
        return ""
    out = html.escape(text, quote=True)
    out = BOLD_RE.sub(r"<strong>\1</strong>", out)
    out = SECTION_RE.sub(r'<h3 class="section-heading">\1</h3>', out)
    out = QUESTION_RE.sub(r'<p class="question"><strong>\1</strong> \2</p>', out)
    out = OPTION_RE.sub(r'<div class="option"><strong>\1)</strong> \2</div>', out)
    out = re.sub(r"\n{2,}", '</p><p class="paragraph">', out)
    out = out.replace("\n", "<br />")
    return f'<div class="paper"><p class="paragraph">{out}</p></div>'
