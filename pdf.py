from pathlib import Path
from typing import List
import logging

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from schema import Question

logger = logging.getLogger(__name__)


def _register_font() -> str:
    # the built-in fonts have no glyphs for − × ÷ or emoji
    here = Path(__file__).resolve().parent
    candidates = [
        here / "fonts" / "DejaVuSans.ttf",
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    ]
    for p in candidates:
        if not p.exists():
            continue
        try:
            pdfmetrics.registerFont(TTFont("Quiz", str(p)))
            return "Quiz"
        except Exception as e:
            logger.warning("font register failed for %s: %s", p, e)
    return "Helvetica"


FONT_NAME = _register_font()


def render_pdf(path: str, title: str, questions: List[Question], with_answers: bool = False) -> None:
    """Write a printable worksheet; with_answers turns it into the answer key."""
    c = canvas.Canvas(path, pagesize=A4)
    W, H = A4
    margin = 15 * mm
    lh = 8 * mm
    x = margin
    y = H - margin
    max_width = W - 2 * margin

    c.setFont(FONT_NAME, 14)
    c.drawString(x, y, title)
    y -= 1.5 * lh

    for i, q in enumerate(questions, start=1):
        c.setFont(FONT_NAME, 9)
        if y < margin + 2 * lh:
            c.showPage(); y = H - margin; c.setFont(FONT_NAME, 9)
        c.drawString(x, y, f"Question {i} · {q.kind}")
        y -= 0.7 * lh

        c.setFont(FONT_NAME, 11)
        line = q.prompt
        if with_answers:
            line += f"   Answer: {q.answer}"
        else:
            line += "   ________"
        for seg in simpleSplit(line, FONT_NAME, 11, max_width):
            if y < margin + lh:
                c.showPage(); y = H - margin; c.setFont(FONT_NAME, 11)
            c.drawString(x, y, seg); y -= lh

        y -= 0.5 * lh

    c.save()
