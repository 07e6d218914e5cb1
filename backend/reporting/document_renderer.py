"""
Paginated document layout with bold dynamic values, rendered to PDF via ReportLab.

Layout is computed first into a plain model (pages of positioned text runs, in
millimetres from the top-left corner). The footer pass runs once layout is
complete, because "Page i / N" needs the final page count. Only then is the
model drawn onto a ReportLab canvas.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Sequence, Tuple

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FOOTER_GRAY = 120 / 255


@dataclass(frozen=True)
class PageGeometry:
    """A4 portrait in millimetres; y grows downwards from the top edge."""
    width: float = 210.0
    height: float = 297.0
    left_margin: float = 14.0
    right_margin: float = 14.0
    title_y: float = 15.0
    top_y: float = 25.0
    bottom_margin: float = 20.0
    line_height: float = 7.0
    footer_offset: float = 10.0
    title_size: float = 16.0
    body_size: float = 11.0
    footer_size: float = 9.0

    @property
    def usable_width(self) -> float:
        return self.width - self.left_margin - self.right_margin

    @property
    def max_y(self) -> float:
        """A line may be drawn at y <= max_y; beyond that a new page starts."""
        return self.height - self.bottom_margin

    @property
    def lines_per_page(self) -> int:
        return int((self.max_y - self.top_y) // self.line_height) + 1


A4 = PageGeometry()


@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    y: float
    font: str = FONT_REGULAR
    size: float = 11.0
    gray: float = 0.0

    @property
    def bold(self) -> bool:
        return self.font == FONT_BOLD


@dataclass
class Page:
    number: int
    runs: List[TextRun] = field(default_factory=list)

    def text_lines(self) -> List[str]:
        """Runs joined per baseline, top to bottom (for previews and tests)."""
        by_y: dict[float, List[TextRun]] = {}
        for r in self.runs:
            by_y.setdefault(r.y, []).append(r)
        return ["".join(r.text for r in sorted(rs, key=lambda r: r.x)) for _, rs in sorted(by_y.items())]


def text_width(text: str, font: str = FONT_REGULAR, size: float = 11.0) -> float:
    """Rendered width in millimetres."""
    return stringWidth(text, font, size) / mm


def _split_long_word(word: str, width: float, font: str, size: float) -> List[str]:
    """Character chunks of `word`, each no wider than `width` (at least one char per chunk)."""
    chunks: List[str] = []
    current = ""
    for ch in word:
        if current and text_width(current + ch, font, size) > width:
            chunks.append(current)
            current = ch
        else:
            current += ch
    if current:
        chunks.append(current)
    return chunks


def wrap_text(text: str, width: float, font: str = FONT_REGULAR, size: float = 11.0) -> List[str]:
    """
    Break text into display lines no wider than `width` mm.

    Explicit newlines always break; blank lines are kept. A word wider than
    the line is cut into character chunks that each fit.
    """
    lines: List[str] = []
    space = text_width(" ", font, size)
    for paragraph in text.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current: List[str] = []
        current_w = -space
        for word in words:
            w = text_width(word, font, size)
            if w > width:
                if current:
                    lines.append(" ".join(current))
                *full, word = _split_long_word(word, width, font, size)
                lines.extend(full)
                current, current_w = [word], text_width(word, font, size)
            elif current and current_w + space + w > width:
                lines.append(" ".join(current))
                current, current_w = [word], w
            else:
                current.append(word)
                current_w += space + w
        lines.append(" ".join(current))
    return lines


def split_bold_runs(line: str, dynamic_values: Sequence[str]) -> List[Tuple[str, bool]]:
    """
    Split a display line into (text, bold) runs.

    On each pass the first value *in dynamic_values order* found anywhere in
    the remaining text wins, even when another value occurs earlier in the
    line or a longer value starts at the same position. The text before it
    is normal, the value itself bold, and scanning resumes after it.
    """
    values = [v for v in dynamic_values if v]
    runs: List[Tuple[str, bool]] = []
    remaining = line
    while remaining:
        for val in values:
            idx = remaining.find(val)
            if idx != -1:
                if idx > 0:
                    runs.append((remaining[:idx], False))
                runs.append((val, True))
                remaining = remaining[idx + len(val):]
                break
        else:
            runs.append((remaining, False))
            remaining = ""
    return runs


@dataclass
class RenderedDocument:
    title: str
    filename: str
    pages: List[Page]
    geometry: PageGeometry = A4

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def to_pdf(self) -> bytes:
        g = self.geometry
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(g.width * mm, g.height * mm), pageCompression=1)
        c.setTitle(self.title)
        for page in self.pages:
            for run in page.runs:
                c.setFont(run.font, run.size)
                c.setFillGray(run.gray)
                c.drawString(run.x * mm, (g.height - run.y) * mm, run.text)
            c.showPage()
        c.save()
        return buf.getvalue()


class DocumentLayout:
    """
    Cursor-driven page builder.

    The cursor starts at geometry.top_y on every page and advances by the
    caller's line height. A page break happens before drawing whenever the
    cursor has moved past geometry.max_y.
    """

    def __init__(self, geometry: PageGeometry = A4):
        self.geometry = geometry
        self.pages: List[Page] = [Page(number=1)]
        self.y = geometry.top_y
        self._finished = False

    @property
    def page(self) -> Page:
        return self.pages[-1]

    def stamp_title(self, title: str) -> None:
        """Centred bold title on the current page (callers stamp it on page 1 only)."""
        g = self.geometry
        w = text_width(title, FONT_BOLD, g.title_size)
        self.page.runs.append(TextRun(title, (g.width - w) / 2, g.title_y, FONT_BOLD, g.title_size))

    def new_page(self) -> None:
        self.pages.append(Page(number=len(self.pages) + 1))
        self.y = self.geometry.top_y

    def ensure_room(self) -> None:
        if self.y > self.geometry.max_y:
            self.new_page()

    def write_runs(self, runs: Sequence[Tuple[str, bool]], size: float | None = None,
                   line_height: float | None = None, x: float | None = None) -> None:
        """Draw one line of (text, bold) runs left to right, then advance the cursor."""
        g = self.geometry
        size = g.body_size if size is None else size
        self.ensure_room()
        cursor_x = g.left_margin if x is None else x
        for text, bold in runs:
            font = FONT_BOLD if bold else FONT_REGULAR
            self.page.runs.append(TextRun(text, cursor_x, self.y, font, size))
            cursor_x += text_width(text, font, size)
        self.y += g.line_height if line_height is None else line_height

    def flow(self, body: str, dynamic_values: Sequence[str] = ()) -> None:
        """Wrap body to the usable width and draw it, bolding dynamic values."""
        g = self.geometry
        for line in wrap_text(body, g.usable_width, FONT_REGULAR, g.body_size):
            self.write_runs(split_bold_runs(line, dynamic_values))

    def write_paragraph(self, text: str, bold: bool = False, size: float | None = None,
                        line_height: float | None = None) -> None:
        g = self.geometry
        size = g.body_size if size is None else size
        font = FONT_BOLD if bold else FONT_REGULAR
        for line in wrap_text(text, g.usable_width, font, size):
            self.write_runs([(line, bold)], size=size, line_height=line_height)

    def write_table(self, header: Tuple[str, str], rows: Sequence[Tuple[str, str]],
                    size: float = 10.0, row_height: float = 10.0, padding: float = 3.0) -> None:
        """Two-column key/value table spanning the usable width, all cells bold."""
        g = self.geometry
        value_x = g.left_margin + g.usable_width / 2 + padding
        baseline = row_height / 2 + size * 0.35 / 2 + 1.0
        for label, value in [header, *rows]:
            if self.y + row_height > g.height - g.bottom_margin:
                self.new_page()
            y = self.y + baseline
            self.page.runs.append(TextRun(label, g.left_margin + padding, y, FONT_BOLD, size))
            self.page.runs.append(TextRun(value, value_x, y, FONT_BOLD, size))
            self.y += row_height

    def advance(self, dy: float) -> None:
        self.y += dy

    def finish(self, title: str, filename: str) -> RenderedDocument:
        """Footer pass: stamp "Page i / N" on every page now that N is known."""
        if self._finished:
            raise RuntimeError("layout already finished")
        self._finished = True
        g = self.geometry
        total = len(self.pages)
        for page in self.pages:
            label = f"Page {page.number} / {total}"
            w = text_width(label, FONT_REGULAR, g.footer_size)
            page.runs.append(
                TextRun(label, (g.width - w) / 2, g.height - g.footer_offset, FONT_REGULAR, g.footer_size, FOOTER_GRAY)
            )
        return RenderedDocument(title=title, filename=filename, pages=self.pages, geometry=g)


def render_flowed_document(
    title: str,
    body: str,
    dynamic_values: Sequence[str],
    filename: str,
    geometry: PageGeometry = A4,
) -> RenderedDocument:
    """Title on page 1, flowed body with bold dynamic values, page-number footer."""
    layout = DocumentLayout(geometry)
    layout.stamp_title(title)
    layout.flow(body, dynamic_values)
    return layout.finish(title, filename)
