from __future__ import annotations
import re
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional
from docx import Document
from docx.shared import Pt
from reportlab.lib import colors
from reportlab.lib.pagesizes import A3, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import HRFlowable
from .markdown_renderer import is_alignment_row, split_cells
INLINE_BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]+')
class ExportError(RuntimeError):
    """Raised when a report cannot be exported."""
@dataclass
class Block:
    kind: str
    text: str = ""
    rows: List[List[str]] = field(default_factory=list)
def parse_blocks(markdown: str) -> List[Block]:
    """Split report markdown into export blocks.
    Kinds: ``h1``, ``h2``, ``quote``, ``bullet``, ``table``, ``rule`` and
    ``paragraph``. The first row of a table is its header row.
    """
    blocks: List[Block] = []
    table: Optional[Block] = None
    for raw in (markdown or "").replace("\r\n", "\n").split("\n"):
        line = raw.rstrip()
        if "|" in line:
            cells = split_cells(line)
            if table is None:
                table = Block("table")
                blocks.append(table)
            if cells and not is_alignment_row(cells):
                table.rows.append(cells)
            continue
        table = None
        if not line.strip():
            continue
        if line.startswith("# "):
            blocks.append(Block("h1", line[2:].strip()))
        elif line.startswith("## "):
            blocks.append(Block("h2", line[3:].strip()))
        elif line.startswith("> "):
            blocks.append(Block("quote", line[2:].strip()))
        elif line.startswith("* "):
            blocks.append(Block("bullet", line[2:].strip()))
        elif line.strip() == "---":
            blocks.append(Block("rule"))
        else:
            blocks.append(Block("paragraph", line.strip()))
    return [b for b in blocks if b.kind != "table" or b.rows]
def _inline_segments(text: str) -> List[tuple[str, bool]]:
    segments: List[tuple[str, bool]] = []
    pos = 0
    for match in INLINE_BOLD_PATTERN.finditer(text):
        if match.start() > pos:
            segments.append((text[pos : match.start()], False))
        segments.append((match.group(1), True))
        pos = match.end()
    if pos < len(text):
        segments.append((text[pos:], False))
    return segments
def _add_runs(paragraph, text: str) -> None:
    for chunk, bold in _inline_segments(text):
        run = paragraph.add_run(chunk)
        if bold:
            run.bold = True
def markdown_to_docx_bytes(markdown: str, title: str = "") -> bytes:
    doc = Document()
    style = doc.styles["Normal"]
    style.font.size = Pt(10)
    if title:
        doc.core_properties.title = title
    for block in parse_blocks(markdown):
        if block.kind == "h1":
            doc.add_heading(INLINE_BOLD_PATTERN.sub(r"\1", block.text), level=1)
        elif block.kind == "h2":
            doc.add_heading(INLINE_BOLD_PATTERN.sub(r"\1", block.text), level=2)
        elif block.kind == "quote":
            _add_runs(doc.add_paragraph(style="Quote"), block.text)
        elif block.kind == "bullet":
            _add_runs(doc.add_paragraph(style="List Bullet"), block.text)
        elif block.kind == "rule":
            doc.add_paragraph("")
        elif block.kind == "table":
            columns = max(len(row) for row in block.rows)
            table = doc.add_table(rows=0, cols=columns)
            table.style = "Table Grid"
            for row_index, row in enumerate(block.rows):
                cells = table.add_row().cells
                for col, value in enumerate(row):
                    paragraph = cells[col].paragraphs[0]
                    if row_index == 0:
                        paragraph.add_run(INLINE_BOLD_PATTERN.sub(r"\1", value)).bold = True
                    else:
                        _add_runs(paragraph, value)
        else:
            _add_runs(doc.add_paragraph(), block.text)
    buffer = BytesIO()
    try:
        doc.save(buffer)
    except Exception as exc:
        raise ExportError(f"DOCX export failed: {exc}") from exc
    return buffer.getvalue()
def _pdf_markup(text: str) -> str:
    safe_text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return INLINE_BOLD_PATTERN.sub(r"<b>\1</b>", safe_text)
def markdown_to_pdf_bytes(markdown: str, title: str = "") -> bytes:
    """Render the report as an A3 landscape PDF."""
    bio = BytesIO()
    doc = SimpleDocTemplate(
        bio,
        pagesize=landscape(A3),
        leftMargin=10 * mm,
        rightMargin=10 * mm,
        topMargin=10 * mm,
        bottomMargin=10 * mm,
        title=title or "A3 Summary",
    )
    styles = getSampleStyleSheet()
    body = ParagraphStyle("A3Body", parent=styles["Normal"], fontSize=10, leading=14, spaceAfter=6)
    quote = ParagraphStyle(
        "A3Quote", parent=body, leftIndent=12, textColor=colors.HexColor("#444444"), fontName="Helvetica-Oblique"
    )
    bullet = ParagraphStyle("A3Bullet", parent=body, leftIndent=14, bulletIndent=4)
    cell = ParagraphStyle("A3Cell", parent=body, spaceAfter=0)
    story: list = []
    for block in parse_blocks(markdown):
        if block.kind == "h1":
            story.append(Paragraph(_pdf_markup(block.text), styles["Heading1"]))
        elif block.kind == "h2":
            story.append(Paragraph(_pdf_markup(block.text), styles["Heading2"]))
        elif block.kind == "quote":
            story.append(Paragraph(_pdf_markup(block.text), quote))
        elif block.kind == "bullet":
            story.append(Paragraph(_pdf_markup(block.text), bullet, bulletText="•"))
        elif block.kind == "rule":
            story.append(HRFlowable(width="100%", thickness=0.5, color=colors.grey))
            story.append(Spacer(1, 4 * mm))
        elif block.kind == "table":
            columns = max(len(row) for row in block.rows)
            data = [
                [Paragraph(_pdf_markup(value), cell) for value in row] + [""] * (columns - len(row))
                for row in block.rows
            ]
            table = Table(data, colWidths=[doc.width / columns] * columns, repeatRows=1, hAlign="LEFT")
            table.setStyle(
                TableStyle(
                    [
                        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#e8eef7")),
                        ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ]
                )
            )
            story.append(table)
            story.append(Spacer(1, 4 * mm))
        else:
            story.append(Paragraph(_pdf_markup(block.text), body))
    if not story:
        story.append(Paragraph("", body))
    try:
        doc.build(story)
    except Exception as exc:
        raise ExportError(f"PDF export failed: {exc}") from exc
    return bio.getvalue()
def _safe_title(title: str) -> str:
    return UNSAFE_FILENAME_CHARS.sub("", re.sub(r"\s+", "_", (title or "").strip()))
def report_filename(title: str, suffix: str) -> str:
    return f"A3_Summary_{_safe_title(title) or 'UPS'}.{suffix.lstrip('.')}"
def project_filename(title: str, timestamp_ms: int) -> str:
    return f"UPS_Project_{_safe_title(title) or 'Untitled'}_{timestamp_ms}.json"
