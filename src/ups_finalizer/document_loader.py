from __future__ import annotations
import logging
from io import BytesIO
from pathlib import Path
from typing import List
from docx import Document
from docx.table import Table
from pypdf import PdfReader
from pypdf.errors import PyPdfError
logger = logging.getLogger(__name__)
MARKDOWN_SUFFIXES = {".md", ".markdown", ".txt"}
DOCX_SUFFIXES = {".docx"}
MAX_PDF_CHARS = 30_000
class DocumentError(ValueError):
    """Raised when an input document cannot be turned into text."""
def extract_pdf_text(data: bytes, max_chars: int = MAX_PDF_CHARS) -> str:
    """Return the text of every non-empty page under a ``[Seite N]`` marker.
    Text beyond ``max_chars`` is cut off to keep the extraction prompt small.
    """
    try:
        reader = PdfReader(BytesIO(data))
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except (PyPdfError, ValueError) as exc:
        raise DocumentError(f"PDF konnte nicht gelesen werden: {exc}") from exc
    text = "\n\n".join(f"[Seite {n}]\n{page}" for n, page in enumerate(pages, start=1) if page)
    if len(text) > max_chars:
        logger.info("PDF text truncated from %d to %d chars", len(text), max_chars)
        text = text[:max_chars]
    return text
def _paragraph_markdown(paragraph) -> str:
    text = "".join(
        f"**{run.text}**" if run.bold and run.text.strip() else run.text for run in paragraph.runs
    ).strip()
    if not text:
        return ""
    style = paragraph.style.name.lower() if paragraph.style is not None else ""
    if style == "heading 1" or style == "title":
        return f"# {paragraph.text.strip()}"
    if style.startswith("heading"):
        return f"## {paragraph.text.strip()}"
    if style == "quote":
        return f"> {text}"
    if style.startswith("list"):
        return f"* {text}"
    return text
def _table_markdown(table: Table) -> List[str]:
    lines: List[str] = []
    for index, row in enumerate(table.rows):
        cells = [cell.text.strip() for cell in row.cells]
        lines.append("| " + " | ".join(cells) + " |")
        if index == 0:
            lines.append("| " + " | ".join("---" for _ in cells) + " |")
    return lines
def docx_to_markdown(data: bytes) -> str:
    """Convert a Word report back into the report markdown dialect."""
    try:
        doc = Document(BytesIO(data))
    except Exception as exc:
        raise DocumentError(f"DOCX konnte nicht gelesen werden: {exc}") from exc
    lines: List[str] = []
    for block in doc.iter_inner_content():
        if isinstance(block, Table):
            lines.extend(_table_markdown(block))
            continue
        line = _paragraph_markdown(block)
        if line:
            lines.append(line)
    return "\n".join(lines)
def load_report_source(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in MARKDOWN_SUFFIXES:
        return path.read_text(encoding="utf-8")
    if suffix in DOCX_SUFFIXES:
        return docx_to_markdown(path.read_bytes())
    raise DocumentError(f"Unsupported report source: {suffix}")
