"""Document text extraction tests."""

import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from ups_finalizer.document_loader import DocumentError, docx_to_markdown, extract_pdf_text, load_report_source
from ups_finalizer.report_export import markdown_to_docx_bytes, markdown_to_pdf_bytes


def test_pdf_pages_are_marked() -> None:
    text = extract_pdf_text(markdown_to_pdf_bytes("# Motor\nLager defekt"))
    assert text.startswith("[Seite 1]\n")
    assert "Motor" in text
    assert "Lager defekt" in text


def test_pdf_text_is_capped() -> None:
    text = extract_pdf_text(markdown_to_pdf_bytes("Lager defekt " * 50), max_chars=20)
    assert len(text) == 20


def test_broken_pdf_raises() -> None:
    with pytest.raises(DocumentError):
        extract_pdf_text(b"%PDF-garbage")


def test_docx_report_converts_back_to_markdown() -> None:
    data = markdown_to_docx_bytes(
        "# A3 Summary: Linie 3\n## 1. Problem\n> Impact\n* **Why 1:** Sensor\n| Nr. | Status |\n| --- | --- |\n| 1 | Offen |"
    )
    assert docx_to_markdown(data).split("\n") == [
        "# A3 Summary: Linie 3",
        "## 1. Problem",
        "> Impact",
        "* **Why 1:** Sensor",
        "| Nr. | Status |",
        "| --- | --- |",
        "| 1 | Offen |",
    ]


def test_load_report_source(tmp_path) -> None:
    path = tmp_path / "report.md"
    path.write_text("# A3\n", encoding="utf-8")
    assert load_report_source(path) == "# A3\n"
    with pytest.raises(DocumentError):
        load_report_source(tmp_path / "image.png")
