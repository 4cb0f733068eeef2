from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from .document_loader import DocumentError, extract_pdf_text
from .gemini_client import GeminiClient
from .project import Countermeasure, FIELD_KEYS, ReapplicationArea, UPSProject
from .prompt_builder import build_extraction_prompt, extract_json_block
from .workbook_loader import EXCEL_SUFFIXES, WorkbookError, extract_gap_analysis, map_to_form_fields
logger = logging.getLogger(__name__)
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
EXTRACTION_TEMPERATURE = 0.1
PDF_MIMETYPE = "application/pdf"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
class UploadError(ValueError):
    """Raised when an uploaded gap analysis cannot be used for auto-fill."""
def detect_file_type(filename: str, mimetype: str = "") -> str:
    suffix = Path(filename or "").suffix.lower()
    if suffix == ".pdf" or mimetype == PDF_MIMETYPE:
        return "pdf"
    if suffix in EXCEL_SUFFIXES or mimetype == XLSX_MIMETYPE:
        return "excel"
    return "unknown"
def validate_upload(filename: str, size: int, mimetype: str = "") -> str:
    if not filename:
        raise UploadError("Keine Datei ausgewählt")
    file_type = detect_file_type(filename, mimetype)
    if file_type == "unknown":
        raise UploadError("Nur PDF und Excel (.xlsx) Dateien werden unterstützt")
    if size > MAX_UPLOAD_BYTES:
        raise UploadError("Datei zu groß. Maximum 10MB")
    return file_type
def _extract_from_pdf(data: bytes, client: Optional[GeminiClient]) -> Dict[str, Any]:
    if client is None:
        raise UploadError("API Key erforderlich für PDF-Analyse")
    try:
        text = extract_pdf_text(data)
    except DocumentError as exc:
        raise UploadError(str(exc)) from exc
    if not text:
        raise UploadError("PDF enthält keinen lesbaren Text. Bitte Daten manuell eingeben.")
    prompt = build_extraction_prompt() + "\n\nDokument:\n" + text
    response = client.generate_content(prompt, temperature=EXTRACTION_TEMPERATURE)
    try:
        data_out = json.loads(extract_json_block(response))
    except json.JSONDecodeError as exc:
        logger.error("Extraction response was not JSON: %s", response[:500])
        raise UploadError(
            "Konnte extrahierte Daten nicht verarbeiten. Bitte PDF manuell eingeben."
        ) from exc
    if not isinstance(data_out, dict):
        raise UploadError("Konnte extrahierte Daten nicht verarbeiten. Bitte PDF manuell eingeben.")
    return data_out
def extract_data_from_file(
    filename: str,
    data: bytes,
    client: Optional[GeminiClient] = None,
    mimetype: str = "",
) -> Dict[str, Any]:
    """Return flat camelCase form fields extracted from an uploaded file."""
    file_type = validate_upload(filename, len(data), mimetype)
    if file_type == "excel":
        try:
            return map_to_form_fields(extract_gap_analysis(data))
        except WorkbookError as exc:
            raise UploadError(str(exc)) from exc
    return _extract_from_pdf(data, client)
def apply_extracted_data(project: UPSProject, extracted: Dict[str, Any]) -> UPSProject:
    for attr, key in FIELD_KEYS.items():
        value = extracted.get(key)
        if isinstance(value, str) and value.strip():
            setattr(project, attr, value.strip())
    measures = [
        Countermeasure.from_dict(item)
        for item in extracted.get("countermeasures") or []
        if isinstance(item, dict)
    ]
    measures = [m for m in measures if not m.is_empty()]
    if measures:
        project.countermeasures = measures
    areas = [
        ReapplicationArea.from_dict(item)
        for item in extracted.get("reapplicationAreas") or []
        if isinstance(item, dict)
    ]
    areas = [a for a in areas if not a.is_empty()]
    if areas:
        project.reapplication_areas = areas
    return project
