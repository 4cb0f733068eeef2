# src/ups_finalizer/workbook_loader.py
from __future__ import annotations
import logging
import re
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List
from openpyxl import load_workbook
logger = logging.getLogger(__name__)
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
WHY_PATTERN = re.compile(r"why\s*[1-5]|warum\s*[1-5]")
class WorkbookError(ValueError):
    """Raised when a gap-analysis workbook cannot be read."""
def _empty_extraction() -> Dict[str, Any]:
    return {
        "projectTitle": "",
        "problemData": {},
        "problemStatement": "",
        "rootCauseData": {},
        "measuresData": [],
        "sustainData": {},
        "reapplicationData": [],
    }
def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
def _load_rows(source: Path | bytes) -> Dict[str, List[List[str]]]:
    try:
        if isinstance(source, (bytes, bytearray)):
            wb = load_workbook(filename=BytesIO(source), data_only=True, read_only=True)
        else:
            wb = load_workbook(filename=str(source), data_only=True, read_only=True)
    except Exception as exc:
        raise WorkbookError(f"Excel parsing error: {exc}") from exc
    sheets: Dict[str, List[List[str]]] = {}
    try:
        for ws in wb.worksheets:
            sheets[ws.title] = [
                [_cell_text(value) for value in row] for row in ws.iter_rows(values_only=True)
            ]
    finally:
        wb.close()
    return sheets
def _scan_sheet(rows: List[List[str]], extracted: Dict[str, Any]) -> None:
    for row_index, row in enumerate(rows):
        below_row = rows[row_index + 1] if row_index + 1 < len(rows) else []
        for col_index, cell in enumerate(row):
            if not cell:
                continue
            cell_text = cell.lower()
            next_cell = row[col_index + 1] if col_index + 1 < len(row) else ""
            below_cell = below_row[col_index] if col_index < len(below_row) else ""
            neighbour = next_cell or below_cell
            if "projekt" in cell_text or "title" in cell_text:
                extracted["projectTitle"] = neighbour
            if "abweichung" in cell_text or "problem" in cell_text:
                if neighbour and not extracted["problemStatement"]:
                    extracted["problemStatement"] = neighbour
                    extracted["problemData"]["what"] = neighbour
            if "ursache" in cell_text or "warum" in cell_text or "grundursache" in cell_text:
                if neighbour and not extracted["rootCauseData"].get("identifiedCause"):
                    extracted["rootCauseData"]["identifiedCause"] = neighbour
            if WHY_PATTERN.search(cell_text):
                why_num = re.search(r"[1-5]", cell_text).group(0)
                extracted["rootCauseData"][f"why{why_num}"] = neighbour
            if ("aktion" in cell_text or "maßnahme" in cell_text or "action" in cell_text) and next_cell:
                if "plan" not in cell_text and len(next_cell) > 3:
                    extracted["measuresData"].append(
                        {"action": next_cell, "responsible": "", "dueDate": "", "status": "Offen"}
                    )
            if "standardis" in cell_text or "sop" in cell_text or "opl" in cell_text:
                if next_cell and not extracted["sustainData"].get("standardization"):
                    extracted["sustainData"]["standardization"] = next_cell
def _dedupe_measures(measures: List[Dict[str, str]]) -> List[Dict[str, str]]:
    unique: List[Dict[str, str]] = []
    seen = set()
    for measure in measures:
        action = measure.get("action")
        if action and action not in seen:
            seen.add(action)
            unique.append(measure)
    return unique
def extract_gap_analysis(source: Path | bytes) -> Dict[str, Any]:
    """Scan every sheet of a gap-analysis workbook for UPS keywords.
    A label cell's value is taken from its right neighbour, or from the
    cell below when the right one is empty.
    """
    extracted = _empty_extraction()
    sheets = _load_rows(source)
    for name, rows in sheets.items():
        logger.debug("Scanning sheet %s (%d rows)", name, len(rows))
        _scan_sheet(rows, extracted)
    extracted["measuresData"] = _dedupe_measures(extracted["measuresData"])
    return extracted
def map_to_form_fields(extracted: Dict[str, Any]) -> Dict[str, Any]:
    problem = extracted.get("problemData") or {}
    root = extracted.get("rootCauseData") or {}
    sustain = extracted.get("sustainData") or {}
    return {
        "projectTitle": extracted.get("projectTitle") or "",
        "teamName": extracted.get("teamName") or "",
        "businessImpact": extracted.get("businessImpact") or "",
        "largeVagueProblem": extracted.get("largeVagueProblem") or "",
        "what": problem.get("what") or "",
        "where": problem.get("where") or "",
        "when": problem.get("when") or "",
        "who": problem.get("who") or "",
        "which": problem.get("which") or "",
        "how": problem.get("how") or "",
        "howMuch": problem.get("howMuch") or "",
        "problemStatement": extracted.get("problemStatement") or "",
        "ishikawaMensch": root.get("ishikawaMensch") or "",
        "ishikawaMaschine": root.get("ishikawaMaschine") or "",
        "ishikawaMethode": root.get("ishikawaMethode") or "",
        "ishikawaMaterial": root.get("ishikawaMaterial") or "",
        "ishikawaUmgebung": root.get("ishikawaUmgebung") or "",
        "why1": root.get("why1") or "",
        "why2": root.get("why2") or "",
        "why3": root.get("why3") or "",
        "why4": root.get("why4") or "",
        "why5": root.get("why5") or "",
        "rootCause": root.get("identifiedCause") or "",
        "verification": root.get("verification") or "",
        "validation": sustain.get("validation") or "",
        "beforeAfter": sustain.get("beforeAfter") or "",
        "standardization": sustain.get("standardization") or "",
        "followUp": sustain.get("followUp") or "",
        "countermeasures": list(extracted.get("measuresData") or []),
        "reapplicationAreas": list(extracted.get("reapplicationData") or []),
    }
