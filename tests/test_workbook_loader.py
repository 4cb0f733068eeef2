"""Gap-analysis workbook scanning tests."""

import os
import sys
from io import BytesIO

import pytest
from openpyxl import Workbook

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from ups_finalizer.workbook_loader import WorkbookError, extract_gap_analysis, map_to_form_fields


def _workbook_bytes(rows, extra_sheet=None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Gap"
    for row in rows:
        ws.append(row)
    if extra_sheet:
        other = wb.create_sheet("Actions")
        for row in extra_sheet:
            other.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


ROWS = [
    ["Projekt", "Linie 3 Stillstand"],
    ["Problem", "Zu viele Stopps"],
    ["Why 1", "Sensor verschmutzt"],
    ["Grundursache", "Kein Reinigungsplan"],
    ["Maßnahme", "Reinigungsplan einführen"],
    ["Standardisierung", "OPL erstellt"],
]


def test_extracts_labelled_values(tmp_path) -> None:
    path = tmp_path / "gap.xlsx"
    path.write_bytes(_workbook_bytes(ROWS))
    extracted = extract_gap_analysis(path)
    assert extracted["projectTitle"] == "Linie 3 Stillstand"
    assert extracted["problemStatement"] == "Zu viele Stopps"
    assert extracted["problemData"]["what"] == "Zu viele Stopps"
    assert extracted["rootCauseData"]["why1"] == "Sensor verschmutzt"
    assert extracted["rootCauseData"]["identifiedCause"] == "Kein Reinigungsplan"
    assert extracted["measuresData"] == [
        {"action": "Reinigungsplan einführen", "responsible": "", "dueDate": "", "status": "Offen"}
    ]
    assert extracted["sustainData"]["standardization"] == "OPL erstellt"


def test_value_below_label_is_used() -> None:
    extracted = extract_gap_analysis(_workbook_bytes([["Problem"], ["Motor überhitzt"]]))
    assert extracted["problemStatement"] == "Motor überhitzt"


def test_measures_are_deduplicated_across_sheets() -> None:
    data = _workbook_bytes(
        [["Action", "Filter tauschen"]],
        extra_sheet=[["Action", "Filter tauschen"], ["Aktion", "ok"], ["Action Plan", "Jahresplan 2024"]],
    )
    measures = extract_gap_analysis(data)["measuresData"]
    assert [m["action"] for m in measures] == ["Filter tauschen"]


def test_map_to_form_fields_flattens() -> None:
    fields = map_to_form_fields(extract_gap_analysis(_workbook_bytes(ROWS)))
    assert fields["projectTitle"] == "Linie 3 Stillstand"
    assert fields["what"] == "Zu viele Stopps"
    assert fields["why1"] == "Sensor verschmutzt"
    assert fields["rootCause"] == "Kein Reinigungsplan"
    assert fields["standardization"] == "OPL erstellt"
    assert fields["teamName"] == ""
    assert len(fields["countermeasures"]) == 1
    assert fields["reapplicationAreas"] == []


def test_unreadable_workbook_raises() -> None:
    with pytest.raises(WorkbookError):
        extract_gap_analysis(b"not a workbook")
