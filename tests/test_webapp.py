"""Flask route tests with Gemini patched out."""

import json
import os
import sys
from io import BytesIO
from unittest.mock import patch

import pytest
from openpyxl import Workbook

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import webapp
from ups_finalizer.gemini_client import GeminiClient, GeminiError
from ups_finalizer.storage import load_session


FORM = {
    "projectTitle": "Linie 3",
    "problemStatement": "Zu viele Stopps",
    "rootCause": "Sensor verschmutzt",
    "cm_action_0": "Reinigen",
    "cm_responsible_0": "Meier",
    "cm_status_0": "Geplant",
}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("UPS_FINALIZER_HOME", str(tmp_path))
    monkeypatch.delenv("TELEMETRY_DIR", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    webapp.app.config["TESTING"] = True
    with webapp.app.test_client() as test_client:
        yield test_client


@pytest.fixture
def keyed_client(client, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return client


def test_index_shows_key_gate_without_key(client) -> None:
    html = client.get("/").get_data(as_text=True)
    assert "Gemini API Key erforderlich" in html
    assert "upsForm" not in html


def test_api_key_is_validated_and_stored(client, tmp_path) -> None:
    with patch.object(GeminiClient, "validate_key", return_value=False):
        html = client.post("/api-key", data={"api_key": "bad"}, follow_redirects=True).get_data(as_text=True)
    assert "Ungültiger Key" in html
    assert not (tmp_path / "credentials.json").exists()
    with patch.object(GeminiClient, "validate_key", return_value=True):
        html = client.post("/api-key", data={"api_key": "good"}, follow_redirects=True).get_data(as_text=True)
    assert "Key gültig!" in html
    assert json.loads((tmp_path / "credentials.json").read_text(encoding="utf-8"))["api_key"] == "good"
    assert "upsForm" in html


def test_save_persists_form(keyed_client) -> None:
    keyed_client.post("/save", data=FORM)
    project = load_session().project
    assert project.project_title == "Linie 3"
    assert [cm.action for cm in project.countermeasures] == ["Reinigen"]
    html = keyed_client.get("/").get_data(as_text=True)
    assert 'value="Linie 3"' in html


def test_generate_requires_fields(keyed_client) -> None:
    with patch.object(GeminiClient, "generate_content") as generate:
        html = keyed_client.post("/generate", data={"projectTitle": "Nur Titel"}, follow_redirects=True).get_data(
            as_text=True
        )
    generate.assert_not_called()
    assert "Bitte mindestens ausfüllen" in html


def test_generate_renders_escaped_report(keyed_client, tmp_path) -> None:
    reply = "# A3 Summary: Linie 3\n<script>alert(1)</script>\n| A | B |\n| --- | --- |\n| 1 | 2 |"
    with patch.object(GeminiClient, "generate_content", return_value=reply):
        html = keyed_client.post("/generate", data=FORM, follow_redirects=True).get_data(as_text=True)
    assert "<h1>A3 Summary: Linie 3</h1>" in html
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "<th>A</th>" in html
    session = load_session()
    assert session.markdown == reply
    assert session.chat.messages[0].role == "system"
    assert (tmp_path / "logs").exists()


def test_generate_api_failure_is_flashed(keyed_client) -> None:
    with patch.object(GeminiClient, "generate_content", side_effect=GeminiError("quota exceeded")):
        html = keyed_client.post("/generate", data=FORM, follow_redirects=True).get_data(as_text=True)
    assert "Fehler bei der Generierung: quota exceeded" in html
    assert load_session().markdown == ""


def test_chat_and_apply(keyed_client) -> None:
    with patch.object(GeminiClient, "generate_content", return_value="# Erste Fassung"):
        keyed_client.post("/generate", data=FORM)
    with patch.object(GeminiClient, "generate_content", return_value="# Zweite Fassung"):
        keyed_client.post("/chat", data={"message": "Bitte kürzer"})
    history = load_session().chat.history()
    assert [m.role for m in history] == ["user", "assistant"]
    keyed_client.post("/chat/apply", data={"index": "0"})
    assert load_session().markdown == "# Erste Fassung"
    keyed_client.post("/chat/apply", data={"index": "1"})
    session = load_session()
    assert session.markdown == "# Zweite Fassung"
    assert "# Zweite Fassung" in session.chat.system_instruction()
    keyed_client.post("/chat/clear")
    assert load_session().chat.history() == []


def test_upload_excel_fills_form(keyed_client) -> None:
    wb = Workbook()
    wb.active.append(["Projekt", "Presse 7"])
    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    html = keyed_client.post(
        "/upload",
        data={"file": (buffer, "gap.xlsx")},
        content_type="multipart/form-data",
        follow_redirects=True,
    ).get_data(as_text=True)
    assert "Felder automatisch ausgefüllt" in html
    assert load_session().project.project_title == "Presse 7"


def test_upload_rejects_other_types(keyed_client) -> None:
    html = keyed_client.post(
        "/upload",
        data={"file": (BytesIO(b"x"), "notes.txt")},
        content_type="multipart/form-data",
        follow_redirects=True,
    ).get_data(as_text=True)
    assert "Nur PDF und Excel" in html


def test_project_export_and_import(keyed_client) -> None:
    keyed_client.post("/save", data=FORM)
    response = keyed_client.get("/project/export")
    assert response.headers["Content-Disposition"].startswith("attachment; filename=UPS_Project_Linie_3_")
    exported = json.loads(response.get_data(as_text=True))
    assert exported["exportVersion"] == "UPS Finalizer v2.0"
    keyed_client.post("/settings/clear")
    assert load_session().project.project_title == ""
    html = keyed_client.post(
        "/project/import",
        data={"file": (BytesIO(json.dumps(exported).encode("utf-8")), "project.json")},
        content_type="multipart/form-data",
        follow_redirects=True,
    ).get_data(as_text=True)
    assert "Projekt erfolgreich geladen!" in html
    assert load_session().project.project_title == "Linie 3"


def test_report_exports(keyed_client) -> None:
    assert keyed_client.get("/export/markdown").status_code == 302
    with patch.object(GeminiClient, "generate_content", return_value="# A3 Summary: Linie 3\n* Punkt"):
        keyed_client.post("/generate", data=FORM)
    markdown = keyed_client.get("/export/markdown")
    assert markdown.get_data(as_text=True).startswith("# A3 Summary")
    assert "A3_Summary_Linie_3.md" in markdown.headers["Content-Disposition"]
    assert keyed_client.get("/export/pdf").data.startswith(b"%PDF")
    assert keyed_client.get("/export/docx").data.startswith(b"PK")
    assert keyed_client.get("/export/html").status_code == 404
