"""Session and project file tests."""

import json
import os
import sys
from datetime import datetime, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from ups_finalizer.project import Countermeasure, ProjectError, UPSProject
from ups_finalizer.storage import (
    EXPORT_VERSION,
    SavedSession,
    clear_session,
    default_session_store,
    load_session,
    project_from_json,
    project_to_json,
    save_session,
)


def test_session_round_trip(tmp_path) -> None:
    store = tmp_path / "session.json"
    session = SavedSession(
        project=UPSProject(project_title="Linie 3", countermeasures=[Countermeasure(action="Reinigen")]),
        markdown="# A3 Summary: Linie 3",
    )
    session.chat.init(session.markdown)
    save_session(session, store)
    assert load_session(store) == session
    clear_session(store)
    assert not store.exists()
    assert load_session(store) == SavedSession()


def test_corrupt_session_falls_back_to_empty(tmp_path) -> None:
    store = tmp_path / "session.json"
    store.write_text("{broken", encoding="utf-8")
    assert load_session(store) == SavedSession()


def test_default_store_follows_home_override(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("UPS_FINALIZER_HOME", str(tmp_path))
    assert default_session_store() == tmp_path / "session.json"


def test_project_json_export() -> None:
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    data = json.loads(project_to_json(UPSProject(project_title="Ä-Projekt"), now=stamp))
    assert data["projectTitle"] == "Ä-Projekt"
    assert data["exportVersion"] == EXPORT_VERSION
    assert data["exportTimestamp"] == "2024-05-01T12:00:00+00:00"


def test_project_json_import() -> None:
    project = project_from_json('{"projectTitle": "T", "exportVersion": "UPS Finalizer v2.0"}')
    assert project.project_title == "T"
    with pytest.raises(ProjectError, match="Fehler beim Laden"):
        project_from_json("{not json")
    with pytest.raises(ProjectError):
        project_from_json("[1, 2]")
