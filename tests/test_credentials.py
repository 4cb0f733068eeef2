"""Credential store tests."""

import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from ups_finalizer.credentials import (
    StoredCredentials,
    app_home,
    clear_credentials,
    load_credentials,
    resolve_api_key,
    save_credentials,
)


def test_round_trip(tmp_path) -> None:
    store = tmp_path / "nested" / "credentials.json"
    save_credentials(StoredCredentials(api_key="abc", model="gemini-1.5-pro"), store)
    loaded = load_credentials(store)
    assert loaded.api_key == "abc"
    assert loaded.model == "gemini-1.5-pro"
    clear_credentials(store)
    assert load_credentials(store) == StoredCredentials()


def test_unreadable_file_gives_defaults(tmp_path) -> None:
    store = tmp_path / "credentials.json"
    store.write_text('{"unknown": 1}', encoding="utf-8")
    assert load_credentials(store) == StoredCredentials()


def test_env_key_fallback(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", " env-key ")
    assert resolve_api_key(StoredCredentials()) == "env-key"
    assert resolve_api_key(StoredCredentials(api_key="stored")) == "stored"


def test_app_home_override(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("UPS_FINALIZER_HOME", str(tmp_path))
    assert app_home() == tmp_path
