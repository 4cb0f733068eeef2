from __future__ import annotations
import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional
logger = logging.getLogger(__name__)
def app_home() -> Path:
    override = os.environ.get("UPS_FINALIZER_HOME")
    return Path(override) if override else Path.home() / ".ups_finalizer"
def default_credentials_store() -> Path:
    return app_home() / "credentials.json"
@dataclass
class StoredCredentials:
    api_key: str = ""
    model: str = "gemini-pro"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
def load_credentials(store: Optional[Path] = None) -> StoredCredentials:
    store = store or default_credentials_store()
    if not store.exists():
        return StoredCredentials()
    try:
        data = json.loads(store.read_text(encoding="utf-8"))
        return StoredCredentials(**data)
    except Exception as exc:
        logger.warning("Ignoring unreadable credentials file %s: %s", store, exc)
        return StoredCredentials()
def save_credentials(creds: StoredCredentials, store: Optional[Path] = None) -> None:
    store = store or default_credentials_store()
    store.parent.mkdir(parents=True, exist_ok=True)
    store.write_text(json.dumps(asdict(creds), indent=2), encoding="utf-8")
def clear_credentials(store: Optional[Path] = None) -> None:
    store = store or default_credentials_store()
    store.unlink(missing_ok=True)
def resolve_api_key(creds: StoredCredentials) -> str:
    return (creds.api_key or os.environ.get("GEMINI_API_KEY", "")).strip()
