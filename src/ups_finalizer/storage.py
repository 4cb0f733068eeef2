from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from .chat_session import ChatSession
from .credentials import app_home
from .project import ProjectError, UPSProject
logger = logging.getLogger(__name__)
EXPORT_VERSION = "UPS Finalizer v2.0"
def default_session_store() -> Path:
    return app_home() / "session.json"
@dataclass
class SavedSession:
    project: UPSProject = field(default_factory=UPSProject)
    markdown: str = ""
    chat: ChatSession = field(default_factory=ChatSession)
def load_session(store: Optional[Path] = None) -> SavedSession:
    store = store or default_session_store()
    if not store.exists():
        return SavedSession()
    try:
        raw = json.loads(store.read_text(encoding="utf-8"))
        markdown = raw.get("markdown")
        return SavedSession(
            project=UPSProject.from_dict(raw.get("project") or {}),
            markdown=markdown if isinstance(markdown, str) else "",
            chat=ChatSession.from_dict(raw.get("chat")),
        )
    except Exception as exc:
        logger.error("Load error for saved session %s: %s", store, exc)
        return SavedSession()
def save_session(session: SavedSession, store: Optional[Path] = None) -> None:
    store = store or default_session_store()
    store.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "project": session.project.to_dict(),
        "markdown": session.markdown,
        "chat": session.chat.to_dict(),
    }
    store.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
def clear_session(store: Optional[Path] = None) -> None:
    store = store or default_session_store()
    store.unlink(missing_ok=True)
def project_to_json(project: UPSProject, now: Optional[datetime] = None) -> str:
    data = project.to_dict()
    stamp = now or datetime.now(timezone.utc)
    data["exportTimestamp"] = stamp.isoformat()
    data["exportVersion"] = EXPORT_VERSION
    return json.dumps(data, indent=2, ensure_ascii=False)
def project_from_json(text: str) -> UPSProject:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProjectError(f"Fehler beim Laden: {exc}") from exc
    return UPSProject.from_dict(data)
