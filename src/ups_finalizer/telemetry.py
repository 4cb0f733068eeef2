from __future__ import annotations
import json
import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from .credentials import app_home
logger = logging.getLogger(__name__)
DEFAULT_TELEMETRY_FILE = "telemetry.jsonl"
def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
def _truncate(s: str, limit: int) -> str:
    if not s:
        return ""
    s = str(s)
    return s if len(s) <= limit else (s[:limit] + "\n...TRUNCATED...")
def _best_user(user_name: str) -> str:
    u = (user_name or "").strip()
    if u:
        return u
    return os.environ.get("USERNAME") or os.environ.get("USER") or "unknown"
@dataclass
class TelemetryConfig:
    dir_path: Path = field(default_factory=lambda: app_home() / "logs")
    filename: str = DEFAULT_TELEMETRY_FILE
    max_payload_chars: int = 20_000
    split_by_user: bool = True
    fallback_dir: Path = field(default_factory=lambda: app_home() / "telemetry_fallback")
    raise_on_error: bool = False
def telemetry_path(user_name: str = "", config: Optional[TelemetryConfig] = None) -> Path:
    cfg = config or TelemetryConfig()
    dir_path = Path(os.environ.get("TELEMETRY_DIR", str(cfg.dir_path)))
    filename = cfg.filename
    if cfg.split_by_user:
        stem = Path(cfg.filename).stem
        suffix = Path(cfg.filename).suffix or ".jsonl"
        filename = f"{stem}.{_best_user(user_name)}{suffix}"  # e.g. telemetry.jdoe.jsonl
    return dir_path / filename
def log_event(
    event_type: str,
    *,
    action: str,
    app_version: str,
    user_name: str = "",
    model: str = "",
    duration_ms: Optional[int] = None,
    success: bool = True,
    error: str = "",
    payload: Optional[Dict[str, Any]] = None,
    config: Optional[TelemetryConfig] = None,
) -> None:
    cfg = config or TelemetryConfig()
    out_path = telemetry_path(user_name, cfg)
    record: Dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "ts_utc": _utc_now_iso(),
        "event_type": event_type,
        "action": action,
        "user": _best_user(user_name),
        "app_version": app_version,
        "model": model,
        "duration_ms": duration_ms,
        "success": bool(success),
    }
    if error:
        record["error"] = _truncate(error, 8_000)
    if payload:
        record["payload"] = {
            k: _truncate(v, cfg.max_payload_chars) if isinstance(v, str) else v for k, v in payload.items()
        }
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "a", encoding="utf-8", newline="\n") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError as exc:
        logger.warning("Telemetry write to %s failed: %s", out_path, exc)
        try:
            cfg.fallback_dir.mkdir(parents=True, exist_ok=True)
            record["telemetry_write_error"] = str(exc)
            with open(cfg.fallback_dir / out_path.name, "a", encoding="utf-8", newline="\n") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
        except OSError as fallback_exc:
            logger.warning("Telemetry fallback write failed: %s", fallback_exc)
        if cfg.raise_on_error:
            raise
class Timer:
    def __init__(self) -> None:
        self._t0 = time.perf_counter()
    def ms(self) -> int:
        return int((time.perf_counter() - self._t0) * 1000)
