from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from wb_provider.provider.types import DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT, ServerAddress


CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_config_lock = threading.Lock()


@dataclass
class AppConfig:
    # --- Metadata server ---
    # Example: 192.168.1.20
    server_ip: str = DEFAULT_SERVER_HOST
    server_port: int = DEFAULT_SERVER_PORT

    # Per-request deadline for calls to the metadata server and poster hosts.
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC

    # DEBUG | INFO | WARNING | ERROR | CRITICAL
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        # An empty ip or a zero port means the value was never configured.
        ip = str(self.server_ip or "").strip()
        self.server_ip = ip or DEFAULT_SERVER_HOST

        try:
            port = int(self.server_port)
        except (TypeError, ValueError):
            port = 0
        if port <= 0 or port > 65535:
            port = DEFAULT_SERVER_PORT
        self.server_port = port

        try:
            timeout = float(self.request_timeout_sec)
        except (TypeError, ValueError):
            timeout = 0.0
        self.request_timeout_sec = timeout if timeout > 0 else DEFAULT_REQUEST_TIMEOUT_SEC

        level = str(self.log_level or "").strip().upper()
        self.log_level = level if level in VALID_LOG_LEVELS else "INFO"

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {k: v for k, v in self.__dict__.items()}

    def to_server_address(self) -> ServerAddress:
        return ServerAddress(host=self.server_ip, port=self.server_port)


_FIELD_NAMES = {f.name for f in fields(AppConfig)}


def _apply_env_overrides(cfg: AppConfig) -> None:
    ip = os.environ.get("WB_PROVIDER_SERVER_IP")
    if ip:
        cfg.server_ip = ip
    port = os.environ.get("WB_PROVIDER_SERVER_PORT")
    if port:
        cfg.server_port = port  # re-normalized below


def _read_stored() -> dict[str, Any] | None:
    with _config_lock:
        if not CONFIG_PATH.exists():
            return None
        try:
            data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except Exception:
            return None
    return data if isinstance(data, dict) else None


def load_config() -> AppConfig:
    """Load config.json, repairing and re-saving it if stored values were unusable."""
    cfg = AppConfig()
    data = _read_stored()
    if data is not None:
        for k, v in data.items():
            if k in _FIELD_NAMES:
                setattr(cfg, k, v)
        # Re-normalize after applying persisted values.
        cfg.__post_init__()

        stored = {k: data.get(k) for k in cfg.to_dict()}
        if stored != cfg.to_dict():
            save_config(cfg)

    _apply_env_overrides(cfg)
    cfg.__post_init__()
    return cfg


def save_config(cfg: AppConfig) -> None:
    """Write config atomically (temp file + replace)."""
    payload = json.dumps(cfg.to_dict(), ensure_ascii=False, indent=4)
    with _config_lock:
        tmp = CONFIG_PATH.with_suffix(".json.tmp")
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, CONFIG_PATH)
