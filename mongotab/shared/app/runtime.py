"""Runtime configuration for mongotab."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_PAGE_SIZE = 20
DEFAULT_SAVE_TIMEOUT_S = 2.0
DEFAULT_POLL_INTERVAL_S = 0.1


def default_config_dir() -> Path:
    """Return the directory holding connections and the last session."""
    override = os.environ.get("MONGOTAB_CONFIG_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "mongotab"


@dataclass
class RuntimeConfig:
    """Runtime configuration provided by CLI or tests."""

    config_dir: Path | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    debug_mode: bool = False
    log_file: Path | None = None
    save_timeout_s: float = DEFAULT_SAVE_TIMEOUT_S
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    mock: bool = False

    @property
    def resolved_config_dir(self) -> Path:
        return self.config_dir or default_config_dir()

    @classmethod
    def from_env(cls) -> RuntimeConfig:
        def _parse_int(value: str | None, default: int) -> int:
            if not value:
                return default
            try:
                parsed = int(value)
            except (TypeError, ValueError):
                return default
            return parsed if parsed > 0 else default

        def _parse_float(value: str | None, default: float) -> float:
            if not value:
                return default
            try:
                parsed = float(value)
            except (TypeError, ValueError):
                return default
            return parsed if parsed > 0 else default

        def _parse_bool(value: str | None, default: bool) -> bool:
            if value is None or not value.strip():
                return default
            return value.strip().lower() in {"1", "true", "yes", "on"}

        config_dir = os.environ.get("MONGOTAB_CONFIG_DIR", "").strip() or None
        log_file = os.environ.get("MONGOTAB_LOG_FILE", "").strip() or None

        return cls(
            config_dir=Path(config_dir).expanduser() if config_dir else None,
            page_size=_parse_int(os.environ.get("MONGOTAB_PAGE_SIZE"), DEFAULT_PAGE_SIZE),
            debug_mode=_parse_bool(os.environ.get("MONGOTAB_DEBUG"), False),
            log_file=Path(log_file).expanduser() if log_file else None,
            save_timeout_s=_parse_float(os.environ.get("MONGOTAB_SAVE_TIMEOUT_S"), DEFAULT_SAVE_TIMEOUT_S),
            poll_interval_s=_parse_float(os.environ.get("MONGOTAB_POLL_INTERVAL_S"), DEFAULT_POLL_INTERVAL_S),
            mock=_parse_bool(os.environ.get("MONGOTAB_MOCK"), False),
        )
