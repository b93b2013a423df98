"""Runtime settings read from the environment and an optional ``.env`` file."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os
from pathlib import Path

from dotenv import load_dotenv

from quiz_kiosk.constants.network_constants import DEFAULT_ADMIN_HOST, DEFAULT_ADMIN_PORT
from quiz_kiosk.core.question_catalog import DEFAULT_CATALOG_PATH

DEFAULT_DATA_DIR = Path.home() / ".quiz_kiosk"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class KioskSettings:
    data_dir: Path = DEFAULT_DATA_DIR
    catalog_path: Path = DEFAULT_CATALOG_PATH
    admin_host: str = DEFAULT_ADMIN_HOST
    admin_port: int = DEFAULT_ADMIN_PORT
    admin_api_enabled: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> KioskSettings:
        """Build settings from ``environ``, or from ``os.environ`` after loading ``.env``."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        port_value = environ.get("QUIZ_KIOSK_ADMIN_PORT", str(DEFAULT_ADMIN_PORT))
        try:
            admin_port = int(port_value)
        except ValueError as exc:
            raise ValueError(f"QUIZ_KIOSK_ADMIN_PORT must be an integer, got '{port_value}'.") from exc

        return cls(
            data_dir=Path(environ.get("QUIZ_KIOSK_DATA_DIR", str(DEFAULT_DATA_DIR))).expanduser(),
            catalog_path=Path(environ.get("QUIZ_KIOSK_CATALOG_PATH", str(DEFAULT_CATALOG_PATH))).expanduser(),
            admin_host=environ.get("QUIZ_KIOSK_ADMIN_HOST", DEFAULT_ADMIN_HOST),
            admin_port=admin_port,
            admin_api_enabled=_parse_flag(environ.get("QUIZ_KIOSK_ADMIN_API"), default=True),
            log_level=environ.get("QUIZ_KIOSK_LOG_LEVEL", "INFO").upper(),
        )


def _parse_flag(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Expected an on/off value, got '{value}'.")
