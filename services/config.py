from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

FALLBACK_CSV_URL = (
    "https://1drv.ms/x/c/ee59d2f4cd050886/IQBHOENRuHf6SIu6IuP2EDPwAfaqaZA0ElB97miXaPa2pro?download=1"
)
GRAPH_SCOPE = "https://graph.microsoft.com/.default"


def _parse_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _parse_str(value: str | None, default: str = "") -> str:
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass
class Settings:
    status_os_url: str = FALLBACK_CSV_URL
    timeout: int = 30
    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""
    graph_scope: str = GRAPH_SCOPE
    upload_root: Path = Path("storage")
    upload_prefix: str = "inventarios"
    default_visible_columns: int = 6
    log_level: str = "INFO"

    @property
    def uses_client_credentials(self) -> bool:
        return bool(self.tenant_id and self.client_id and self.client_secret)


def load_settings(env_file: str | None = None) -> Settings:
    """Lee la configuración desde variables de entorno (y .env si existe)."""
    load_dotenv(env_file)
    env = os.environ
    return Settings(
        status_os_url=_parse_str(env.get("STATUS_OS_ONEDRIVE_URL"), FALLBACK_CSV_URL),
        timeout=_parse_int(env.get("STATUS_OS_TIMEOUT"), 30),
        tenant_id=_parse_str(env.get("STATUS_OS_TENANT_ID")),
        client_id=_parse_str(env.get("STATUS_OS_CLIENT_ID")),
        client_secret=_parse_str(env.get("STATUS_OS_CLIENT_SECRET")),
        graph_scope=_parse_str(env.get("STATUS_OS_GRAPH_SCOPE"), GRAPH_SCOPE),
        upload_root=Path(_parse_str(env.get("UPLOAD_ROOT"), "storage")),
        upload_prefix=_parse_str(env.get("UPLOAD_PREFIX"), "inventarios"),
        default_visible_columns=_parse_int(env.get("DEFAULT_VISIBLE_COLUMNS"), 6),
        log_level=_parse_str(env.get("LOG_LEVEL"), "INFO").upper(),
    )
