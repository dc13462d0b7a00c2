from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests

from services.config import Settings
from services.csv_service import CSVService

logger = logging.getLogger(__name__)

TOKEN_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"


class UpstreamFetchFailed(Exception):
    pass


class UpstreamHTTPError(UpstreamFetchFailed):
    def __init__(self, status: int, reason: str = ""):
        self.status = status
        self.reason = reason
        detail = f"{status} {reason}".strip()
        super().__init__(f"No se pudo descargar el archivo CSV desde OneDrive ({detail}).")


class UpstreamTimeout(UpstreamFetchFailed):
    pass


class UpstreamNetworkError(UpstreamFetchFailed):
    pass


class UpstreamAuthError(UpstreamFetchFailed):
    pass


@dataclass
class RelayResponse:
    status: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)


class RelayService:
    """
    Descarga el CSV de Status O/S desde OneDrive.
    - Con credenciales de cliente configuradas pide un token (client_credentials).
    - Sin credenciales usa el enlace público de descarga.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def acquire_token(self) -> str:
        s = self.settings
        url = TOKEN_URL.format(tenant=s.tenant_id)
        payload = {
            "grant_type": "client_credentials",
            "client_id": s.client_id,
            "client_secret": s.client_secret,
            "scope": s.graph_scope,
        }
        try:
            response = self.session.post(url, data=payload, timeout=s.timeout)
        except requests.Timeout as e:
            raise UpstreamTimeout("Timeout al pedir el token de acceso.") from e
        except requests.RequestException as e:
            raise UpstreamNetworkError(f"Error de red al pedir el token: {e}") from e

        if not response.ok:
            logger.error("[status-os] Token rechazado: %s %s", response.status_code, response.reason)
            raise UpstreamAuthError(f"No se pudo obtener el token ({response.status_code}).")
        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamAuthError("La respuesta de autenticación no es JSON.") from e
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise UpstreamAuthError("La respuesta de autenticación no trae access_token.")
        return token

    def fetch_bytes(self) -> bytes:
        url = self.settings.status_os_url
        if not url:
            logger.error("[status-os] URL vacía. Revisa STATUS_OS_ONEDRIVE_URL.")
            raise UpstreamFetchFailed("No hay URL configurada para el CSV de OneDrive.")

        headers = {"Cache-Control": "no-cache"}
        if self.settings.uses_client_credentials:
            headers["Authorization"] = f"Bearer {self.acquire_token()}"

        try:
            response = self.session.get(url, headers=headers, timeout=self.settings.timeout, allow_redirects=True)
        except requests.Timeout as e:
            logger.error("[status-os] Timeout al descargar el CSV desde OneDrive")
            raise UpstreamTimeout("Timeout al descargar el CSV desde OneDrive.") from e
        except requests.RequestException as e:
            logger.error("[status-os] Error de red: %s", e)
            raise UpstreamNetworkError(f"Error de red al descargar el CSV: {e}") from e

        if not response.ok:
            logger.error("[status-os] Error al descargar CSV: %s %s", response.status_code, response.reason)
            raise UpstreamHTTPError(response.status_code, response.reason or "")
        return response.content

    def fetch_csv(self) -> str:
        return CSVService.decode(self.fetch_bytes())

    def relay_csv(self) -> RelayResponse:
        """Republica el CSV como text/csv sin caché; errores como JSON."""
        try:
            text = self.fetch_csv()
        except UpstreamTimeout as e:
            return RelayResponse(504, json.dumps({"error": str(e)}), {"Content-Type": "application/json"})
        except UpstreamHTTPError as e:
            body = {"error": str(e), "status": e.status, "statusText": e.reason}
            return RelayResponse(500, json.dumps(body), {"Content-Type": "application/json"})
        except UpstreamFetchFailed as e:
            return RelayResponse(500, json.dumps({"error": str(e)}), {"Content-Type": "application/json"})
        return RelayResponse(200, text, {
            "Content-Type": "text/csv; charset=utf-8",
            "Cache-Control": "no-store",
        })
