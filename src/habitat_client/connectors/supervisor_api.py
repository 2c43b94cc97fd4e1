from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from habitat_client.core.common.exceptions import (
    SupervisorApiError,
    SupervisorUnavailableError,
)

logger = logging.getLogger(__name__)


class SupervisorApiConnector:
    """Thin wrapper over the supervisor's HTTP gateway.

    The underlying ``httpx.AsyncClient`` is created on first use unless one is
    supplied, and is only closed by :meth:`aclose` when this connector owns it.
    """

    def __init__(
        self, base_url: str, client: httpx.AsyncClient | None = None
    ) -> None:
        self.base_url = base_url
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url)
        return self._client

    async def get(self, path: str) -> Any:
        """GET ``path`` relative to the base URL and decode the JSON body."""
        try:
            response = await self.client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Supervisor API error for %s: %s - %s",
                path,
                e.response.status_code,
                e.response.text,
            )
            raise SupervisorApiError(
                f"Supervisor API returned {e.response.status_code} for {path}",
                details={"url": str(e.request.url), "body": e.response.text},
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error("Could not reach supervisor API at %s: %s", self.base_url, e)
            raise SupervisorUnavailableError(
                f"Could not connect to supervisor API at {self.base_url} ({e})",
                details={"base_url": self.base_url},
            ) from e

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise SupervisorApiError(
                f"Supervisor API returned a non-JSON body for {path}",
                details={"body": response.text},
                status_code=response.status_code,
            ) from e

    async def get_services(self) -> Any:
        return await self.get("services")

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
