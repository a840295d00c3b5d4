"""
AAS generator API client.

Creates Asset Administration Shells from parsed VEC data via the
AAS Creator endpoint of the generator service.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.exceptions import UpstreamError, UpstreamErrorKind
from app.schemas.generator import CreateAasRequest, CreateAasResponse

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Failed to create AAS"


class AasGeneratorClient:
    """
    Async HTTP client for the AAS generator.

    Features:
    - Optional API key authentication
    - Error classification into bad request, conflict, server and unknown errors
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Get default headers for API requests."""
        headers = {
            "Accept": "application/json",
            "User-Agent": "VEC-Upload-Service/1.0",
        }
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def create_aas(
        self,
        asset_id_short: str,
        blueprint_ids: list[str] | None = None,
        data: Any = None,
        language: str | None = None,
    ) -> CreateAasResponse:
        """
        Create a new AAS with optional submodels.

        Args:
            asset_id_short: The assetIdShort of the new AAS
            blueprint_ids: Blueprint IDs selecting submodel templates to generate
            data: Parsed data used to populate the submodels
            language: Language code for generated submodels

        Returns:
            Identifier of the created AAS

        Raises:
            UpstreamError: On any failure, classified by HTTP status
        """
        body = CreateAasRequest(blueprintsIds=blueprint_ids, data=data, language=language)
        path = f"/v2/AasCreator/{quote(asset_id_short, safe='')}"

        try:
            client = await self._get_client()
            if body.is_empty():
                response = await client.post(path)
            else:
                response = await client.post(path, json=body.model_dump(exclude_none=True))
        except httpx.HTTPError as e:
            logger.exception(f"Error creating AAS {asset_id_short}")
            raise UpstreamError(UpstreamErrorKind.UNKNOWN, FALLBACK_MESSAGE) from e

        if response.is_error:
            raise self._classify_error(response)

        try:
            return CreateAasResponse.model_validate(response.json())
        except ValueError as e:
            logger.exception(f"Unreadable AAS generator response for {asset_id_short}")
            raise UpstreamError(UpstreamErrorKind.UNKNOWN, FALLBACK_MESSAGE) from e

    def _classify_error(self, response: httpx.Response) -> UpstreamError:
        """Map an error response to an UpstreamError with a readable message."""
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        detail = payload.get("title") or payload.get("detail")

        status = response.status_code
        if status == 400:
            kind, default = UpstreamErrorKind.BAD_REQUEST, "Bad request"
        elif status == 409:
            kind, default = UpstreamErrorKind.CONFLICT, "AAS already exists"
        elif status >= 500:
            kind, default = UpstreamErrorKind.SERVER_ERROR, "Server error"
        else:
            kind, default = UpstreamErrorKind.UNKNOWN, "An error occurred"

        logger.warning(f"AAS generator returned {status} ({kind.value}): {detail or default}")
        return UpstreamError(kind, str(detail or default))

    async def __aenter__(self) -> "AasGeneratorClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
