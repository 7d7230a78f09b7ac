"""Sanity CMS client (HTTP API).

Covers the small surface the storefront needs:
- GROQ queries (catalog reads, wheel of fortune, order totals)
- Document mutations (create, patch set)
- Image asset uploads

Reads use the read token (or anonymous access for public datasets),
writes require the write token.
"""

import json
import logging
from typing import Any

import httpx

from storefront.settings import get_settings

logger = logging.getLogger("uvicorn.error")


class CmsError(RuntimeError):
    """Raised when a CMS call fails or the client is not configured."""


class SanityClient:
    """Async client for the Sanity HTTP API."""

    def __init__(
        self,
        project_id: str | None = None,
        dataset: str | None = None,
        api_version: str | None = None,
        read_token: str | None = None,
        write_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client; missing values fall back to settings."""
        settings = get_settings()
        self.project_id = project_id if project_id is not None else settings.sanity_project_id
        self.dataset = dataset or settings.sanity_dataset
        self.api_version = api_version or settings.sanity_api_version
        self.read_token = read_token if read_token is not None else settings.sanity_api_read_token
        self.write_token = write_token if write_token is not None else settings.sanity_api_write_token
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return f"https://{self.project_id}.api.sanity.io/v{self.api_version.lstrip('v')}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0, transport=self._transport)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def _headers(self, write: bool = False) -> dict[str, str]:
        token = self.write_token if write else (self.read_token or self.write_token)
        if write and not token:
            raise CmsError("Sanity write token not configured")
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _require_project(self) -> None:
        if not self.project_id:
            raise CmsError("Sanity project id not configured")

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        try:
            payload = response.json()
        except ValueError:
            payload = None
        message = response.text
        if isinstance(payload, dict):
            error = payload.get("error")
            description = error.get("description") if isinstance(error, dict) else error
            message = description or payload.get("message") or message
        raise CmsError(f"Sanity {action} failed ({response.status_code}): {message}")

    @staticmethod
    def _json_body(response: httpx.Response, action: str) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise CmsError(f"Sanity {action} returned a non-JSON body") from e
        if not isinstance(payload, dict):
            raise CmsError(f"Sanity {action} returned an unexpected body")
        return payload

    # ============================================================
    # Queries
    # ============================================================

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        """Run a GROQ query and return its `result`.

        Args:
            query: GROQ query string.
            params: Query parameters, referenced as $name in the query.

        Returns:
            Decoded `result` value (list, dict, scalar or None).
        """
        self._require_project()

        request_params: dict[str, str] = {"query": query}
        for name, value in (params or {}).items():
            # GROQ parameters are passed JSON-encoded as $name=<json>
            request_params[f"${name}"] = json.dumps(value)

        client = await self._get_client()
        try:
            response = await client.get(
                f"{self.base_url}/data/query/{self.dataset}",
                params=request_params,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise CmsError(f"Sanity query failed: {e}") from e

        self._raise_for_status(response, "query")
        return self._json_body(response, "query").get("result")

    # ============================================================
    # Mutations
    # ============================================================

    async def mutate(self, mutations: list[dict[str, Any]]) -> dict[str, Any]:
        """Submit mutations and return the raw response (with documents)."""
        self._require_project()

        client = await self._get_client()
        try:
            response = await client.post(
                f"{self.base_url}/data/mutate/{self.dataset}",
                params={"returnDocuments": "true", "visibility": "sync"},
                json={"mutations": mutations},
                headers=self._headers(write=True),
            )
        except httpx.HTTPError as e:
            raise CmsError(f"Sanity mutation failed: {e}") from e

        self._raise_for_status(response, "mutation")
        return self._json_body(response, "mutation")

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        """Create a document and return it (including the generated `_id`)."""
        payload = await self.mutate([{"create": document}])

        results = payload.get("results") or []
        created = results[0].get("document") if results else None
        if not created:
            # returnIds-style response: only the id is guaranteed
            doc_id = results[0].get("id") if results else None
            if not doc_id:
                raise CmsError("Sanity create returned no document id")
            created = {**document, "_id": doc_id}

        logger.info(f"[cms] created {created.get('_type')} _id={created.get('_id')}")
        return created

    async def patch_set(self, document_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Set fields on an existing document."""
        payload = await self.mutate([{"patch": {"id": document_id, "set": fields}}])

        results = payload.get("results") or []
        if results and results[0].get("document"):
            return results[0]["document"]
        return {"_id": document_id, **fields}

    # ============================================================
    # Assets
    # ============================================================

    async def upload_image(
        self,
        data: bytes,
        filename: str,
        content_type: str = "image/jpeg",
    ) -> dict[str, Any]:
        """Upload image bytes as an asset and return the asset document."""
        self._require_project()

        client = await self._get_client()
        headers = self._headers(write=True)
        headers["Content-Type"] = content_type
        try:
            response = await client.post(
                f"{self.base_url}/assets/images/{self.dataset}",
                params={"filename": filename},
                content=data,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise CmsError(f"Sanity asset upload failed: {e}") from e

        self._raise_for_status(response, "asset upload")
        asset = self._json_body(response, "asset upload").get("document") or {}
        if not asset.get("_id"):
            raise CmsError("Sanity asset upload returned no asset id")
        return asset


# Global client instance
_client: SanityClient | None = None


def get_cms_client() -> SanityClient:
    """Get global CMS client instance."""
    global _client
    if _client is None:
        _client = SanityClient()
    return _client


async def close_cms_client() -> None:
    """Close the global CMS client, if one was created."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
