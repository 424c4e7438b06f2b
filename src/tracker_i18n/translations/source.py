"""Translation fetch port and its HTTP implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from tracker_i18n.errors import TranslationFetchError
from tracker_i18n.models.translation import Culture, TranslationsResponse

logger = structlog.get_logger(__name__)

_cultures_adapter = TypeAdapter(list[Culture])


class TranslationSource(ABC):
    """Abstract source of cultures and translation trees."""

    @abstractmethod
    async def fetch_cultures(self) -> list[Culture]:
        """``GET /translations/cultures``."""
        ...

    @abstractmethod
    async def fetch_translations(self, culture_code: str) -> TranslationsResponse:
        """``GET /translations/{culture}``: the full tree for one culture."""
        ...

    @abstractmethod
    async def fetch_category(self, culture_code: str, category: str) -> dict[str, Any]:
        """``GET /translations/{culture}/category/{category}``: one subtree."""
        ...

    async def aclose(self) -> None:
        """Release any held resources."""
        return None


class HttpTranslationSource(TranslationSource):
    """Fetches translations from the backend API with ``httpx``.

    Transport errors, non-2xx statuses, undecodable bodies and payloads of the
    wrong shape are all reported as ``TranslationFetchError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/") + "/translations"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_cultures(self) -> list[Culture]:
        payload = await self._get_json(f"{self._base_url}/cultures")
        try:
            return _cultures_adapter.validate_python(payload)
        except ValidationError as e:
            raise TranslationFetchError(f"Invalid cultures payload: {e}") from e

    async def fetch_translations(self, culture_code: str) -> TranslationsResponse:
        url = f"{self._base_url}/{quote(culture_code, safe='')}"
        payload = await self._get_json(url)
        try:
            return TranslationsResponse.model_validate(payload)
        except ValidationError as e:
            raise TranslationFetchError(f"Invalid translations payload: {e}", url=url) from e

    async def fetch_category(self, culture_code: str, category: str) -> dict[str, Any]:
        url = (
            f"{self._base_url}/{quote(culture_code, safe='')}"
            f"/category/{quote(category, safe='')}"
        )
        payload = await self._get_json(url)
        if not isinstance(payload, dict):
            raise TranslationFetchError(
                f"Category payload must be an object, got {type(payload).__name__}", url=url,
            )
        return payload

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, url: str) -> Any:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("translation_fetch_status", url=url, status_code=e.response.status_code)
            raise TranslationFetchError(
                f"GET {url} returned {e.response.status_code}",
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("translation_fetch_failed", url=url, error=str(e))
            raise TranslationFetchError(f"GET {url} failed: {e}", url=url) from e

        try:
            return response.json()
        except ValueError as e:
            raise TranslationFetchError(f"GET {url} returned invalid JSON", url=url) from e
