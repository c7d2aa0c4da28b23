"""Occupation taxonomy search client (ESCO)."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from src.recommend.config import RecommendConfig, get_recommend_config
from src.recommend.outcome import (
    MalformedResponseError,
    RateLimitedError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 300
DEFAULT_DESCRIPTION = (
    "A professional career with strong growth potential in the current job market."
)


@dataclass(frozen=True)
class TaxonomyOccupation:
    """One occupation returned by a taxonomy search."""

    id: str | None
    title: str
    description: str


class TaxonomyClient(Protocol):
    """Occupation taxonomy search service."""

    async def search(self, term: str) -> list[TaxonomyOccupation]: ...


def clean_description(description: str | None) -> str:
    """Strip HTML tags and cap the description length."""
    if not description:
        return DEFAULT_DESCRIPTION
    cleaned = re.sub(r"<[^>]*>", "", description)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if not cleaned:
        return DEFAULT_DESCRIPTION
    if len(cleaned) > MAX_DESCRIPTION_LENGTH:
        return cleaned[:MAX_DESCRIPTION_LENGTH] + "..."
    return cleaned


class EscoTaxonomyClient:
    """Search the ESCO occupation taxonomy over HTTP.

    The underlying ``httpx.AsyncClient`` is created lazily and shared across
    searches of one client instance; call :meth:`aclose` (or use the client as
    an async context manager) to release it.
    """

    def __init__(
        self,
        config: RecommendConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or get_recommend_config()
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> EscoTaxonomyClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.taxonomy_base_url.rstrip("/"),
                timeout=httpx.Timeout(self.config.taxonomy_timeout),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def search(self, term: str) -> list[TaxonomyOccupation]:
        """Search occupations matching ``term``.

        Raises:
            RateLimitedError: HTTP 429.
            TimeoutError: The request exceeded the configured timeout.
            UpstreamUnavailableError: Transport errors and non-2xx responses.
            MalformedResponseError: The body is not the expected JSON shape.
        """
        params = {
            "text": term,
            "type": "occupation",
            "language": self.config.taxonomy_language,
            "limit": self.config.taxonomy_search_limit,
        }

        try:
            response = await self._get_client().get("/search", params=params)
        except httpx.TimeoutException as e:
            raise TimeoutError(f"Taxonomy search timed out for {term!r}") from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Taxonomy search failed: {e}", e) from e

        if response.status_code == 429:
            raise RateLimitedError(f"Taxonomy search rate limited for {term!r}")
        if response.status_code >= 400:
            raise UpstreamUnavailableError(
                f"Taxonomy search returned HTTP {response.status_code} for {term!r}"
            )

        try:
            payload = response.json()
        except json.JSONDecodeError as e:
            raise MalformedResponseError("Taxonomy response is not valid JSON", e) from e

        return self._parse_results(payload)

    def _parse_results(self, payload: Any) -> list[TaxonomyOccupation]:
        if not isinstance(payload, dict):
            raise MalformedResponseError("Taxonomy response must be a JSON object")

        embedded = payload.get("_embedded")
        if embedded is None:
            # ESCO omits _embedded when nothing matched.
            return []
        if not isinstance(embedded, dict) or not isinstance(
            embedded.get("results", []), list
        ):
            raise MalformedResponseError("Taxonomy response has no results list")

        occupations: list[TaxonomyOccupation] = []
        for item in embedded.get("results", []):
            if not isinstance(item, dict):
                continue
            title = item.get("title") or item.get("preferredLabel")
            if isinstance(title, dict):
                title = title.get(self.config.taxonomy_language)
            if not isinstance(title, str) or not title.strip():
                continue
            occupations.append(
                TaxonomyOccupation(
                    id=item.get("uri"),
                    title=title.strip(),
                    description=clean_description(
                        _description_text(item, self.config.taxonomy_language)
                    ),
                )
            )
        return occupations


def _description_text(item: dict[str, Any], language: str) -> str | None:
    description = item.get("description")
    if isinstance(description, str):
        return description
    if isinstance(description, dict):
        localized = description.get(language)
        if isinstance(localized, dict):
            literal = localized.get("literal")
            return literal if isinstance(literal, str) else None
        if isinstance(localized, str):
            return localized
    return None
