from __future__ import annotations

from dataclasses import replace

from wb_provider.utils.logger import logger, reset_query, set_query
from .client import RemoteClient
from .errors import ProviderError
from .parser import has_content, parse_metadata, production_year_from
from .types import (
    IMAGE_TYPE_PRIMARY,
    PROVIDER_NAME,
    EnrichmentResult,
    ImageRecord,
    ImageResponse,
    MediaMetadata,
    MediaQuery,
    SearchResult,
    ServerAddress,
)


def _require_query(query: MediaQuery) -> MediaQuery:
    if query is None:
        raise TypeError("media query is required")
    return query


def fallback_result(query: MediaQuery) -> EnrichmentResult:
    """What the host keeps when the server has nothing: its own name and year."""
    return EnrichmentResult(
        has_metadata=False,
        metadata=MediaMetadata(title=query.display_name, production_year=query.known_year),
    )


class EnrichmentService:
    """Metadata + image provider for one configured metadata server.

    The host builds a single instance and passes it to every query site.
    All methods are safe to run concurrently; nothing is cached between calls.
    """

    name = PROVIDER_NAME

    def __init__(self, server: ServerAddress, client: RemoteClient):
        if server is None:
            raise TypeError("server address is required")
        self.server = server
        self.client = client

    # -- Metadata role --

    async def enrich(self, query: MediaQuery, *, timeout: float | None = None) -> EnrichmentResult:
        query = _require_query(query)
        base_name = query.base_name
        token = set_query(base_name)
        try:
            logger.info(f"enrich: name={query.display_name} path={query.file_path} server={self.server}")
            try:
                raw = await self.client.fetch_metadata(self.server, base_name, timeout=timeout)
            except ProviderError as e:
                logger.warning(f"no metadata for {base_name} ({self.server}): {e}")
                return fallback_result(query)

            parsed = parse_metadata(raw)
            merged = replace(
                parsed,
                title=parsed.title or query.display_name,
                production_year=parsed.production_year if parsed.production_year is not None else query.known_year,
            )
            found = has_content(parsed)
            logger.info(
                f"enrich done: has_metadata={found} title={merged.title} year={merged.production_year} "
                f"tags={len(merged.tags)} cast={len(merged.cast)} rating={merged.community_rating} "
                f"poster={merged.poster_url}"
            )
            return EnrichmentResult(has_metadata=found, metadata=merged)
        finally:
            reset_query(token)

    async def search(self, query_name: str, *, timeout: float | None = None) -> list[SearchResult]:
        token = set_query(query_name)
        try:
            payloads = await self.client.search_metadata(self.server, query_name, timeout=timeout)
            results = [
                SearchResult(
                    name=p.title,
                    production_year=production_year_from(p),
                    image_url=p.poster_url or None,
                )
                for p in payloads
            ]
            logger.info(f"search: {len(results)} result(s)")
            return results
        finally:
            reset_query(token)

    # -- Image role --

    def supported_image_types(self) -> tuple[str, ...]:
        return (IMAGE_TYPE_PRIMARY,)

    async def resolve_images(self, query: MediaQuery, *, timeout: float | None = None) -> list[ImageRecord]:
        query = _require_query(query)
        token = set_query(query.base_name)
        try:
            try:
                raw = await self.client.fetch_metadata(self.server, query.base_name, timeout=timeout)
            except ProviderError as e:
                logger.warning(f"no image info ({self.server}): {e}")
                return []
            if not raw.poster_url:
                return []
            logger.info(f"image info: {raw.poster_url}")
            return [ImageRecord(url=raw.poster_url, provider_name=self.name)]
        finally:
            reset_query(token)

    async def get_image_response(self, url: str, *, timeout: float | None = None) -> ImageResponse:
        return await self.client.get_image_response(url, timeout=timeout)
