"""
Provider API - metadata, search and poster endpoints consumed by the media server host
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.constants import MAX_URL_LENGTH
from api.dependencies import get_enrichment_service
from api.schemas import (
    CastMemberOut,
    EnrichmentResponse,
    ImageRecordOut,
    MediaMetadataOut,
    MediaQueryRequest,
    ProviderInfo,
    SearchRequest,
    SearchResultOut,
)
from wb_provider.provider.service import EnrichmentService
from wb_provider.provider.types import EnrichmentResult, MediaQuery

router = APIRouter()


def _to_query(req: MediaQueryRequest) -> MediaQuery:
    return MediaQuery(display_name=req.name, file_path=req.path, known_year=req.year)


def _to_response(result: EnrichmentResult) -> EnrichmentResponse:
    m = result.metadata
    return EnrichmentResponse(
        has_metadata=result.has_metadata,
        metadata=MediaMetadataOut(
            title=m.title,
            overview=m.overview,
            premiere_date=m.premiere_date.isoformat() if m.premiere_date else None,
            production_year=m.production_year,
            studios=list(m.studios),
            tags=list(m.tags),
            cast=[CastMemberOut(name=c.name, role=c.role) for c in m.cast],
            community_rating=m.community_rating,
            critic_rating=m.critic_rating,
            poster_url=m.poster_url,
        ),
    )


@router.get("/api/provider", response_model=ProviderInfo)
async def provider_info(service: EnrichmentService = Depends(get_enrichment_service)):
    return ProviderInfo(
        name=service.name,
        server=str(service.server),
        supported_images=list(service.supported_image_types()),
    )


@router.post("/api/metadata", response_model=EnrichmentResponse)
async def get_metadata(req: MediaQueryRequest, service: EnrichmentService = Depends(get_enrichment_service)):
    """Look up metadata for one media file; falls back to the given name/year."""
    result = await service.enrich(_to_query(req))
    return _to_response(result)


@router.post("/api/search", response_model=list[SearchResultOut])
async def search(req: SearchRequest, service: EnrichmentService = Depends(get_enrichment_service)):
    results = await service.search(req.name)
    return [
        SearchResultOut(name=r.name, production_year=r.production_year, image_url=r.image_url)
        for r in results
    ]


@router.post("/api/images", response_model=list[ImageRecordOut])
async def get_images(req: MediaQueryRequest, service: EnrichmentService = Depends(get_enrichment_service)):
    records = await service.resolve_images(_to_query(req))
    return [
        ImageRecordOut(provider_name=r.provider_name, url=r.url, image_type=r.image_type)
        for r in records
    ]


@router.get("/api/image")
async def get_image(
    url: str = Query(..., min_length=1, max_length=MAX_URL_LENGTH),
    service: EnrichmentService = Depends(get_enrichment_service),
):
    """Stream poster bytes from the remote host or the local share."""
    image = await service.get_image_response(url)
    if image.reason == "unsupported_url":
        raise HTTPException(status_code=400, detail="Unsupported image url format")
    if not image.ok:
        raise HTTPException(status_code=404, detail="Image not found")
    return Response(content=image.content, media_type=image.content_type)
