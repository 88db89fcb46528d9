from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from api.constants import MAX_NAME_LENGTH, MAX_PATH_LENGTH, MAX_YEAR, MIN_YEAR


class MediaQueryRequest(BaseModel):
    name: str = Field(default="", max_length=MAX_NAME_LENGTH)
    path: str = Field(..., min_length=1, max_length=MAX_PATH_LENGTH)
    year: int | None = Field(default=None, ge=MIN_YEAR, le=MAX_YEAR)

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('path cannot be empty')
        return v


class SearchRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class CastMemberOut(BaseModel):
    name: str
    role: str


class MediaMetadataOut(BaseModel):
    title: str | None = None
    overview: str | None = None
    premiere_date: str | None = None
    production_year: int | None = None
    studios: list[str] = []
    tags: list[str] = []
    cast: list[CastMemberOut] = []
    community_rating: float | None = None
    critic_rating: float | None = None
    poster_url: str | None = None


class EnrichmentResponse(BaseModel):
    has_metadata: bool
    metadata: MediaMetadataOut


class SearchResultOut(BaseModel):
    name: str | None = None
    production_year: int | None = None
    image_url: str | None = None


class ImageRecordOut(BaseModel):
    provider_name: str
    url: str
    image_type: str


class ProviderInfo(BaseModel):
    name: str
    server: str
    supported_images: list[str]
