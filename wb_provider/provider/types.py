from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PureWindowsPath

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 8765

PROVIDER_NAME = "WbProvider"
IMAGE_TYPE_PRIMARY = "Primary"
ROLE_ACTOR = "Actor"


@dataclass(frozen=True)
class ServerAddress:
    """Where the metadata server lives. Empty host / port 0 mean "use the default"."""

    host: str = DEFAULT_SERVER_HOST
    port: int = DEFAULT_SERVER_PORT

    @property
    def effective_host(self) -> str:
        return (self.host or "").strip() or DEFAULT_SERVER_HOST

    @property
    def effective_port(self) -> int:
        return self.port if self.port and self.port > 0 else DEFAULT_SERVER_PORT

    @property
    def base_url(self) -> str:
        return f"http://{self.effective_host}:{self.effective_port}"

    def __str__(self) -> str:
        return f"{self.effective_host}:{self.effective_port}"


@dataclass(frozen=True)
class MediaQuery:
    display_name: str
    file_path: str
    known_year: int | None = None

    @property
    def base_name(self) -> str:
        # PureWindowsPath splits on both "/" and "\".
        return PureWindowsPath(self.file_path or "").stem


class RawMetadataPayload(BaseModel):
    """Direct deserialization of one metadata object sent by the server.

    The server reuses generic column names, so several fields are aliased:
    comment1 is the summary, comment2 the poster url and writer the studio.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = None
    summary: str | None = Field(default=None, alias="comment1")
    create_time: str | None = None
    tag_string: str | None = Field(default=None, alias="tag")
    poster_url: str | None = Field(default=None, alias="comment2")
    artist_string: str | None = Field(default=None, alias="artist")
    studio: str | None = Field(default=None, alias="writer")
    score: float | None = None


@dataclass(frozen=True)
class CastMember:
    name: str
    role: str = ROLE_ACTOR


@dataclass(frozen=True)
class MediaMetadata:
    title: str | None = None
    overview: str | None = None
    premiere_date: datetime | None = None
    production_year: int | None = None
    studios: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    cast: tuple[CastMember, ...] = ()
    community_rating: float | None = None
    critic_rating: float | None = None
    poster_url: str | None = None


@dataclass(frozen=True)
class EnrichmentResult:
    has_metadata: bool
    metadata: MediaMetadata = field(default_factory=MediaMetadata)


@dataclass(frozen=True)
class ImageRecord:
    url: str
    provider_name: str = PROVIDER_NAME
    image_type: str = IMAGE_TYPE_PRIMARY


@dataclass(frozen=True)
class SearchResult:
    name: str | None
    production_year: int | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class ImageResponse:
    """Bytes plus content type, shaped like the HTTP response a host streams back."""

    status_code: int
    content: bytes = b""
    content_type: str | None = None
    # "not_found" | "unsupported_url" for failed lookups, None on success
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def not_found(cls) -> ImageResponse:
        return cls(status_code=404, reason="not_found")

    @classmethod
    def unsupported_url(cls) -> ImageResponse:
        return cls(status_code=400, reason="unsupported_url")
