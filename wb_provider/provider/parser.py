from __future__ import annotations

import re
from datetime import datetime

from .types import CastMember, MediaMetadata, RawMetadataPayload


CREATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
# strptime alone accepts "2020-5-1 0:0:0"; the server always zero-pads.
_CREATE_TIME_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")

STAR = "★"
_STAR_RATINGS: dict[int, float] = {
    1: 2.0,
    2: 4.0,
    3: 6.0,
    4: 8.0,
    5: 10.0,
}


def parse_create_time(value: str | None) -> datetime | None:
    """Parse "yyyy-MM-dd HH:mm:ss"; anything else (incl. impossible dates) -> None."""
    if not value or not _CREATE_TIME_RE.fullmatch(value):
        return None
    try:
        return datetime.strptime(value, CREATE_TIME_FORMAT)
    except ValueError:
        return None


def production_year_from(raw: RawMetadataPayload) -> int | None:
    created = parse_create_time(raw.create_time)
    return created.year if created else None


def split_tags(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(t for t in value.split(",") if t)


def community_rating_from_tags(value: str | None) -> float | None:
    """Stars anywhere in the tag text are the user's rating: one star = 2 points."""
    if not value:
        return None
    return _STAR_RATINGS.get(value.count(STAR))


def split_artists(value: str | None) -> tuple[CastMember, ...]:
    if not value:
        return ()
    return tuple(CastMember(name=name) for name in value.split())


def parse_metadata(raw: RawMetadataPayload) -> MediaMetadata:
    created = parse_create_time(raw.create_time)
    return MediaMetadata(
        title=raw.title or None,
        overview=raw.summary or None,
        premiere_date=created,
        production_year=created.year if created else None,
        studios=(raw.studio,) if raw.studio else (),
        tags=split_tags(raw.tag_string),
        cast=split_artists(raw.artist_string),
        community_rating=community_rating_from_tags(raw.tag_string),
        critic_rating=raw.score,
        poster_url=raw.poster_url or None,
    )


def has_content(metadata: MediaMetadata) -> bool:
    """True if the server actually told us something (a poster alone counts)."""
    return any(
        (
            metadata.title,
            metadata.overview,
            metadata.studios,
            metadata.tags,
            metadata.cast,
            metadata.community_rating is not None,
            metadata.critic_rating is not None,
            metadata.poster_url,
        )
    )
