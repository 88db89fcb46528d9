from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from wb_provider.utils.logger import logger
from .errors import MalformedResponseError, NotFoundError, TransportError, UnsupportedUrlFormatError
from .paths import is_share_path, translate_share_path
from .types import ImageResponse, RawMetadataPayload, ServerAddress


DEFAULT_USER_AGENT = "WbProvider/0.1.0"
DEFAULT_TIMEOUT_SEC = 30.0

CONTENT_TYPE_FALLBACK = "application/octet-stream"
_CONTENT_TYPES_BY_EXT = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


def guess_content_type(path: str | Path) -> str:
    return _CONTENT_TYPES_BY_EXT.get(Path(path).suffix.lower(), CONTENT_TYPE_FALLBACK)


def classify_image_url(url: str) -> str:
    """Return "local" for share paths, "remote" for http(s) urls.

    Raises UnsupportedUrlFormatError for everything else.
    """
    if is_share_path(url):
        return "local"
    try:
        parsed = urlparse(url or "")
    except ValueError as e:
        raise UnsupportedUrlFormatError(f"unsupported url format: {url!r}") from e
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return "remote"
    raise UnsupportedUrlFormatError(f"unsupported url format: {url!r}")


def _require_server(server: ServerAddress) -> ServerAddress:
    if server is None:
        raise TypeError("server address is required")
    return server


def _read_file(path: Path) -> bytes | None:
    if not path.is_file():
        return None
    return path.read_bytes()


class RemoteClient:
    """HTTP client for the metadata server plus the two poster sources.

    One instance (and its connection pool) is shared by every in-flight query;
    no per-call state is stored on it. Pass ``http_client`` to reuse an existing
    httpx.AsyncClient, otherwise one is created and closed by aclose().
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": user_agent},
        )

    async def __aenter__(self) -> RemoteClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    @staticmethod
    def _timeout(timeout: float | None):
        return httpx.USE_CLIENT_DEFAULT if timeout is None else timeout

    async def _post_form(self, url: str, form: dict[str, str], timeout: float | None) -> httpx.Response:
        try:
            return await self._http.post(url, data=form, timeout=self._timeout(timeout))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"request to {url} failed: {e}") from e

    # -- Metadata server --

    async def fetch_metadata(
        self, server: ServerAddress, base_name: str, *, timeout: float | None = None
    ) -> RawMetadataPayload:
        """POST /metadata with the file's base name as lookup key."""
        url = f"{_require_server(server).base_url}/metadata"
        logger.info(f"POST {url} postBody={base_name}")
        r = await self._post_form(url, {"postBody": base_name}, timeout)
        logger.info(f"<- {r.status_code} {url}")

        if not r.is_success:
            logger.warning(f"metadata lookup failed: HTTP {r.status_code} body={r.text[:500]}")
            raise NotFoundError(f"HTTP {r.status_code} from {url}", status_code=r.status_code)

        logger.debug(f"metadata response: {r.text}")
        try:
            data = r.json()
        except ValueError as e:
            logger.error(f"metadata response is not JSON: {e}; body={r.text[:500]}")
            raise MalformedResponseError(f"undecodable JSON from {url}") from e

        if data is None:
            logger.warning("metadata response was null")
            raise MalformedResponseError(f"null payload from {url}")
        if not isinstance(data, dict):
            logger.error(f"metadata response is not an object: {type(data).__name__}")
            raise MalformedResponseError(f"expected JSON object from {url}")

        try:
            return RawMetadataPayload.model_validate(data)
        except ValidationError as e:
            logger.error(f"metadata payload rejected: {e}")
            raise MalformedResponseError(f"invalid payload from {url}") from e

    async def search_metadata(
        self, server: ServerAddress, query_name: str, *, timeout: float | None = None
    ) -> list[RawMetadataPayload]:
        """POST /search. Never raises: every failure degrades to an empty list."""
        url = f"{_require_server(server).base_url}/search"
        logger.info(f"POST {url} query={query_name}")
        try:
            r = await self._post_form(url, {"query": query_name}, timeout)
        except TransportError as e:
            logger.error(f"search failed ({server}): {e}")
            return []

        logger.info(f"<- {r.status_code} {url}")
        if not r.is_success:
            logger.error(f"search failed ({server}): HTTP {r.status_code}")
            return []

        try:
            data = r.json()
        except ValueError as e:
            logger.error(f"search response is not JSON ({server}): {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"search response is not an array ({server}): {type(data).__name__}")
            return []

        out: list[RawMetadataPayload] = []
        for item in data:
            if not isinstance(item, dict):
                logger.warning(f"skip search item: not an object ({type(item).__name__})")
                continue
            try:
                out.append(RawMetadataPayload.model_validate(item))
            except ValidationError as e:
                logger.warning(f"skip search item: {e}")
        return out

    # -- Posters --

    async def fetch_remote_image(self, url: str, *, timeout: float | None = None) -> ImageResponse:
        logger.info(f"GET {url}")
        try:
            r = await self._http.get(url, timeout=self._timeout(timeout), follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"image request error {url}: {e}")
            return ImageResponse.not_found()

        if not r.is_success:
            logger.warning(f"image fetch failed: {url}, HTTP {r.status_code}")
            return ImageResponse.not_found()

        content_type = r.headers.get("content-type") or CONTENT_TYPE_FALLBACK
        logger.info(f"image fetched: {url} ({len(r.content)} bytes, {content_type})")
        return ImageResponse(status_code=r.status_code, content=r.content, content_type=content_type)

    async def fetch_local_image(self, share_path: str) -> ImageResponse:
        local = translate_share_path(share_path)
        logger.info(f"local image: {share_path} -> {local}")
        path = Path(local)
        try:
            data = await asyncio.to_thread(_read_file, path)
        except (OSError, ValueError) as e:
            logger.error(f"local image read error {local}: {e}")
            return ImageResponse.not_found()

        if data is None:
            logger.warning(f"local image does not exist: {local}")
            return ImageResponse.not_found()

        content_type = guess_content_type(path)
        logger.info(f"local image loaded: {local} ({len(data)} bytes, {content_type})")
        return ImageResponse(status_code=200, content=data, content_type=content_type)

    async def get_image_response(self, url: str, *, timeout: float | None = None) -> ImageResponse:
        """Route an image url to the local share or the remote host."""
        try:
            kind = classify_image_url(url)
        except UnsupportedUrlFormatError as e:
            logger.warning(str(e))
            return ImageResponse.unsupported_url()

        if kind == "local":
            return await self.fetch_local_image(url)
        return await self.fetch_remote_image(url, timeout=timeout)
