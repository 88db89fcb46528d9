"""
Centralized dependency injection for FastAPI routes.

The shared RemoteClient (one connection pool for every request) and the
EnrichmentService built on top of it are created lazily here and injected via
Depends(). Tests replace them with
app.dependency_overrides[get_enrichment_service] = lambda: service.
"""
from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wb_provider.provider.client import RemoteClient
    from wb_provider.provider.service import EnrichmentService
    from wb_provider.utils.config import AppConfig


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    from wb_provider.utils.config import load_config
    return load_config()


@lru_cache(maxsize=1)
def get_remote_client() -> RemoteClient:
    from wb_provider.provider.client import RemoteClient
    return RemoteClient(timeout=get_config().request_timeout_sec)


@lru_cache(maxsize=1)
def get_enrichment_service() -> EnrichmentService:
    from wb_provider.provider.service import EnrichmentService
    return EnrichmentService(get_config().to_server_address(), get_remote_client())
