import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from api.routes.provider import router as provider_router
from api.constants import API_VERSION
from api.dependencies import get_config, get_enrichment_service, get_remote_client
from wb_provider.utils.logger import resolve_log_level, set_log_level


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    set_log_level(resolve_log_level(get_config().log_level))
    yield
    # Shutdown: release the shared connection pool (only if it was ever created)
    # and drop the service holding it, so a restarted app builds fresh ones.
    if get_remote_client.cache_info().currsize:
        await get_remote_client().aclose()
    get_enrichment_service.cache_clear()
    get_remote_client.cache_clear()


def create_app() -> FastAPI:
    app = FastAPI(title="WB Provider API", version=API_VERSION, lifespan=lifespan)

    # CORS configuration for internal network use
    allowed_origins = os.environ.get("CORS_ORIGINS", "*").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(provider_router, tags=["provider"])

    @app.get("/")
    async def root():
        return {"message": "WB Provider API is running"}

    return app


app = create_app()
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
