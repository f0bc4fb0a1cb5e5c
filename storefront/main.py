from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront import __version__
from storefront.core.config import get_settings
from storefront.core.logging import configure_logging
from storefront.infrastructure.database import init_db
from storefront.infrastructure.database.session import dispose_engine
from storefront.interfaces.http.errors import register_exception_handlers
from storefront.interfaces.http.routers import create_api_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    await init_db()
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.project_name,
        description="Prepaid wallet storefront for growth services",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", summary="Liveness probe")
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "storefront.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
    )
