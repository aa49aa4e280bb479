"""
FastAPI main application
VMix Server - Excel rows as a vMix data source

Routers in vmix_server/api/:
- health.py: Health check and endpoint directory
- upload.py: Excel upload and import
- elements.py: Row listing, selection and reset
- status.py: Server and store status

The row store is created here and reached by routers through
``app.state.store``.
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from vmix_server import __version__
from vmix_server.api import elements, health, status, upload
from vmix_server.config import Settings, load_config
from vmix_server.core.store import RowStore


logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    app.state.started_at = time.monotonic()
    settings = app.state.settings
    logger.info(f"🚀 {settings.server_name} started on port {settings.port}")
    logger.info(f"📊 API available at /api/v1, CORS origin: {settings.client_url}")

    yield

    logger.info("🛑 Server shutting down")


def create_app(settings: Optional[Settings] = None, store: Optional[RowStore] = None) -> FastAPI:
    """
    Build the application

    Args:
        settings: Server settings (loaded from config/server.yaml if None)
        store: Row store owned by this app (a fresh one if None)

    Returns:
        Configured FastAPI instance
    """
    settings = settings or load_config()

    app = FastAPI(
        title=settings.server_name,
        description="Upload an Excel file and expose a selected row to vMix",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store if store is not None else RowStore()
    app.state.started_at = time.monotonic()

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.client_url.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================== INCLUDE ROUTERS ====================

    # Health check (GET /health)
    app.include_router(health.router)

    # Upload endpoint (POST /api/v1/upload)
    app.include_router(upload.router)

    # Row endpoints (GET /api/v1/elements, PUT /api/v1/element/select/{id}, ...)
    app.include_router(elements.router)

    # Status endpoint (GET /api/v1/status)
    app.include_router(status.router)

    # ==================== FRONT-END ====================

    frontend = Path(settings.frontend_dir) if settings.frontend_dir else None
    if frontend is not None and frontend.is_dir():
        app.mount("/", StaticFiles(directory=str(frontend), html=True), name="frontend")
        logger.info(f"🖥️ Serving front-end from {frontend}")
    else:
        app.include_router(health.root_router)

    return app


settings = load_config()
setup_logging(settings.log_level)
app = create_app(settings)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
