"""
Item Tracker - FastAPI Backend
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio
import uvicorn

from itemtracker import __version__
from itemtracker.config import settings
from itemtracker.logging import setup_logging, get_logger
from itemtracker.models import TrackerStats
from itemtracker.routers import saves, tracker
from itemtracker.services.catalog import ItemCatalog
from itemtracker.services.saves import find_latest_world
from itemtracker.services.tracker import TrackerService

logger = get_logger('main')

STATS_EVENT = "tracker_stats"

# Socket.IO server for live progress updates
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*'
)


async def publish_stats(stats: TrackerStats) -> None:
    await sio.emit(STATS_EVENT, stats.model_dump(mode="json"))


def _initial_save_dir() -> Path | None:
    if settings.SAVE_PATH:
        return Path(settings.SAVE_PATH)
    return find_latest_world(settings.SAVES_ROOT_DIR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.DEBUG)
    logger.info("Starting Item Tracker API")

    catalog = ItemCatalog.from_file(settings.CATALOG_PATH)
    if catalog.is_empty:
        logger.warning(
            f"Item catalog at {settings.CATALOG_PATH} is empty or missing - tracking will record nothing"
        )
    app.state.catalog = catalog

    tracker_service = TrackerService(catalog=catalog)
    tracker_service.subscribe(publish_stats)
    app.state.tracker_service = tracker_service
    logger.info("Services initialized")

    if settings.AUTO_START:
        save_dir = _initial_save_dir()
        if save_dir is None:
            logger.info(f"No save found under {settings.SAVES_ROOT_DIR} - choose one via /api/tracker/start")
        else:
            try:
                await tracker_service.start_tracking(save_dir)
            except ValueError as e:
                logger.warning(f"Could not start tracking {save_dir}: {e}")

    yield

    logger.info("Shutting down application")
    await tracker_service.stop_tracking()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Item Tracker API",
        description="Tracks which catalog items have ever been held in a save's inventories",
        version=__version__,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(tracker.router, prefix="/api/tracker", tags=["Tracker"])
    app.include_router(saves.router, prefix="/api/saves", tags=["Saves"])

    @sio.event
    async def connect(sid, environ):
        logger.debug(f"Client {sid[:8]}... connected")
        service = getattr(app.state, "tracker_service", None)
        if service is not None and service.latest_stats is not None:
            await sio.emit(STATS_EVENT, service.latest_stats.model_dump(mode="json"), to=sid)

    @sio.event
    async def disconnect(sid):
        logger.debug(f"Client {sid[:8]}... disconnected")

    @app.get("/health")
    async def health_check():
        service = getattr(app.state, "tracker_service", None)
        return {
            "status": "healthy",
            "service": "item-tracker",
            "tracking": str(service.save_dir) if service and service.save_dir else None,
            "running": service.running if service else False,
        }

    @app.get("/")
    async def root():
        return {
            "name": "Item Tracker API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health"
        }

    return app


app = create_app()
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


def main() -> None:
    uvicorn.run(asgi_app, host=settings.HOST, port=settings.PORT, log_level="debug" if settings.DEBUG else "info")


if __name__ == "__main__":
    main()
