from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
import os

from backend import RoomStore, create_room_store
from constants import CORS_ORIGINS
from exceptions import IdGenerationExhausted, PlanningPokerException, StorageUnavailable
from logging_config import get_logger, setup_logging
from routers.packs import card_packs_router
from routers.rooms import rooms_router

# Setup logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE", None)
setup_logging(log_level=log_level, log_file=log_file)
logger = get_logger(__name__)


async def planning_poker_exception_handler(request: Request, exc: PlanningPokerException):
    if isinstance(exc, (StorageUnavailable, IdGenerationExhausted)):
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "kind": exc.kind},
        headers={"Cache-Control": "no-store"},
    )


def create_app(room_store: Optional[RoomStore] = None) -> FastAPI:
    """
    Build the application around one room store.

    The store is created once here and shared by every request through
    app.state; pass one in to swap the backend (tests use a MemoryRoomStore).
    """
    app = FastAPI(title="Planning Poker API")
    app.state.room_store = room_store if room_store is not None else create_room_store()

    # Credentials (cookies) cannot be combined with a literal "*" origin in browsers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PlanningPokerException, planning_poker_exception_handler)
    app.include_router(card_packs_router)
    app.include_router(rooms_router)

    logger.info(f"FastAPI application initialized with {type(app.state.room_store).__name__}")
    return app


app = create_app()
