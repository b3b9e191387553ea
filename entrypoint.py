import os

import uvicorn

from logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def main():
    """Run the API with uvicorn; the room store backend is chosen when app.py is imported."""
    # Setup logging before importing app so store selection is logged
    setup_logging(log_level=os.getenv("LOG_LEVEL", "INFO"), log_file=os.getenv("LOG_FILE", None))

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    reload = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")
    logger.info(f"Starting Planning Poker server on {host}:{port} (reload={reload})")
    uvicorn.run("app:app", host=host, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    main()
