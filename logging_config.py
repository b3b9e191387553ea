import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure the root logger once per process. Safe to call repeatedly."""
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    if not any(getattr(h, "_planning_poker", False) for h in root.handlers):
        handlers = [logging.StreamHandler(sys.stdout)]
        if log_file:
            handlers.append(logging.FileHandler(log_file))
        for handler in handlers:
            handler.setFormatter(formatter)
            handler._planning_poker = True
            root.addHandler(handler)

    # uvicorn access logs are noisy with one-second polling clients
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
