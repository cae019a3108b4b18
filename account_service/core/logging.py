import logging
import os
from typing import Optional

_NOISY_LOGGERS = ("httpx", "httpcore", "multipart", "python_multipart")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging defaults for the account service."""
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLogger().level))
