from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Minimal logging configuration for this repo.

    Notes:
    - stdlib logging only; uvicorn already installs handlers.
    - Set `CAMPUS_LOG_LEVEL=DEBUG` to see every data-scope decision.
    """

    normalized = level.upper()
    logging.getLogger("campus_hub").setLevel(normalized)
    # Ensure child loggers under campus_hub.* inherit this level.
    logging.getLogger("campus_hub").propagate = True
