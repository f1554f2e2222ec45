import logging

from .config import settings


def setup_logging(level: str | None = None) -> None:
    """
    Configure global logging for the entire application.
    Reads LOG_LEVEL from environment (.env) or defaults to INFO.
    """
    log_level = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from overly chatty libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
