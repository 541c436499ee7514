import logging
import sys

from tutorhub.config import get_settings

NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "asyncio", "multipart")


def setup_logging():
    """Root logger on stdout at the configured level; chatty libraries at WARNING."""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # SQL statements only when DATABASE_ECHO is on
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )
