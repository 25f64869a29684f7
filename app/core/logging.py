import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process."""
    root = logging.getLogger()
    resolved = (level or settings.LOG_LEVEL or "INFO").upper()
    root.setLevel(resolved)

    if not any(getattr(h, "_submanager", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._submanager = True
        root.addHandler(handler)

    # SQL echo is too noisy outside development
    if settings.ENVIRONMENT == "production":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
