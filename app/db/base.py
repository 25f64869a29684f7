import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()

# Models register themselves in app/models/__init__.py; importing them here
# at module level would be circular.


def init_db(max_retries: int = 30, retry_delay: float = 2):
    """
    Create missing tables once the database accepts connections.

    Existing tables are left untouched; schema changes go through
    migrations/*.sql and apply_migration.py.
    """
    from app.db.session import engine
    from app.models import (  # noqa: F401
        CartItem,
        Subscription,
        SubscriptionPackage,
        SubscriptionPayment,
        UserRole,
        UserSubscription,
    )

    for attempt in range(1, max_retries + 1):
        try:
            with engine.begin() as conn:
                conn.execute(text("SELECT 1"))
            break
        except OperationalError as e:
            if attempt == max_retries:
                logger.error(f"Database unreachable after {max_retries} attempts: {e}")
                raise
            logger.warning(f"Database not ready, retrying in {retry_delay}s ({attempt}/{max_retries})")
            time.sleep(retry_delay)

    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")
