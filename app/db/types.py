import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.types import TypeDecorator

from app.core.billing import parse_features


def new_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeatureList(TypeDecorator):
    """
    JSON column holding an ordered list of feature strings.

    Older rows store features as a single string; both directions go through
    parse_features so callers always see a list.
    """

    impl = JSON
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return parse_features(value)

    def process_result_value(self, value, dialect):
        return parse_features(value)
