from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase

from offer_tracker.db.types import JSONType
from offer_tracker.types import JsonArray, JsonObject


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    type_annotation_map = {
        datetime: DateTime(timezone=True),
        JsonObject: JSONType,
        JsonArray: JSONType,
    }
