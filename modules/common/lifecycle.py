# modules/common/lifecycle.py
import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum
from sqlalchemy.ext.hybrid import hybrid_property


class Lifecycle(str, enum.Enum):
    ACTIVE = "active"
    DEACTIVATED = "deactivated"


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class SoftDeleteMixin:
    """
    Records are never hard-deleted: they move ACTIVE -> DEACTIVATED.
    Listing / aggregation filter on `is_active`; lookups by id ignore it.
    """
    lifecycle = Column(Enum(Lifecycle), default=Lifecycle.ACTIVE, nullable=False, index=True)

    @hybrid_property
    def is_active(self):
        return self.lifecycle == Lifecycle.ACTIVE

    def deactivate(self) -> None:
        self.lifecycle = Lifecycle.DEACTIVATED
