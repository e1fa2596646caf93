from datetime import datetime, timezone

import sqlalchemy
from sqlalchemy import Column, String
from sqlalchemy.orm import declarative_base
from uuid6 import uuid7

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    __abstract__ = True
    id = Column(String, primary_key=True, default=lambda: str(uuid7()), index=True)
    # Python-side defaults keep sub-second ordering on SQLite, where
    # CURRENT_TIMESTAMP only has second resolution.
    created_at = Column(
        sqlalchemy.DateTime(timezone=True),
        default=utcnow,
        server_default=sqlalchemy.func.now(),
        nullable=False,
        index=True,
    )
    updated_at = Column(
        sqlalchemy.DateTime(timezone=True),
        default=utcnow,
        server_default=sqlalchemy.func.now(),
        onupdate=utcnow,
        nullable=False,
    )

# Note: Models will import this Base. Do not import models here to avoid circular imports.
# Import models in wcag_audit/platform/db/session.py::init_models instead.
