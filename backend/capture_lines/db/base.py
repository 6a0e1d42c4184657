"""Declarative Base — metadata shared by the ORM models and Alembic.

Invariants:
    - Index and constraint names follow NAMING_CONVENTION, so migrations
      and create_all produce identical schemas (ix_capture_lines_status, ...)
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
