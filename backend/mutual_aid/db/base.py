"""SQLAlchemy Declarative Base — shared base class and constraint naming.

Invariants:
    - All models inherit from Base
    - Model-created constraints get deterministic names (NAMING_CONVENTION)

Design Decisions:
    - Separate file for Base: avoids circular imports between models
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all mutual-aid ORM models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
