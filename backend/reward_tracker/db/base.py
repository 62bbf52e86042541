"""SQLAlchemy Declarative Base: shared metadata for users, tasks, referral codes, invites.

Invariants:
    - Every model inherits from Base; Base.metadata is the schema alembic compares against
    - Index, unique, foreign and primary key names are deterministic (naming convention)

Design Decisions:
    - CHECK constraints are named explicitly on each model, so "ck" is left out of the
      convention (it would prefix the names a second time)
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
