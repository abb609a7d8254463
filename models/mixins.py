"""
SQLAlchemy mixins for common model patterns.

These mixins provide reusable column definitions shared by the seed registry
and the message store.
"""
from datetime import datetime

from cuid2 import cuid_wrapper
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Collision-resistant ID for seeds and captured newsletters"""
    return cuid_generator()


class CuidMixin:
    """
    Mixin for models using CUID as primary key.

    Provides:
        - id: String primary key with automatic CUID generation
    """

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class UserOwnedMixin:
    """
    Mixin for records owned by a single dashboard user.

    Provides:
        - user_id: ID of the owning user (the JWT 'sub' claim)

    Every lookup of a user-owned record must filter on user_id so one user
    can never reach another user's rows.
    """

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return mapped_column(String, nullable=False, index=True)


class TimestampMixin:
    """
    Mixin for timestamp tracking.

    Provides:
        - created_at: Timestamp set on creation (server-side default)
        - updated_at: Timestamp updated on modification (server-side default + onupdate)
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class UserOwnedModel(CuidMixin, UserOwnedMixin, TimestampMixin):
    """
    Complete mixin for user-owned models.

    Combines:
        - CuidMixin: CUID primary key
        - UserOwnedMixin: owning user ID
        - TimestampMixin: Created/updated timestamps
    """

    __abstract__ = True
