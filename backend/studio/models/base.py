"""
Base model configuration for all SQLModel classes.
Provides common fields and column helpers.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Type
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, Enum as SAEnum
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def enum_column(enum_cls: Type[Enum], name: str, **kwargs) -> Column:
    """
    Build a fresh enum column.

    A Column instance can belong to one table only, so every model
    field gets its own.
    """
    return Column(
        SAEnum(
            enum_cls,
            name=name,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=kwargs.pop("nullable", False),
        **kwargs,
    )


class BaseUUIDModel(SQLModel):
    """
    Base model with UUID primary key and creation timestamp.

    All database models inherit from this.
    """
    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        index=True,
        nullable=False
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=DateTime(timezone=True),
    )
