from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    return datetime.now(UTC)


def utc_timestamp(*, nullable: bool = False, index: bool = False) -> Any:
    """Timezone-aware timestamp column.

    Non-nullable columns are stamped on insert, by the application and by the
    database default alike. Nullable ones start empty and are set by services.
    """
    if nullable:
        return Field(default=None, index=index, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    return Field(
        default_factory=now_utc,
        index=index,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )


class RecordBase(SQLModel):
    """Row keyed by a random UUID assigned on construction."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class CreatedAtMixin(SQLModel):
    created_at: datetime = utc_timestamp()
