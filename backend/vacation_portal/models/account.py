from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from vacation_portal.models.base import CreatedAtMixin, RecordBase


class Account(RecordBase, CreatedAtMixin, table=True):
    """A staff account: identity, login credential and role."""

    __tablename__ = "account"
    __table_args__ = (sa.CheckConstraint("role IN ('supervisor', 'subordinate')", name="ck_account_role"),)

    display_name: str = Field(max_length=255)
    contact_address: str = Field(max_length=255, unique=True)
    login_code: str = Field(max_length=7, unique=True)
    credential_digest: str = Field(max_length=255)
    role: str = Field(max_length=20)
