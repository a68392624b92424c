"""Join request model."""

import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel


class JoinRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class JoinRequest(SQLModel, table=True):
    __tablename__ = "join_requests"
    __table_args__ = (
        # At most one pending request per (album, user)
        Index(
            "uq_join_requests_pending",
            "album_id",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: str = Field(default_factory=lambda: f"jrq_{secrets.token_hex(8)}", primary_key=True)
    album_id: str = Field(index=True)
    user_id: str = Field(index=True)
    invite_id: Optional[str] = None
    requested_role: str = Field(default="contributor")
    status: str = Field(default="pending")  # 'pending' | 'approved' | 'rejected'
    reviewed_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reviewed_at: Optional[datetime] = None
