"""Album invite model."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class AlbumInvite(SQLModel, table=True):
    __tablename__ = "album_invites"

    id: str = Field(default_factory=lambda: f"inv_{secrets.token_hex(8)}", primary_key=True)
    album_id: str = Field(index=True)
    invite_token: str = Field(unique=True)
    default_role: str = Field(default="contributor")
    requires_approval: bool = Field(default=False)
    expires_at: Optional[datetime] = None  # None = never expires
    created_by: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
