"""Album and membership models."""

import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class AlbumPrivacyMode(str, Enum):
    INVITE_ONLY = "invite_only"
    LINK_ACCESSIBLE = "link_accessible"
    PUBLIC_UNLISTED = "public_unlisted"


class Album(SQLModel, table=True):
    __tablename__ = "albums"

    id: str = Field(default_factory=lambda: f"alb_{secrets.token_hex(8)}", primary_key=True)
    owner_id: str = Field(index=True)
    title: str
    description: Optional[str] = None
    cover_photo_id: Optional[str] = None
    privacy_mode: str = Field(default="invite_only")  # 'invite_only' | 'link_accessible' | 'public_unlisted'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AlbumMember(SQLModel, table=True):
    __tablename__ = "album_members"

    # Composite key: at most one membership per (album, user)
    album_id: str = Field(primary_key=True)
    user_id: str = Field(primary_key=True, index=True)
    role: str = Field(default="contributor")  # see capsule.models.roles.Role
    notification_preference: str = Field(default="full")  # 'full' | 'digest' | 'none'
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
