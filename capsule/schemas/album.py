"""Album request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from capsule.models.album import AlbumPrivacyMode


class AlbumCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    privacy_mode: AlbumPrivacyMode = AlbumPrivacyMode.INVITE_ONLY


class AlbumUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    privacy_mode: Optional[AlbumPrivacyMode] = None
    cover_photo_id: Optional[str] = None


class AlbumResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: Optional[str]
    cover_photo_id: Optional[str]
    privacy_mode: str
    created_at: str
    updated_at: str


class AlbumSummaryResponse(AlbumResponse):
    role: str
    member_count: int
