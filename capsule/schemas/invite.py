"""Invite and join request schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from capsule.models.roles import Role


class InviteCreateRequest(BaseModel):
    default_role: Role = Role.CONTRIBUTOR
    requires_approval: bool = False
    expires_in: Optional[int] = Field(default=None, gt=0)  # seconds; None = never expires


class InviteResponse(BaseModel):
    id: str
    album_id: str
    invite_token: str
    invite_url: str
    deep_link_url: str
    default_role: str
    requires_approval: bool
    expires_at: Optional[str]
    created_by: str
    created_at: str


class InvitePreviewResponse(BaseModel):
    status: str  # 'valid' | 'expired' | 'already_member' | 'not_found'
    album_id: Optional[str] = None
    album_title: Optional[str] = None
    default_role: Optional[str] = None
    requires_approval: bool = False
    expires_at: Optional[str] = None


class JoinRequestResponse(BaseModel):
    id: str
    album_id: str
    user_id: str
    requested_role: str
    status: str
    reviewed_by: Optional[str]
    created_at: str
    reviewed_at: Optional[str]


class InviteAcceptResponse(BaseModel):
    outcome: str  # 'joined' | 'already_member' | 'pending_approval' | 'expired' | 'not_found'
    album_id: Optional[str] = None
    join_request: Optional[JoinRequestResponse] = None


class JoinRequestResolveRequest(BaseModel):
    approve: bool
    role: Optional[Role] = None  # defaults to the role the request was opened with
