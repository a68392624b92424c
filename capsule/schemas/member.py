"""Membership schemas."""

from pydantic import BaseModel

from capsule.models.roles import NotificationPreference, Role


class MemberResponse(BaseModel):
    album_id: str
    user_id: str
    role: str
    role_display_name: str
    role_description: str
    notification_preference: str
    joined_at: str


class MemberRoleUpdateRequest(BaseModel):
    role: Role


class NotificationPreferenceRequest(BaseModel):
    notification_preference: NotificationPreference


class AccessCheckResponse(BaseModel):
    album_id: str
    user_id: str
    capability: str
    allowed: bool
