"""Capsule Database Models."""

from capsule.models.album import Album, AlbumMember, AlbumPrivacyMode
from capsule.models.invite import AlbumInvite
from capsule.models.join_request import JoinRequest, JoinRequestStatus
from capsule.models.roles import Capability, NotificationPreference, Role

__all__ = [
    "Album",
    "AlbumMember",
    "AlbumPrivacyMode",
    "AlbumInvite",
    "JoinRequest",
    "JoinRequestStatus",
    "Capability",
    "NotificationPreference",
    "Role",
]
