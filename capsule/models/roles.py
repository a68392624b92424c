"""Album roles and the permission predicates derived from them.

Roles are totally ordered by rank: owner > co_manager > contributor > viewer.
Every authorization decision in Capsule is expressed through the predicates
below; nothing else compares role strings.
"""

from enum import Enum


class Role(str, Enum):
    OWNER = "owner"
    CO_MANAGER = "co_manager"
    CONTRIBUTOR = "contributor"
    VIEWER = "viewer"

    @property
    def display_name(self) -> str:
        return _ROLE_LABELS[self][0]

    @property
    def description(self) -> str:
        return _ROLE_LABELS[self][1]


class NotificationPreference(str, Enum):
    FULL = "full"
    DIGEST = "digest"
    NONE = "none"

    @property
    def display_name(self) -> str:
        return _PREFERENCE_LABELS[self]


class Capability(str, Enum):
    VIEW = "view"
    UPLOAD = "upload"
    MANAGE_MEMBERS = "manage_members"
    MODIFY_ALBUM = "modify_album"
    HIDE_PHOTOS = "hide_photos"
    DELETE_ALBUM = "delete_album"


_RANKS = {
    Role.OWNER: 4,
    Role.CO_MANAGER: 3,
    Role.CONTRIBUTOR: 2,
    Role.VIEWER: 1,
}

_ROLE_LABELS = {
    Role.OWNER: ("Owner", "Full control over the album"),
    Role.CO_MANAGER: ("Co-Manager", "Can manage members and content"),
    Role.CONTRIBUTOR: ("Contributor", "Can upload and download photos"),
    Role.VIEWER: ("Viewer", "Can only view and download photos"),
}

_PREFERENCE_LABELS = {
    NotificationPreference.FULL: "All Updates",
    NotificationPreference.DIGEST: "Daily Digest",
    NotificationPreference.NONE: "None",
}


def rank(role: Role) -> int:
    """Permission level of a role (owner highest)."""
    return _RANKS[Role(role)]


def outranks(a: Role, b: Role) -> bool:
    return rank(a) > rank(b)


def can_upload(role: Role) -> bool:
    return rank(role) >= rank(Role.CONTRIBUTOR)


def can_manage_members(role: Role) -> bool:
    return rank(role) >= rank(Role.CO_MANAGER)


def can_modify_album(role: Role) -> bool:
    return rank(role) >= rank(Role.CO_MANAGER)


def can_hide_photos(role: Role) -> bool:
    return Role(role) == Role.OWNER


def can_delete_album(role: Role) -> bool:
    return Role(role) == Role.OWNER


_CAPABILITY_PREDICATES = {
    Capability.VIEW: lambda role: True,
    Capability.UPLOAD: can_upload,
    Capability.MANAGE_MEMBERS: can_manage_members,
    Capability.MODIFY_ALBUM: can_modify_album,
    Capability.HIDE_PHOTOS: can_hide_photos,
    Capability.DELETE_ALBUM: can_delete_album,
}


def allows(role: Role | None, capability: Capability) -> bool:
    """Whether a member holding `role` has `capability`. No role means no access."""
    if role is None:
        return False
    return _CAPABILITY_PREDICATES[Capability(capability)](role)


def assignable_roles() -> list[Role]:
    """Roles an invite may grant on acceptance."""
    return [Role.CONTRIBUTOR, Role.VIEWER]
