"""Album member API endpoints."""

from fastapi import APIRouter, Depends, status

from capsule.api.deps import get_access_gate, get_current_user_id, get_memberships
from capsule.models.album import AlbumMember
from capsule.models.roles import Capability, Role
from capsule.schemas.member import (
    MemberResponse,
    MemberRoleUpdateRequest,
    NotificationPreferenceRequest,
)
from capsule.services.access_gate import AccessGate
from capsule.services.membership_store import MembershipStore
from capsule.utils.clock import isoformat

router = APIRouter(prefix="/albums/{album_id}/members", tags=["members"])


def _member_to_response(member: AlbumMember) -> MemberResponse:
    return MemberResponse(
        album_id=member.album_id,
        user_id=member.user_id,
        role=member.role,
        role_display_name=Role(member.role).display_name,
        role_description=Role(member.role).description,
        notification_preference=member.notification_preference,
        joined_at=isoformat(member.joined_at) or "",
    )


@router.get("", response_model=list[MemberResponse])
def list_members(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    gate: AccessGate = Depends(get_access_gate),
    memberships: MembershipStore = Depends(get_memberships),
):
    """List album members, oldest first. Any member may look."""
    gate.require_capability(album_id, user_id, Capability.VIEW)
    return [_member_to_response(m) for m in memberships.list_members(album_id)]


@router.get("/me", response_model=MemberResponse)
def get_my_membership(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    memberships: MembershipStore = Depends(get_memberships),
):
    return _member_to_response(memberships.get(album_id, user_id))


@router.patch("/me/notifications", response_model=MemberResponse)
def update_my_notifications(
    album_id: str,
    request: NotificationPreferenceRequest,
    user_id: str = Depends(get_current_user_id),
    memberships: MembershipStore = Depends(get_memberships),
):
    member = memberships.update_notification_preference(
        album_id, user_id, request.notification_preference, acting_user_id=user_id
    )
    return _member_to_response(member)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def leave_album(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    memberships: MembershipStore = Depends(get_memberships),
):
    """Leave an album. The owner cannot leave."""
    memberships.leave(album_id, user_id)


@router.patch("/{member_id}", response_model=MemberResponse)
def update_member_role(
    album_id: str,
    member_id: str,
    request: MemberRoleUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    memberships: MembershipStore = Depends(get_memberships),
):
    """Change a member's role. Co-managers and the owner only."""
    member = memberships.update_role(album_id, member_id, request.role, acting_user_id=user_id)
    return _member_to_response(member)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    album_id: str,
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    memberships: MembershipStore = Depends(get_memberships),
):
    """Remove a member. Co-managers and the owner only; the owner stays."""
    memberships.remove(album_id, member_id, acting_user_id=user_id)
