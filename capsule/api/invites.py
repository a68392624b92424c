"""Invite API endpoints."""

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, status

from capsule.api.deps import (
    get_access_gate,
    get_current_user_id,
    get_invites,
    get_optional_user_id,
)
from capsule.api.join_requests import request_to_response
from capsule.errors import InviteExpiredError, NotFoundError
from capsule.models.invite import AlbumInvite
from capsule.models.roles import Capability
from capsule.schemas.invite import (
    InviteAcceptResponse,
    InviteCreateRequest,
    InvitePreviewResponse,
    InviteResponse,
)
from capsule.services.access_gate import AccessGate
from capsule.services.invite_manager import (
    AcceptOutcome,
    InviteManager,
    deep_link_url,
    invite_url,
)
from capsule.utils.clock import isoformat

router = APIRouter(tags=["invites"])


def _invite_to_response(invite: AlbumInvite) -> InviteResponse:
    return InviteResponse(
        id=invite.id,
        album_id=invite.album_id,
        invite_token=invite.invite_token,
        invite_url=invite_url(invite.invite_token),
        deep_link_url=deep_link_url(invite.invite_token),
        default_role=invite.default_role,
        requires_approval=bool(invite.requires_approval),
        expires_at=isoformat(invite.expires_at),
        created_by=invite.created_by,
        created_at=isoformat(invite.created_at) or "",
    )


@router.post("/albums/{album_id}/invites", response_model=InviteResponse, status_code=201)
def create_invite(
    album_id: str,
    request: InviteCreateRequest,
    user_id: str = Depends(get_current_user_id),
    invites: InviteManager = Depends(get_invites),
):
    """Create an invite link for the album. Co-managers and the owner only."""
    invite = invites.create(
        album_id,
        user_id,
        default_role=request.default_role,
        requires_approval=request.requires_approval,
        expires_in=timedelta(seconds=request.expires_in) if request.expires_in else None,
    )
    return _invite_to_response(invite)


@router.get("/albums/{album_id}/invites", response_model=list[InviteResponse])
def list_invites(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    gate: AccessGate = Depends(get_access_gate),
    invites: InviteManager = Depends(get_invites),
):
    gate.require_capability(album_id, user_id, Capability.MANAGE_MEMBERS)
    return [_invite_to_response(i) for i in invites.list_invites(album_id)]


@router.delete("/invites/{invite_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_invite(
    invite_id: str,
    user_id: str = Depends(get_current_user_id),
    invites: InviteManager = Depends(get_invites),
):
    invites.revoke(invite_id, user_id)


@router.get("/invites/{token}", response_model=InvitePreviewResponse)
def preview_invite(
    token: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
    invites: InviteManager = Depends(get_invites),
):
    """Show what an invite link leads to. Works before signing in."""
    preview = invites.preview(token, user_id)
    invite = preview.invite
    if invite is None:
        return InvitePreviewResponse(status=preview.status.value)
    return InvitePreviewResponse(
        status=preview.status.value,
        album_id=invite.album_id,
        album_title=preview.album_title,
        default_role=invite.default_role,
        requires_approval=bool(invite.requires_approval),
        expires_at=isoformat(invite.expires_at),
    )


@router.post("/invites/{token}/accept", response_model=InviteAcceptResponse)
def accept_invite(
    token: str,
    user_id: str = Depends(get_current_user_id),
    invites: InviteManager = Depends(get_invites),
):
    """Join the album behind an invite, or ask to join when approval is required."""
    result = invites.accept(token, user_id)
    if result.outcome == AcceptOutcome.NOT_FOUND:
        raise NotFoundError("Invite not found")
    if result.outcome == AcceptOutcome.EXPIRED:
        raise InviteExpiredError("Invite has expired", {"album_id": result.album_id})

    return InviteAcceptResponse(
        outcome=result.outcome.value,
        album_id=result.album_id,
        join_request=request_to_response(result.join_request) if result.join_request else None,
    )
