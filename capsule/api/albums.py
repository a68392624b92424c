"""Album API endpoints."""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from capsule.api.deps import get_access_gate, get_current_user_id
from capsule.database import get_session
from capsule.models.album import Album
from capsule.models.roles import Capability
from capsule.schemas.album import (
    AlbumCreateRequest,
    AlbumResponse,
    AlbumSummaryResponse,
    AlbumUpdateRequest,
)
from capsule.schemas.member import AccessCheckResponse
from capsule.services import album_service
from capsule.services.access_gate import AccessGate
from capsule.utils.clock import isoformat

router = APIRouter(prefix="/albums", tags=["albums"])


def _album_to_response(album: Album) -> AlbumResponse:
    return AlbumResponse(
        id=album.id,
        owner_id=album.owner_id,
        title=album.title,
        description=album.description,
        cover_photo_id=album.cover_photo_id,
        privacy_mode=album.privacy_mode,
        created_at=isoformat(album.created_at) or "",
        updated_at=isoformat(album.updated_at) or "",
    )


@router.get("", response_model=list[AlbumSummaryResponse])
def list_albums(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """List albums the current user is a member of."""
    return [
        AlbumSummaryResponse(
            **_album_to_response(s.album).model_dump(),
            role=s.role.value,
            member_count=s.member_count,
        )
        for s in album_service.list_albums(user_id, session)
    ]


@router.post("", response_model=AlbumResponse, status_code=201)
def create_album(
    request: AlbumCreateRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Create a new album owned by the current user."""
    album = album_service.create_album(
        user_id,
        request.title,
        session,
        description=request.description,
        privacy_mode=request.privacy_mode,
    )
    return _album_to_response(album)


@router.get("/{album_id}", response_model=AlbumResponse)
def get_album(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    return _album_to_response(album_service.get_album(album_id, user_id, session))


@router.patch("/{album_id}", response_model=AlbumResponse)
def update_album(
    album_id: str,
    request: AlbumUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Update album properties. Co-managers and the owner only."""
    album = album_service.update_album(
        album_id,
        user_id,
        session,
        title=request.title,
        description=request.description,
        privacy_mode=request.privacy_mode,
        cover_photo_id=request.cover_photo_id,
    )
    return _album_to_response(album)


@router.delete("/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_album(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Delete an album and everything membership-related in it. Owner only."""
    album_service.delete_album(album_id, user_id, session)


@router.get("/{album_id}/access/{capability}", response_model=AccessCheckResponse)
def check_access(
    album_id: str,
    capability: Capability,
    user_id: str = Depends(get_current_user_id),
    gate: AccessGate = Depends(get_access_gate),
):
    """Ask whether the caller may perform `capability` on the album."""
    return AccessCheckResponse(
        album_id=album_id,
        user_id=user_id,
        capability=capability.value,
        allowed=gate.check(album_id, user_id, capability),
    )
