"""Album lifecycle: creation with its owner membership, edits, teardown."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from sqlalchemy import delete
from sqlmodel import Session, col, func, select

from capsule.errors import NotFoundError
from capsule.models.album import Album, AlbumMember, AlbumPrivacyMode
from capsule.models.invite import AlbumInvite
from capsule.models.join_request import JoinRequest
from capsule.models.roles import Capability, NotificationPreference, Role
from capsule.services.access_gate import AccessGate
from capsule.utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass
class AlbumSummary:
    album: Album
    role: Role
    member_count: int


def create_album(
    owner_id: str,
    title: str,
    session: Session,
    description: str | None = None,
    privacy_mode: AlbumPrivacyMode = AlbumPrivacyMode.INVITE_ONLY,
    clock: Callable[[], datetime] = utcnow,
) -> Album:
    """Create an album and its owner membership in one transaction."""
    now = clock()
    album = Album(
        owner_id=owner_id,
        title=title,
        description=description,
        privacy_mode=AlbumPrivacyMode(privacy_mode).value,
        created_at=now,
        updated_at=now,
    )
    session.add(album)
    session.add(AlbumMember(
        album_id=album.id,
        user_id=owner_id,
        role=Role.OWNER.value,
        notification_preference=NotificationPreference.FULL.value,
        joined_at=now,
    ))
    session.commit()
    session.refresh(album)
    logger.info("User %s created album %s", owner_id, album.id)
    return album


def _get_or_404(album_id: str, session: Session) -> Album:
    album = session.get(Album, album_id)
    if not album:
        raise NotFoundError("Album not found", {"album_id": album_id})
    return album


def get_album(album_id: str, user_id: str, session: Session) -> Album:
    album = _get_or_404(album_id, session)
    AccessGate(session).require_capability(album_id, user_id, Capability.VIEW)
    return album


def list_albums(user_id: str, session: Session) -> list[AlbumSummary]:
    """Albums the user belongs to, most recently updated first."""
    rows = session.exec(
        select(Album, AlbumMember.role)
        .join(AlbumMember, col(AlbumMember.album_id) == col(Album.id))
        .where(AlbumMember.user_id == user_id)
        .order_by(col(Album.updated_at).desc())
    ).all()
    if not rows:
        return []

    album_ids = [album.id for album, _ in rows]
    counts = dict(
        session.exec(
            select(AlbumMember.album_id, func.count())
            .where(col(AlbumMember.album_id).in_(album_ids))
            .group_by(AlbumMember.album_id)
        ).all()
    )
    return [AlbumSummary(album, Role(role), counts.get(album.id, 0)) for album, role in rows]


def update_album(
    album_id: str,
    user_id: str,
    session: Session,
    title: str | None = None,
    description: str | None = None,
    privacy_mode: AlbumPrivacyMode | None = None,
    cover_photo_id: str | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> Album:
    """Edit album properties. Requires co-manager or owner."""
    album = _get_or_404(album_id, session)
    AccessGate(session).require_capability(album_id, user_id, Capability.MODIFY_ALBUM)

    if title is not None:
        album.title = title
    if description is not None:
        album.description = description
    if privacy_mode is not None:
        album.privacy_mode = AlbumPrivacyMode(privacy_mode).value
    if cover_photo_id is not None:
        album.cover_photo_id = cover_photo_id
    album.updated_at = clock()

    session.add(album)
    session.commit()
    session.refresh(album)
    return album


def delete_album(album_id: str, user_id: str, session: Session) -> None:
    """Delete an album with its memberships, invites and join requests. Owner only."""
    album = _get_or_404(album_id, session)
    AccessGate(session).require_capability(album_id, user_id, Capability.DELETE_ALBUM)

    conn = session.connection()
    conn.execute(delete(JoinRequest).where(JoinRequest.album_id == album_id))
    conn.execute(delete(AlbumInvite).where(AlbumInvite.album_id == album_id))
    conn.execute(delete(AlbumMember).where(AlbumMember.album_id == album_id))
    session.delete(album)
    session.commit()
    logger.info("User %s deleted album %s", user_id, album_id)
