"""Album invites: issuing, previewing, accepting and revoking.

An invite is a shareable token that grants its default role to whoever
redeems it, optionally gated by an expiry time and by manager approval.
Expiry is evaluated when the token is used; nothing evicts old invites.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from sqlmodel import col, select

from capsule.config import settings
from capsule.errors import AlreadyMemberError, InvalidRoleError, NotFoundError
from capsule.models.album import Album
from capsule.models.invite import AlbumInvite
from capsule.models.join_request import JoinRequest
from capsule.models.roles import Role, assignable_roles
from capsule.services.base import StoreService, store_operation
from capsule.services.join_request_manager import JoinRequestManager
from capsule.services.membership_store import MembershipStore
from capsule.utils.clock import as_utc, utcnow
from capsule.utils.security import generate_invite_token

logger = logging.getLogger(__name__)


class AcceptOutcome(str, Enum):
    JOINED = "joined"
    ALREADY_MEMBER = "already_member"
    PENDING_APPROVAL = "pending_approval"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


@dataclass
class AcceptResult:
    outcome: AcceptOutcome
    album_id: str | None = None
    join_request: JoinRequest | None = None


class InviteStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    ALREADY_MEMBER = "already_member"
    NOT_FOUND = "not_found"


@dataclass
class InvitePreview:
    status: InviteStatus
    invite: AlbumInvite | None = None
    album_title: str | None = None


def invite_url(token: str) -> str:
    """Web link for sharing (works on every platform)."""
    return f"{settings.web_app_url.rstrip('/')}/invite/{token}"


def deep_link_url(token: str) -> str:
    """Deep link that opens the invite in the mobile app."""
    return f"{settings.url_scheme}://invite/{token}"


class InviteManager(StoreService):

    def __init__(
        self,
        session,
        clock=utcnow,
        memberships: MembershipStore | None = None,
        join_requests: JoinRequestManager | None = None,
    ):
        super().__init__(session, clock)
        self.memberships = memberships or MembershipStore(session, clock)
        self.join_requests = join_requests or JoinRequestManager(session, clock, self.memberships)

    def _find_by_token(self, token: str) -> AlbumInvite | None:
        return self.session.exec(
            select(AlbumInvite).where(AlbumInvite.invite_token == token)
        ).first()

    def is_expired(self, invite: AlbumInvite) -> bool:
        expires_at = as_utc(invite.expires_at)
        return expires_at is not None and expires_at < self.clock()

    @store_operation
    def create(
        self,
        album_id: str,
        acting_user_id: str,
        default_role: Role = Role.CONTRIBUTOR,
        requires_approval: bool = False,
        expires_in: timedelta | None = None,
    ) -> AlbumInvite:
        """Issue a new invite. Managers only; grants contributor or viewer."""
        default_role = Role(default_role)
        self.memberships.require_manager(album_id, acting_user_id, "create_invite")
        if default_role not in assignable_roles():
            raise InvalidRoleError(
                f"Invites cannot grant the '{default_role.value}' role",
                {"album_id": album_id, "role": default_role.value},
            )

        now = self.clock()
        invite = AlbumInvite(
            album_id=album_id,
            invite_token=generate_invite_token(),
            default_role=default_role.value,
            requires_approval=requires_approval,
            expires_at=now + expires_in if expires_in is not None else None,
            created_by=acting_user_id,
            created_at=now,
        )
        self.session.add(invite)
        self.session.commit()
        self.session.refresh(invite)
        logger.info(
            "User %s created invite %s for album %s (role=%s, approval=%s)",
            acting_user_id, invite.id, album_id, default_role.value, requires_approval,
        )
        return invite

    @store_operation
    def resolve(self, token: str) -> AlbumInvite:
        invite = self._find_by_token(token)
        if not invite:
            raise NotFoundError("Invite not found")
        return invite

    @store_operation
    def preview(self, token: str, user_id: str | None = None) -> InvitePreview:
        """Describe what accepting the token would do, without changing anything."""
        invite = self._find_by_token(token)
        if not invite:
            return InvitePreview(InviteStatus.NOT_FOUND)

        album = self.session.get(Album, invite.album_id)
        title = album.title if album else None
        if self.is_expired(invite):
            return InvitePreview(InviteStatus.EXPIRED, invite, title)
        if user_id and self.memberships.is_member(invite.album_id, user_id):
            return InvitePreview(InviteStatus.ALREADY_MEMBER, invite, title)
        return InvitePreview(InviteStatus.VALID, invite, title)

    @store_operation
    def accept(self, token: str, user_id: str) -> AcceptResult:
        """Redeem an invite for `user_id`.

        The membership check up front only short-circuits the common case;
        the unique (album, user) key decides concurrent acceptances.
        """
        invite = self._find_by_token(token)
        if not invite:
            return AcceptResult(AcceptOutcome.NOT_FOUND)

        album_id = invite.album_id
        if self.is_expired(invite):
            logger.info("User %s tried expired invite %s", user_id, invite.id)
            return AcceptResult(AcceptOutcome.EXPIRED, album_id)

        if self.memberships.is_member(album_id, user_id):
            return AcceptResult(AcceptOutcome.ALREADY_MEMBER, album_id)

        role = Role(invite.default_role)
        if invite.requires_approval:
            request = self.join_requests.create(
                album_id, user_id, requested_role=role, invite_id=invite.id
            )
            return AcceptResult(AcceptOutcome.PENDING_APPROVAL, album_id, request)

        try:
            self.memberships.create(album_id, user_id, role)
        except AlreadyMemberError:
            return AcceptResult(AcceptOutcome.ALREADY_MEMBER, album_id)
        return AcceptResult(AcceptOutcome.JOINED, album_id)

    @store_operation
    def revoke(self, invite_id: str, acting_user_id: str) -> None:
        """Delete an invite. Revoking one that is already gone is a no-op."""
        invite = self.session.exec(
            select(AlbumInvite).where(AlbumInvite.id == invite_id)
        ).first()
        if not invite:
            logger.debug("Invite %s already gone", invite_id)
            return

        album_id = invite.album_id
        self.memberships.require_manager(album_id, acting_user_id, "revoke_invite")
        self.session.delete(invite)
        self.session.commit()
        logger.info("User %s revoked invite %s for album %s", acting_user_id, invite_id, album_id)

    @store_operation
    def list_invites(self, album_id: str) -> list[AlbumInvite]:
        """Invites for an album, newest first."""
        return list(
            self.session.exec(
                select(AlbumInvite)
                .where(AlbumInvite.album_id == album_id)
                .order_by(col(AlbumInvite.created_at).desc())
            ).all()
        )
