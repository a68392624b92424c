"""Approval-gated join pipeline.

A join request moves from `pending` to `approved` or `rejected` exactly once.
The transition is a conditional UPDATE on `status = 'pending'`, so when two
managers resolve the same request only one of them wins.
"""

import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from capsule.errors import AlreadyResolvedError, InvalidTransitionError, NotFoundError
from capsule.models.join_request import JoinRequest, JoinRequestStatus
from capsule.models.roles import Role
from capsule.services.base import StoreService, store_operation
from capsule.services.membership_store import MembershipStore
from capsule.utils.clock import utcnow

logger = logging.getLogger(__name__)


class JoinRequestManager(StoreService):

    def __init__(self, session, clock=utcnow, memberships: MembershipStore | None = None):
        super().__init__(session, clock)
        self.memberships = memberships or MembershipStore(session, clock)

    def _pending(self, album_id: str, user_id: str) -> JoinRequest | None:
        return self.session.exec(
            select(JoinRequest).where(
                JoinRequest.album_id == album_id,
                JoinRequest.user_id == user_id,
                JoinRequest.status == JoinRequestStatus.PENDING.value,
            )
        ).first()

    @store_operation
    def get(self, request_id: str) -> JoinRequest:
        request = self.session.exec(
            select(JoinRequest)
            .where(JoinRequest.id == request_id)
            .execution_options(populate_existing=True)
        ).first()
        if not request:
            raise NotFoundError(f"Join request {request_id} not found", {"request_id": request_id})
        return request

    @store_operation
    def create(
        self,
        album_id: str,
        user_id: str,
        requested_role: Role = Role.CONTRIBUTOR,
        invite_id: str | None = None,
    ) -> JoinRequest:
        """Open a pending request, or return the one already pending for this user."""
        existing = self._pending(album_id, user_id)
        if existing:
            return existing

        request = JoinRequest(
            album_id=album_id,
            user_id=user_id,
            invite_id=invite_id,
            requested_role=Role(requested_role).value,
            status=JoinRequestStatus.PENDING.value,
            created_at=self.clock(),
        )
        self.session.add(request)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost the race against a concurrent create for the same user
            self.session.rollback()
            existing = self._pending(album_id, user_id)
            if existing:
                return existing
            raise

        self.session.refresh(request)
        logger.info("User %s requested to join album %s (%s)", user_id, album_id, request.id)
        return request

    @store_operation
    def list_pending(self, album_id: str, acting_user_id: str) -> list[JoinRequest]:
        """Pending requests for an album, oldest first. Managers only."""
        self.memberships.require_manager(album_id, acting_user_id, "list_join_requests")
        return list(
            self.session.exec(
                select(JoinRequest)
                .where(
                    JoinRequest.album_id == album_id,
                    JoinRequest.status == JoinRequestStatus.PENDING.value,
                )
                .order_by(col(JoinRequest.created_at).asc())
            ).all()
        )

    @store_operation
    def resolve(
        self,
        request_id: str,
        approve: bool,
        acting_user_id: str,
        role_if_approved: Role | None = None,
    ) -> JoinRequest:
        """Approve or reject a pending request.

        On approval the requester becomes a member with `role_if_approved`,
        falling back to the role recorded on the request. A membership that
        already exists (joined through another path) is not an error.
        """
        request = self.get(request_id)
        album_id, user_id = request.album_id, request.user_id
        self.memberships.require_manager(album_id, acting_user_id, "resolve_join_request")

        if request.status != JoinRequestStatus.PENDING.value:
            raise AlreadyResolvedError(request_id, request.status)

        role = Role(role_if_approved) if role_if_approved is not None else Role(request.requested_role)
        if approve and role == Role.OWNER:
            raise InvalidTransitionError(
                "Ownership cannot be granted through a join request",
                {"request_id": request_id},
            )

        # Status change and membership commit together or not at all
        status = JoinRequestStatus.APPROVED if approve else JoinRequestStatus.REJECTED
        try:
            result = self._execute(
                update(JoinRequest)
                .where(
                    JoinRequest.id == request_id,
                    JoinRequest.status == JoinRequestStatus.PENDING.value,
                )
                .values(status=status.value, reviewed_by=acting_user_id, reviewed_at=self.clock())
            )
            if result.rowcount != 1:
                logger.warning("Join request %s was resolved concurrently", request_id)
                raise AlreadyResolvedError(request_id)

            if approve and not self.memberships.insert_if_absent(album_id, user_id, role):
                logger.info("User %s was already a member of album %s", user_id, album_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("User %s %s join request %s", acting_user_id, status.value, request_id)
        return self.get(request_id)
