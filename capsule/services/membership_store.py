"""Album membership storage and the rules for changing it.

A membership binds (album, user) to a role and a notification preference.
The (album_id, user_id) primary key is what keeps memberships unique:
`create` is a single INSERT that fails on conflict, never a lookup
followed by an insert.
"""

import logging

from sqlalchemy import delete, insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from capsule.errors import (
    AlreadyMemberError,
    CannotRemoveOwnerError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from capsule.models.album import AlbumMember
from capsule.models.roles import NotificationPreference, Role, can_manage_members
from capsule.services.base import StoreService, store_operation

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class MembershipStore(StoreService):

    def _find(self, album_id: str, user_id: str) -> AlbumMember | None:
        return self.session.exec(
            select(AlbumMember)
            .where(AlbumMember.album_id == album_id, AlbumMember.user_id == user_id)
            .execution_options(populate_existing=True)
        ).first()

    @store_operation
    def get(self, album_id: str, user_id: str) -> AlbumMember:
        member = self._find(album_id, user_id)
        if not member:
            raise NotFoundError(
                f"User {user_id} is not a member of album {album_id}",
                {"album_id": album_id, "user_id": user_id},
            )
        return member

    @store_operation
    def get_role(self, album_id: str, user_id: str) -> Role | None:
        member = self._find(album_id, user_id)
        return Role(member.role) if member else None

    def is_member(self, album_id: str, user_id: str) -> bool:
        return self.get_role(album_id, user_id) is not None

    @store_operation
    def create(
        self,
        album_id: str,
        user_id: str,
        role: Role,
        notification_preference: NotificationPreference = NotificationPreference.FULL,
    ) -> AlbumMember:
        """Insert a membership. Raises AlreadyMemberError if one exists."""
        role = Role(role)
        if role == Role.OWNER and self._owner_id(album_id) is not None:
            raise InvalidTransitionError(
                f"Album {album_id} already has an owner",
                {"album_id": album_id},
            )

        try:
            self._execute(
                insert(AlbumMember).values(
                    album_id=album_id,
                    user_id=user_id,
                    role=role.value,
                    notification_preference=NotificationPreference(notification_preference).value,
                    joined_at=self.clock(),
                )
            )
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info("Membership (%s, %s) already exists", album_id, user_id)
            raise AlreadyMemberError(album_id, user_id)

        logger.info("User %s joined album %s as %s", user_id, album_id, role.value)
        return self.get(album_id, user_id)

    def insert_if_absent(self, album_id: str, user_id: str, role: Role) -> bool:
        """Add a non-owner membership inside the caller's transaction.

        Does not commit. Returns False when the user was already a member;
        the existing membership is left untouched.
        """
        role = Role(role)
        if role == Role.OWNER:
            raise InvalidTransitionError(
                "Ownership cannot be granted",
                {"album_id": album_id, "user_id": user_id},
            )
        dialect_insert = _UPSERT_INSERTS[self.session.connection().dialect.name]
        result = self._execute(
            dialect_insert(AlbumMember)
            .values(
                album_id=album_id,
                user_id=user_id,
                role=role.value,
                notification_preference=NotificationPreference.FULL.value,
                joined_at=self.clock(),
            )
            .on_conflict_do_nothing(index_elements=["album_id", "user_id"])
        )
        return result.rowcount == 1

    def _owner_id(self, album_id: str) -> str | None:
        return self.session.exec(
            select(AlbumMember.user_id).where(
                AlbumMember.album_id == album_id,
                AlbumMember.role == Role.OWNER.value,
            )
        ).first()

    def require_manager(self, album_id: str, acting_user_id: str, action: str) -> Role:
        acting_role = self.get_role(album_id, acting_user_id)
        if acting_role is None or not can_manage_members(acting_role):
            logger.warning("User %s denied %s on album %s", acting_user_id, action, album_id)
            raise PermissionDeniedError(
                f"Managing members of album {album_id} requires co-manager or owner",
                {"album_id": album_id, "user_id": acting_user_id, "action": action},
            )
        return acting_role

    @store_operation
    def update_role(
        self, album_id: str, user_id: str, new_role: Role, acting_user_id: str
    ) -> AlbumMember:
        """Change a member's role. The owner's role is fixed; nobody becomes owner."""
        new_role = Role(new_role)
        self.require_manager(album_id, acting_user_id, "update_role")
        if acting_user_id == user_id:
            raise PermissionDeniedError(
                "Members cannot change their own role",
                {"album_id": album_id, "user_id": user_id},
            )

        member = self.get(album_id, user_id)
        if member.role == Role.OWNER.value:
            raise InvalidTransitionError(
                "The owner's role cannot be changed",
                {"album_id": album_id, "user_id": user_id},
            )
        if new_role == Role.OWNER:
            raise InvalidTransitionError(
                "Ownership cannot be granted",
                {"album_id": album_id, "user_id": user_id},
            )

        old_role = member.role
        member.role = new_role.value
        self.session.add(member)
        self.session.commit()
        self.session.refresh(member)
        logger.info(
            "User %s changed role of %s in album %s: %s -> %s",
            acting_user_id, user_id, album_id, old_role, new_role.value,
        )
        return member

    @store_operation
    def update_notification_preference(
        self,
        album_id: str,
        user_id: str,
        preference: NotificationPreference,
        acting_user_id: str,
    ) -> AlbumMember:
        """Self-service: only the member can change their own preference."""
        if acting_user_id != user_id:
            raise PermissionDeniedError(
                "Notification preferences can only be changed by the member",
                {"album_id": album_id, "user_id": user_id},
            )
        member = self.get(album_id, user_id)
        member.notification_preference = NotificationPreference(preference).value
        self.session.add(member)
        self.session.commit()
        self.session.refresh(member)
        return member

    @store_operation
    def remove(self, album_id: str, user_id: str, acting_user_id: str) -> None:
        """Remove a member, either self-leave or by a manager. The owner stays."""
        member = self.get(album_id, user_id)
        if member.role == Role.OWNER.value:
            raise CannotRemoveOwnerError(
                "The album owner cannot be removed",
                {"album_id": album_id, "user_id": user_id},
            )
        if acting_user_id != user_id:
            self.require_manager(album_id, acting_user_id, "remove")

        self._execute(
            delete(AlbumMember).where(
                AlbumMember.album_id == album_id,
                AlbumMember.user_id == user_id,
            )
        )
        self.session.commit()
        if acting_user_id == user_id:
            logger.info("User %s left album %s", user_id, album_id)
        else:
            logger.info("User %s removed %s from album %s", acting_user_id, user_id, album_id)

    def leave(self, album_id: str, user_id: str) -> None:
        self.remove(album_id, user_id, acting_user_id=user_id)

    @store_operation
    def list_members(self, album_id: str) -> list[AlbumMember]:
        """Members of an album, oldest first."""
        return list(
            self.session.exec(
                select(AlbumMember)
                .where(AlbumMember.album_id == album_id)
                .order_by(col(AlbumMember.joined_at).asc(), col(AlbumMember.user_id).asc())
                .execution_options(populate_existing=True)
            ).all()
        )
