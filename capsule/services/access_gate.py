"""The single authorization checkpoint for album-scoped actions.

Photo, album and social code ask the gate before touching anything that
belongs to an album. No membership means no capability, including `view`.
"""

import logging

from capsule.errors import ForbiddenError
from capsule.models.roles import Capability, Role, allows
from capsule.services.membership_store import MembershipStore
from capsule.utils.clock import utcnow

logger = logging.getLogger(__name__)


class AccessGate:

    def __init__(self, session, clock=utcnow, memberships: MembershipStore | None = None):
        self.memberships = memberships or MembershipStore(session, clock)

    def role_of(self, album_id: str, user_id: str) -> Role | None:
        return self.memberships.get_role(album_id, user_id)

    def check(self, album_id: str, user_id: str, capability: Capability) -> bool:
        return allows(self.role_of(album_id, user_id), Capability(capability))

    def require_capability(self, album_id: str, user_id: str, capability: Capability) -> Role:
        """Like `check`, but raises ForbiddenError. Returns the caller's role."""
        capability = Capability(capability)
        role = self.role_of(album_id, user_id)
        if not allows(role, capability):
            logger.warning(
                "User %s forbidden '%s' on album %s (role=%s)",
                user_id, capability.value, album_id, role.value if role else None,
            )
            raise ForbiddenError(album_id, user_id, capability.value)
        return role
