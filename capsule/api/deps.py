"""Common API dependencies: caller identity and request-scoped services."""

from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from capsule.database import get_session
from capsule.services.access_gate import AccessGate
from capsule.services.invite_manager import InviteManager
from capsule.services.join_request_manager import JoinRequestManager
from capsule.services.membership_store import MembershipStore
from capsule.utils.security import decode_token

bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)


def _user_id_from_token(token: str) -> str:
    try:
        payload = decode_token(token)
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    if payload.get("type", "access") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
        )
    return user_id


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    """The caller's user id, taken from the identity provider's JWT."""
    return _user_id_from_token(credentials.credentials)


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
) -> Optional[str]:
    if credentials is None:
        return None
    return _user_id_from_token(credentials.credentials)


def get_memberships(session: Session = Depends(get_session)) -> MembershipStore:
    return MembershipStore(session)


def get_access_gate(memberships: MembershipStore = Depends(get_memberships)) -> AccessGate:
    return AccessGate(memberships.session, memberships=memberships)


def get_join_requests(memberships: MembershipStore = Depends(get_memberships)) -> JoinRequestManager:
    return JoinRequestManager(memberships.session, memberships=memberships)


def get_invites(
    memberships: MembershipStore = Depends(get_memberships),
    join_requests: JoinRequestManager = Depends(get_join_requests),
) -> InviteManager:
    return InviteManager(memberships.session, memberships=memberships, join_requests=join_requests)
