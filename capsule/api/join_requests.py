"""Join request API endpoints."""

from fastapi import APIRouter, Depends

from capsule.api.deps import get_current_user_id, get_join_requests
from capsule.models.join_request import JoinRequest
from capsule.schemas.invite import JoinRequestResolveRequest, JoinRequestResponse
from capsule.services.join_request_manager import JoinRequestManager
from capsule.utils.clock import isoformat

router = APIRouter(tags=["join-requests"])


def request_to_response(request: JoinRequest) -> JoinRequestResponse:
    return JoinRequestResponse(
        id=request.id,
        album_id=request.album_id,
        user_id=request.user_id,
        requested_role=request.requested_role,
        status=request.status,
        reviewed_by=request.reviewed_by,
        created_at=isoformat(request.created_at) or "",
        reviewed_at=isoformat(request.reviewed_at),
    )


@router.get("/albums/{album_id}/join-requests", response_model=list[JoinRequestResponse])
def list_pending_requests(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    join_requests: JoinRequestManager = Depends(get_join_requests),
):
    """Pending join requests, oldest first. Co-managers and the owner only."""
    return [request_to_response(r) for r in join_requests.list_pending(album_id, user_id)]


@router.post("/join-requests/{request_id}/resolve", response_model=JoinRequestResponse)
def resolve_request(
    request_id: str,
    request: JoinRequestResolveRequest,
    user_id: str = Depends(get_current_user_id),
    join_requests: JoinRequestManager = Depends(get_join_requests),
):
    """Approve or reject a join request."""
    resolved = join_requests.resolve(
        request_id, request.approve, user_id, role_if_approved=request.role
    )
    return request_to_response(resolved)
