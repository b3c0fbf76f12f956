from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import List, Sequence, Tuple, TypeVar

from socialnet.auth import get_current_user
from socialnet.config import settings
from socialnet.database import get_db
from socialnet.dependencies import get_friending, get_identity, get_responses
from socialnet.middleware.rate_limit import rate_limit_friend_write
from socialnet.schemas.friends import (
    FriendRequestResponse, FriendsListResponse, FriendRequestsListResponse, FriendRequestStatusResponse,
    RelationshipStatusResponse
)
from socialnet import schemas
from socialnet.services.friending import FriendingEngine
from socialnet.services.identity import IdentityResolver
from socialnet.services.presentation import Responses
from socialnet.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["friends"])

T = TypeVar("T")


def _page(items: Sequence[T], page: int, page_size: int) -> Tuple[List[T], int]:
    """Slice one page out of ``items``; returns the page and the total count."""
    offset = (page - 1) * page_size
    return list(items[offset:offset + page_size]), len(items)


def _require_username(current_user: schemas.CurrentUser) -> None:
    if not current_user.username:
        raise HTTPException(
            status_code=400,
            detail="You must set a username before using friend requests. Please update your account first."
        )


@router.get("/friends", response_model=FriendsListResponse)
async def get_friends(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    responses: Responses = Depends(get_responses),
):
    """Get the current user's friends"""
    friend_ids = await friending.get_friends(db, current_user.id)
    page_ids, total = _page(friend_ids, page, page_size)

    return FriendsListResponse(
        friends=responses.friends(db, page_ids),
        total_count=total,
        page=page,
        page_size=page_size
    )


@router.delete("/friends/{friend}", response_model=FriendRequestStatusResponse)
@rate_limit_friend_write
async def remove_friend(
    request: Request,
    friend: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    identity: IdentityResolver = Depends(get_identity),
):
    """Remove a friend by username"""
    friend_id = identity.resolve(db, friend)
    await friending.remove_friend(db, current_user.id, friend_id)

    return FriendRequestStatusResponse(
        message=f"Unfriended {friend}!",
        status="removed"
    )


async def _request_list(
    fetch, current_user: schemas.CurrentUser, page: int, page_size: int, db: Session, responses: Responses
) -> FriendRequestsListResponse:
    requests = await fetch(db, current_user.id)
    page_requests, total = _page(requests, page, page_size)

    return FriendRequestsListResponse(
        requests=responses.friend_requests(db, page_requests, viewer_id=current_user.id),
        total_count=total,
        page=page,
        page_size=page_size
    )


@router.get("/friend/requests", response_model=FriendRequestsListResponse)
async def get_friend_requests(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    responses: Responses = Depends(get_responses),
):
    """Get pending friend requests sent or received by the current user"""
    return await _request_list(friending.get_requests, current_user, page, page_size, db, responses)


@router.get("/friend/requests/received", response_model=FriendRequestsListResponse)
async def get_received_friend_requests(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    responses: Responses = Depends(get_responses),
):
    """Get pending friend requests waiting on the current user"""
    return await _request_list(friending.get_received_requests, current_user, page, page_size, db, responses)


@router.get("/friend/requests/sent", response_model=FriendRequestsListResponse)
async def get_sent_friend_requests(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    responses: Responses = Depends(get_responses),
):
    """Get pending friend requests sent by the current user"""
    return await _request_list(friending.get_sent_requests, current_user, page, page_size, db, responses)


@router.post("/friend/requests/{to}", response_model=FriendRequestResponse)
@rate_limit_friend_write
async def send_friend_request(
    request: Request,
    to: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    identity: IdentityResolver = Depends(get_identity),
    responses: Responses = Depends(get_responses),
):
    """Send a friend request to another user by username"""
    _require_username(current_user)
    to_id = identity.resolve(db, to)
    friend_request = await friending.send_request(db, current_user.id, to_id)
    return responses.friend_request(db, friend_request, viewer_id=current_user.id)


@router.delete("/friend/requests/{to}", response_model=FriendRequestStatusResponse)
@rate_limit_friend_write
async def cancel_friend_request(
    request: Request,
    to: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    identity: IdentityResolver = Depends(get_identity),
):
    """Cancel a friend request the current user sent"""
    to_id = identity.resolve(db, to)
    await friending.remove_request(db, current_user.id, to_id)

    return FriendRequestStatusResponse(
        message=f"Removed friend request to {to}!",
        status="cancelled"
    )


@router.put("/friend/accept/{from_user}", response_model=FriendRequestStatusResponse)
@rate_limit_friend_write
async def accept_friend_request(
    request: Request,
    from_user: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    identity: IdentityResolver = Depends(get_identity),
):
    """Accept the pending friend request from ``from_user``"""
    from_id = identity.resolve(db, from_user)
    await friending.accept_request(db, from_id, current_user.id)

    return FriendRequestStatusResponse(
        message=f"Accepted friend request from {from_user}!",
        status="accepted"
    )


@router.put("/friend/reject/{from_user}", response_model=FriendRequestStatusResponse)
@rate_limit_friend_write
async def reject_friend_request(
    request: Request,
    from_user: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    identity: IdentityResolver = Depends(get_identity),
):
    """Reject the pending friend request from ``from_user``"""
    from_id = identity.resolve(db, from_user)
    await friending.reject_request(db, from_id, current_user.id)

    return FriendRequestStatusResponse(
        message=f"Rejected friend request from {from_user}!",
        status="rejected"
    )


@router.get("/friend/status", response_model=RelationshipStatusResponse)
async def get_relationship_status(
    usernames: str = Query(..., description="Comma separated usernames"),
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
    identity: IdentityResolver = Depends(get_identity),
):
    """Relationship between the current user and each listed username"""
    names = [name.strip() for name in usernames.split(",") if name.strip()]
    ids = {name: identity.resolve(db, name) for name in names}

    status_map = await friending.relationship_status(db, current_user.id, list(set(ids.values())))
    return RelationshipStatusResponse(statuses={name: status_map[user_id] for name, user_id in ids.items()})
