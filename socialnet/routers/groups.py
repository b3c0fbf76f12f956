from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from socialnet.auth import get_current_user
from socialnet.database import get_db
from socialnet.dependencies import get_identity, get_responses
from socialnet.middleware.rate_limit import rate_limit_api_write
from socialnet.services.identity import IdentityResolver
from socialnet.services.presentation import Responses
from socialnet.utils.logger import get_logger
from socialnet import schemas, crud

logger = get_logger(__name__)

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("", response_model=List[schemas.GroupResponse])
async def get_groups(
    author: Optional[str] = Query(None, description="Only groups created by this username"),
    db: Session = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity),
    responses: Responses = Depends(get_responses),
):
    if author:
        groups = crud.group.get_groups_by_author(db, identity.resolve(db, author))
    else:
        groups = crud.group.get_groups(db)
    return responses.groups(db, groups)


@router.post("", response_model=schemas.GroupCreatedResponse)
@rate_limit_api_write
async def create_group(
    request: Request,
    body: schemas.GroupCreate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    responses: Responses = Depends(get_responses),
):
    """Create a group; the current user becomes its author and first member"""
    group = crud.group.create_group(db, current_user.id, body.group_name)
    logger.info(f"Group {group.id} created by {current_user.id}")
    return schemas.GroupCreatedResponse(msg="Group successfully created!", group=responses.group(db, group))


@router.post("/{group_id}/members", response_model=schemas.GroupCreatedResponse)
async def add_member(
    group_id: str,
    body: schemas.GroupMemberAdd,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity),
    responses: Responses = Depends(get_responses),
):
    """Add a user to one of the current user's groups"""
    group = crud.group.assert_author_is_user(db, group_id, current_user.id)
    group = crud.group.add_member(db, group, identity.resolve(db, body.username))
    return schemas.GroupCreatedResponse(msg=f"Added {body.username} to the group!", group=responses.group(db, group))


@router.delete("/{group_id}/members/{username}", response_model=schemas.GroupCreatedResponse)
async def remove_member(
    group_id: str,
    username: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity),
    responses: Responses = Depends(get_responses),
):
    group = crud.group.assert_author_is_user(db, group_id, current_user.id)
    group = crud.group.remove_member(db, group, identity.resolve(db, username))
    return schemas.GroupCreatedResponse(msg=f"Removed {username} from the group!", group=responses.group(db, group))


@router.delete("/{group_id}", response_model=schemas.MessageResponse)
async def delete_group(
    group_id: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    group = crud.group.assert_author_is_user(db, group_id, current_user.id)
    crud.group.delete_group(db, group)
    logger.info(f"Group {group_id} deleted by {current_user.id}")
    return schemas.MessageResponse(msg="Deleted group successfully!")
