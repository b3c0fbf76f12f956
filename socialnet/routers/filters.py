from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from socialnet.auth import get_current_user
from socialnet.database import get_db
from socialnet.dependencies import get_identity, get_responses
from socialnet.middleware.rate_limit import rate_limit_api_write
from socialnet.services.identity import IdentityResolver
from socialnet.services.presentation import Responses
from socialnet import schemas, crud

router = APIRouter(prefix="/filters", tags=["filters"])


@router.get("", response_model=List[schemas.FilterResponse])
async def get_filters(
    author: Optional[str] = Query(None, description="Only filters saved by this username"),
    db: Session = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity),
    responses: Responses = Depends(get_responses),
):
    if author:
        filters = crud.filter.get_filters_by_author(db, identity.resolve(db, author))
    else:
        filters = crud.filter.get_filters(db)
    return responses.filters(db, filters)


@router.post("", response_model=schemas.MessageResponse)
@rate_limit_api_write
async def add_filter(
    request: Request,
    body: schemas.FilterCreate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Save a tag filter for the current user"""
    crud.filter.add_filter(db, current_user.id, body.filter)
    return schemas.MessageResponse(msg=f'Filter "{body.filter}" added!')


@router.delete("/{name}", response_model=schemas.MessageResponse)
async def remove_filter(
    name: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    crud.filter.remove_filter(db, current_user.id, name)
    return schemas.MessageResponse(msg=f'Filter "{name}" removed!')
