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

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=List[schemas.PostResponse])
async def get_posts(
    author: Optional[str] = Query(None, description="Only posts by this username"),
    tags: Optional[str] = Query(None, description="Comma separated tags; keeps posts with any of them"),
    db: Session = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity),
    responses: Responses = Depends(get_responses),
):
    """Get the feed, optionally narrowed to one author and/or a set of tags"""
    if author:
        posts = crud.post.get_posts_by_author(db, identity.resolve(db, author))
    else:
        posts = crud.post.get_posts(db)

    if tags:
        wanted = [tag.strip() for tag in tags.split(",") if tag.strip()]
        posts = crud.post.filter_posts_by_tags(posts, wanted)

    return responses.posts(db, posts)


@router.post("", response_model=schemas.PostCreatedResponse)
@rate_limit_api_write
async def create_post(
    request: Request,
    post: schemas.PostCreate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    responses: Responses = Depends(get_responses),
):
    """Create a post as the current user"""
    background_color = post.options.background_color if post.options else None
    db_post = crud.post.create_post(db, current_user.id, post.content, post.tags, background_color)
    logger.info(f"Post {db_post.id} created by {current_user.id}")
    return schemas.PostCreatedResponse(msg="Post successfully created!", post=responses.post(db, db_post))


@router.patch("/{post_id}", response_model=schemas.PostCreatedResponse)
async def update_post(
    post_id: str,
    update: schemas.PostUpdate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    responses: Responses = Depends(get_responses),
):
    """Update one of the current user's posts"""
    db_post = crud.post.assert_author_is_user(db, post_id, current_user.id)
    background_color = update.options.background_color if update.options else None
    db_post = crud.post.update_post(db, db_post, update.content, update.tags, background_color)
    return schemas.PostCreatedResponse(msg="Post successfully updated!", post=responses.post(db, db_post))


@router.delete("/{post_id}", response_model=schemas.MessageResponse)
async def delete_post(
    post_id: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete one of the current user's posts"""
    db_post = crud.post.assert_author_is_user(db, post_id, current_user.id)
    crud.post.delete_post(db, db_post)
    logger.info(f"Post {post_id} deleted by {current_user.id}")
    return schemas.MessageResponse(msg="Deleted post successfully!")
