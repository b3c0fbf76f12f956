from __future__ import annotations
from typing import Iterable, Optional
from sqlalchemy.orm import Session
from socialnet.errors import PostAuthorNotMatchError, PostNotFoundError
from socialnet.models.post import Post


def create_post(db: Session, author_id: str, content: str, tags: list[str], background_color: Optional[str] = None) -> Post:
    """
    Create a new post.

    Args:
        db: Database session
        author_id: ID of the posting user
        content: Post body
        tags: Tags the feed can be filtered by
        background_color: Optional display option

    Returns:
        Created Post object
    """
    db_post = Post(author_id=author_id, content=content, tags=tags, background_color=background_color)
    db.add(db_post)
    db.commit()
    db.refresh(db_post)
    return db_post


def get_posts(db: Session) -> list[Post]:
    """Return all posts, newest first."""
    return db.query(Post).order_by(Post.created_at.desc(), Post.id.desc()).all()


def get_posts_by_author(db: Session, author_id: str) -> list[Post]:
    return db.query(Post).filter(Post.author_id == author_id).order_by(Post.created_at.desc(), Post.id.desc()).all()


def get_post(db: Session, post_id: str) -> Optional[Post]:
    return db.query(Post).filter(Post.id == post_id).first()


def update_post(db: Session, post: Post, content: Optional[str] = None, tags: Optional[list[str]] = None,
                background_color: Optional[str] = None) -> Post:
    """Update only the fields that were provided."""
    if content is not None:
        post.content = content
    if tags is not None:
        post.tags = tags
    if background_color is not None:
        post.background_color = background_color
    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, post: Post) -> None:
    db.delete(post)
    db.commit()


def assert_author_is_user(db: Session, post_id: str, user_id: str) -> Post:
    """Return the post if ``user_id`` wrote it, otherwise raise."""
    post = get_post(db, post_id)
    if post is None:
        raise PostNotFoundError(post_id)
    if post.author_id != user_id:
        raise PostAuthorNotMatchError(user_id, post_id)
    return post


def filter_posts_by_tags(posts: Iterable[Post], filter_list: list[str]) -> list[Post]:
    """Keep posts that carry any of the tags in ``filter_list``; no filters keeps everything."""
    posts = list(posts)
    if not filter_list:
        return posts
    wanted = set(filter_list)
    return [post for post in posts if wanted.intersection(post.tags or [])]
