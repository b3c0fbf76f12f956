from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func
from socialnet.models import User
from typing import Iterable, Optional

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Get a user by username (case-insensitive)."""
    return db.query(User).filter(func.lower(User.username) == func.lower(username)).first()

def get_users(db: Session) -> list[User]:
    """Return every user that has picked a username, newest first."""
    return db.query(User).filter(User.username.isnot(None)).order_by(User.created_at.desc()).all()

def get_usernames_by_ids(db: Session, user_ids: Iterable[str]) -> dict[str, str]:
    """
    Map user IDs to usernames with a single query.

    IDs that no longer exist are simply absent from the result.
    """
    ids = list(set(user_ids))
    if not ids:
        return {}
    rows = db.query(User.id, User.username).filter(User.id.in_(ids)).all()
    return {row.id: row.username for row in rows}

def user_exists(db: Session, user_id: str) -> bool:
    """Check whether a user ID is known."""
    return db.query(User.id).filter(User.id == user_id).first() is not None

def is_username_available(db: Session, username: str, exclude_user_id: str = None) -> bool:
    """
    Check if a username is available (unique, case-insensitive).

    Args:
        db: Database session
        username: Username to check
        exclude_user_id: User ID to exclude from the check (for updates)

    Returns:
        True if username is available, False otherwise
    """
    query = db.query(User).filter(func.lower(User.username) == username.lower())

    if exclude_user_id:
        query = query.filter(User.id != exclude_user_id)

    return query.first() is None

def create_user(
    db: Session,
    username: Optional[str],
    password_hash: Optional[str] = None,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    display_name: Optional[str] = None,
) -> User:
    """
    Create a new user.

    Args:
        db: Database session
        username: Unique username, or None for accounts created from a Firebase token
        password_hash: bcrypt hash, or None for Firebase-only accounts
        user_id: Explicit ID (the Firebase UID); generated when omitted
        email: Optional email address
        display_name: Optional display name

    Returns:
        Created User object

    Raises:
        ValueError: If the username is already taken
    """
    if username is not None and not is_username_available(db, username):
        raise ValueError(f"User with username {username} already exists!")

    db_user = User(
        username=username,
        password_hash=password_hash,
        email=email,
        display_name=display_name,
    )
    if user_id:
        db_user.id = user_id

    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError(f"User with username {username} already exists!")
    db.refresh(db_user)
    return db_user

def update_username(db: Session, user: User, username: str) -> User:
    """Update a user's username, enforcing uniqueness."""
    if not is_username_available(db, username, exclude_user_id=user.id):
        raise ValueError(f"User with username {username} already exists!")

    user.username = username
    try:
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise ValueError(f"User with username {username} already exists!")
    return user

def update_password_hash(db: Session, user: User, password_hash: str) -> User:
    """Store a new password hash for the user."""
    user.password_hash = password_hash
    db.commit()
    db.refresh(user)
    return user

def update_user_display_name(db: Session, user_id: str, display_name: str) -> Optional[User]:
    """Update a user's display name."""
    db_user = get_user(db, user_id)
    if db_user:
        db_user.display_name = display_name
        db.commit()
        db.refresh(db_user)
    return db_user

def delete_user(db: Session, user: User) -> None:
    """Delete a user along with their posts, filters, quizzes, groups and memberships."""
    db.delete(user)
    db.commit()
