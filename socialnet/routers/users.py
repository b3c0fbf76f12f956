from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import List

from socialnet.auth import end_session, get_current_user, require_logged_out, start_session
from socialnet.database import get_db
from socialnet.dependencies import get_friending, get_identity
from socialnet.errors import NotAllowedError
from socialnet.middleware.rate_limit import rate_limit_auth
from socialnet.services.friending import FriendingEngine
from socialnet.services.identity import IdentityResolver
from socialnet.utils.security import hash_password, verify_password
from socialnet.utils.logger import get_logger
from socialnet import schemas, crud

router = APIRouter(
    tags=["users"],
    responses={404: {"description": "Not found"}}
)

logger = get_logger(__name__)


@router.get("/session", response_model=schemas.CurrentUser)
async def get_session_user(current_user: schemas.CurrentUser = Depends(get_current_user)):
    """Get the logged-in user"""
    return current_user


@router.get("/users", response_model=List[schemas.UserResponse])
async def get_users(db: Session = Depends(get_db)):
    """List every user that has a username"""
    return crud.get_users(db)


@router.get("/users/{username}", response_model=schemas.UserResponse)
async def get_user(
    username: str,
    db: Session = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity),
):
    """Look up a user by username"""
    return identity.get_user(db, username)


@router.post("/users", response_model=schemas.MessageResponse, dependencies=[Depends(require_logged_out)])
@rate_limit_auth
async def create_user(
    request: Request,
    user: schemas.UserCreate,
    db: Session = Depends(get_db),
):
    """Sign up with a username and password"""
    try:
        db_user = crud.create_user(db, user.username, password_hash=hash_password(user.password))
    except ValueError as e:
        raise NotAllowedError(str(e))

    logger.info(f"Created user {db_user.id} ({db_user.username})")
    return schemas.MessageResponse(msg="Created user successfully!")


@router.post("/login", response_model=schemas.MessageResponse, dependencies=[Depends(require_logged_out)])
@rate_limit_auth
async def login(
    request: Request,
    credentials: schemas.LoginRequest,
    db: Session = Depends(get_db),
):
    """Start a session for the given username and password"""
    db_user = crud.get_user_by_username(db, credentials.username)
    if db_user is None or not db_user.password_hash or not verify_password(credentials.password, db_user.password_hash):
        raise NotAllowedError("Username or password is incorrect.")

    start_session(request, db_user.id)
    logger.info(f"User {db_user.id} logged in")
    return schemas.MessageResponse(msg="Logged in!")


@router.post("/logout", response_model=schemas.MessageResponse)
async def logout(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
):
    """End the current session"""
    end_session(request)
    return schemas.MessageResponse(msg="Logged out!")


@router.patch("/users/username", response_model=schemas.MessageResponse)
async def update_username(
    update: schemas.UsernameUpdate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change the current user's username"""
    db_user = crud.get_user(db, current_user.id)
    try:
        crud.update_username(db, db_user, update.username)
    except ValueError as e:
        raise NotAllowedError(str(e))
    return schemas.MessageResponse(msg="Updated username successfully!")


@router.patch("/users/password", response_model=schemas.MessageResponse)
async def update_password(
    update: schemas.PasswordUpdate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change the current user's password; requires the current one"""
    db_user = crud.get_user(db, current_user.id)
    if not db_user.password_hash or not verify_password(update.current_password, db_user.password_hash):
        raise NotAllowedError("The given current password is wrong!")

    crud.update_password_hash(db, db_user, hash_password(update.new_password))
    return schemas.MessageResponse(msg="Updated password successfully!")


@router.delete("/users", response_model=schemas.MessageResponse)
async def delete_user(
    request: Request,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    friending: FriendingEngine = Depends(get_friending),
):
    """
    Delete the current account.

    Friend requests and friendships are cleared through the friending engine
    first; posts, filters, quizzes, groups and memberships go with the user row.
    """
    await friending.purge_user(db, current_user.id)

    db_user = crud.get_user(db, current_user.id)
    if db_user is not None:
        crud.delete_user(db, db_user)

    end_session(request)
    logger.info(f"Deleted user {current_user.id}")
    return schemas.MessageResponse(msg="Deleted user successfully!")
