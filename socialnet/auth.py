from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth
from typing import Optional
from sqlalchemy.orm import Session
from socialnet.database import get_db
from socialnet.errors import NotAllowedError
from socialnet.utils.logger import get_logger, set_user_context
from socialnet import crud, schemas

logger = get_logger(__name__)

SESSION_USER_KEY = "user_id"


def start_session(request: Request, user_id: str) -> None:
    """Log the user in for subsequent requests on this cookie."""
    request.session[SESSION_USER_KEY] = user_id
    set_user_context(user_id)


def end_session(request: Request) -> None:
    request.session.clear()
    set_user_context(None)


def get_session_user_id(request: Request) -> Optional[str]:
    return request.session.get(SESSION_USER_KEY)


def require_logged_out(request: Request) -> None:
    """Dependency for routes that only make sense without a session (e.g. sign up)."""
    if get_session_user_id(request):
        raise NotAllowedError("You must be logged out!")


def _to_current_user(db_user) -> schemas.CurrentUser:
    return schemas.CurrentUser(
        id=db_user.id,
        username=db_user.username,
        email=db_user.email,
        display_name=db_user.display_name,
    )


def _user_from_firebase_token(db: Session, token: str):
    """Verify a Firebase ID token, creating the account on first sight."""
    decoded_token = auth.verify_id_token(token)

    user_id = decoded_token.get("uid")
    email = decoded_token.get("email")
    display_name = decoded_token.get("name")

    db_user = crud.get_user(db, user_id)
    if db_user:
        if display_name and display_name != db_user.display_name:
            db_user = crud.update_user_display_name(db, user_id, display_name)
    else:
        # Firebase users have no password and choose a username later
        db_user = crud.create_user(db, None, user_id=user_id, email=email, display_name=display_name)
        logger.info(f"Created account for Firebase user {user_id}")
    return db_user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
    db: Session = Depends(get_db)
) -> schemas.CurrentUser:
    """
    Resolve the logged-in user from the session cookie.
    Falls back to a Firebase ID token in the Authorization header.

    Raises:
        HTTPException: If there is no valid session or token
    """
    session_user_id = get_session_user_id(request)
    if session_user_id:
        db_user = crud.get_user(db, session_user_id)
        if not db_user:
            # Account was deleted under a live cookie
            end_session(request)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Session is no longer valid. Please log in again.",
            )
        set_user_context(db_user.id)
        return _to_current_user(db_user)

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in!",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        db_user = _user_from_firebase_token(db, credentials.credentials)
    except HTTPException:
        raise
    except Exception as firebase_error:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(firebase_error)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_user_context(db_user.id)
    return _to_current_user(db_user)
