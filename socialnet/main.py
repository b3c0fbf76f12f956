from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import firebase_admin
from firebase_admin import credentials
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware
import os

from socialnet.config import settings
from socialnet.database import Base, engine, get_session_local
from socialnet.errors import SocialError
from socialnet.logging_config import configure_logging
from socialnet.middleware.rate_limit import limiter
from socialnet.middleware.request_id import RequestIDMiddleware
from socialnet.routers import api, users, friends, posts, filters, groups, quizzes
from socialnet.services.friending import FriendingEngine
from socialnet.services.identity import IdentityResolver
from socialnet.services.presentation import Responses
from socialnet.utils.logger import get_logger

# Configure logging first
configure_logging()
logger = get_logger(__name__)

# Initialize database tables
Base.metadata.create_all(bind=engine)

# Firebase sign in is optional; password sessions work without it
firebase_app = None
firebase_json_path = settings.FIREBASE_SERVICE_ACCOUNT_JSON
if firebase_json_path and os.path.exists(firebase_json_path):
    try:
        cred = credentials.Certificate(firebase_json_path)
        firebase_app = firebase_admin.initialize_app(cred)
        logger.info("Initialized Firebase Admin with provided service account JSON")
    except Exception as e:
        logger.exception(f"Failed to initialize Firebase Admin SDK: {e}")
        raise
else:
    logger.warning(f"FIREBASE_SERVICE_ACCOUNT_JSON not found at {firebase_json_path}. Bearer token sign in is disabled.")

# Conditional docs configuration
if settings.DEBUG:
    docs_config = {
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "openapi_url": "/openapi.json"
    }
    logger.info("DEBUG mode: Swagger docs enabled at /docs")
else:
    docs_config = {
        "docs_url": None,
        "redoc_url": None,
        "openapi_url": None
    }
    logger.info("Production mode: Swagger docs disabled")

app = FastAPI(
    title="Socialnet API",
    description="Backend API for a small social network: accounts, friends, posts, filters, groups and quizzes",
    version=api.VERSION,
    **docs_config
)

# One identity resolver and friending engine per process; the engine owns the pair locks
identity = IdentityResolver()
app.state.identity = identity
app.state.friending = FriendingEngine(identity, lock_timeout=settings.FRIENDING_LOCK_TIMEOUT_SECONDS)
app.state.responses = Responses(identity)

# Set up rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(SocialError)
async def social_error_handler(request: Request, exc: SocialError):
    """Render rejected operations as ``{"detail": message}`` with usernames substituted."""
    responses: Responses = request.app.state.responses
    if exc.user_ids:
        db = get_session_local()()
        try:
            message = responses.error_message(db, exc)
        except Exception as e:
            logger.error(f"Could not resolve usernames for error message: {e}")
            message = str(exc)
        finally:
            db.close()
    else:
        message = responses.error_message(None, exc)

    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": message})


logger.info(f"CORS_ORIGINS: {settings.CORS_ORIGINS}")

# Add Request ID middleware first for proper request tracing
app.add_middleware(RequestIDMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Cookie sessions; added last so it wraps everything and rate limit keys can read it
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE,
)

# Include routers
app.include_router(api.router)
app.include_router(users.router)
app.include_router(friends.router)
app.include_router(posts.router)
app.include_router(filters.router)
app.include_router(groups.router)
app.include_router(quizzes.router)


@app.on_event("startup")
async def startup_event():
    """Log application startup information."""
    # Initialize database in this worker process (for Gunicorn compatibility)
    from socialnet.database import get_engine
    get_engine()

    if settings.DEBUG:
        logger.info("Socialnet API started in DEBUG mode - Docs available at /docs")
    else:
        logger.info("Socialnet API started in PRODUCTION mode - Docs disabled")
