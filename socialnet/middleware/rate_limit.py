from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import redis
from socialnet.config import settings
from socialnet.utils.logger import get_logger

logger = get_logger(__name__)

# Redis connection for rate limiting; only attempted when limiting is on
redis_client = None
if settings.RATE_LIMIT_ENABLED:
    try:
        redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            decode_responses=True,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        redis_client.ping()
        logger.info(f"Rate limiting Redis connected: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    except Exception as e:
        logger.warning(f"Rate limiting Redis connection failed: {e}. Using in-memory fallback.")
        redis_client = None

def get_user_id_or_ip(request: Request):
    """
    Key rate limits by the logged-in user when there is a session,
    otherwise by client IP address.
    """
    user_id = request.session.get("user_id") if "session" in request.scope else None
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"

limiter = Limiter(
    key_func=get_user_id_or_ip,
    storage_uri=f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}" if redis_client else "memory://",
    default_limits=["1000/hour"],
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Rate limiting configurations for different endpoints
RATE_LIMITS = {
    # Sign up / log in
    "auth": "10/minute",

    # Friend request writes (send, cancel, accept, reject, unfriend)
    "friend_write": "60/hour",

    # Posts, filters, groups and quizzes
    "api_write": "100/hour",
}

def get_rate_limit_for_endpoint(endpoint: str) -> str:
    """Get rate limit configuration for specific endpoint."""
    return RATE_LIMITS.get(endpoint, "100/hour")

def rate_limit_auth(func):
    """Rate limit for authentication endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("auth"))(func)

def rate_limit_friend_write(func):
    """Rate limit for friend request mutations."""
    return limiter.limit(get_rate_limit_for_endpoint("friend_write"))(func)

def rate_limit_api_write(func):
    """Rate limit for other write endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("api_write"))(func)
