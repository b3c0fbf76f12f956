# Middleware package for the social API

from .request_id import RequestIDMiddleware
from .rate_limit import limiter, rate_limit_auth, rate_limit_friend_write, rate_limit_api_write

__all__ = [
    "RequestIDMiddleware",
    "limiter",
    "rate_limit_auth",
    "rate_limit_friend_write",
    "rate_limit_api_write",
]
