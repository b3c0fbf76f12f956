# API Routers
from socialnet.routers import api, users, friends, posts, filters, groups, quizzes

__all__ = ["api", "users", "friends", "posts", "filters", "groups", "quizzes"]
