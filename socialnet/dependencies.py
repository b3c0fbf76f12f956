from fastapi import Request

from socialnet.services.friending import FriendingEngine
from socialnet.services.identity import IdentityResolver
from socialnet.services.presentation import Responses


def get_friending(request: Request) -> FriendingEngine:
    """The friending engine built at startup and owned by the application."""
    return request.app.state.friending


def get_identity(request: Request) -> IdentityResolver:
    return request.app.state.identity


def get_responses(request: Request) -> Responses:
    return request.app.state.responses
