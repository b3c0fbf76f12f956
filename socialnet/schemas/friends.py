from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional
from datetime import datetime

class FriendRequestResponse(BaseModel):
    id: str
    requester_id: str
    recipient_id: str
    status: str
    created_at: Optional[datetime] = None
    requester_username: Optional[str] = None
    recipient_username: Optional[str] = None
    direction: Optional[Literal["sent", "received"]] = Field(
        None, description="Whether the viewing user sent or received this request"
    )

class FriendResponse(BaseModel):
    user_id: str
    username: str

class FriendsListResponse(BaseModel):
    friends: List[FriendResponse]
    total_count: int
    page: int
    page_size: int

class FriendRequestsListResponse(BaseModel):
    requests: List[FriendRequestResponse]
    total_count: int
    page: int
    page_size: int

class FriendRequestStatusResponse(BaseModel):
    message: str
    status: str

class RelationshipStatusResponse(BaseModel):
    statuses: Dict[str, str] = Field(
        ..., description="username -> friend | request_sent | request_received | none"
    )
