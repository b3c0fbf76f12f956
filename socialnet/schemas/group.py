from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class GroupCreate(BaseModel):
    group_name: str = Field(..., min_length=1, max_length=100)


class GroupMemberAdd(BaseModel):
    username: str


class GroupResponse(BaseModel):
    id: str
    name: str
    author: str
    members: List[str]
    created_at: Optional[datetime] = None


class GroupCreatedResponse(BaseModel):
    msg: str
    group: GroupResponse
