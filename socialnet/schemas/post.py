from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class PostOptions(BaseModel):
    """Optional presentation settings for a post."""
    background_color: Optional[str] = Field(None, max_length=32)


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000, description="The post body")
    tags: List[str] = Field(default_factory=list, description="Tags used by feed filters")
    options: Optional[PostOptions] = None


class PostUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    tags: Optional[List[str]] = None
    options: Optional[PostOptions] = None


class PostResponse(BaseModel):
    id: str
    author: str = Field(..., description="Username of the author")
    content: str
    tags: List[str]
    background_color: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PostCreatedResponse(BaseModel):
    msg: str
    post: PostResponse
