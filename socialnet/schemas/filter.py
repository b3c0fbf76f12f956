from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class FilterCreate(BaseModel):
    filter: str = Field(..., min_length=1, max_length=64, description="Tag name to filter posts by")


class FilterResponse(BaseModel):
    id: str
    name: str
    author: str
    created_at: Optional[datetime] = None
