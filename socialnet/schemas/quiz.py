from pydantic import BaseModel, Field, validator
from typing import List, Optional, Union
from datetime import datetime


def split_csv(value: Union[str, List[str], None]) -> Optional[List[str]]:
    """Accept "a, b, c" or ["a", "b", "c"] and return trimmed, non-empty items."""
    if value is None:
        return None
    items = value.split(",") if isinstance(value, str) else value
    return [item.strip() for item in items if item and item.strip()]


class QuizCreate(BaseModel):
    question: str = Field(..., min_length=1, max_length=1000)
    tags: Union[str, List[str]] = Field(default_factory=list)
    options: Union[str, List[str]]
    answer: str = Field(..., min_length=1)

    @validator('tags', 'options', pre=True)
    def split_lists(cls, v):
        return split_csv(v)


class QuizUpdate(BaseModel):
    question: Optional[str] = Field(None, min_length=1, max_length=1000)
    tags: Optional[Union[str, List[str]]] = None
    options: Optional[Union[str, List[str]]] = None
    answer: Optional[str] = None

    @validator('tags', 'options', pre=True)
    def split_lists(cls, v):
        return split_csv(v)


class QuizResponse(BaseModel):
    id: str
    author: str
    question: str
    options: List[str]
    answer: str
    tags: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuizSavedResponse(BaseModel):
    msg: str
    quiz: QuizResponse
