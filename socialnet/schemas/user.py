from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
import re

RESERVED_USERNAMES = ['admin', 'root', 'system', 'user', 'test', 'guest']


def validate_username_value(v: str) -> str:
    """Username validation rules shared by signup and rename."""
    if len(v) < 3:
        raise ValueError('Username must be at least 3 characters long')
    if len(v) > 30:
        raise ValueError('Username must be at most 30 characters long')
    if not re.match(r'^[a-zA-Z0-9_]+$', v):
        raise ValueError('Username can only contain letters, numbers, and underscores')
    if v.lower() in RESERVED_USERNAMES:
        raise ValueError('Username is not allowed')
    return v


class UserCreate(BaseModel):
    """Schema for signing up with a username and password"""
    username: str
    password: str = Field(..., min_length=6, max_length=128)

    @validator('username')
    def validate_username(cls, v):
        return validate_username_value(v)


class LoginRequest(BaseModel):
    username: str
    password: str


class UsernameUpdate(BaseModel):
    username: str

    @validator('username')
    def validate_username(cls, v):
        return validate_username_value(v)


class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=128)


class UserResponse(BaseModel):
    """Public view of a user"""
    id: str
    username: Optional[str] = None
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CurrentUser(BaseModel):
    """Simplified user model for authentication responses"""
    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None


class MessageResponse(BaseModel):
    msg: str
