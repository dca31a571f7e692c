# schooldesk/backend/api/schemas/user.py
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID

from .common import CamelModel

class LoginRequest(CamelModel):
    email: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserResponse(CamelModel):
    """A user account as returned to clients; the password never leaves the server."""
    id: UUID
    name: str
    role: str
    email: str
    status: str

class LoginResponse(CamelModel):
    token: Token
    user: UserResponse

class PasswordChangeRequest(CamelModel):
    current_password: str
    new_password: str
    confirm_password: str

# Internal representation of JWT data
class TokenData(BaseModel):
    user_id: Optional[UUID] = Field(None)
