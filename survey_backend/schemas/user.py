# schemas/user.py
from typing import Optional

from pydantic import BaseModel, EmailStr


class UserCreate(BaseModel):
    username: str
    password: str
    name: str
    surname: str
    email: EmailStr
    role: str = "user"


class UserOut(BaseModel):
    id: int
    username: str
    name: str
    surname: str
    email: str
    role: str


class Identity(BaseModel):
    """The signed-in user as carried by the access token."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: str = "user"


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    redirect_to: str = "/"
