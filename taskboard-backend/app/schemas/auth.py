# File: app/schemas/auth.py

from pydantic import BaseModel, EmailStr

from app.schemas.user import UserCreate, UserSummary


class RegisterRequest(UserCreate):
    pass


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(UserSummary):
    access_token: str
    token_type: str = "bearer"


class Message(BaseModel):
    message: str
