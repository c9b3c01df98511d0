from pydantic import BaseModel

from datetime import datetime
from typing import Optional, Union


class UserCredentials(BaseModel):
    # Optional so a missing field is reported as 400 by the handler, not 422
    username: Optional[str] = None
    password: Optional[str] = None


class RegisteredUser(BaseModel):
    id: Union[int, str]
    username: str
    created_at: Optional[Union[datetime, str]] = None


class RegistrationResponse(BaseModel):
    message: str = "Registration successful"
    user: RegisteredUser


class AuthenticatedUser(BaseModel):
    id: Union[int, str]
    username: str


class LoginResponse(BaseModel):
    token: str
    user: AuthenticatedUser


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class MessageResponse(BaseModel):
    message: str
