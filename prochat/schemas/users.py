from datetime import datetime
from pydantic import BaseModel
from typing import Optional
from ..models import as_utc

class CredentialsIn(BaseModel):
    # optional so that missing fields reach the service and come back as a 400
    username: Optional[str] = None
    password: Optional[str] = None

class AuthOut(BaseModel):
    success: bool = True
    username: str

class ActionOkOut(BaseModel):
    success: bool = True

class SessionOut(BaseModel):
    loggedIn: bool
    username: Optional[str] = None

class StudentOut(BaseModel):
    username: str
    createdAt: datetime

    @classmethod
    def from_user(cls, user) -> 'StudentOut':
        return cls(username=user.username, createdAt=as_utc(user.created_at))
