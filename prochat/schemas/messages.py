from datetime import datetime
from pydantic import BaseModel
from typing import Optional
from ..models import as_utc

class MessageIn(BaseModel):
    receiver: Optional[str] = None
    message: Optional[str] = None

class SentMessageOut(BaseModel):
    id: str
    sender: str
    receiver: str
    message: str
    timestamp: datetime

    @classmethod
    def from_message(cls, m) -> 'SentMessageOut':
        return cls(id=str(m.id), sender=m.sender, receiver=m.receiver, message=m.text, timestamp=as_utc(m.timestamp))

class MessageOut(SentMessageOut):
    read: bool = False

    @classmethod
    def from_message(cls, m) -> 'MessageOut':
        return cls(id=str(m.id), sender=m.sender, receiver=m.receiver, message=m.text,
                   timestamp=as_utc(m.timestamp), read=bool(m.read))
