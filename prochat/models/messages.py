from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Index, false
from . import Base, utcnow

class Message(Base):
    __tablename__ = 'messages'
    id = Column(Integer, primary_key=True, autoincrement=True)
    sender = Column(String(150), nullable=False)
    receiver = Column(String(150), nullable=False)
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    read = Column(Boolean, default=False, server_default=false(), nullable=False)
    __table_args__ = (
        Index('ix_messages_pair_timestamp', 'sender', 'receiver', 'timestamp'),
    )
