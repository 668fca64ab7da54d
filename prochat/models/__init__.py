from datetime import datetime, timezone
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # sqlite hands timestamptz columns back naive; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Import models to register tables
from .users import User  # noqa: F401,E402
from .session_tokens import SessionToken  # noqa: F401,E402
from .messages import Message  # noqa: F401,E402
