import logging
from datetime import timedelta
from sqlalchemy import select, or_, and_
from sqlalchemy.exc import IntegrityError

from .database import Database
from .errors import DuplicateUsername, InvalidInput
from .models import utcnow
from .models.users import User
from .models.session_tokens import SessionToken
from .models.messages import Message
from .security import MAX_USERNAME_LENGTH, MIN_PASSWORD_LENGTH, hash_password, hash_token, verify_password

logger = logging.getLogger(__name__)

# users

def check_credentials(username: str | None, password: str | None):
    if not username or not password:
        raise InvalidInput('Username & password required')
    if len(username) > MAX_USERNAME_LENGTH:
        raise InvalidInput(f'Username longer than {MAX_USERNAME_LENGTH} characters')
    if '\x00' in username or '\x00' in password:
        raise InvalidInput('Username & password must not contain NUL characters')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput('Password too short')

async def create_user(db: Database, username: str, password: str,
                      session_token: str | None = None, ttl: timedelta | None = None) -> User:
    """
    Insert a user. When session_token is given, the session row is written in
    the same transaction, so either both exist afterwards or neither does.
    """
    check_credentials(username, password)
    hashed_password = hash_password(password)
    async with db.session() as session:
        user = User(username=username, hashed_password=hashed_password, created_at=utcnow())
        session.add(user)
        if session_token is not None:
            session.add(_new_session_token(username, session_token, ttl))
        try:
            await session.commit()
        except IntegrityError:
            # unique index on username is the only arbiter between concurrent signups
            await session.rollback()
            raise DuplicateUsername()
        await session.refresh(user)
        logger.info({'msg': 'user_created', 'username': username})
        return user

async def get_user_by_username(db: Database, username: str) -> User | None:
    if '\x00' in username or len(username) > MAX_USERNAME_LENGTH:
        # cannot name a stored user; Postgres would reject the parameter outright
        return None
    async with db.session() as session:
        q = await session.execute(select(User).where(User.username == username))
        return q.scalars().first()

def verify_secret(user: User, password: str) -> bool:
    return verify_password(password, user.hashed_password)

async def list_users_except(db: Database, username: str) -> list[User]:
    async with db.session() as session:
        q = await session.execute(
            select(User).where(User.username != username).order_by(User.username.asc())
        )
        return list(q.scalars().all())

# session tokens

def _new_session_token(username: str, token: str, ttl: timedelta) -> SessionToken:
    now = utcnow()
    return SessionToken(username=username, token_hash=hash_token(token), created_at=now, expires_at=now + ttl)

async def create_session_token(db: Database, username: str, token: str, ttl: timedelta) -> SessionToken:
    async with db.session() as session:
        st = _new_session_token(username, token, ttl)
        session.add(st)
        await session.commit()
        await session.refresh(st)
        return st

async def get_live_session_token(db: Database, token: str) -> SessionToken | None:
    async with db.session() as session:
        q = await session.execute(select(SessionToken).where(
            SessionToken.token_hash == hash_token(token),
            SessionToken.revoked_at.is_(None),
            SessionToken.expires_at > utcnow(),
        ))
        return q.scalars().first()

async def revoke_session_token(db: Database, token: str) -> bool:
    async with db.session() as session:
        q = await session.execute(select(SessionToken).where(
            SessionToken.token_hash == hash_token(token),
            SessionToken.revoked_at.is_(None),
        ))
        st = q.scalars().first()
        if not st:
            return False
        st.revoked_at = utcnow()
        session.add(st)
        await session.commit()
        return True

# messaging

async def append_message(db: Database, sender: str, receiver: str, text: str) -> Message:
    if not text:
        raise InvalidInput('Message text required')
    if '\x00' in text:
        raise InvalidInput('Message must not contain NUL characters')
    async with db.session() as session:
        # timestamp is taken here, never from the client
        m = Message(sender=sender, receiver=receiver, text=text, timestamp=utcnow(), read=False)
        session.add(m)
        await session.commit()
        await session.refresh(m)
        return m

async def list_between(db: Database, user_a: str, user_b: str,
                       after_id: int | None = None, limit: int | None = None) -> list[Message]:
    if '\x00' in user_a or '\x00' in user_b:
        return []
    async with db.session() as session:
        q = select(Message).where(or_(
            and_(Message.sender == user_a, Message.receiver == user_b),
            and_(Message.sender == user_b, Message.receiver == user_a),
        ))
        if after_id is not None:
            cursor = await session.get(Message, after_id)
            if cursor is None:
                q = q.where(Message.id > after_id)
            else:
                q = q.where(or_(
                    Message.timestamp > cursor.timestamp,
                    and_(Message.timestamp == cursor.timestamp, Message.id > cursor.id),
                ))
        # id breaks timestamp ties in insertion order
        q = q.order_by(Message.timestamp.asc(), Message.id.asc())
        if limit is not None:
            q = q.limit(limit)
        res = await session.execute(q)
        return list(res.scalars().all())
