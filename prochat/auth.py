import logging
from datetime import timedelta
from fastapi import Request

from . import crud
from .config import Settings
from .database import Database
from .errors import InvalidCredentials, InvalidInput, Unauthenticated
from .metrics import LOGINS, SIGNUPS
from .models.users import User
from .security import dummy_verify, generate_session_token

logger = logging.getLogger(__name__)


def _session_ttl(settings: Settings) -> timedelta:
    return timedelta(hours=settings.session_ttl_hours)

async def _open_session(db: Database, settings: Settings, username: str) -> str:
    token = generate_session_token()
    await crud.create_session_token(db, username, token, _session_ttl(settings))
    return token

async def signup(db: Database, settings: Settings, username: str | None, password: str | None) -> tuple[User, str]:
    """Create the account and log it in. Returns the user and a fresh session token."""
    crud.check_credentials(username, password)
    token = generate_session_token()
    user = await crud.create_user(db, username, password, session_token=token, ttl=_session_ttl(settings))
    SIGNUPS.inc()
    return user, token

async def login(db: Database, settings: Settings, username: str | None, password: str | None) -> tuple[User, str]:
    """
    Check credentials and open a session.

    Unknown user and wrong password raise the same InvalidCredentials, and both
    pay for one bcrypt verification.
    """
    if not username or not password:
        raise InvalidInput('Username & password required')
    user = await crud.get_user_by_username(db, username)
    if user is None or '\x00' in password:
        # bcrypt refuses NUL bytes; treat them like any other mismatch
        dummy_verify()
        ok = False
    else:
        ok = crud.verify_secret(user, password)
    if not ok:
        LOGINS.labels(outcome='rejected').inc()
        logger.info({'msg': 'login_rejected'})
        raise InvalidCredentials()
    token = await _open_session(db, settings, user.username)
    LOGINS.labels(outcome='ok').inc()
    return user, token

async def logout(db: Database, token: str | None) -> None:
    if not token:
        return
    revoked = await crud.revoke_session_token(db, token)
    if not revoked:
        logger.debug({'msg': 'logout_noop'})

async def resolve(db: Database, token: str | None) -> str:
    if not token:
        raise Unauthenticated()
    st = await crud.get_live_session_token(db, token)
    if st is None:
        raise Unauthenticated()
    return st.username

# request plumbing

def get_db(request: Request) -> Database:
    return request.app.state.db

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def extract_token(request: Request) -> str | None:
    """Session token from an Authorization: Bearer header, else from the session cookie."""
    header = request.headers.get('authorization', '')
    scheme, _, value = header.partition(' ')
    if scheme.lower() == 'bearer' and value.strip():
        return value.strip()
    return request.cookies.get(get_settings(request).session_cookie_name) or None

async def get_current_user(request: Request) -> str:
    return await resolve(get_db(request), extract_token(request))
