from fastapi import APIRouter, Depends, Request, Response
from ..schemas.users import CredentialsIn, AuthOut, ActionOkOut, SessionOut, StudentOut
from ..auth import (
    signup as signup_user,
    login as login_user,
    logout as logout_user,
    resolve,
    extract_token,
    get_current_user,
    get_db,
    get_settings,
)
from ..config import Settings
from ..conversations import list_other_users
from ..database import Database
from ..errors import Unauthenticated

router = APIRouter()


def _set_session_cookie(response: Response, settings: Settings, token: str):
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite='lax',
        secure=settings.session_cookie_secure,
    )


@router.post('/signup', response_model=AuthOut, status_code=201)
async def signup(
    payload: CredentialsIn,
    response: Response,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, token = await signup_user(db, settings, payload.username, payload.password)
    _set_session_cookie(response, settings, token)
    return {'success': True, 'username': user.username}


@router.post('/login', response_model=AuthOut)
async def login(
    payload: CredentialsIn,
    response: Response,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, token = await login_user(db, settings, payload.username, payload.password)
    _set_session_cookie(response, settings, token)
    return {'success': True, 'username': user.username}


@router.post('/logout', response_model=ActionOkOut)
async def logout(
    request: Request,
    response: Response,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    await logout_user(db, extract_token(request))
    response.delete_cookie(settings.session_cookie_name, httponly=True, samesite='lax')
    return {'success': True}


@router.get('/session', response_model=SessionOut)
async def session_state(request: Request, db: Database = Depends(get_db)):
    try:
        username = await resolve(db, extract_token(request))
    except Unauthenticated:
        return {'loggedIn': False, 'username': None}
    return {'loggedIn': True, 'username': username}


@router.get('/api/students', response_model=list[StudentOut])
async def students(
    current_user: str = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    users = await list_other_users(db, current_user)
    return [StudentOut.from_user(u) for u in users]
