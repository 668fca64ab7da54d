"""
Conversation access rules and the operations built on them.

A conversation is the unordered pair of usernames; the only access rule is
that the caller is one of the two.
"""
import logging

from . import crud
from .database import Database
from .errors import Forbidden, InvalidInput, NotFound
from .metrics import MESSAGES_SENT
from .models.messages import Message
from .models.users import User

logger = logging.getLogger(__name__)

MAX_HISTORY_PAGE = 500


def authorize_conversation(caller: str, user_a: str, user_b: str) -> None:
    if caller != user_a and caller != user_b:
        raise Forbidden()

async def authorize_send(db: Database, caller: str, receiver: str | None) -> None:
    if not receiver:
        raise InvalidInput('Receiver & message required')
    if receiver == caller:
        raise InvalidInput('Cannot message yourself')
    if '\x00' in receiver:
        raise InvalidInput('Receiver must not contain NUL characters')
    if await crud.get_user_by_username(db, receiver) is None:
        raise NotFound()

async def send(db: Database, caller: str, receiver: str | None, text: str | None) -> Message:
    if not receiver or not text:
        raise InvalidInput('Receiver & message required')
    await authorize_send(db, caller, receiver)
    m = await crud.append_message(db, caller, receiver, text)
    MESSAGES_SENT.inc()
    logger.info({'msg': 'message_sent', 'id': m.id, 'sender': caller, 'receiver': receiver})
    return m

async def history(db: Database, caller: str, user_a: str, user_b: str,
                  after_id: int | None = None, limit: int | None = None) -> list[Message]:
    authorize_conversation(caller, user_a, user_b)
    if limit is not None and not 1 <= limit <= MAX_HISTORY_PAGE:
        raise InvalidInput(f'limit must be between 1 and {MAX_HISTORY_PAGE}')
    return await crud.list_between(db, user_a, user_b, after_id=after_id, limit=limit)

async def list_other_users(db: Database, caller: str) -> list[User]:
    return await crud.list_users_except(db, caller)
