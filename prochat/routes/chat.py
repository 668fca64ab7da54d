from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from ..schemas.messages import MessageIn, MessageOut, SentMessageOut
from ..auth import get_current_user, get_db
from ..conversations import send as send_message, history
from ..database import Database

MAX_MESSAGE_ID = 2**31 - 1

router = APIRouter()

@router.post('/send', response_model=SentMessageOut, status_code=201)
async def send(
    payload: MessageIn,
    current_user: str = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    m = await send_message(db, current_user, payload.receiver, payload.message)
    return SentMessageOut.from_message(m)

@router.get('/{user_a}/{user_b}', response_model=List[MessageOut])
async def conversation(
    user_a: str,
    user_b: str,
    after: Optional[int] = Query(None, ge=1, le=MAX_MESSAGE_ID, description='id of the last message already seen'),
    limit: Optional[int] = Query(None),
    current_user: str = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    messages = await history(db, current_user, user_a, user_b, after_id=after, limit=limit)
    return [MessageOut.from_message(m) for m in messages]
