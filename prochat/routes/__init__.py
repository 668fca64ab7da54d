from fastapi import APIRouter
from .users import router as users_router
from .chat import router as chat_router

router = APIRouter()
router.include_router(users_router, tags=['users'])
router.include_router(chat_router, prefix='/api/chat', tags=['chat'])
