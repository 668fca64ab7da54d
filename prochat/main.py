from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from .routes import router
from .config import Settings
from .core import database_startup, shutdown_connections
from .database import Database
from .errors import ChatError
import logging
from pythonjsonlogger import jsonlogger

# setup structured logging
logger = logging.getLogger('prochat')
handler = logging.StreamHandler()
formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(logging.INFO)


def create_app(settings: Settings | None = None, db: Database | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logger.setLevel(settings.log_level)

    app = FastAPI(title="ProChat API", version="1.0.0")
    app.state.settings = settings
    app.state.db = db or Database(settings.database_url, timeout=settings.db_timeout)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    app.include_router(router)
    app.mount('/metrics', make_asgi_app())

    @app.get('/healthz')
    async def healthz():
        return {'status': 'ok'}

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError):
        if exc.status_code >= 500:
            logger.error({'msg': 'request_failed', 'path': request.url.path, 'error_type': type(exc).__name__})
        return JSONResponse(status_code=exc.status_code, content={'error': exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={'error': 'Invalid input'})

    @app.middleware('http')
    async def log_requests(request: Request, call_next):
        logger.info({'msg': 'request_start', 'method': request.method, 'path': request.url.path})
        response = await call_next(request)
        logger.info({'msg': 'request_end', 'status': response.status_code})
        return response

    @app.on_event("startup")
    async def startup():
        await database_startup(app.state.db)

    @app.on_event("shutdown")
    async def shutdown():
        await shutdown_connections(app.state.db)

    return app


app = create_app()
