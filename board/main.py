# board/main.py
import logging
import re
import sys
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

from .config import settings
from .db import init_db
from .errors import BoardError, NotFoundError
from .utils.security import mask_token
from .routers import (
    ads as ads_router,
    admin_ads as admin_ads_router,
    categories as categories_router,
    users as users_router,
    health as health_router,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("board")

# токен редактирования в пути не должен попадать в лог
_EDIT_TOKEN_IN_PATH = re.compile(r"(/edit/)([^/]+)")


def _loggable_path(path: str) -> str:
    return _EDIT_TOKEN_IN_PATH.sub(lambda m: m.group(1) + mask_token(m.group(2)), path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # таблицы создаём при старте; миграций здесь нет
    init_db()
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    logger.info("Bulletin board started")
    yield


app = FastAPI(title="Bulletin Board", lifespan=lifespan)

# --- CORS ---
allowed_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Лог запросов с request id ---
@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = uuid.uuid4().hex[:8]
    request.state.rid = rid
    resp = await call_next(request)
    logger.info("%s %s status=%s rid=%s", request.method, _loggable_path(request.url.path), resp.status_code, rid)
    resp.headers["X-Request-ID"] = rid
    return resp


# --- Ошибки ---
@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError):
    body = {"detail": str(exc)}
    if isinstance(exc, NotFoundError):
        body["entity"] = exc.entity
        # токен в ответ не попадает: identifier для него равен "edit token"
        body["id"] = exc.identifier
    return JSONResponse(jsonable_encoder(body), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=400)


# --- Загруженные картинки ---
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)

# --- Роутеры ---
app.include_router(health_router.router)
app.include_router(ads_router.router)
app.include_router(admin_ads_router.router)
app.include_router(categories_router.router)
app.include_router(users_router.router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
