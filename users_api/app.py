import logging
import os
import platform
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from users_api import __version__
from users_api.user_store import DEFAULT_LIMIT, User, UserNotFound, UserStore

logger = logging.getLogger(__name__)

FALSE_VALUES = ("", "0", "false", "no", "off")


def env_flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).strip().lower() not in FALSE_VALUES


# Seed the store with sample users unless USERS_API_SEED is one of FALSE_VALUES
SEED = env_flag("USERS_API_SEED")
# Comma separated, e.g. "http://localhost:5173,http://127.0.0.1:5173"; "*" allows any origin
CORS_ORIGINS = [o.strip() for o in os.getenv("USERS_API_CORS_ORIGINS", "*").split(",") if o.strip()]

SAMPLE_USERS = [
    User(id=1, name="DevZAKRI", email="3tern4llord@gmail.com", age=25),
    User(id=2, name="Rust Developer", email="rust@example.com", age=30),
]

ENDPOINTS = [
    ("GET", "/", "Welcome message"),
    ("GET", "/health", "Health check"),
    ("GET", "/api/users", "List users (limit, offset)"),
    ("POST", "/api/users", "Create user"),
    ("GET", "/api/users/{id}", "Get user by id"),
    ("PUT", "/api/users/{id}", "Replace user"),
    ("DELETE", "/api/users/{id}", "Delete user"),
    ("GET", "/api/info", "Server info"),
]


class UserCreate(BaseModel):
    model_config = ConfigDict(strict=True)

    name: str
    email: str
    age: int = Field(ge=0)


router = APIRouter()


def get_store(request: Request) -> UserStore:
    return request.app.state.store


@router.get("/")
def welcome():
    return {
        "message": "Welcome to the Users API!",
        "info": "A small in-memory user service built on FastAPI",
        "author": "DevZAKRI",
    }


@router.get("/health")
def health_check(request: Request):
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }


@router.get("/api/users")
def list_users(
    limit: int = Query(DEFAULT_LIMIT, ge=0),
    offset: int = Query(0, ge=0),
    store: UserStore = Depends(get_store),
):
    users, total = store.list(limit, offset)
    return {"users": users, "total": total, "limit": limit, "offset": offset}


@router.post("/api/users", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, store: UserStore = Depends(get_store)):
    return store.create(payload.name, payload.email, payload.age)


@router.get("/api/users/{user_id}", response_model=User)
def get_user(user_id: int, store: UserStore = Depends(get_store)):
    return store.get(user_id)


@router.put("/api/users/{user_id}", response_model=User)
def update_user(user_id: int, payload: UserCreate, store: UserStore = Depends(get_store)):
    return store.update(user_id, payload.name, payload.email, payload.age)


@router.delete("/api/users/{user_id}")
def delete_user(user_id: int, store: UserStore = Depends(get_store)):
    store.delete(user_id)
    return {"message": f"User {user_id} deleted successfully"}


@router.get("/api/info")
def server_info():
    return {
        "server": "Users API",
        "framework": "FastAPI",
        "version": __version__,
        "python_version": platform.python_version(),
        "features": [
            "In-memory user store",
            "Thread-safe CRUD operations",
            "Pagination with limit/offset",
            "Permissive CORS",
        ],
    }


async def user_not_found_handler(request: Request, exc: UserNotFound):
    logger.info("%s %s: %s", request.method, request.url.path, exc)
    return Response(status_code=status.HTTP_404_NOT_FOUND)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Malformed request on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.started_at = time.monotonic()
    logger.info("Users API started with %d users", len(app.state.store))
    for method, path, description in ENDPOINTS:
        logger.info("  %-6s %-18s %s", method, path, description)
    yield
    logger.info("Users API shutting down")


def create_app(store: Optional[UserStore] = None, seed: bool = SEED) -> FastAPI:
    """Build an app bound to `store`, or to a new store when none is given."""
    if store is None:
        store = UserStore(SAMPLE_USERS if seed else None)

    app = FastAPI(title="Users API", version=__version__, lifespan=lifespan)
    app.state.store = store
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(UserNotFound, user_not_found_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


app = create_app()
