"""
Maintain API Server - FastAPI Application

Main entry point for the recommendation service consumed by the web client
and the Telegram bot.

Business logic is delegated to the services and storage modules - this file
only handles:
- API routing
- Cookie authentication
- Request/response handling
- Middleware configuration
- Health checks
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional
from uuid import UUID

from fastapi import Cookie, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from config import config
from schemas import (
    HealthResponse,
    HistoryFeedbackRequest,
    HistoryRequest,
    LikeRequest,
    LoginRequest,
    ProfileRequest,
    RecommendRequest,
    RecommendResponse,
    SaveRequest,
    SignupRequest,
    TelegramLinkRequest,
    TrendingResponse,
)
from services.auth import (
    clear_auth_cookie,
    parse_user_id,
    set_auth_cookie,
    validate_credentials,
)
from services.recommender import get_recommender
from services.trending import get_trending_service
from storage.errors import (
    TelegramAlreadyLinkedError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from storage.postgres_store import PostgresStore


# Configure logging
logging.basicConfig(
    level=getattr(logging, config.server.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler for startup/shutdown events.

    Validates configuration on startup.
    """
    logger.info("Starting Maintain API server...")

    warnings = config.validate()
    for warning in warnings:
        logger.warning(f"Config warning: {warning}")

    logger.info(f"Server configured for {config.llm.provider} LLM provider")
    logger.info(f"Debug mode: {config.server.debug}")

    yield

    logger.info("Shutting down Maintain API server...")


app = FastAPI(
    title="Maintain API",
    description="Mood-aware content recommendations with likes, saves and history",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if config.server.debug else None,
    redoc_url="/redoc" if config.server.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)


# =============================================================================
# Dependencies
# =============================================================================

_store: Optional[PostgresStore] = None


def get_store() -> PostgresStore:
    """Shared PostgresStore; overridden in tests."""
    global _store
    if _store is None:
        _store = PostgresStore()
    return _store


def get_optional_user_id(
    user_id: Optional[str] = Cookie(default=None, alias=config.auth.cookie_name),
) -> Optional[UUID]:
    return parse_user_id(user_id)


def get_current_user_id(
    user_id: Optional[UUID] = Depends(get_optional_user_id),
) -> UUID:
    """Require a valid auth cookie."""
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return user_id


def _server_error(action: str, e: Exception) -> HTTPException:
    logger.exception(f"Failed to {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}"
    )


# =============================================================================
# System
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Returns:
        HealthResponse with server status
    """
    return HealthResponse(
        status="healthy",
        version=VERSION,
        llm_provider=config.llm.provider
    )


@app.get("/", tags=["System"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "service": "Maintain API",
        "version": VERSION,
        "docs": "/docs" if config.server.debug else "Disabled in production"
    }


# =============================================================================
# Recommendations
# =============================================================================

@app.post(
    "/api/recommend",
    response_model=RecommendResponse,
    response_model_exclude_none=True,
    tags=["Recommendations"],
)
async def recommend(
    request: Request,
    user_id: Optional[UUID] = Depends(get_optional_user_id),
) -> RecommendResponse:
    """
    Recommend content for a message, mood and profile.

    Never fails: malformed bodies are treated as empty requests and any
    model failure yields saved-item fallback suggestions.
    """
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    try:
        recommend_request = RecommendRequest.model_validate(body)
    except ValidationError as e:
        logger.warning(f"Invalid recommend request, using defaults: {e.error_count()} errors")
        message = body.get("message")
        recommend_request = RecommendRequest(message=message if isinstance(message, str) else "")

    logger.info(
        f"Recommend request: user={user_id}, mood={recommend_request.mood}, "
        f"message_length={len(recommend_request.message)}"
    )

    return await run_in_threadpool(get_recommender().recommend, recommend_request, user_id)


@app.get(
    "/api/trending",
    response_model=TrendingResponse,
    response_model_exclude_none=True,
    tags=["Recommendations"],
)
async def trending(category: str = "all", count: int = 10) -> dict[str, Any]:
    """Trending YouTube videos, or static fallback content."""
    return await get_trending_service().get_trending(category=category, count=count)


# =============================================================================
# Likes
# =============================================================================

@app.get("/api/likes", tags=["Likes"])
def list_likes(
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        likes = store.get_user_likes(user_id)
    except Exception as e:
        raise _server_error("fetch likes", e)

    return {
        "likes": [like.video_id for like in likes],
        "likedSuggestions": {
            like.video_id: like.suggestion for like in likes if like.suggestion
        },
    }


@app.post("/api/likes", tags=["Likes"])
def like(
    payload: LikeRequest,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, bool]:
    if payload.suggestion is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="missing suggestion"
        )

    try:
        store.like_video(user_id, payload.suggestion.id, payload.suggestion.to_wire())
    except Exception as e:
        raise _server_error("like video", e)

    return {"ok": True}


@app.delete("/api/likes", tags=["Likes"])
def unlike(
    id: str,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, bool]:
    try:
        removed = store.unlike_video(user_id, id)
    except Exception as e:
        raise _server_error("unlike video", e)

    return {"ok": True, "removed": removed}


# =============================================================================
# Saves
# =============================================================================

@app.get("/api/saves", tags=["Saves"])
def list_saves(
    list_name: Optional[str] = Query(default=None, alias="list"),
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        items = store.get_user_saves(user_id, list_name)
    except Exception as e:
        raise _server_error("fetch saves", e)

    return {"items": [item.to_dict() for item in items]}


@app.post("/api/saves", tags=["Saves"])
def save(
    payload: SaveRequest,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, bool]:
    if payload.suggestion is None or payload.list is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="missing suggestion/list"
        )

    try:
        store.save_video(
            user_id,
            payload.suggestion.id,
            payload.suggestion.to_wire(),
            payload.list,
            payload.notes,
        )
    except Exception as e:
        raise _server_error("save video", e)

    return {"ok": True}


@app.delete("/api/saves", tags=["Saves"])
def remove_save(
    id: str,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, bool]:
    try:
        removed = store.remove_save(user_id, id)
    except Exception as e:
        raise _server_error("remove save", e)

    return {"ok": True, "removed": removed}


# =============================================================================
# History
# =============================================================================

def _parse_session_id(raw: str) -> UUID:
    try:
        return UUID(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid session id"
        )


@app.get("/api/history", tags=["History"])
def list_history(
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        sessions = store.get_user_history(user_id, limit=50)
    except Exception as e:
        raise _server_error("fetch history", e)

    return {"history": [session.to_dict() for session in sessions]}


@app.post("/api/history", tags=["History"])
def add_history(
    payload: HistoryRequest,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    if payload.session is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="missing session data"
        )

    session = payload.session
    try:
        history = store.add_to_history(
            user_id,
            session.message,
            session.mood,
            [s.to_wire() for s in session.suggestions],
            timestamp=session.timestamp,
        )
    except Exception as e:
        raise _server_error("save history", e)

    return {"ok": True, "id": str(history.id)}


@app.post("/api/history/{session_id}/feedback", tags=["History"])
def history_feedback(
    session_id: str,
    payload: HistoryFeedbackRequest,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, bool]:
    if payload.feedback is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="missing feedback"
        )
    parsed_id = _parse_session_id(session_id)

    try:
        updated = store.set_history_feedback(user_id, parsed_id, payload.feedback)
    except Exception as e:
        raise _server_error("save feedback", e)

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="session not found"
        )
    return {"ok": True}


@app.delete("/api/history", tags=["History"])
def delete_history(
    id: Optional[str] = None,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    session_id = _parse_session_id(id) if id else None

    try:
        deleted = store.delete_history(user_id, session_id)
    except Exception as e:
        raise _server_error("delete history", e)

    return {"ok": True, "deleted": deleted}


# =============================================================================
# Profile
# =============================================================================

@app.get("/api/profile", tags=["Profile"])
def get_profile(
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        user = store.get_user_by_id(user_id)
    except Exception as e:
        raise _server_error("fetch profile", e)

    if user is None or user.profile is None:
        return {"profile": {}}

    profile = user.profile.to_dict()
    if user.name:
        profile["name"] = user.name
    return {"profile": profile}


@app.post("/api/profile", tags=["Profile"])
def update_profile(
    payload: ProfileRequest,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    if payload.profile is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="missing profile"
        )

    data = payload.profile.model_dump(by_alias=True, exclude_unset=True)
    try:
        profile = store.update_user_profile(user_id, data)
    except Exception as e:
        raise _server_error("update profile", e)

    return {"ok": True, "profile": profile.to_dict()}


# =============================================================================
# Auth
# =============================================================================

def _user_summary(user: Any) -> dict[str, Any]:
    return {"id": str(user.id), "email": user.email, "name": user.name}


@app.post("/api/auth/signup", status_code=status.HTTP_201_CREATED, tags=["Auth"])
def signup(
    payload: SignupRequest,
    response: Response,
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    error = validate_credentials(payload.email, payload.password)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    try:
        user = store.create_user(payload.email, payload.password, payload.name)
    except UserAlreadyExistsError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists"
        )
    except Exception as e:
        raise _server_error("create account", e)

    set_auth_cookie(response, user.id)
    logger.info(f"Signup: user_id={user.id}")
    return {"user": _user_summary(user)}


@app.post("/api/auth/login", tags=["Auth"])
def login(
    payload: LoginRequest,
    response: Response,
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required"
        )

    try:
        user = store.verify_user(payload.email, payload.password)
    except Exception as e:
        raise _server_error("log in", e)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    set_auth_cookie(response, user.id)
    return {"user": _user_summary(user)}


@app.post("/api/auth/logout", tags=["Auth"])
def logout(response: Response) -> dict[str, bool]:
    clear_auth_cookie(response)
    return {"ok": True}


@app.get("/api/auth/me", tags=["Auth"])
def me(
    response: Response,
    user_id: Optional[UUID] = Depends(get_optional_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    """Current user, or {"user": null} when the cookie is missing or stale."""
    if user_id is None:
        return {"user": None}

    try:
        user = store.get_user_by_id(user_id)
    except Exception as e:
        raise _server_error("get user", e)

    if user is None:
        clear_auth_cookie(response)
        return {"user": None}

    return {
        "user": {
            **_user_summary(user),
            "telegramLinked": bool(user.telegram_id),
            "profile": user.profile.to_dict() if user.profile else None,
            "stats": user.stats.to_dict() if user.stats else None,
        }
    }


@app.post("/api/auth/telegram/link", tags=["Auth"])
def link_telegram(
    payload: TelegramLinkRequest,
    user_id: UUID = Depends(get_current_user_id),
    store: PostgresStore = Depends(get_store),
) -> dict[str, Any]:
    """Attach a Telegram account to the signed-in web user."""
    try:
        user = store.link_telegram_to_web_user(
            user_id, payload.model_dump(exclude_none=True)
        )
    except TelegramAlreadyLinkedError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Telegram account already linked to another user"
        )
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    except Exception as e:
        raise _server_error("link Telegram account", e)

    return {"ok": True, "user": user.to_dict()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "server:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
        log_level=config.server.log_level.lower()
    )
