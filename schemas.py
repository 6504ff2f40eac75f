"""
Pydantic schemas for the Maintain API.

Wire format is camelCase (what the web client and the bot send); Python
attributes are snake_case and mapped through aliases.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MOODS = ("tired", "curious", "motivated", "relaxed", "bored", "chill")
SAVE_LISTS = ("listen", "learn", "knowledge", "tomorrow", "other")

Mood = Literal["tired", "curious", "motivated", "relaxed", "bored", "chill"]
SaveList = Literal["listen", "learn", "knowledge", "tomorrow", "other"]
Feedback = Literal["helpful", "not-helpful"]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Content
# =============================================================================

class Suggestion(CamelModel):
    """A recommended video, article or podcast."""

    id: str = Field(..., description="Stable identifier of the suggestion")
    title: str = Field(..., description="Content title")
    creator_name: str = Field(..., description="Channel, author or host")
    creator_avatar_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration_minutes: Optional[float] = None
    date_published: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    relevance: float = Field(default=0.5, ge=0, le=1)
    url: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Youtuber(CamelModel):
    name: str
    channel_url: Optional[str] = None


class ProfileData(CamelModel):
    """
    User profile. Every field is optional so the same model serves
    partial updates.
    """

    name: Optional[str] = None
    hobbies: Optional[list[str]] = None
    interests: Optional[list[str]] = None
    languages: Optional[list[str]] = None
    work_context: Optional[str] = None
    youtubers: Optional[list[Youtuber]] = None


# =============================================================================
# Recommend
# =============================================================================

class RecommendRequest(CamelModel):
    message: str = Field(default="", description="What the user is looking for")
    mood: Optional[str] = Field(default=None, description="One of the known moods")
    profile: Optional[ProfileData] = None
    count: Optional[int] = Field(default=None, description="Number of suggestions (1-20)")


class RecommendResponse(CamelModel):
    suggestions: list[Suggestion]
    model: str = Field(..., description="Model name, or 'fallback'")
    used_fallback: bool
    error: Optional[str] = Field(
        default=None,
        description="Failure reason, only outside production"
    )


# =============================================================================
# Likes / Saves / History / Profile
# =============================================================================

class LikeRequest(CamelModel):
    suggestion: Optional[Suggestion] = None


class SaveRequest(CamelModel):
    suggestion: Optional[Suggestion] = None
    list: Optional[SaveList] = None
    notes: Optional[str] = None


class HistorySessionData(CamelModel):
    id: Optional[str] = None
    message: str = ""
    mood: Optional[str] = None
    suggestions: list[Suggestion] = Field(default_factory=list)
    timestamp: Optional[datetime] = None
    feedback: Optional[Feedback] = None


class HistoryRequest(CamelModel):
    session: Optional[HistorySessionData] = None


class HistoryFeedbackRequest(CamelModel):
    feedback: Optional[Feedback] = None


class ProfileRequest(CamelModel):
    profile: Optional[ProfileData] = None


# =============================================================================
# Auth
# =============================================================================

class SignupRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TelegramLinkRequest(CamelModel):
    telegram_id: str = Field(..., min_length=1)
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    language_code: Optional[str] = None


# =============================================================================
# System
# =============================================================================

class TrendingResponse(CamelModel):
    suggestions: list[Suggestion]
    source: Literal["youtube", "fallback"]
    error: Optional[str] = None


class HealthResponse(CamelModel):
    status: str = Field(..., description="Server health status")
    version: str = Field(..., description="Server version")
    llm_provider: str = Field(..., description="Configured LLM provider")
