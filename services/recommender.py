"""
Recommendation service.

Asks the configured LLM for a JSON array of suggestions and falls back to
the user's saved items when the model is unavailable or its answer cannot
be parsed.
"""

import json
import logging
import random
import re
import uuid
from typing import Any, Optional
from uuid import UUID

from config import config
from llm import LLMError, get_llm_client
from schemas import RecommendRequest, RecommendResponse, Suggestion

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 10
MAX_COUNT = 20

SYSTEM_INSTRUCTION = """You are a web content recommendation system. You recommend videos, articles, and podcasts based on user requests.

Always return ONLY valid JSON in this exact format - an array of suggestion objects:
[
  {
    "id": "unique_id",
    "title": "Content Title",
    "creatorName": "Creator Name",
    "thumbnailUrl": "https://youtube.com/thumb.jpg",
    "creatorAvatarUrl": "https://youtube.com/avatar.jpg",
    "durationMinutes": 25,
    "date_published": "2024-07-01",
    "description": "Brief description of the content",
    "tags": ["tag1", "tag2"],
    "relevance": 0.9,
    "url": "https://youtube.com/content"
  }
]

Consider the user's mood, profile (hobbies, interests, languages, work context), and favorite content creators. Prioritize matching channels when relevant to their interests. Avoid duplicates. Ensure relevance is a number between 0 and 1."""

_FENCE_START = re.compile(r"^```[a-zA-Z]*\n?")
_FENCE_END = re.compile(r"```\s*$")


def clamp_count(count: Optional[int]) -> int:
    """Default to 10 and clamp into 1..20."""
    if count is None:
        return DEFAULT_COUNT
    return min(max(count, 1), MAX_COUNT)


def build_prompt(request: RecommendRequest) -> tuple[str, str]:
    """
    Build the (system instruction, user prompt) pair for a request.
    """
    count = clamp_count(request.count)
    profile = (
        request.profile.model_dump(by_alias=True, exclude_none=True)
        if request.profile else {}
    )

    user_prompt = (
        f"Please recommend {count} pieces of web content based on:\n\n"
        f"Message: \"{request.message}\"\n"
        f"Mood: {request.mood or 'unknown'}\n"
        f"Profile: {json.dumps(profile)}\n\n"
        "Return only the JSON array, no additional text."
    )
    return SYSTEM_INSTRUCTION, user_prompt


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang fence and a trailing ``` fence."""
    return _FENCE_END.sub("", _FENCE_START.sub("", text.strip()))


def extract_json_array(source: str) -> Optional[str]:
    """
    Return the first top-level JSON array in source, found by bracket depth.

    Brackets inside string literals are ignored. When the array never
    closes (a truncated model answer) the remainder is returned with a
    closing bracket appended. Returns None when there is no '['.
    """
    start = source.find("[")
    if start < 0:
        return None

    depth = 0
    in_string = False
    prev_char = ""
    for i in range(start, len(source)):
        ch = source[i]
        if in_string:
            if ch == '"' and prev_char != "\\":
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return source[start:i + 1]
        prev_char = ch

    return source[start:] + "]"


def extract_json_objects(source: str) -> list[dict[str, Any]]:
    """Collect every top-level {...} object in source that parses as JSON."""
    results = []
    start = -1
    depth = 0
    in_string = False
    prev_char = ""
    for i, ch in enumerate(source):
        if in_string:
            if ch == '"' and prev_char != "\\":
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0 and start >= 0:
                try:
                    obj = json.loads(source[start:i + 1])
                    if isinstance(obj, dict):
                        results.append(obj)
                except json.JSONDecodeError:
                    pass
                start = -1
        prev_char = ch
    return results


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def normalize_suggestion(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Coerce a model-produced object into a well-formed suggestion dict.
    """
    date_published = raw.get("datePublished") or raw.get("date_published")
    relevance = raw.get("relevance")
    tags = raw.get("tags")

    suggestion = Suggestion(
        id=str(raw["id"]) if raw.get("id") is not None else str(uuid.uuid4()),
        title=str(raw["title"]) if raw.get("title") is not None else "Untitled",
        creator_name=(
            str(raw["creatorName"]) if raw.get("creatorName") is not None else "Unknown"
        ),
        creator_avatar_url=_optional_str(raw.get("creatorAvatarUrl")),
        thumbnail_url=_optional_str(raw.get("thumbnailUrl")),
        duration_minutes=(
            raw["durationMinutes"] if _is_number(raw.get("durationMinutes")) else None
        ),
        date_published=date_published if isinstance(date_published, str) else None,
        description=raw.get("description") if isinstance(raw.get("description"), str) else None,
        tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        relevance=max(0.0, min(1.0, relevance)) if _is_number(relevance) else 0.5,
        url=raw.get("url") if isinstance(raw.get("url"), str) else None,
    )
    return suggestion.to_wire()


def parse_llm_response(text: str, count: int) -> list[dict[str, Any]]:
    """
    Turn raw model text into at most count suggestions.

    Tries the first JSON array, then loose top-level objects. Returns an
    empty list when nothing usable is found.
    """
    text = strip_code_fences(text or "")

    json_array = extract_json_array(text)
    if json_array:
        try:
            items = json.loads(json_array)
            if isinstance(items, list):
                suggestions = [
                    normalize_suggestion(item)
                    for item in items
                    if isinstance(item, dict)
                ][:count]
                if suggestions:
                    return suggestions
        except json.JSONDecodeError:
            pass

    objects = extract_json_objects(text)
    return [normalize_suggestion(obj) for obj in objects[:count]]


def _placeholder_suggestions(message: str, count: int) -> list[dict[str, Any]]:
    return [
        {
            "id": f"fallback_{i + 1}",
            "title": f"No saved content yet - {message}",
            "creatorName": "Your Saves",
            "durationMinutes": 30,
            "description": "Save some content to see personalized suggestions when AI is unavailable.",
            "tags": ["saved", "fallback"],
            "relevance": 0.5,
            "url": "#",
        }
        for i in range(count)
    ]


def _error_suggestions(count: int) -> list[dict[str, Any]]:
    return [
        {
            "id": f"error_{i + 1}",
            "title": "AI temporarily unavailable",
            "creatorName": "System",
            "durationMinutes": 0,
            "description": "Please try again later. Error loading saved content.",
            "tags": ["error"],
            "relevance": 0.1,
            "url": "#",
        }
        for i in range(count)
    ]


def fallback_from_saves(message: str, count: int, saves: list[Any]) -> list[dict[str, Any]]:
    """
    Build suggestions from saved items (anything with video_id, list and
    suggestion attributes).

    Stored suggestions are normalized first; rows imported from older data
    may lack required fields.
    """
    if not saves:
        return _placeholder_suggestions(message, count)

    shuffled = list(saves)
    random.shuffle(shuffled)

    results = []
    for i, item in enumerate(shuffled[:count]):
        stored = item.suggestion if isinstance(item.suggestion, dict) else {}
        base = normalize_suggestion({"id": item.video_id, **stored})
        description = base.get("description") or "Saved content"
        base.update({
            "id": f"saved_{item.video_id}_{i}",
            "description": f"From your saves ({item.list}) - {description}",
            "tags": [*(base.get("tags") or []), "saved", item.list],
            "relevance": max(0.4, round(0.9 - i * 0.1, 2)),
        })
        results.append(base)
    return results


class RecommendationService:
    """
    Produces recommendations for a request, with saved-item fallback.

    The LLM client is created lazily; a missing API key surfaces as a
    fallback response rather than a startup failure.
    """

    def __init__(self, store: Any = None, llm_client: Any = None) -> None:
        self._store = store
        self._llm_client = llm_client

    @property
    def store(self) -> Any:
        if self._store is None:
            from storage.postgres_store import PostgresStore
            self._store = PostgresStore()
        return self._store

    def _get_llm(self) -> Any:
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    def fallback_suggestions(
        self, message: str, count: int, user_id: Optional[UUID]
    ) -> list[dict[str, Any]]:
        """
        Suggestions built from the user's saves.

        Anonymous callers have no saves and get placeholders; a store error
        yields error placeholders.
        """
        try:
            saves = self.store.get_user_saves(user_id) if user_id else []
        except Exception as e:
            logger.error(f"Failed to load saves for fallback: {e}")
            return _error_suggestions(count)
        return fallback_from_saves(message, count, saves)

    def recommend(
        self, request: RecommendRequest, user_id: Optional[UUID] = None
    ) -> RecommendResponse:
        """
        Recommend content for a request.

        Any LLM or parsing failure, including an empty parsed result,
        produces a fallback response instead of an error.
        """
        count = clamp_count(request.count)

        try:
            llm = self._get_llm()
            system, prompt = build_prompt(request)
            text = llm.generate(prompt, system=system)
            suggestions = parse_llm_response(text, count)
            if not suggestions:
                raise LLMError("No suggestions could be parsed from the model response")

            logger.info(f"Recommendation produced {len(suggestions)} suggestions")
            return RecommendResponse(
                suggestions=suggestions,
                model=getattr(llm, "model_name", config.llm.gemini_model),
                used_fallback=False,
            )
        except Exception as e:
            logger.warning(f"Recommendation falling back to saves: {e}")
            suggestions = self.fallback_suggestions(request.message, count, user_id)
            return RecommendResponse(
                suggestions=suggestions,
                model="fallback",
                used_fallback=True,
                error=None if config.server.is_production else str(e),
            )


_recommender: Optional[RecommendationService] = None


def get_recommender() -> RecommendationService:
    """Process-wide RecommendationService."""
    global _recommender
    if _recommender is None:
        _recommender = RecommendationService()
    return _recommender
