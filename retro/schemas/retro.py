from __future__ import annotations

from datetime import datetime, UTC
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

ACTION_ITEM_CATEGORY = "action-item"


class UnknownStageError(ValueError):
    """Raised when a stage value falls outside the session stage enumeration."""


class Stage(str, Enum):
    IDEA_GENERATION = "idea-generation"
    VOTING = "voting"
    ACTION_ITEMS = "action-items"
    CLOSED = "closed"


def coerce_stage(value: Any) -> Stage:
    """Resolve a Stage from a member, its wire value or its member name."""
    if isinstance(value, Stage):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        try:
            return Stage(candidate.lower())
        except ValueError:
            pass
        member = Stage.__members__.get(candidate.upper().replace("-", "_"))
        if member is not None:
            return member
    raise UnknownStageError(f"Unknown session stage: {value!r}")


def _parse_instant(value: Any) -> Any:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass
        # Browsers serialise with Date#toUTCString, e.g. "Wed, 01 Feb 2017 00:00:00 GMT"
        try:
            return parsedate_to_datetime(text)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Unrecognised timestamp: {value!r}") from exc
    return value


class Idea(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: int
    category: str
    body: str = ""
    user_id: int
    inserted_at: Optional[datetime] = None
    is_highlighted: bool = Field(
        default=False,
        validation_alias=AliasChoices("isHighlighted", "is_highlighted"),
        serialization_alias="isHighlighted",
    )

    @field_validator("inserted_at", mode="before")
    @classmethod
    def parse_inserted_at(cls, value):
        return _parse_instant(value)

    @field_validator("inserted_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("is_highlighted", mode="before")
    @classmethod
    def missing_highlight_is_false(cls, value):
        return False if value is None else value

    @property
    def is_action_item(self) -> bool:
        return self.category == ACTION_ITEM_CATEGORY


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    given_name: str = ""
    is_facilitator: bool = False
    is_typing: bool = False
    picture: Optional[str] = None
    token: Optional[str] = None
    online_at: Optional[int] = None


class Vote(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int
    idea_id: Optional[int] = None


class _StageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stage: Stage
    votes: List[Vote] = Field(default_factory=list)
    now: Optional[datetime] = None

    @field_validator("stage", mode="before")
    @classmethod
    def resolve_stage(cls, value):
        return coerce_stage(value)

    @field_validator("votes", mode="before")
    @classmethod
    def missing_votes_are_empty(cls, value):
        return [] if value is None else value


class IdeaControlsRequest(_StageRequest):
    # Kept as received so edit requests forward the record untouched
    idea: Dict[str, Any]
    current_user: User = Field(
        validation_alias=AliasChoices("currentUser", "current_user"),
    )

    @field_validator("idea")
    @classmethod
    def idea_must_parse(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        try:
            Idea.model_validate(value)
        except ValidationError as exc:
            raise ValueError(f"Invalid idea: {exc.errors()[0]['msg']}") from exc
        return value

    @property
    def parsed_idea(self) -> Idea:
        return Idea.model_validate(self.idea)


class UserPresenceRequest(_StageRequest):
    user: User


class RosterRequest(_StageRequest):
    users: List[User] = Field(default_factory=list)


IdeaLike = Union[Idea, Mapping[str, Any]]
UserLike = Union[User, Mapping[str, Any]]


def coerce_idea(idea: IdeaLike) -> Idea:
    return idea if isinstance(idea, Idea) else Idea.model_validate(idea)


def coerce_user(user: UserLike) -> User:
    return user if isinstance(user, User) else User.model_validate(user)
