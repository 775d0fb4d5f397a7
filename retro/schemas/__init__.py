from .retro import (
    ACTION_ITEM_CATEGORY,
    Idea,
    IdeaControlsRequest,
    RosterRequest,
    Stage,
    UnknownStageError,
    User,
    UserPresenceRequest,
    Vote,
    coerce_stage,
)

__all__ = [
    "ACTION_ITEM_CATEGORY",
    "Idea",
    "IdeaControlsRequest",
    "RosterRequest",
    "Stage",
    "UnknownStageError",
    "User",
    "UserPresenceRequest",
    "Vote",
    "coerce_stage",
]
