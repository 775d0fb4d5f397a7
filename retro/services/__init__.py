"""Policy layer for the retro board client."""

from .idea_controls import (
    ControlState,
    ControlUnavailableError,
    IdeaControls,
    OutboundEvent,
    VoteCounterState,
    evaluate,
)  # noqa: F401
from .user_presence import PresentationState, VotingStatus, present, present_roster
from .vote_eligibility import VOTE_CAP, count_for, is_exhausted, remaining_for

__all__ = [
    "ControlState",
    "ControlUnavailableError",
    "IdeaControls",
    "OutboundEvent",
    "VoteCounterState",
    "evaluate",
    "PresentationState",
    "VotingStatus",
    "present",
    "present_roster",
    "VOTE_CAP",
    "count_for",
    "is_exhausted",
    "remaining_for",
]
