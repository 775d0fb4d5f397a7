from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from retro.schemas.retro import (
    Idea,
    IdeaLike,
    Stage,
    User,
    UserLike,
    coerce_idea,
    coerce_stage,
    coerce_user,
)
from retro.services.vote_eligibility import (
    VoteLike,
    coerce_votes,
    count_for_idea,
    is_exhausted,
)
from retro.utils.clock import Instant, elapsed_ms, resolve_instant
from retro.utils.retro_channel import RetroChannel

logger = logging.getLogger(__name__)

REMOVAL_WINDOW_MS = 5000
CONTROLS = ("remove", "edit", "announce", "ban", "vote")


class ControlUnavailableError(RuntimeError):
    """Raised when activating a control the current snapshot does not offer."""


@dataclass(frozen=True)
class OutboundEvent:
    event: str
    payload: Any


@dataclass(frozen=True)
class VoteCounterState:
    disabled: bool
    vote_count: int = 0


@dataclass(frozen=True)
class ControlState:
    renders: bool
    can_remove: bool = False
    can_edit: bool = False
    can_announce: bool = False
    can_ban: bool = False
    vote_counter: Optional[VoteCounterState] = None

    @property
    def can_vote(self) -> bool:
        return self.vote_counter is not None and not self.vote_counter.disabled

    def offers(self, control: str) -> bool:
        if control == "vote":
            return self.can_vote
        return bool(getattr(self, f"can_{control}"))

    def to_payload(self) -> Dict[str, Any]:
        """Return a JSON-friendly snapshot of the control panel."""
        counter = None
        if self.vote_counter is not None:
            counter = {
                "buttonDisabled": self.vote_counter.disabled,
                "voteCount": self.vote_counter.vote_count,
            }
        return {
            "renders": self.renders,
            "canRemove": self.can_remove,
            "canEdit": self.can_edit,
            "canAnnounce": self.can_announce,
            "canBan": self.can_ban,
            "voteCounter": counter,
        }


HIDDEN = ControlState(renders=False)


def can_remove(
    idea: Idea,
    current_user: User,
    now: Instant | None = None,
    removal_window_ms: int = REMOVAL_WINDOW_MS,
) -> bool:
    """Facilitators may always remove; owners only within the removal window."""
    if current_user.is_facilitator:
        return True
    if current_user.id is None or idea.user_id != current_user.id:
        return False
    # No timestamp yet means the idea was only just submitted
    if idea.inserted_at is None:
        return True
    return elapsed_ms(idea.inserted_at, resolve_instant(now)) < removal_window_ms


def vote_counter_for(
    idea: Idea,
    current_user: User,
    stage: Stage,
    votes: Iterable[VoteLike] | None = None,
) -> Optional[VoteCounterState]:
    stage = coerce_stage(stage)
    vote_list = coerce_votes(votes)
    if stage is Stage.VOTING:
        if idea.is_action_item:
            return None
        return VoteCounterState(
            disabled=is_exhausted(current_user.id, vote_list),
            vote_count=count_for_idea(idea.id, vote_list),
        )
    if stage is Stage.ACTION_ITEMS:
        return VoteCounterState(
            disabled=True, vote_count=count_for_idea(idea.id, vote_list)
        )
    # Idea generation and closed sessions show no counter
    return None


def evaluate(
    idea: IdeaLike,
    current_user: UserLike,
    stage: Stage | str,
    votes: Iterable[VoteLike] | None = None,
    now: Instant | None = None,
    *,
    removal_window_ms: int = REMOVAL_WINDOW_MS,
) -> ControlState:
    """Compute which idea controls are offered to ``current_user``."""
    stage = coerce_stage(stage)
    if stage is Stage.CLOSED:
        return HIDDEN

    idea = coerce_idea(idea)
    current_user = coerce_user(current_user)
    is_facilitator = current_user.is_facilitator
    state = ControlState(
        renders=True,
        can_remove=can_remove(idea, current_user, now, removal_window_ms),
        can_edit=True,
        can_announce=is_facilitator and not idea.is_highlighted,
        can_ban=is_facilitator and idea.is_highlighted,
        vote_counter=vote_counter_for(idea, current_user, stage, votes),
    )
    logger.debug(
        "Idea controls: idea_id=%s user_id=%s stage=%s state=%s",
        idea.id,
        current_user.id,
        stage.value,
        state,
    )
    return state


def removal_event(idea: IdeaLike) -> OutboundEvent:
    return OutboundEvent("delete_idea", coerce_idea(idea).id)


def edit_event(idea: IdeaLike, current_user: UserLike) -> OutboundEvent:
    """Forward the idea record as received together with the editor token."""
    return OutboundEvent(
        "enable_edit_state",
        {"idea": idea, "editorToken": coerce_user(current_user).token},
    )


def highlight_event(idea: IdeaLike) -> OutboundEvent:
    # Carries the idea's current highlight flag, not its negation.
    idea = coerce_idea(idea)
    return OutboundEvent(
        "highlight_idea", {"id": idea.id, "isHighlighted": idea.is_highlighted}
    )


def vote_event(idea: IdeaLike, current_user: UserLike) -> OutboundEvent:
    return OutboundEvent(
        "submit_vote",
        {"ideaId": coerce_idea(idea).id, "userId": coerce_user(current_user).id},
    )


class IdeaControls:
    """Binds one render snapshot of an idea's control panel to a channel."""

    def __init__(
        self,
        idea: IdeaLike,
        current_user: UserLike,
        stage: Stage | str,
        channel: RetroChannel,
        votes: Iterable[VoteLike] | None = None,
        now: Instant | None = None,
        *,
        removal_window_ms: int = REMOVAL_WINDOW_MS,
    ) -> None:
        self._record = idea
        self.idea = coerce_idea(idea)
        self.current_user = coerce_user(current_user)
        self.stage = coerce_stage(stage)
        self.channel = channel
        self.state = evaluate(
            self.idea,
            self.current_user,
            self.stage,
            votes,
            now,
            removal_window_ms=removal_window_ms,
        )

    def remove(self) -> OutboundEvent:
        return self._activate("remove", removal_event(self.idea))

    def edit(self) -> OutboundEvent:
        return self._activate("edit", edit_event(self._record, self.current_user))

    def announce(self) -> OutboundEvent:
        return self._activate("announce", highlight_event(self.idea))

    def ban(self) -> OutboundEvent:
        return self._activate("ban", highlight_event(self.idea))

    def vote(self) -> OutboundEvent:
        return self._activate("vote", vote_event(self.idea, self.current_user))

    def activate(self, control: str) -> OutboundEvent:
        if control not in CONTROLS:
            raise ValueError(f"Unknown idea control: {control!r}")
        return getattr(self, control)()

    def _activate(self, control: str, event: OutboundEvent) -> OutboundEvent:
        if not self.state.offers(control):
            logger.info(
                "Refused %s on idea_id=%s for user_id=%s at stage=%s",
                control,
                self.idea.id,
                self.current_user.id,
                self.stage.value,
            )
            raise ControlUnavailableError(
                f"The {control} control is not available for idea {self.idea.id}."
            )
        self.channel.push(event.event, event.payload)
        return event
