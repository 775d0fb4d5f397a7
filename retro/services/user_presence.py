from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from retro.schemas.retro import Stage, User, UserLike, coerce_stage, coerce_user
from retro.services.vote_eligibility import VoteLike, coerce_votes, is_exhausted
from retro.utils.avatar import normalize_avatar_url
from retro.utils.clock import Instant, resolve_instant

logger = logging.getLogger(__name__)

FACILITATOR_SUFFIX = "(facilitator)"
TYPING_GLYPH = "circle"
TYPING_GLYPH_COUNT = 3
ALL_VOTES_IN_LABEL = "all votes in"
ALL_VOTES_IN_MARKER = "allVotesIn"


@dataclass(frozen=True)
class VotingStatus:
    opaque: bool
    label: str = ALL_VOTES_IN_LABEL
    marker: str = ALL_VOTES_IN_MARKER


@dataclass(frozen=True)
class PresentationState:
    display_name: str
    picture_url: Optional[str]
    typing_glyphs: Tuple[str, ...] = ()
    voting_status: Optional[VotingStatus] = None
    online_for_ms: Optional[int] = None

    @property
    def is_typing_shown(self) -> bool:
        return bool(self.typing_glyphs)

    def to_payload(self) -> Dict[str, Any]:
        status = None
        if self.voting_status is not None:
            status = {
                "label": self.voting_status.label,
                "marker": self.voting_status.marker,
                "opaque": self.voting_status.opaque,
            }
        return {
            "displayName": self.display_name,
            "pictureUrl": self.picture_url,
            "typingGlyphs": list(self.typing_glyphs),
            "votingStatus": status,
            "onlineForMs": self.online_for_ms,
        }


def display_name(user: User) -> str:
    if user.is_facilitator:
        return f"{user.given_name} {FACILITATOR_SUFFIX}"
    return user.given_name


def typing_glyphs(user: User, stage: Stage) -> Tuple[str, ...]:
    if stage is Stage.VOTING or not user.is_typing:
        return ()
    return (TYPING_GLYPH,) * TYPING_GLYPH_COUNT


def voting_status(
    user: User, stage: Stage, votes: Iterable[VoteLike] | None
) -> Optional[VotingStatus]:
    if stage is not Stage.VOTING:
        return None
    return VotingStatus(opaque=is_exhausted(user.id, votes))


def _online_for_ms(user: User, now: Instant | None) -> Optional[int]:
    if user.online_at is None:
        return None
    now_ms = int(resolve_instant(now).timestamp() * 1000)
    return max(0, now_ms - user.online_at)


def present(
    user: UserLike,
    stage: Stage | str,
    votes: Iterable[VoteLike] | None = None,
    now: Instant | None = None,
) -> PresentationState:
    """Derive the roster entry for one participant."""
    user = coerce_user(user)
    stage = coerce_stage(stage)
    return PresentationState(
        display_name=display_name(user),
        picture_url=normalize_avatar_url(user.picture),
        typing_glyphs=typing_glyphs(user, stage),
        voting_status=voting_status(user, stage, votes),
        online_for_ms=_online_for_ms(user, now),
    )


def present_roster(
    users: Iterable[UserLike],
    stage: Stage | str,
    votes: Iterable[VoteLike] | None = None,
    now: Instant | None = None,
) -> List[PresentationState]:
    stage = coerce_stage(stage)
    vote_list = coerce_votes(votes)
    instant = resolve_instant(now)
    entries = [present(user, stage, vote_list, instant) for user in users]
    logger.debug("Presented roster of %s users at stage=%s", len(entries), stage.value)
    return entries
