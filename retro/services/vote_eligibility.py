from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Union

from retro.schemas.retro import Vote

VOTE_CAP = 5

VoteLike = Union[Vote, Mapping[str, Any]]


def coerce_votes(votes: Optional[Iterable[VoteLike]]) -> List[Vote]:
    """Normalise a vote sequence into Vote models; ``None`` is an empty sequence."""
    if not votes:
        return []
    return [vote if isinstance(vote, Vote) else Vote.model_validate(vote) for vote in votes]


def count_for(user_id: Optional[int], votes: Optional[Iterable[VoteLike]]) -> int:
    if user_id is None:
        return 0
    return sum(1 for vote in coerce_votes(votes) if vote.user_id == user_id)


def is_exhausted(user_id: Optional[int], votes: Optional[Iterable[VoteLike]]) -> bool:
    return count_for(user_id, votes) >= VOTE_CAP


def remaining_for(user_id: Optional[int], votes: Optional[Iterable[VoteLike]]) -> int:
    return max(0, VOTE_CAP - count_for(user_id, votes))


def count_for_idea(idea_id: int, votes: Optional[Iterable[VoteLike]]) -> int:
    """Tally of votes attached to a single idea."""
    return sum(1 for vote in coerce_votes(votes) if vote.idea_id == idea_id)
