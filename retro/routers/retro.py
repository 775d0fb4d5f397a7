import logging
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from retro.config.loader import get_idea_control_settings
from retro.schemas.retro import IdeaControlsRequest, RosterRequest, UserPresenceRequest
from retro.services.idea_controls import (
    CONTROLS,
    ControlUnavailableError,
    IdeaControls,
    evaluate,
)
from retro.services.user_presence import present, present_roster
from retro.utils.retro_channel import BufferedRetroChannel

router = APIRouter(prefix="/api/retro", tags=["retro"])

logger = logging.getLogger(__name__)


@router.post("/idea-controls")
async def idea_controls(payload: IdeaControlsRequest) -> Dict[str, Any]:
    settings = get_idea_control_settings()
    state = evaluate(
        payload.idea,
        payload.current_user,
        payload.stage,
        payload.votes,
        payload.now,
        removal_window_ms=settings["removal_window_ms"],
    )
    return state.to_payload()


@router.post("/idea-controls/{control}")
async def activate_idea_control(
    control: str, payload: IdeaControlsRequest
) -> Dict[str, Any]:
    """Activate one control and return the events it pushed to the channel."""
    if control not in CONTROLS:
        raise HTTPException(status_code=404, detail=f"Unknown control '{control}'.")

    settings = get_idea_control_settings()
    idea_id = payload.parsed_idea.id
    channel = BufferedRetroChannel(f"idea-{idea_id}")
    controls = IdeaControls(
        payload.idea,
        payload.current_user,
        payload.stage,
        channel,
        votes=payload.votes,
        now=payload.now,
        removal_window_ms=settings["removal_window_ms"],
    )
    try:
        controls.activate(control)
    except ControlUnavailableError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    messages = [message.to_json() for message in channel.drain()]
    logger.info(
        "Idea control activated: control=%s idea_id=%s events=%s",
        control,
        idea_id,
        [message["event"] for message in messages],
    )
    return {"events": messages}


@router.post("/user-presence")
async def user_presence(payload: UserPresenceRequest) -> Dict[str, Any]:
    state = present(payload.user, payload.stage, payload.votes, payload.now)
    return state.to_payload()


@router.post("/roster")
async def roster(payload: RosterRequest) -> Dict[str, List[Dict[str, Any]]]:
    entries = present_roster(payload.users, payload.stage, payload.votes, payload.now)
    return {"users": [entry.to_payload() for entry in entries]}
