"""Playback session API endpoints.

The server holds a single session. Handlers are coroutines so they run on
the event loop that drives the playback tick and never race it.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query
from pydantic import BaseModel

from ...session import MatchSession
from ..dependencies import Session

router = APIRouter(prefix="/session", tags=["session"])


class PlaybackStateResponse(BaseModel):
    """Playback state of the session."""

    match_id: int | None
    is_loaded: bool
    frame_count: int
    current_frame: int | None
    is_playing: bool
    speed_multiplier: float
    current_frame_index: int
    speed_options: list[float]


class LoadResponse(BaseModel):
    match_id: int
    home_team: str
    away_team: str
    frame_count: int
    event_count: int
    phase_count: int
    state: PlaybackStateResponse


def _state(session: MatchSession) -> PlaybackStateResponse:
    return PlaybackStateResponse(**session.state_dict())


@router.post("/load/{match_id}")
async def load_match(
    match_id: int,
    session: Session,
    tracking_limit: int | None = Query(default=None, ge=0),
) -> LoadResponse:
    """Load a match into the session, replacing any loaded match.

    The files are parsed off the event loop; other requests keep being
    served while a large tracking file loads.
    """
    bundle = await session.load_async(match_id, tracking_limit=tracking_limit)
    return LoadResponse(
        match_id=bundle.match.id,
        home_team=bundle.match.home_team.name,
        away_team=bundle.match.away_team.name,
        frame_count=len(bundle.tracking),
        event_count=len(bundle.events),
        phase_count=len(bundle.phases),
        state=_state(session),
    )


@router.get("/state")
async def get_state(session: Session) -> PlaybackStateResponse:
    return _state(session)


@router.get("/view")
async def get_view(session: Session) -> dict[str, Any]:
    """Frame view at the playback pointer: players, ball, clock and phase."""
    return session.current_view().to_dict()


@router.post("/play")
async def play(session: Session) -> PlaybackStateResponse:
    session.playback.play()
    return _state(session)


@router.post("/pause")
async def pause(session: Session) -> PlaybackStateResponse:
    session.playback.pause()
    return _state(session)


@router.post("/toggle")
async def toggle(session: Session) -> PlaybackStateResponse:
    session.playback.toggle_play_pause()
    return _state(session)


@router.post("/speed")
async def set_speed(
    session: Session, multiplier: float = Query(gt=0)
) -> PlaybackStateResponse:
    session.playback.set_speed(multiplier)
    return _state(session)


@router.post("/step-forward")
async def step_forward(session: Session) -> PlaybackStateResponse:
    session.playback.step_forward()
    return _state(session)


@router.post("/step-backward")
async def step_backward(session: Session) -> PlaybackStateResponse:
    session.playback.step_backward()
    return _state(session)


@router.post("/jump-forward")
async def jump_forward(session: Session) -> PlaybackStateResponse:
    session.playback.jump_forward()
    return _state(session)


@router.post("/jump-backward")
async def jump_backward(session: Session) -> PlaybackStateResponse:
    session.playback.jump_backward()
    return _state(session)


@router.post("/seek")
async def seek(session: Session, frame_number: int) -> PlaybackStateResponse:
    """Go to the first frame at or after ``frame_number``."""
    session.navigator.navigate_to_frame(frame_number)
    return _state(session)


@router.post("/start")
async def go_to_start(session: Session) -> PlaybackStateResponse:
    session.navigator.navigate_to_start()
    return _state(session)


@router.post("/end")
async def go_to_end(session: Session) -> PlaybackStateResponse:
    session.navigator.navigate_to_end()
    return _state(session)


@router.post("/first-valid")
async def go_to_first_valid(session: Session) -> PlaybackStateResponse:
    session.navigator.navigate_to_first_valid_frame()
    return _state(session)
