"""Request dependencies shared by the routers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from ..config import PitchReplayConfig
from ..session import MatchSession


def get_config(request: Request) -> PitchReplayConfig:
    return request.app.state.config


def get_session(request: Request) -> MatchSession:
    return request.app.state.session


AppConfig = Annotated[PitchReplayConfig, Depends(get_config)]
Session = Annotated[MatchSession, Depends(get_session)]
