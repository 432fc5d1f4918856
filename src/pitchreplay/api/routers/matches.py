"""Match data API endpoints.

These read straight from the open data checkout and never touch the
playback session.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Query

from ...skillcorner.loaders import load_match_bundle, load_matches_list
from ...timeline.frame_index import FrameIndex
from ...timeline.phases import build_phase_data, find_phase_at_frame
from ..dependencies import AppConfig

router = APIRouter(tags=["matches"])


@router.get("/matches")
def list_matches(config: AppConfig) -> dict[str, Any]:
    """List the matches available in the open data checkout."""
    items = [asdict(item) for item in load_matches_list(config.data_dir)]
    return {"items": items, "total": len(items)}


@router.get("/matches/{match_id}")
def get_match(
    match_id: int,
    config: AppConfig,
    include_tracking: bool = False,
    tracking_limit: int | None = Query(default=None, ge=0),
) -> dict[str, Any]:
    """Get match metadata, dynamic events and phases of play.

    Args:
        match_id: SkillCorner match ID
        include_tracking: Also return the tracking frames
        tracking_limit: Return only the first N tracking frames
    """
    bundle = load_match_bundle(
        match_id,
        config.data_dir,
        include_tracking=include_tracking,
        tracking_limit=tracking_limit,
    )

    response: dict[str, Any] = {
        "match": bundle.match.raw,
        "events": [asdict(e) for e in bundle.events],
        "phases": [asdict(p) for p in bundle.phases],
    }
    if include_tracking:
        response["tracking"] = [asdict(f) for f in bundle.tracking]
    return response


@router.get("/matches/{match_id}/phases/at/{frame_number}")
def get_phase_at_frame(
    match_id: int, frame_number: int, config: AppConfig
) -> dict[str, Any]:
    """Phase of play active at a frame, with its display geometry."""
    bundle = load_match_bundle(match_id, config.data_dir)
    phase = find_phase_at_frame(bundle.phases, frame_number)
    phase_data = build_phase_data(
        phase,
        bundle.events,
        FrameIndex(bundle.tracking),
        bundle.match,
        frame_number,
        sample_every=config.phases.trace_sample_every,
    )
    return {
        "match_id": match_id,
        "frame": frame_number,
        "phase": phase_data.to_dict() if phase_data else None,
    }
