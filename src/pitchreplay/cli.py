"""Command-line interface for pitchreplay."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .config import (
    ConfigError,
    PitchReplayConfig,
    default_config,
    get_default_config_path,
    load_config,
)
from .errors import PitchReplayError
from .session import MatchSession
from .skillcorner.loaders import load_matches_list
from .stats import (
    aggregate_player_match_stats,
    compute_team_performance,
    list_event_types,
    load_physical_profiles,
    player_event_stats,
)
from .timeline.scheduler import AsyncioScheduler, ManualScheduler

logger = logging.getLogger(__name__)

LOG_LEVELS = ["debug", "info", "warning", "error"]

# How often the play command checks whether playback has stopped by itself
_PLAY_POLL_SECONDS = 0.1


def resolve_config(args) -> PitchReplayConfig:
    """Build the configuration for a command.

    An explicit ``--config`` must exist. Otherwise the default config file is
    used when present and the built-in defaults when it is not. ``--data-dir``
    overrides ``[paths] opendata_dir``.
    """
    config_path = getattr(args, "config", None)
    if config_path:
        config = load_config(Path(config_path))
    else:
        default_path = Path(get_default_config_path())
        config = load_config(default_path) if default_path.exists() else default_config()

    data_dir = getattr(args, "data_dir", None)
    if data_dir:
        config.paths.opendata_dir = Path(data_dir).expanduser()

    config.validate()
    return config


def _print_error(e: Exception, as_json: bool) -> None:
    if as_json:
        error_result = {
            "error": {
                "type": type(e).__name__,
                "message": str(e),
                "details": getattr(e, "details", {}),
            },
            "status": "error",
        }
        print(json.dumps(error_result, indent=2, default=str))
    else:
        print(f"Error: {e}", file=sys.stderr)
        details = getattr(e, "details", {})
        if "suggested_action" in details:
            print(f"Suggestion: {details['suggested_action']}", file=sys.stderr)


def handle_matches_command(args) -> int:
    """List the matches in the open data checkout.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config = resolve_config(args)
        matches = load_matches_list(config.data_dir)
    except (PitchReplayError, ConfigError) as e:
        _print_error(e, args.json)
        return 1

    if args.json:
        print(
            json.dumps(
                [
                    {
                        "id": m.id,
                        "date_time": m.date_time,
                        "home_team": m.home_team_short_name,
                        "away_team": m.away_team_short_name,
                        "status": m.status,
                    }
                    for m in matches
                ],
                indent=2,
            )
        )
        return 0

    if not matches:
        print("No matches found.")
        return 0

    for m in matches:
        print(
            f"{m.id:>8}  {m.date_time or '':<20}  "
            f"{m.home_team_short_name or '?'} vs {m.away_team_short_name or '?'}"
        )
    print(f"\n{len(matches)} match(es)")
    return 0


def handle_frame_command(args) -> int:
    """Print the frame view and active phase at a frame number."""
    try:
        config = resolve_config(args)
        session = MatchSession(config.data_dir, config, scheduler=ManualScheduler())
        session.load(args.match_id)
        session.navigator.navigate_to_frame(args.frame_number)
        view = session.current_view()
    except (PitchReplayError, ConfigError) as e:
        _print_error(e, args.json)
        return 1

    if args.json:
        print(json.dumps(view.to_dict(), indent=2))
        return 0

    print(f"Match {view.match_id}  frame {view.frame}  clock {view.clock}  period {view.period}")
    if view.frame != args.frame_number:
        print(f"  (frame {args.frame_number} not in tracking, showing next available)")

    ball = view.ball
    if ball.x is not None and ball.y is not None:
        print(f"Ball: ({ball.x:.1f}, {ball.y:.1f})")
    else:
        print("Ball: not detected")
    print(f"Players: {len(view.players)} positioned")

    phase = view.phase
    if phase is None:
        print("Phase: none")
    else:
        print(
            f"Phase: {phase.phase_name or 'unknown'} "
            f"[{phase.frame_start}-{phase.frame_end}] {phase.team_color}"
        )
        print(f"  Ball range x: {phase.x_start:.1f} to {phase.x_end:.1f}")
        print(f"  Passes: {len(phase.passes)}  Trace points: {len(phase.ball_trace)}")
    return 0


def _describe_position(session: MatchSession) -> str:
    frame = session.current_frame()
    phase = session.current_phase()
    clock = session.current_view().clock
    phase_name = (phase.phase_type or "unknown") if phase else "no phase"
    frame_number = frame.frame if frame else "-"
    return f"[{clock}] frame {frame_number}: {phase_name}"


async def run_playback(
    config: PitchReplayConfig,
    match_id: int,
    speed: float,
    seconds: float,
    from_frame: int | None = None,
) -> MatchSession:
    """Play a match on the running loop for ``seconds`` of wall-clock time.

    Each phase change is printed as it happens. Playback is torn down on every
    exit path, including cancellation.
    """
    session = MatchSession(config.data_dir, config, scheduler=AsyncioScheduler())
    last_phase = None

    def on_frame_change(index: int) -> None:
        nonlocal last_phase
        phase = session.current_phase()
        key = phase.index if phase else None
        if key != last_phase:
            last_phase = key
            print(_describe_position(session), flush=True)

    try:
        session.load(match_id)
        if from_frame is not None:
            session.navigator.navigate_to_frame(from_frame)
        session.playback.set_speed(speed)

        phase = session.current_phase()
        last_phase = phase.index if phase else None
        print(_describe_position(session), flush=True)
        session.on_frame_change = on_frame_change

        loop = asyncio.get_running_loop()
        deadline = loop.time() + seconds
        session.playback.play()
        while session.playback.is_playing and loop.time() < deadline:
            await asyncio.sleep(min(_PLAY_POLL_SECONDS, max(0.0, deadline - loop.time())))

        if not session.playback.is_playing:
            logger.info("Playback reached the end of the tracking data")
    finally:
        session.close()

    return session


def handle_play_command(args) -> int:
    """Run timed playback of a match in the terminal."""
    try:
        config = resolve_config(args)
        speed = args.speed if args.speed is not None else config.playback.default_speed
        if speed not in config.playback.speed_options:
            options = ", ".join(str(s) for s in config.playback.speed_options)
            raise ConfigError(f"Speed {speed} is not one of the speed_options: {options}")
        asyncio.run(
            run_playback(
                config,
                args.match_id,
                speed=speed,
                seconds=args.seconds,
                from_frame=args.from_frame,
            )
        )
    except (PitchReplayError, ConfigError) as e:
        _print_error(e, False)
        return 1
    except KeyboardInterrupt:
        print("\nStopped.")
    return 0


def _stats_payload(args, config: PitchReplayConfig) -> list | dict:
    if args.stats_command == "players":
        return [s.to_dict() for s in aggregate_player_match_stats(config.data_dir)]
    if args.stats_command == "physical":
        return [p.to_dict() for p in load_physical_profiles(config.physical_aggregates_path)]
    if args.stats_command == "teams":
        return [t.to_dict() for t in compute_team_performance(config.data_dir)]
    if args.stats_command == "event-types":
        return list_event_types(
            config.data_dir, sample_matches=config.stats.event_type_sample_matches
        )
    return player_event_stats(config.data_dir, args.player_id, args.event_type).to_dict()


def _print_stats_text(command: str, payload) -> None:
    if command == "players":
        for p in payload:
            print(
                f"{p['player_id']:>8}  {p['short_name'] or '?':<24} {p['team_name']:<24} "
                f"{p['matches_played']:>3} matches  {p['total_minutes_played']:>7.1f} min  "
                f"{p['total_goals']:>2} goals"
            )
        print(f"\n{len(payload)} player(s)")
    elif command == "physical":
        for p in payload:
            raw = p["raw_values"]
            print(
                f"{p['id']:<20} {p['name']} {p['surname']:<20} "
                f"{raw['Total distance']:>8.0f} m  PSV99 {raw['PSV99']:.1f}"
            )
        print(f"\n{len(payload)} profile(s)")
    elif command == "teams":
        for t in payload:
            print(
                f"{t['team_name']:<28} {t['matches_played']:>3} matches  "
                f"possession {t['avg_possession']:>5.1f}%  "
                f"pass accuracy {t['avg_pass_accuracy']:>5.1f}%  "
                f"xthreat {t['avg_total_xthreat']:.2f}"
            )
    elif command == "event-types":
        for t in payload:
            print(f"{t['id']:<28} {t['label']}")
    else:
        print(
            f"Player {payload['player_id']} {payload['event_type']}: "
            f"{payload['total_events']} events in {payload['total_otip_minutes']:.1f} "
            f"OTIP minutes ({payload['events_per30_otip']:.1f} per 30)"
        )
        for s in payload["subtypes"]:
            print(
                f"  {s['subtype']:<24} {s['count']:>4}  {s['percentage']:>5.1f}%  "
                f"{s['per30_otip']:>4.1f} per 30"
            )


def handle_stats_command(args) -> int:
    """Print season statistics computed from the checkout."""
    try:
        config = resolve_config(args)
        payload = _stats_payload(args, config)
    except (PitchReplayError, ConfigError) as e:
        _print_error(e, args.json)
        return 1

    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        _print_stats_text(args.stats_command, payload)
    return 0


def handle_serve_command(args) -> int:
    """Start the API server."""
    import uvicorn

    from .api import create_app

    try:
        config = resolve_config(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    logger.info(f"Starting API server on {args.host}:{args.port}")
    uvicorn.run(create_app(config), host=args.host, port=args.port, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pitchreplay",
        description="Match playback and phase-of-play analysis for SkillCorner open data",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"pitchreplay {__version__}",
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Path to a config.toml file"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="SkillCorner opendata checkout (overrides [paths] opendata_dir)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="warning",
        help="Logging verbosity (default: warning)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Matches subcommand
    matches_parser = subparsers.add_parser(
        "matches", help="List matches in the open data checkout"
    )
    matches_parser.add_argument(
        "--json",
        action="store_true",
        help="Output results in machine-readable JSON format",
    )

    # Frame subcommand
    frame_parser = subparsers.add_parser(
        "frame", help="Show the frame view and phase of play at a frame number"
    )
    frame_parser.add_argument("match_id", type=int, help="SkillCorner match ID")
    frame_parser.add_argument("frame_number", type=int, help="Tracking frame number")
    frame_parser.add_argument(
        "--json",
        action="store_true",
        help="Output results in machine-readable JSON format",
    )

    # Play subcommand
    play_parser = subparsers.add_parser(
        "play", help="Play a match and print each phase of play as it starts"
    )
    play_parser.add_argument("match_id", type=int, help="SkillCorner match ID")
    play_parser.add_argument(
        "--speed",
        type=float,
        default=None,
        help="Speed multiplier, one of [playback] speed_options (default: config)",
    )
    play_parser.add_argument(
        "--seconds",
        type=float,
        default=30.0,
        help="Wall-clock seconds to play for (default: 30)",
    )
    play_parser.add_argument(
        "--from-frame",
        type=int,
        default=None,
        help="Start at this frame number instead of the first valid frame",
    )

    # Stats subcommand
    stats_parser = subparsers.add_parser(
        "stats", help="Season statistics across every match in the checkout"
    )
    stats_subparsers = stats_parser.add_subparsers(
        dest="stats_command", required=True, help="Statistic to compute"
    )
    stats_subparsers.add_parser("players", help="Minutes, goals and cards per player")
    stats_subparsers.add_parser(
        "physical", help="Normalised physical profiles from the aggregates CSV"
    )
    stats_subparsers.add_parser("teams", help="Team averages and head-to-head splits")
    stats_subparsers.add_parser(
        "event-types", help="Event types seen in a sample of the matches"
    )
    player_events_parser = stats_subparsers.add_parser(
        "player-events", help="One player's events of a type, per 30 OTIP minutes"
    )
    player_events_parser.add_argument("player_id", type=int, help="SkillCorner player ID")
    player_events_parser.add_argument("event_type", help="Dynamic event type, e.g. on_ball_engagement")
    for sub in stats_subparsers.choices.values():
        sub.add_argument(
            "--json",
            action="store_true",
            help="Output results in machine-readable JSON format",
        )

    # Serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Route to appropriate handler
    if args.command == "matches":
        return handle_matches_command(args)
    elif args.command == "frame":
        return handle_frame_command(args)
    elif args.command == "play":
        return handle_play_command(args)
    elif args.command == "stats":
        return handle_stats_command(args)
    elif args.command == "serve":
        return handle_serve_command(args)
    else:
        # No subcommand provided, show help
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
