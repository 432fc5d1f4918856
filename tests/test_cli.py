"""Tests for the pitchreplay command line."""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from pitchreplay.cli import handle_serve_command, main, resolve_config, run_playback
from pitchreplay.config import ConfigError
from pitchreplay.errors import MatchDataNotFoundError
from tests.fixtures.builders import MATCH_ID


@pytest.fixture(autouse=True)
def no_user_config(tmp_path):
    """Keep the user's real ~/.pitchreplay/config.toml out of the tests."""
    with patch(
        "pitchreplay.cli.get_default_config_path",
        return_value=tmp_path / "missing" / "config.toml",
    ):
        yield


class TestResolveConfig:
    def test_defaults_when_no_file(self):
        config = resolve_config(SimpleNamespace(config=None, data_dir=None))
        assert config.playback.data_fps == 10

    def test_data_dir_override(self, opendata_root):
        config = resolve_config(SimpleNamespace(config=None, data_dir=str(opendata_root)))
        assert config.data_dir == opendata_root / "data"

    def test_explicit_config_must_exist(self, tmp_path):
        with pytest.raises(ConfigError):
            resolve_config(SimpleNamespace(config=str(tmp_path / "nope.toml"), data_dir=None))

    def test_explicit_config_is_validated(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[playback]\ndata_fps = 0\n")
        with pytest.raises(ConfigError):
            resolve_config(SimpleNamespace(config=str(path), data_dir=None))


def test_matches_command(opendata_root, capsys):
    exit_code = main(["--data-dir", str(opendata_root), "matches"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert str(MATCH_ID) in out
    assert "Home vs Away" in out


def test_matches_command_json(opendata_root, capsys):
    exit_code = main(["--data-dir", str(opendata_root), "matches", "--json"])

    assert exit_code == 0
    data = json.loads(capsys.readouterr().out)
    assert data[0]["id"] == MATCH_ID


def test_matches_command_missing_data(tmp_path, capsys):
    exit_code = main(["--data-dir", str(tmp_path), "matches"])

    assert exit_code == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Suggestion:" in err


def test_frame_command(opendata_root, capsys):
    exit_code = main(["--data-dir", str(opendata_root), "frame", str(MATCH_ID), "35"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "frame 35" in out
    assert "Phase: direct" in out


def test_frame_command_in_gap_shows_next_frame(opendata_root, capsys):
    exit_code = main(["--data-dir", str(opendata_root), "frame", str(MATCH_ID), "3"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "frame 10" in out
    assert "not in tracking" in out


def test_frame_command_json(opendata_root, capsys):
    exit_code = main(["--data-dir", str(opendata_root), "frame", str(MATCH_ID), "20", "--json"])

    assert exit_code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["frame"] == 20
    assert data["phase"]["phase_name"] == "build_up"


def test_frame_command_unknown_match_json(opendata_root, capsys):
    exit_code = main(["--data-dir", str(opendata_root), "frame", "1", "20", "--json"])

    assert exit_code == 1
    data = json.loads(capsys.readouterr().out)
    assert data["status"] == "error"
    assert data["error"]["type"] == "MatchDataNotFoundError"


def test_run_playback_prints_phase_changes(config, capsys):
    # 40 frames at 8x: the whole match plays in well under a second
    session = asyncio.run(run_playback(config, MATCH_ID, speed=8.0, seconds=2.0))

    out = capsys.readouterr().out
    assert "build_up" in out
    assert "direct" in out
    assert session.playback.torn_down
    assert not session.playback.is_playing


def test_run_playback_tears_down_on_error(config):
    with patch("pitchreplay.cli.MatchSession.close") as close:
        with pytest.raises(MatchDataNotFoundError):
            asyncio.run(run_playback(config, 424242, speed=1.0, seconds=1.0))
    close.assert_called_once()


def test_play_command_unknown_match(opendata_root, capsys):
    exit_code = main(["--data-dir", str(opendata_root), "play", "424242", "--seconds", "0"])

    assert exit_code == 1
    assert "Error:" in capsys.readouterr().err


def test_play_command_from_frame(opendata_root, capsys):
    exit_code = main(
        ["--data-dir", str(opendata_root), "play", str(MATCH_ID), "--seconds", "0", "--from-frame", "40"]
    )

    assert exit_code == 0
    assert "frame 40: direct" in capsys.readouterr().out


def test_handle_serve_command_runs_uvicorn(monkeypatch):
    args = SimpleNamespace(host="0.0.0.0", port=9999, config=None, data_dir=None)

    called = {"run": False}

    def fake_run(app, host, port, log_level):
        called["run"] = True
        assert app == "app"
        assert host == "0.0.0.0"
        assert port == 9999
        assert log_level == "info"

    monkeypatch.setattr("pitchreplay.api.create_app", lambda config: "app")
    monkeypatch.setattr("uvicorn.run", fake_run)

    assert handle_serve_command(args) == 0
    assert called["run"] is True


def test_handle_serve_command_bad_config(tmp_path, capsys):
    args = SimpleNamespace(host="127.0.0.1", port=8000, config=str(tmp_path / "none.toml"), data_dir=None)
    assert handle_serve_command(args) == 1
    assert "not found" in capsys.readouterr().out.lower()


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


def test_play_command_rejects_speed_outside_options(opendata_root, capsys):
    exit_code = main(
        ["--data-dir", str(opendata_root), "play", str(MATCH_ID), "--speed", "3", "--seconds", "0"]
    )

    assert exit_code == 1
    assert "speed_options" in capsys.readouterr().err


def test_stats_players_json(season_root, capsys):
    exit_code = main(["--data-dir", str(season_root), "stats", "players", "--json"])

    assert exit_code == 0
    players = json.loads(capsys.readouterr().out)
    assert [p["player_id"] for p in players] == [11, 12, 21, 22]
    assert players[0]["total_minutes_played"] == 135.0


def test_stats_teams_text(season_root, capsys):
    exit_code = main(["--data-dir", str(season_root), "stats", "teams"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Home FC" in out
    assert "possession  55.0%" in out


def test_stats_player_events_text(season_root, capsys):
    exit_code = main(
        ["--data-dir", str(season_root), "stats", "player-events", "21", "on_ball_engagement"]
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "2 events in 90.0 OTIP minutes (0.7 per 30)" in out
    assert "pressing" in out


def test_stats_event_types_uses_configured_sample(season_root, tmp_path, capsys):
    config_path = tmp_path / "config.toml"
    config_path.write_text("[stats]\nevent_type_sample_matches = 1\n", encoding="utf-8")
    early = season_root / "data" / "matches" / "1000"
    early.mkdir()
    (early / "1000_dynamic_events.csv").write_text(
        "event_id,frame_start,frame_end,event_type\n1,1,2,zzz_marker\n", encoding="utf-8"
    )

    exit_code = main(
        ["--config", str(config_path), "--data-dir", str(season_root), "stats", "event-types", "--json"]
    )

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == [{"id": "zzz_marker", "label": "ZZZ MARKER"}]


def test_stats_physical_missing_file_json(season_root, capsys):
    exit_code = main(["--data-dir", str(season_root), "stats", "physical", "--json"])

    assert exit_code == 1
    error = json.loads(capsys.readouterr().out)["error"]
    assert error["type"] == "MatchDataNotFoundError"
