# tests/api/test_app.py
"""Tests for the FastAPI app: match data, session and stats endpoints."""

import pytest
from fastapi.testclient import TestClient

from pitchreplay.api import create_app
from pitchreplay.config import PathsConfig, PitchReplayConfig
from pitchreplay.timeline.scheduler import ManualScheduler
from tests.fixtures.builders import (
    AWAY_COLOR,
    HOME_COLOR,
    HOME_TEAM_ID,
    MATCH_ID,
    write_physical_aggregates,
)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def app(config, scheduler):
    return create_app(config, scheduler=scheduler)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def loaded_client(client):
    response = client.post(f"/session/load/{MATCH_ID}")
    assert response.status_code == 200
    return client


class TestHealthEndpoint:
    """Tests for the root and health endpoints."""

    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == "pitchreplay API"
        assert data["version"] == "0.1.0"

    def test_health(self, client, data_dir):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["data_available"] is True
        assert data["data_dir"] == str(data_dir)
        assert data["loaded_match_id"] is None

    def test_health_without_data(self, tmp_path):
        from pitchreplay.config import PathsConfig, PitchReplayConfig

        app = create_app(PitchReplayConfig(paths=PathsConfig(opendata_dir=tmp_path)))
        data = TestClient(app).get("/health").json()
        assert data["data_available"] is False


class TestMatchEndpoints:
    def test_list_matches(self, client):
        data = client.get("/matches").json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == MATCH_ID

    def test_get_match(self, client):
        data = client.get(f"/matches/{MATCH_ID}").json()
        assert data["match"]["id"] == MATCH_ID
        assert len(data["events"]) == 2
        assert len(data["phases"]) == 2
        assert "tracking" not in data

    def test_get_match_with_tracking(self, client):
        response = client.get(
            f"/matches/{MATCH_ID}", params={"include_tracking": True, "tracking_limit": 3}
        )
        frames = response.json()["tracking"]
        assert [f["frame"] for f in frames] == [10, 11, 12]

    def test_unknown_match_is_404(self, client):
        response = client.get("/matches/424242")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["type"] == "MatchDataNotFoundError"
        assert "suggested_action" in error["details"]

    def test_phase_at_frame(self, client):
        data = client.get(f"/matches/{MATCH_ID}/phases/at/35").json()
        assert data["phase"]["phase_index"] == 1
        assert data["phase"]["team_color"] == AWAY_COLOR
        assert data["phase"]["current_frame"] == 35

    def test_phase_at_frame_outside_phases(self, client):
        data = client.get(f"/matches/{MATCH_ID}/phases/at/5000").json()
        assert data["phase"] is None

    def test_corrupt_match_is_422(self, client, data_dir):
        path = data_dir / "matches" / str(MATCH_ID) / f"{MATCH_ID}_match.json"
        path.write_text("{broken")
        response = client.get(f"/matches/{MATCH_ID}")
        assert response.status_code == 422
        assert response.json()["error"]["type"] == "MatchDataFormatError"


class TestSessionEndpoints:
    def test_state_before_load(self, client):
        data = client.get("/session/state").json()
        assert data["is_loaded"] is False
        assert data["match_id"] is None
        assert data["frame_count"] == 0
        assert data["speed_options"] == [0.5, 1.0, 2.0, 4.0]

    def test_view_before_load_is_409(self, client):
        response = client.get("/session/view")
        assert response.status_code == 409
        assert response.json()["error"]["type"] == "MatchNotLoadedError"

    def test_load(self, client):
        data = client.post(f"/session/load/{MATCH_ID}").json()
        assert data["match_id"] == MATCH_ID
        assert data["home_team"] == "Home FC"
        assert data["frame_count"] == 40
        assert data["state"]["current_frame"] == 10

    def test_load_unknown_match(self, client):
        assert client.post("/session/load/424242").status_code == 404

    def test_view(self, loaded_client):
        data = loaded_client.get("/session/view").json()
        assert data["frame"] == 10
        assert data["phase"]["team_color"] == HOME_COLOR
        assert len(data["players"]) == 2

    def test_play_and_tick(self, loaded_client, scheduler):
        assert loaded_client.post("/session/play").json()["is_playing"] is True
        scheduler.advance(300)

        data = loaded_client.post("/session/pause").json()
        assert data["is_playing"] is False
        assert data["current_frame_index"] == 3

    def test_toggle(self, loaded_client):
        assert loaded_client.post("/session/toggle").json()["is_playing"] is True
        assert loaded_client.post("/session/toggle").json()["is_playing"] is False

    def test_speed(self, loaded_client):
        data = loaded_client.post("/session/speed", params={"multiplier": 2}).json()
        assert data["speed_multiplier"] == 2.0

    def test_speed_must_be_positive(self, loaded_client):
        response = loaded_client.post("/session/speed", params={"multiplier": 0})
        assert response.status_code == 422

    def test_steps_and_jumps(self, loaded_client):
        assert loaded_client.post("/session/step-forward").json()["current_frame_index"] == 1
        assert loaded_client.post("/session/step-backward").json()["current_frame_index"] == 0
        assert loaded_client.post("/session/jump-forward").json()["current_frame_index"] == 39
        assert loaded_client.post("/session/jump-backward").json()["current_frame_index"] == 0

    def test_navigation(self, loaded_client):
        data = loaded_client.post("/session/seek", params={"frame_number": 25}).json()
        assert data["current_frame"] == 25
        assert loaded_client.post("/session/end").json()["current_frame"] == 49
        assert loaded_client.post("/session/start").json()["current_frame_index"] == 0
        assert loaded_client.post("/session/first-valid").json()["current_frame"] == 10

    def test_controls_before_load_are_no_ops(self, client):
        data = client.post("/session/step-forward").json()
        assert data["current_frame_index"] == 0
        assert data["is_loaded"] is False


@pytest.fixture
def season_client(season_root, scheduler):
    config = PitchReplayConfig(paths=PathsConfig(opendata_dir=season_root))
    with TestClient(create_app(config, scheduler=scheduler)) as test_client:
        yield test_client


class TestStatsEndpoints:
    def test_players(self, season_client):
        players = season_client.get("/stats/players").json()
        assert [p["player_id"] for p in players] == [11, 12, 21, 22]
        assert players[0]["goals_per_match"] == 0.5

    def test_physical(self, season_client, season_dir):
        write_physical_aggregates(
            season_dir,
            [{"player_id": 7, "player_name": "Kim Seven", "position_group": "Midfield", "psv99": 30.0}],
        )

        (profile,) = season_client.get("/stats/players/physical").json()

        assert profile["id"] == "7_Midfield"
        assert profile["raw_values"]["PSV99"] == 30.0
        assert profile["scores"]["PSV99"] == 0.5

    def test_physical_without_aggregates_is_404(self, season_client):
        response = season_client.get("/stats/players/physical")
        assert response.status_code == 404
        assert response.json()["error"]["type"] == "MatchDataNotFoundError"

    def test_player_events(self, season_client):
        data = season_client.get("/stats/players/21/events/on_ball_engagement").json()
        assert data["total_events"] == 2
        assert data["subtypes"][0]["subtype"] == "pressing"

    def test_player_events_needs_numeric_id(self, season_client):
        response = season_client.get("/stats/players/abc/events/on_ball_engagement")
        assert response.status_code == 422

    def test_team_performance(self, season_client):
        teams = season_client.get("/stats/teams/performance").json()
        assert teams[0]["team_id"] == HOME_TEAM_ID
        assert teams[0]["avg_possession"] == 55.0
        assert len(teams[0]["matchups"]) == 1

    def test_event_types(self, season_client):
        types = season_client.get("/stats/event-types").json()
        assert {"id": "off_ball_run", "label": "OFF BALL RUN"} in types
