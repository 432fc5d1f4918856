"""Shared pytest fixtures."""

import pytest

from pitchreplay.config import PathsConfig, PitchReplayConfig
from tests.fixtures.builders import write_opendata, write_season


@pytest.fixture
def opendata_root(tmp_path):
    """A SkillCorner open data checkout with one small match."""
    root = tmp_path / "opendata"
    write_opendata(root)
    return root


@pytest.fixture
def data_dir(opendata_root):
    return opendata_root / "data"


@pytest.fixture
def config(opendata_root):
    return PitchReplayConfig(paths=PathsConfig(opendata_dir=opendata_root))


@pytest.fixture
def season_root(tmp_path):
    """A checkout with two matches carrying squads, playing time and stats events."""
    root = tmp_path / "season"
    write_season(root / "data")
    return root


@pytest.fixture
def season_dir(season_root):
    return season_root / "data"
