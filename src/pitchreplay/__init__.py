"""pitchreplay: Match playback and phase-of-play analysis for SkillCorner open data."""

from .version import get_package_version

__version__ = get_package_version()
__author__ = "pitchreplay contributors"
__description__ = "Match playback and phase-of-play analysis for SkillCorner open data"

__all__ = ["__version__"]
