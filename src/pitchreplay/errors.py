"""Custom exceptions for pitchreplay with structured error information."""


class PitchReplayError(Exception):
    """Base exception for all pitchreplay errors.

    Provides structured error information with actionable messages.
    """

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class MatchDataNotFoundError(PitchReplayError):
    """Raised when a match data file cannot be found."""

    def __init__(self, path: str, match_id: int | str | None = None):
        message = f"Match data file not found: {path}"
        details = {
            "path": path,
            "match_id": match_id,
            "suggested_action": (
                "Verify the opendata directory and match ID. The data is "
                "expected under <opendata_dir>/data/matches/<match_id>/"
            ),
        }
        super().__init__(message, details)


class MatchDataFormatError(PitchReplayError):
    """Raised when a match data file cannot be decoded."""

    def __init__(self, path: str, reason: str = None, suggested_action: str = None):
        base_message = f"Invalid match data: {path}"
        if reason:
            message = f"{base_message} ({reason})"
        else:
            message = base_message

        details = {
            "path": path,
            "reason": reason,
            "suggested_action": suggested_action
            or "Re-download the SkillCorner open data or check the file for corruption",
        }
        super().__init__(message, details)


class MatchNotLoadedError(PitchReplayError):
    """Raised when a session query needs a match but none is loaded."""

    def __init__(self):
        super().__init__(
            "No match loaded in this session",
            {"suggested_action": "Load a match before querying the session"},
        )
