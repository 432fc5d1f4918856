"""Version management for pitchreplay."""

# Package version
PACKAGE_VERSION = "0.1.0"

# Version of the match metadata schema bundled in schemas/
METADATA_SCHEMA_VERSION = "1.0.0"


def get_package_version() -> str:
    """Get the current package version."""
    return PACKAGE_VERSION


def get_schema_version() -> str:
    """Get the current match metadata schema version."""
    return METADATA_SCHEMA_VERSION
