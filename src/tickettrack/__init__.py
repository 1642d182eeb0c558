"""tickettrack - Time tracking for Asana tickets in an "In Progress" section."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the package version."""
    return __version__
