"""Data models for the Asana client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Project:
    """An Asana project the session can see."""

    gid: str
    name: str
