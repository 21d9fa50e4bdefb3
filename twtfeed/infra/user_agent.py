"""User-Agent string sent with every feed request."""

from __future__ import annotations

from .. import __version__
from ..config import TwtxtSettings


def build_user_agent(settings: TwtxtSettings) -> str:
    """Return ``twtfeed/<version>``, disclosing nick and url when allowed."""

    agent = f"twtfeed/{__version__}"
    if settings.disclose_identity and settings.nick and settings.twturl:
        agent += f" (+{settings.twturl}; @{settings.nick})"
    return agent


__all__ = ["build_user_agent"]
