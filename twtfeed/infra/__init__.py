"""Infra layer utilities (storage, client identification)."""

from .storage import SQLiteManager
from .user_agent import build_user_agent

__all__ = ["SQLiteManager", "build_user_agent"]
