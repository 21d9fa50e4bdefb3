"""Terminal output helpers."""

from .presenter import display, render

__all__ = ["display", "render"]
