"""API routes."""

from . import analysis

__all__ = ["analysis"]
