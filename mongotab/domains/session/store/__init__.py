"""Session persistence."""

from .session import SessionStore

__all__ = ["SessionStore"]
