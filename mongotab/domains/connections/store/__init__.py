"""Connection persistence."""

from .connections import ConnectionStore

__all__ = ["ConnectionStore"]
