"""Repository implementations for infrastructure layer."""

from .tracked_repository import TrackedRepository

__all__ = ["TrackedRepository"]
