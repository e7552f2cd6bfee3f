"""Application layer: resolution policy, tracker service and pipeline."""

from .pipeline import AuditPipeline
from .resolver import AuditFieldResolver
from .tracker import ModelTracker, get_tracker, reset_tracker

__all__ = [
    "AuditFieldResolver",
    "AuditPipeline",
    "ModelTracker",
    "get_tracker",
    "reset_tracker",
]
