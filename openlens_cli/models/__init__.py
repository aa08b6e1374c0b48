"""
Data Models Layer.

This package contains the job lifecycle types, the Pydantic models for the
job service's JSON bodies, and the application configuration.
"""

from .config import ClientConfig
from .job import (
    JobHandle,
    JobRequest,
    JobStatus,
    LocalFile,
    OrchestrationState,
    PersistedAsset,
    Phase,
    StatusKind,
)

__all__ = [
    "ClientConfig",
    "JobHandle",
    "JobRequest",
    "JobStatus",
    "LocalFile",
    "OrchestrationState",
    "PersistedAsset",
    "Phase",
    "StatusKind",
]
