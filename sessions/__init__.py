"""Fusion session module."""
from sessions.models import (
    FusionSession,
    SessionState,
    GenerateRequest,
    GenerateResponse,
    ReferenceSelectRequest
)

__all__ = [
    "FusionSession",
    "SessionState",
    "GenerateRequest",
    "GenerateResponse",
    "ReferenceSelectRequest"
]
