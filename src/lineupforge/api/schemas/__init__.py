"""Pydantic models for API I/O."""

from .players import (
    PlayerResponse,
    PlayerUploadResponse,
    SkippedRowResponse,
    SlotResponse,
    TemplateResponse,
)
from .lineup import (
    LineupRequest,
    LineupResponse,
    LineupPlayerResponse,
    PlayerUsageResponse,
)
from .batch import LineupBatchResponse

__all__ = [
    "PlayerResponse",
    "PlayerUploadResponse",
    "SkippedRowResponse",
    "SlotResponse",
    "TemplateResponse",
    "LineupRequest",
    "LineupResponse",
    "LineupPlayerResponse",
    "PlayerUsageResponse",
    "LineupBatchResponse",
]
