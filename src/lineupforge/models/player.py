"""Canonical player models shared across ingestion and optimizer layers."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class PlayerRecord(BaseModel):
    """Normalized candidate consumed by the lineup generator.

    ``position`` is the single slot-eligibility category, already resolved
    against a roster template's category set by the ingest layer.
    """

    player_id: str = Field(..., min_length=1)
    name: str
    team: str
    position: str = Field(..., min_length=1)
    salary: int = Field(..., ge=0)
    projection: float = Field(..., ge=0.0)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)
