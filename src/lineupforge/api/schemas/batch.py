from __future__ import annotations

from pydantic import BaseModel, Field

from .lineup import LineupResponse, PlayerUsageResponse


class LineupBatchResponse(BaseModel):
    count: int
    requested: int
    lineups: list[LineupResponse]
    player_usage: list[PlayerUsageResponse] = Field(default_factory=list)
    message: str | None = None
    stop_reason: str
    failures: dict[str, int] = Field(default_factory=dict)
