from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class LineupPlayerResponse(BaseModel):
    player_id: str
    name: str
    team: str
    position: str
    slot: str
    salary: int
    projection: float


class LineupResponse(BaseModel):
    lineup_id: str
    used_salary: int
    total_projection: float
    players: List[LineupPlayerResponse]


class LineupRequest(BaseModel):
    site: str = Field(default="DK")
    sport: str = Field(default="NFL")
    template: Dict[str, Any] | None = None
    lineups: int = Field(default=1, ge=1, le=500)
    noise: float = Field(default=1.0, ge=0.0)
    temperature: float = Field(default=0.05, ge=0.0, le=10.0)
    min_diff: int = Field(default=2, ge=0)
    max_from_one_team: int | None = Field(default=None, ge=1)
    tries_per_lineup: int | None = Field(default=None, ge=1, le=10_000)
    salary_cap: int | None = Field(default=None, ge=0)
    seed: int | None = None
    max_attempts: int | None = Field(default=None, ge=1, le=1_000_000)
    time_limit: float | None = Field(default=None, gt=0.0)
    parallel_jobs: int = Field(default=1, ge=1, le=32)


class PlayerUsageResponse(BaseModel):
    player_id: str
    name: str
    team: str
    position: str
    count: int
    exposure: float
