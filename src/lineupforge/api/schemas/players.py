from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PlayerResponse(BaseModel):
    player_id: str
    name: str
    team: str
    position: str
    salary: int
    projection: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class SkippedRowResponse(BaseModel):
    label: str
    reason: str


class PlayerUploadResponse(BaseModel):
    message: str
    count: int
    template: str
    skipped: list[SkippedRowResponse] = Field(default_factory=list)
    position_counts: dict[str, int] = Field(default_factory=dict)


class SlotResponse(BaseModel):
    name: str
    positions: list[str]


class TemplateResponse(BaseModel):
    key: str
    site: str
    sport: str
    salary_cap: int
    team_max_players: int
    slots: list[SlotResponse]
    stack_rule: dict[str, Any] | None = None
    exclusion_rule: dict[str, Any] | None = None
