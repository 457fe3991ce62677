"""REST API for the lineupforge generator."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile

from lineupforge.api.schemas import (
    LineupBatchResponse,
    LineupPlayerResponse,
    LineupRequest,
    LineupResponse,
    PlayerResponse,
    PlayerUploadResponse,
    PlayerUsageResponse,
    SkippedRowResponse,
    SlotResponse,
    TemplateResponse,
)
from lineupforge.config import (
    RosterTemplate,
    admin_token,
    get_template,
    iter_templates,
    template_from_mapping,
)
from lineupforge.ingest import DEFAULT_PROJECTION_MAPPING, load_records_from_bytes, sample_players
from lineupforge.models import PlayerRecord
from lineupforge.optimizer import EmptyPoolError, LineupResult, generate_lineups


logger = logging.getLogger(__name__)


def _lineup_to_response(lineup: LineupResult) -> LineupResponse:
    return LineupResponse(
        lineup_id=lineup.lineup_id,
        used_salary=lineup.salary,
        total_projection=round(lineup.projection, 4),
        players=[
            LineupPlayerResponse(
                player_id=player.player_id,
                name=player.name,
                team=player.team,
                position=player.position,
                slot=player.slot,
                salary=player.salary,
                projection=player.projection,
            )
            for player in lineup.players
        ],
    )


def _calculate_player_usage(lineups: list[LineupResponse]) -> list[PlayerUsageResponse]:
    total_lineups = len(lineups)
    if total_lineups == 0:
        return []

    usage: dict[str, dict[str, Any]] = {}
    for lineup in lineups:
        for player in lineup.players:
            entry = usage.setdefault(
                player.player_id,
                {
                    "name": player.name,
                    "team": player.team,
                    "position": player.position,
                    "count": 0,
                },
            )
            entry["count"] = int(entry["count"]) + 1

    sorted_usage = sorted(
        usage.items(),
        key=lambda item: (-int(item[1]["count"]), str(item[1]["name"])),
    )
    return [
        PlayerUsageResponse(
            player_id=player_id,
            name=str(data["name"]),
            team=str(data["team"]),
            position=str(data["position"]),
            count=int(data["count"]),
            exposure=int(data["count"]) / total_lineups,
        )
        for player_id, data in sorted_usage
    ]


def _template_to_response(template: RosterTemplate) -> TemplateResponse:
    stack = template.stack_rule
    exclusion = template.exclusion_rule
    return TemplateResponse(
        key=template.key,
        site=template.site,
        sport=template.sport,
        salary_cap=template.salary_cap,
        team_max_players=template.team_max_players,
        slots=[SlotResponse(name=slot.name, positions=sorted(slot.positions)) for slot in template.slots],
        stack_rule=None if stack is None else {
            "anchor_position": stack.anchor_position,
            "companion_positions": sorted(stack.companion_positions),
            "min_companions": stack.min_companions,
            "same_team_required": stack.same_team_required,
        },
        exclusion_rule=None if exclusion is None else {
            "position": exclusion.position,
            "blocked_positions": sorted(exclusion.blocked_positions),
        },
    )


def _parse_mapping(mapping_str: str | None) -> dict[str, str]:
    if not mapping_str:
        return {}
    try:
        mapping = json.loads(mapping_str)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid mapping JSON: {exc}") from exc
    if not isinstance(mapping, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in mapping.items()
    ):
        raise HTTPException(status_code=400, detail="column_mapping must be a JSON object of strings")
    return mapping


def _resolve_template(site: str, sport: str, payload: dict[str, Any] | None = None) -> RosterTemplate:
    try:
        if payload:
            return template_from_mapping(payload)
        return get_template(site, sport)
    except KeyError as exc:
        raise HTTPException(status_code=400, detail=str(exc.args[0])) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid template: {exc}") from exc


def create_app(*, admin_token_value: str | None = None) -> FastAPI:
    app = FastAPI(title="lineupforge optimizer")
    app.state.player_pool = ()
    app.state.admin_token = admin_token_value if admin_token_value is not None else admin_token()

    def require_admin(request: Request, token: str | None) -> None:
        expected = app.state.admin_token
        supplied = request.headers.get("x-admin-token") or token or ""
        if not expected or supplied != expected:
            raise HTTPException(status_code=401, detail="Unauthorized")

    def replace_pool(records: list[PlayerRecord]) -> None:
        app.state.player_pool = tuple(records)
        logger.info("Player pool replaced (%s players)", len(records))

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "players": len(app.state.player_pool)}

    @app.get("/players", response_model=list[PlayerResponse])
    async def players() -> list[PlayerResponse]:
        return [PlayerResponse(**record.model_dump()) for record in app.state.player_pool]

    @app.get("/templates", response_model=list[TemplateResponse])
    async def templates() -> list[TemplateResponse]:
        return [_template_to_response(template) for template in iter_templates()]

    @app.post("/optimize", response_model=LineupResponse | LineupBatchResponse)
    def optimize(request: LineupRequest) -> LineupResponse | LineupBatchResponse:
        template = _resolve_template(request.site, request.sport, request.template)
        pool = app.state.player_pool
        try:
            output = generate_lineups(
                pool,
                template,
                n_lineups=request.lineups,
                noise=request.noise,
                temperature=request.temperature,
                min_diff=request.min_diff,
                max_from_one_team=request.max_from_one_team,
                tries_per_lineup=request.tries_per_lineup,
                salary_cap=request.salary_cap,
                seed=request.seed,
                max_attempts=request.max_attempts,
                time_limit=request.time_limit,
                parallel_jobs=request.parallel_jobs,
            )
        except EmptyPoolError as exc:
            raise HTTPException(status_code=400, detail=f"{exc}; upload players first") from exc

        lineups_payload = [_lineup_to_response(lineup) for lineup in output.lineups]
        if request.lineups <= 1 and lineups_payload:
            return lineups_payload[0]
        return LineupBatchResponse(
            count=output.count,
            requested=output.requested,
            lineups=lineups_payload,
            player_usage=_calculate_player_usage(lineups_payload),
            message=output.message,
            stop_reason=output.stop_reason,
            failures=output.failures,
        )

    @app.post("/admin/upload-players", response_model=PlayerUploadResponse)
    async def upload_players(
        request: Request,
        file: UploadFile = File(...),
        site: str = Form("DK"),
        sport: str = Form("NFL"),
        column_mapping: str | None = Form(None),
        token: str | None = Query(None),
    ) -> PlayerUploadResponse:
        require_admin(request, token)
        template = _resolve_template(site, sport)
        contents = await file.read()
        if not contents:
            raise HTTPException(status_code=400, detail="players file is empty")
        mapping = DEFAULT_PROJECTION_MAPPING | _parse_mapping(column_mapping)
        try:
            records, report = load_records_from_bytes(contents, template=template, mapping=mapping)
        except UnicodeDecodeError as exc:
            raise HTTPException(status_code=400, detail="players file must be UTF-8 CSV") from exc
        replace_pool(records)
        return PlayerUploadResponse(
            message="Players uploaded successfully",
            count=len(records),
            template=template.key,
            skipped=[SkippedRowResponse(label=label, reason=reason) for label, reason in report.skipped_rows],
            position_counts=report.position_counts,
        )

    @app.post("/admin/fetch-players", response_model=PlayerUploadResponse)
    async def fetch_players(request: Request, token: str | None = Query(None)) -> PlayerUploadResponse:
        require_admin(request, token)
        records = sample_players()
        replace_pool(records)
        return PlayerUploadResponse(
            message="Sample players loaded",
            count=len(records),
            template=get_template("DK", "NFL").key,
        )

    return app


__all__ = ["create_app"]
