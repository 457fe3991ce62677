import json

import pytest
from httpx import ASGITransport, AsyncClient

from lineupforge.api import create_app


TOKEN = "secret"

STACK_TEMPLATE = {
    "site": "DK",
    "sport": "DUO",
    "salary_cap": 14000,
    "slots": [
        {"name": "QB", "positions": ["QB"]},
        {"name": "WR", "positions": ["WR"]},
    ],
    "stack_rule": {"anchor_position": "QB", "companion_positions": ["WR"]},
}


@pytest.fixture
async def client():
    app = create_app(admin_token_value=TOKEN)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


def _players_csv() -> str:
    return """id,name,team,pos,salary,proj
1,Arrow QB,KC,QB,7000,20
2,Bolt QB,BUF,QB,6500,17
3,Catch WR,KC,WR,6000,16
4,Dash WR,BUF,WR,5500,14
5,Edge WR,MIA,WR,5000,12
6,Fort Defense,PIT,DST,3000,7
7,Toe Kicker,NYJ,K,4000,8
"""


async def _upload(client: AsyncClient) -> dict:
    files = {"file": ("players.csv", _players_csv(), "text/csv")}
    resp = await client.post(
        "/admin/upload-players",
        files=files,
        data={"site": "DK", "sport": "NFL"},
        headers={"x-admin-token": TOKEN},
    )
    assert resp.status_code == 200
    return resp.json()


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "players": 0}


@pytest.mark.anyio
async def test_templates_endpoint(client: AsyncClient):
    resp = await client.get("/templates")
    assert resp.status_code == 200
    templates = {entry["key"]: entry for entry in resp.json()}
    assert "DK_NFL" in templates
    dk = templates["DK_NFL"]
    assert dk["salary_cap"] == 50000
    assert [slot["name"] for slot in dk["slots"]][-1] == "DST"
    assert dk["stack_rule"]["anchor_position"] == "QB"


@pytest.mark.anyio
async def test_admin_endpoints_require_token(client: AsyncClient):
    resp = await client.post("/admin/fetch-players")
    assert resp.status_code == 401

    resp = await client.post("/admin/fetch-players", headers={"x-admin-token": "wrong"})
    assert resp.status_code == 401

    files = {"file": ("players.csv", _players_csv(), "text/csv")}
    resp = await client.post("/admin/upload-players", files=files)
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_admin_endpoints_closed_without_configured_token():
    app = create_app(admin_token_value="")
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as other:
        resp = await other.post("/admin/fetch-players", headers={"x-admin-token": ""})
        assert resp.status_code == 401


@pytest.mark.anyio
async def test_fetch_sample_players(client: AsyncClient):
    resp = await client.post("/admin/fetch-players", params={"token": TOKEN})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Sample players loaded"
    assert body["count"] == 22
    assert body["template"] == "DK_NFL"

    resp = await client.get("/players")
    assert resp.status_code == 200
    assert len(resp.json()) == 22

    resp = await client.get("/health")
    assert resp.json()["players"] == 22


@pytest.mark.anyio
async def test_upload_players_reports_skipped_rows(client: AsyncClient):
    body = await _upload(client)
    assert body["message"] == "Players uploaded successfully"
    assert body["count"] == 6
    assert body["template"] == "DK_NFL"
    assert body["skipped"][0]["label"] == "Toe Kicker"
    assert body["position_counts"] == {"QB": 2, "WR": 3, "DST": 1}


@pytest.mark.anyio
async def test_upload_players_with_column_mapping(client: AsyncClient):
    csv_text = "Player,Club,Pos,Cost,FPPG\nArrow QB,KC,QB,7000,20\n"
    files = {"file": ("players.csv", csv_text, "text/csv")}
    mapping = {"name": "Player", "team": "Club", "position": "Pos", "salary": "Cost", "projection": "FPPG"}
    resp = await client.post(
        "/admin/upload-players",
        files=files,
        data={"column_mapping": json.dumps(mapping)},
        headers={"x-admin-token": TOKEN},
    )
    assert resp.status_code == 200
    assert resp.json()["count"] == 1

    players = (await client.get("/players")).json()
    assert players[0]["player_id"] == "arrow-qb-kc"


@pytest.mark.anyio
async def test_upload_rejects_bad_mapping_and_empty_file(client: AsyncClient):
    files = {"file": ("players.csv", _players_csv(), "text/csv")}
    resp = await client.post(
        "/admin/upload-players",
        files=files,
        data={"column_mapping": "{not json"},
        headers={"x-admin-token": TOKEN},
    )
    assert resp.status_code == 400

    for bad_mapping in ("[1]", "5", json.dumps({"name": 5})):
        files = {"file": ("players.csv", _players_csv(), "text/csv")}
        resp = await client.post(
            "/admin/upload-players",
            files=files,
            data={"column_mapping": bad_mapping},
            headers={"x-admin-token": TOKEN},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "column_mapping must be a JSON object of strings"

    files = {"file": ("players.csv", "", "text/csv")}
    resp = await client.post("/admin/upload-players", files=files, headers={"x-admin-token": TOKEN})
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_optimize_with_empty_pool(client: AsyncClient):
    resp = await client.post("/optimize", json={"lineups": 1})
    assert resp.status_code == 400
    assert "upload players first" in resp.json()["detail"]


@pytest.mark.anyio
async def test_optimize_single_lineup(client: AsyncClient):
    await _upload(client)
    resp = await client.post(
        "/optimize",
        json={"template": STACK_TEMPLATE, "lineups": 1, "noise": 0, "temperature": 0},
    )
    assert resp.status_code == 200
    lineup = resp.json()
    assert lineup["lineup_id"] == "L001"
    assert [player["player_id"] for player in lineup["players"]] == ["1", "3"]
    assert [player["slot"] for player in lineup["players"]] == ["QB", "WR"]
    assert lineup["used_salary"] == 13000
    assert lineup["total_projection"] == pytest.approx(36.0)


@pytest.mark.anyio
async def test_optimize_batch(client: AsyncClient):
    await _upload(client)
    resp = await client.post(
        "/optimize",
        json={
            "template": STACK_TEMPLATE,
            "lineups": 3,
            "noise": 3.0,
            "temperature": 0.3,
            "min_diff": 2,
            "seed": 7,
            "max_attempts": 200,
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["requested"] == 3
    assert 1 <= body["count"] <= 2
    assert body["count"] == len(body["lineups"])
    assert body["message"]
    assert body["stop_reason"] in {"diversity_exhausted", "no_feasible_lineup"}
    signatures = {tuple(sorted(p["player_id"] for p in lineup["players"])) for lineup in body["lineups"]}
    assert len(signatures) == body["count"]
    for lineup in body["lineups"]:
        teams = {player["team"] for player in lineup["players"]}
        assert len(teams) == 1
    assert body["player_usage"]
    assert all(0 < usage["exposure"] <= 1 for usage in body["player_usage"])


@pytest.mark.anyio
async def test_optimize_reports_infeasible_request(client: AsyncClient):
    await client.post("/admin/fetch-players", headers={"x-admin-token": TOKEN})
    resp = await client.post("/optimize", json={"lineups": 1, "salary_cap": 1000, "seed": 1})
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 0
    assert body["lineups"] == []
    assert body["stop_reason"] == "no_feasible_lineup"
    assert body["message"]
    assert body["failures"]


@pytest.mark.anyio
async def test_optimize_rejects_unknown_template(client: AsyncClient):
    await _upload(client)
    resp = await client.post("/optimize", json={"site": "XX", "sport": "CURLING"})
    assert resp.status_code == 400

    resp = await client.post("/optimize", json={"template": {"slots": []}})
    assert resp.status_code == 400

    bad_team_cap = dict(STACK_TEMPLATE, team_max_players=None)
    resp = await client.post("/optimize", json={"template": bad_team_cap})
    assert resp.status_code == 400

    bad_stack = dict(STACK_TEMPLATE, stack_rule={"anchor_position": "QB", "min_companions": None})
    resp = await client.post("/optimize", json={"template": bad_stack})
    assert resp.status_code == 400
