"""Lightweight REST client for the lineupforge API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the lineupforge REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("players", type=Path, nargs="?", help="Players CSV to upload before optimizing")
    parser.add_argument("--token", default="", help="Admin token for upload endpoints")
    parser.add_argument("--sample", action="store_true", help="Load the built-in sample pool instead of a CSV")
    parser.add_argument("--site", default="DK", help="Site key")
    parser.add_argument("--sport", default="NFL", help="Sport key")
    parser.add_argument("--lineups", type=int, default=1, help="Number of lineups to request")
    parser.add_argument("--min-diff", type=int, default=2, help="Minimum differing players between lineups")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--list-templates", action="store_true", help="List built-in templates and exit")
    args = parser.parse_args()

    headers = {"x-admin-token": args.token} if args.token else {}
    with httpx.Client(base_url=args.base_url, headers=headers) as client:
        if args.list_templates:
            resp = client.get("/templates")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.sample:
            resp = client.post("/admin/fetch-players")
        elif args.players is not None:
            files = {"file": (args.players.name, args.players.read_bytes(), "text/csv")}
            resp = client.post("/admin/upload-players", files=files, data={"site": args.site, "sport": args.sport})
        else:
            resp = None
        if resp is not None:
            if resp.status_code == 401:
                raise SystemExit("admin token rejected")
            resp.raise_for_status()
            print("Upload:", json.dumps(resp.json(), indent=2))

        request = {
            "site": args.site,
            "sport": args.sport,
            "lineups": args.lineups,
            "min_diff": args.min_diff,
            "seed": args.seed,
        }
        resp = client.post("/optimize", json=request)
        if resp.status_code == 400:
            raise SystemExit(resp.json().get("detail", "request rejected"))
        resp.raise_for_status()
        print(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    main()
