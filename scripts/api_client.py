"""Lightweight REST client for the dfsproj API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def build_mapping(name: str) -> dict[str, str]:
    if not name:
        return {}
    try:
        return json.loads(name)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid mapping JSON: {exc}") from exc


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the dfsproj REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("salaries", type=Path, nargs="?", help="Salary export CSV")
    parser.add_argument("--salary-mapping", default="", help="JSON mapping for salary columns")
    parser.add_argument("--threshold", type=float, default=None, help="Fuzzy match threshold")
    parser.add_argument("--flush", action="store_true", help="Persist provisional records after preview")
    parser.add_argument("--resolve", nargs="+", metavar="NAME", help="Resolve player names and exit")
    parser.add_argument("--list-registry", action="store_true", help="List registry records and exit")
    parser.add_argument("--provisional-only", action="store_true", help="Only list provisional records")
    parser.add_argument("--project", type=Path, metavar="REQUEST_JSON", help="POST a projection request and exit")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=60.0) as client:
        if args.list_registry:
            resp = client.get("/registry", params={"provisional_only": args.provisional_only})
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.resolve:
            payload: dict = {"names": args.resolve}
            if args.threshold is not None:
                payload["threshold"] = args.threshold
            resp = client.post("/resolve", json=payload)
            resp.raise_for_status()
            for entry in resp.json()["results"]:
                identity = entry["identity"]
                print(f"{entry['raw_name']} -> {identity['name']} ({identity['id']}, {entry['stage']} {entry['score']:.3f})")
            return

        if args.project:
            resp = client.post("/projections", json=json.loads(args.project.read_text(encoding="utf-8")))
            resp.raise_for_status()
            for row in resp.json()["projections"]:
                print(
                    f"{row['rank']:>3}. {row['name']:<24} {row['points']:6.2f} "
                    f"[{row['floor']:.1f}-{row['ceiling']:.1f}] conf {row['confidence']:.0f} {row['tier']}"
                )
            return

        if args.salaries is None:
            raise SystemExit("a salary CSV is required unless using --resolve/--list-registry/--project")

        data = {"flush": str(args.flush).lower()}
        if build_mapping(args.salary_mapping):
            data["salary_mapping"] = args.salary_mapping
        if args.threshold is not None:
            data["threshold"] = str(args.threshold)
        files = {"salaries": (args.salaries.name, args.salaries.read_bytes(), "text/csv")}
        resp = client.post("/preview", files=files, data=data)
        if resp.status_code == 400:
            raise SystemExit(f"preview rejected: {resp.json().get('detail')}")
        resp.raise_for_status()
        print("Preview report:", json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    main()
