#!/usr/bin/env python3
"""Smoke test for a running EGP node.

Walks the sense -> propose -> adopt chain against a live node, feeding
each step the id returned by the previous one.

Usage:
    python scripts/smoke_egp.py
    python scripts/smoke_egp.py --base-url http://localhost:3000
"""

import argparse
import json
import sys

import httpx

SENSE_BODY = {
    "issue": "water_shortage",
    "title": "The well is dry",
    "scope": "village:llajta",
    "evidence": {
        "sensor_data": "pH 9.2",
        "oral_history": "Elder says this hasn't happened in 70 years",
    },
    "urgency": "3/5",
    "tags": ["water", "climate", "indigenous_knowledge"],
}


def _proposal_body(sense_uri: str) -> dict:
    return {
        "title": "Moonlight Water Sharing",
        "in_response_to": sense_uri,
        "solution": {
            "description": "Farmers take turns at night to reduce evaporation",
            "format": "text/markdown",
        },
        "test": "Conflict drops 20% in 2mo",
        "sunset": "P6M",
        "resources": {
            "needed": ["jugs", "volunteers"],
            "offered": ["land_access", "elders_council"],
        },
    }


def _adoption_body(proposal_uri: str) -> dict:
    return {
        "proposal_uri": proposal_uri,
        "decision_process": {"type": "consent"},
        "modifications": {"sunset": "P3M", "test": "Conflict drops 10%"},
        "monitoring": {"who": ["water_council", "youth_group"], "frequency": "P1W"},
    }


def _step(client: httpx.Client, number: int, path: str, body: dict) -> str | None:
    """POST one lifecycle call and return the Location header on success."""
    print("\n" + "=" * 60)
    print(f"{number}. POST {path}")
    print("=" * 60)

    try:
        response = client.post(path, json=body)
    except httpx.HTTPError as e:
        print(f"   ❌ Request failed: {e}")
        return None

    print(f"   Status: {response.status_code}")
    print(json.dumps(response.json(), indent=2))
    if response.status_code != 201:
        print("   ❌ Expected 201")
        return None

    location = response.headers.get("location")
    print(f"   ✅ Location: {location}")
    return location


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke test a running EGP node")
    parser.add_argument(
        "--base-url",
        default="http://localhost:3000",
        help="Node base URL (default: http://localhost:3000)",
    )
    parser.add_argument(
        "--timeout", type=float, default=10.0, help="Request timeout in seconds"
    )
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        sense_uri = _step(client, 1, "/sense", SENSE_BODY)
        if sense_uri is None:
            return 1
        proposal_uri = _step(client, 2, "/propose", _proposal_body(sense_uri))
        if proposal_uri is None:
            return 1
        if _step(client, 3, "/adopt", _adoption_body(proposal_uri)) is None:
            return 1

    print("\n✅ sense -> propose -> adopt completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
