#!/usr/bin/env python3

"""
Smoke-test runner for a running GreenRatchet projection API.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import argparse
import asyncio
import json
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import httpx
import jwt

BASE_URL = os.getenv("GREENRATCHET_BASE_URL", "http://localhost:4322/api/v1")
ORGANIZATION = os.getenv("GREENRATCHET_SMOKE_ORGANIZATION_ID", "demo-organization")
SERVICE_TOKEN = os.getenv("GREENRATCHET_EXPECTED_SERVICE_TOKEN", "replace_with_strong_token")
VERIFY_KEY = os.getenv("GREENRATCHET_CONTEXT_VERIFY_KEY", "replace_with_strong_key")
ISSUER = os.getenv("GREENRATCHET_CONTEXT_ISSUER", "greenratchet-web")
AUDIENCE = os.getenv("GREENRATCHET_CONTEXT_AUDIENCE", "greenratchet-projections")


def _context_jwt() -> str:
    now = int(time.time())
    payload = {
        "iss": ISSUER,
        "aud": AUDIENCE,
        "iat": now,
        "exp": now + 600,
        "organization_id": ORGANIZATION,
        "user_id": "local-runner",
        "username": "local-runner",
        "role": "admin",
        "is_superuser": False,
    }
    return jwt.encode(payload, VERIFY_KEY, algorithm="HS256")


HEADERS = {
    "Content-Type": "application/json",
    "X-Service-Token": SERVICE_TOKEN,
    "Authorization": f"Bearer {_context_jwt()}",
}


@dataclass(frozen=True)
class Case:
    label: str
    method: str
    path: str
    body: Dict[str, Any] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    expect: int = 200
    section: str = ""


ORG_PATH = f"/organizations/{ORGANIZATION}"

CASES: list[Case] = [
    Case("health", "GET", "/health", section="Health"),
    Case("ready", "GET", "/ready", section="Health"),

    Case("emissions default window", "POST", "/timeline", section="Timeline",
         body={"organizationId": ORGANIZATION, "metric": "emissions"}),
    Case("water 24 + 12", "POST", "/timeline", section="Timeline",
         body={"organizationId": ORGANIZATION, "metric": "water", "historyMonths": 24, "projectionMonths": 12}),
    Case("energy via path", "GET", f"{ORG_PATH}/timeline/energy", section="Timeline",
         params={"history_months": 12, "projection_months": 6}),
    Case("dashboard", "GET", f"{ORG_PATH}/dashboard", section="Timeline"),

    Case("history too short", "POST", "/timeline", section="Validation", expect=400,
         body={"organizationId": ORGANIZATION, "metric": "emissions", "historyMonths": 1}),
    Case("negative projection", "POST", "/timeline", section="Validation", expect=400,
         body={"organizationId": ORGANIZATION, "metric": "emissions", "projectionMonths": -1}),
    Case("unknown metric", "GET", f"{ORG_PATH}/timeline/ai", section="Validation", expect=400),
    Case("foreign organization", "GET", "/organizations/someone-else/timeline/water",
         section="Validation", expect=403),
]


async def run_case(client: httpx.AsyncClient, case: Case) -> Tuple[bool, str, Any]:
    try:
        r = await client.request(case.method, case.path, json=case.body or None, params=case.params)
    except httpx.TransportError as exc:
        return False, f"transport error: {exc}", None
    try:
        body: Any = r.json()
    except ValueError:
        body = r.text
    if r.status_code == case.expect:
        return True, "", body
    return False, f"{r.status_code} {r.reason_phrase}: {body}", body


async def main() -> None:
    parser = argparse.ArgumentParser(description="Run API smoke cases")
    parser.add_argument("--section", help="only run cases from this section name")
    parser.add_argument("--label", help="only run the case with this exact label")
    args = parser.parse_args()
    selected = [
        c for c in CASES
        if (not args.section or c.section == args.section) and (not args.label or c.label == args.label)
    ]
    if not selected:
        print("no matching cases (check --section or --label)")
        sys.exit(1)

    passed = failed = 0
    current_section = ""

    async with httpx.AsyncClient(base_url=BASE_URL, headers=HEADERS, timeout=30) as client:
        for case in selected:
            if case.section != current_section:
                current_section = case.section
                print(f"\n── {current_section} {'─' * max(0, 44 - len(current_section))}")

            ok, detail, body = await run_case(client, case)
            pretty = json.dumps(body, indent=2) if isinstance(body, (dict, list)) else str(body)

            if ok:
                passed += 1
                print(f"  ✓ PASS  {case.method} {case.path} — {case.label}")
            else:
                failed += 1
                print(f"  ✗ FAIL  {case.method} {case.path} — {case.label} (expected {case.expect})")
                if detail:
                    print(f"         {detail}")
                print(f"         response:\n{pretty}")

    total = passed + failed
    print(f"\n{'━' * 43}")
    print(f"  Results: {passed} passed / {failed} failed / {total} total")
    print(f"{'━' * 43}\n")
    sys.exit(0 if failed == 0 else 1)


if __name__ == "__main__":
    asyncio.run(main())
