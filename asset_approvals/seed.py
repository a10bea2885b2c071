"""Seed script for development data.

Run against a development API (which loads the demo users on startup):
    python -m asset_approvals.seed
"""

from __future__ import annotations

import asyncio
import os
import sys

import httpx

BASE_URL = os.environ.get("SEED_BASE_URL", "http://localhost:8000")

ADMIN_HEADERS = {"X-User-Id": "demo_admin"}
SUPERVISOR_HEADERS = {"X-User-Id": "demo_supervisor"}
EMPLOYEE_HEADERS = {"X-User-Id": "demo_employee"}


async def _safe_post(
    client: httpx.AsyncClient,
    url: str,
    json: dict | None,
    label: str,
    headers: dict[str, str],
) -> dict | None:
    """POST and report; 409 means the workflow already moved past this step."""
    resp = await client.post(url, json=json, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already decided)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_asset_types(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed the default catalogue and return asset type IDs by name."""
    print("\n--- Seeding asset types ---")
    await _safe_post(client, f"{BASE_URL}/asset-types/seed", None, "Default asset types", ADMIN_HEADERS)
    resp = await client.get(f"{BASE_URL}/asset-types", headers=ADMIN_HEADERS)
    resp.raise_for_status()
    return {item["name"]: item["id"] for item in resp.json()["items"]}


async def seed_requests(client: httpx.AsyncClient, asset_type_ids: dict[str, str]) -> None:
    """Seed one request in each interesting workflow state."""
    print("\n--- Seeding requests ---")

    gate_pass_id = asset_type_ids.get("Gate Pass")
    if gate_pass_id:
        result = await _safe_post(
            client,
            f"{BASE_URL}/requests",
            {
                "asset_type_id": gate_pass_id,
                "form_data": {
                    "visitorName": "Jordan Lee",
                    "company": "Acme Contractors",
                    "purpose": "HVAC maintenance",
                    "validFrom": "2026-11-02",
                    "validUntil": "2026-11-03",
                    "accessAreas": "General Office",
                },
            },
            "Request: Gate Pass (approved by supervisor)",
            EMPLOYEE_HEADERS,
        )
        if result:
            await _safe_post(
                client,
                f"{BASE_URL}/requests/{result['id']}/approve",
                {"comment": "Escort required on the second floor"},
                "Approve Gate Pass",
                SUPERVISOR_HEADERS,
            )

    license_id = asset_type_ids.get("Software License")
    if license_id:
        result = await _safe_post(
            client,
            f"{BASE_URL}/requests",
            {
                "asset_type_id": license_id,
                "form_data": {
                    "softwareName": "JetBrains All Products",
                    "licenseType": "Single User",
                    "seats": 1,
                    "justification": "Primary IDE for backend work",
                    "duration": "Annual",
                },
            },
            "Request: Software License (awaiting admin)",
            EMPLOYEE_HEADERS,
        )
        if result:
            await _safe_post(
                client,
                f"{BASE_URL}/requests/{result['id']}/approve",
                None,
                "Approve Software License at supervisor level",
                SUPERVISOR_HEADERS,
            )

    hardware_id = asset_type_ids.get("Hardware Asset")
    if hardware_id:
        result = await _safe_post(
            client,
            f"{BASE_URL}/requests",
            {
                "asset_type_id": hardware_id,
                "form_data": {
                    "assetCategory": "Monitor",
                    "specifications": "27 inch 4K",
                    "justification": "Second screen",
                    "urgency": "Low",
                },
            },
            "Request: Hardware Asset (denied)",
            EMPLOYEE_HEADERS,
        )
        if result:
            await _safe_post(
                client,
                f"{BASE_URL}/requests/{result['id']}/deny",
                {"comment": "Insufficient justification"},
                "Deny Hardware Asset",
                SUPERVISOR_HEADERS,
            )


async def main() -> None:
    print("=" * 60)
    print("  Asset Approvals - Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            print("Make sure the API is running in the development environment")
            sys.exit(1)

        asset_type_ids = await seed_asset_types(client)
        await seed_requests(client, asset_type_ids)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
