"""HTTP tests for the request endpoints: submission, transitions, listing,
stats, history and error mapping.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from asset_approvals.services.notifications import wait_for_pending_notifications

if TYPE_CHECKING:
    from httpx import AsyncClient

    from asset_approvals.services.notifications import InMemoryNotifier

ADMIN_HEADERS = {"X-User-Id": "adm1"}
SUPER_ADMIN_HEADERS = {"X-User-Id": "root"}
SUPERVISOR_HEADERS = {"X-User-Id": "sup1"}
EMPLOYEE_HEADERS = {"X-User-Id": "emp1"}
OTHER_EMPLOYEE_HEADERS = {"X-User-Id": "emp2"}

ASSET_TYPES_URL = "/asset-types"
REQUESTS_URL = "/requests"


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _create_asset_type(
    client: AsyncClient,
    approval_levels: list[str],
    name: str = "Software License",
    fields: list[dict[str, Any]] | None = None,
) -> str:
    resp = await client.post(
        ASSET_TYPES_URL,
        json={"name": name, "fields": fields or [], "approval_levels": approval_levels},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    result: str = resp.json()["id"]
    return result


async def _submit(
    client: AsyncClient,
    asset_type_id: str,
    form_data: dict[str, Any] | None = None,
    headers: dict[str, str] = EMPLOYEE_HEADERS,
) -> dict[str, Any]:
    resp = await client.post(
        REQUESTS_URL,
        json={"asset_type_id": asset_type_id, "form_data": form_data or {}},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def test_submit_request(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor", "admin"])
    data = await _submit(async_client, asset_type_id, {"softwareName": "IDE"})

    assert data["status"] == "pending"
    assert data["requester_id"] == "emp1"
    assert data["requester_name"] == "Erin Employee"
    assert data["current_approval_level"] == 0
    assert data["total_approval_levels"] == 2
    assert data["required_role"] == "supervisor"
    assert data["asset_type_name"] == "Software License"


async def test_submit_with_invalid_form_data(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(
        async_client,
        ["supervisor"],
        fields=[
            {"name": "seats", "label": "Number of Seats", "kind": "number", "required": True},
            {"name": "tier", "label": "Tier", "kind": "select", "options": ["Basic", "Pro"]},
        ],
    )
    resp = await async_client.post(
        REQUESTS_URL,
        json={"asset_type_id": asset_type_id, "form_data": {"seats": "many", "tier": "Gold"}},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "ValidationError"
    assert "Number of Seats must be a number" in body["detail"]
    assert "Tier must be one of" in body["detail"]


async def test_submit_unknown_asset_type(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        REQUESTS_URL,
        json={"asset_type_id": str(uuid.uuid4()), "form_data": {}},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFoundError"


async def test_missing_user_header_is_rejected(async_client: AsyncClient) -> None:
    resp = await async_client.get(REQUESTS_URL)
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"


async def test_unknown_user_is_forbidden(async_client: AsyncClient) -> None:
    resp = await async_client.get(REQUESTS_URL, headers={"X-User-Id": "nobody"})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Unknown or inactive user"


async def test_inactive_user_is_forbidden(async_client: AsyncClient) -> None:
    resp = await async_client.get(REQUESTS_URL, headers={"X-User-Id": "gone"})
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


async def test_approve_through_every_level(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor", "admin"])
    request_id = (await _submit(async_client, asset_type_id))["id"]

    resp = await async_client.post(f"{REQUESTS_URL}/{request_id}/approve", headers=SUPERVISOR_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {
        "request_id": request_id,
        "status": "pending",
        "current_approval_level": 1,
        "total_approval_levels": 2,
        "is_fully_approved": False,
    }

    resp = await async_client.post(
        f"{REQUESTS_URL}/{request_id}/approve",
        json={"comment": "Budget confirmed"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"
    assert resp.json()["is_fully_approved"] is True

    detail = (await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=EMPLOYEE_HEADERS)).json()
    assert detail["issued_at"] is not None
    assert detail["required_role"] is None


async def test_approve_with_insufficient_role(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["admin"])
    request_id = (await _submit(async_client, asset_type_id))["id"]

    resp = await async_client.post(f"{REQUESTS_URL}/{request_id}/approve", headers=SUPERVISOR_HEADERS)
    assert resp.status_code == 403
    assert resp.json()["error"] == "ForbiddenError"
    assert "requiring 'admin'" in resp.json()["detail"]


async def test_employee_cannot_approve(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    request_id = (await _submit(async_client, asset_type_id))["id"]

    resp = await async_client.post(f"{REQUESTS_URL}/{request_id}/approve", headers=OTHER_EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_deny_requires_comment(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    request_id = (await _submit(async_client, asset_type_id))["id"]

    resp = await async_client.post(
        f"{REQUESTS_URL}/{request_id}/deny", json={"comment": "  "}, headers=SUPERVISOR_HEADERS
    )
    assert resp.status_code == 422
    assert resp.json()["detail"] == "A comment is required to deny a request"

    detail = (await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=EMPLOYEE_HEADERS)).json()
    assert detail["status"] == "pending"


async def test_deny_with_comment(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor", "admin"])
    request_id = (await _submit(async_client, asset_type_id))["id"]

    resp = await async_client.post(
        f"{REQUESTS_URL}/{request_id}/deny",
        json={"comment": "Insufficient justification"},
        headers=SUPERVISOR_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "denied"
    assert resp.json()["current_approval_level"] == 0


async def test_action_on_terminal_request_conflicts(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    request_id = (await _submit(async_client, asset_type_id))["id"]
    await async_client.post(f"{REQUESTS_URL}/{request_id}/approve", headers=SUPERVISOR_HEADERS)

    resp = await async_client.post(f"{REQUESTS_URL}/{request_id}/approve", headers=SUPER_ADMIN_HEADERS)
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidStateError"
    assert resp.json()["detail"] == "Request is not pending"


async def test_cancel_own_request(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    request_id = (await _submit(async_client, asset_type_id))["id"]

    resp = await async_client.post(f"{REQUESTS_URL}/{request_id}/cancel", headers=OTHER_EMPLOYEE_HEADERS)
    assert resp.status_code == 403

    resp = await async_client.post(f"{REQUESTS_URL}/{request_id}/cancel", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"

    resp = await async_client.post(f"{REQUESTS_URL}/{request_id}/cancel", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 409


async def test_unknown_request_is_404(async_client: AsyncClient) -> None:
    missing = uuid.uuid4()
    resp = await async_client.get(f"{REQUESTS_URL}/{missing}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 404
    resp = await async_client.post(f"{REQUESTS_URL}/{missing}/approve", headers=SUPERVISOR_HEADERS)
    assert resp.status_code == 404


async def test_comment_too_long_is_rejected(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    request_id = (await _submit(async_client, asset_type_id))["id"]

    resp = await async_client.post(
        f"{REQUESTS_URL}/{request_id}/deny", json={"comment": "x" * 2001}, headers=SUPERVISOR_HEADERS
    )
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Comment must be at most 2000 characters"


async def test_long_comment_does_not_mask_state_or_role_errors(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["admin"])
    pending_id = (await _submit(async_client, asset_type_id))["id"]
    long_comment = {"comment": "x" * 2001}

    resp = await async_client.post(f"{REQUESTS_URL}/{pending_id}/deny", json=long_comment, headers=SUPERVISOR_HEADERS)
    assert resp.status_code == 403

    await async_client.post(f"{REQUESTS_URL}/{pending_id}/cancel", headers=EMPLOYEE_HEADERS)
    resp = await async_client.post(f"{REQUESTS_URL}/{pending_id}/deny", json=long_comment, headers=SUPERVISOR_HEADERS)
    assert resp.status_code == 409


async def test_approval_pinned_to_a_passed_level_conflicts(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor", "admin"])
    request_id = (await _submit(async_client, asset_type_id))["id"]

    resp = await async_client.post(f"{REQUESTS_URL}/{request_id}/approve", json={"level": 0}, headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["current_approval_level"] == 1

    resp = await async_client.post(
        f"{REQUESTS_URL}/{request_id}/approve", json={"level": 0}, headers=SUPER_ADMIN_HEADERS
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidStateError"

    resp = await async_client.get(f"{REQUESTS_URL}/{request_id}", headers=ADMIN_HEADERS)
    assert resp.json()["status"] == "pending"
    assert resp.json()["current_approval_level"] == 1


# ---------------------------------------------------------------------------
# Listing, stats and history
# ---------------------------------------------------------------------------


async def test_list_requests_with_filters(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    first = await _submit(async_client, asset_type_id)
    second = await _submit(async_client, asset_type_id, headers=OTHER_EMPLOYEE_HEADERS)
    await async_client.post(f"{REQUESTS_URL}/{first['id']}/cancel", headers=EMPLOYEE_HEADERS)

    resp = await async_client.get(REQUESTS_URL, headers=ADMIN_HEADERS)
    data = resp.json()
    assert data["total"] == 2
    assert [item["id"] for item in data["items"]] == [second["id"], first["id"]]

    resp = await async_client.get(REQUESTS_URL, params={"status": "pending"}, headers=ADMIN_HEADERS)
    assert [item["id"] for item in resp.json()["items"]] == [second["id"]]

    resp = await async_client.get(REQUESTS_URL, params={"requester_id": "emp1"}, headers=ADMIN_HEADERS)
    assert [item["id"] for item in resp.json()["items"]] == [first["id"]]

    resp = await async_client.get(REQUESTS_URL, params={"limit": 1}, headers=ADMIN_HEADERS)
    assert resp.json()["total"] == 2
    assert len(resp.json()["items"]) == 1


async def test_employee_lists_only_own_requests(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    own = await _submit(async_client, asset_type_id)
    await _submit(async_client, asset_type_id, headers=OTHER_EMPLOYEE_HEADERS)

    resp = await async_client.get(REQUESTS_URL, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()["items"]] == [own["id"]]

    resp = await async_client.get(REQUESTS_URL, params={"requester_id": "emp1"}, headers=EMPLOYEE_HEADERS)
    assert resp.json()["total"] == 1

    resp = await async_client.get(REQUESTS_URL, params={"requester_id": "emp2"}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403

    resp = await async_client.get(REQUESTS_URL, params={"requester_id": "emp2"}, headers=SUPERVISOR_HEADERS)
    assert resp.json()["total"] == 1


async def test_list_requests_rejects_unknown_status(async_client: AsyncClient) -> None:
    resp = await async_client.get(REQUESTS_URL, params={"status": "expired"}, headers=ADMIN_HEADERS)
    assert resp.status_code == 422


async def test_stats(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    approved = await _submit(async_client, asset_type_id)
    denied = await _submit(async_client, asset_type_id)
    cancelled = await _submit(async_client, asset_type_id)
    await _submit(async_client, asset_type_id)

    await async_client.post(f"{REQUESTS_URL}/{approved['id']}/approve", headers=SUPERVISOR_HEADERS)
    await async_client.post(
        f"{REQUESTS_URL}/{denied['id']}/deny", json={"comment": "No budget"}, headers=SUPERVISOR_HEADERS
    )
    await async_client.post(f"{REQUESTS_URL}/{cancelled['id']}/cancel", headers=EMPLOYEE_HEADERS)

    resp = await async_client.get(f"{REQUESTS_URL}/stats", headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"total": 4, "pending": 1, "approved": 1, "denied": 1, "cancelled": 1}


async def test_history(async_client: AsyncClient) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor", "admin"])
    request_id = (await _submit(async_client, asset_type_id))["id"]
    await async_client.post(
        f"{REQUESTS_URL}/{request_id}/approve", json={"comment": "ok"}, headers=SUPERVISOR_HEADERS
    )
    await async_client.post(
        f"{REQUESTS_URL}/{request_id}/deny",
        json={"comment": "insufficient justification"},
        headers=ADMIN_HEADERS,
    )

    resp = await async_client.get(f"{REQUESTS_URL}/{request_id}/history", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["request"]["status"] == "denied"
    assert data["asset_type"]["id"] == asset_type_id
    assert [(e["action"], e["level"], e["approver_id"]) for e in data["events"]] == [
        ("approved", 0, "sup1"),
        ("denied", 1, "adm1"),
    ]
    assert [t["kind"] for t in data["trail"]] == ["created", "approval", "approval", "terminal"]
    assert data["trail"][-1]["status"] == "denied"


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


async def test_transitions_notify_in_background(async_client: AsyncClient, notifier: InMemoryNotifier) -> None:
    asset_type_id = await _create_asset_type(async_client, ["supervisor"])
    request_id = (await _submit(async_client, asset_type_id))["id"]
    await async_client.post(f"{REQUESTS_URL}/{request_id}/approve", headers=SUPERVISOR_HEADERS)
    await wait_for_pending_notifications()

    events = [(n.event_type, n.recipient) for n in notifier.sent]
    assert ("approval_required", "sam@example.com") in events
    assert ("request_approved", "erin@example.com") in events
