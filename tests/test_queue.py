import pytest

from tests._client import get_async_client
from tests._factories import create_application, create_approvers


@pytest.mark.anyio
async def test_queue_lists_applications_awaiting_the_stage():
    first = await create_application(status="pending_director", client_name="First")
    second = await create_application(status="pending_director", client_name="Second")
    await create_application(status="pending_manager")
    await create_application(status="rejected")

    async with get_async_client() as client:
        r = await client.get("/api/v1/queue", params={"stage": "director"})

    assert r.status_code == 200, r.text
    payload = r.json()
    assert payload["stage"] == "director"
    assert [i["id"] for i in payload["items"]] == [str(first), str(second)]
    assert all(i["status"] == "pending_director" for i in payload["items"])


@pytest.mark.anyio
async def test_queue_follows_decisions():
    approvers = await create_approvers()
    app_id = await create_application()

    async with get_async_client() as client:
        r = await client.get("/api/v1/queue", params={"stage": "manager"})
        assert [i["id"] for i in r.json()["items"]] == [str(app_id)]

        r = await client.post(
            "/api/v1/loan-approval",
            json={"loan_id": str(app_id), "action": "approve", "notes": "", "approver_id": str(approvers["manager"])},
        )
        assert r.status_code == 200, r.text

        r_manager = await client.get("/api/v1/queue", params={"stage": "manager"})
        r_director = await client.get("/api/v1/queue", params={"stage": "director"})

    assert r_manager.json()["items"] == []
    assert [i["id"] for i in r_director.json()["items"]] == [str(app_id)]


@pytest.mark.anyio
async def test_queue_pagination():
    ids = [await create_application(status="pending_ceo") for _ in range(3)]

    async with get_async_client() as client:
        r = await client.get("/api/v1/queue", params={"stage": "ceo", "limit": 2, "offset": 1})

    assert r.status_code == 200, r.text
    assert [i["id"] for i in r.json()["items"]] == [str(i) for i in ids[1:]]


@pytest.mark.anyio
async def test_queue_rejects_unknown_stage():
    async with get_async_client() as client:
        r1 = await client.get("/api/v1/queue", params={"stage": "field_officer"})
        r2 = await client.get("/api/v1/queue", params={"stage": "board"})
        r3 = await client.get("/api/v1/queue")

    assert r1.status_code == 422
    assert r2.status_code == 422
    assert r3.status_code == 422
    assert r1.json()["request_id"]
