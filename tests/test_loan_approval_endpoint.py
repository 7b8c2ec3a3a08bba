import uuid

import pytest
from sqlalchemy.exc import OperationalError

from loanflow.config import settings
from loanflow.services.approval_workflow import ApprovalWorkflowService
from loanflow.worker.celery_app import celery_app

from tests._client import get_async_client
from tests._factories import create_application, create_approvers, create_user, load_state


def _body(loan_id, approver_id, action="approve", notes=""):
    return {"loan_id": str(loan_id), "action": action, "notes": notes, "approver_id": str(approver_id)}


@pytest.mark.anyio
async def test_manager_approval_advances_to_director():
    approvers = await create_approvers()
    app_id = await create_application()

    async with get_async_client() as client:
        r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers["manager"], notes="ok"))

    assert r.status_code == 200, r.text
    payload = r.json()
    assert payload == {
        "action": "approve",
        "isFinalDecision": False,
        "status": "pending_director",
        "currentStage": "director",
    }


@pytest.mark.anyio
async def test_ceo_approval_is_final_and_successful():
    approvers = await create_approvers()
    app_id = await create_application()

    async with get_async_client() as client:
        for role in ("manager", "director", "chairperson"):
            r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers[role]))
            assert r.status_code == 200, r.text

        r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers["ceo"]))

    assert r.status_code == 200, r.text
    payload = r.json()
    assert payload["isFinalDecision"] is True
    assert payload["finalResult"] == "SUCCESSFUL"
    assert payload["status"] == "approved"
    assert "currentStage" not in payload


@pytest.mark.anyio
async def test_rejection_is_final_and_failed():
    approvers = await create_approvers()
    app_id = await create_application()

    async with get_async_client() as client:
        r = await client.post(
            "/api/v1/loan-approval",
            json=_body(app_id, approvers["manager"], action="reject", notes="incomplete documents"),
        )

    assert r.status_code == 200, r.text
    payload = r.json()
    assert payload["action"] == "reject"
    assert payload["isFinalDecision"] is True
    assert payload["finalResult"] == "FAILED"
    assert payload["status"] == "rejected"

    _, workflow, _ = await load_state(app_id)
    assert workflow.manager_notes == "incomplete documents"


@pytest.mark.anyio
async def test_wrong_role_returns_403_envelope():
    approvers = await create_approvers()
    app_id = await create_application()

    async with get_async_client() as client:
        r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers["director"]))

    assert r.status_code == 403, r.text
    payload = r.json()
    assert payload["kind"] == "UnauthorizedStage"
    assert "manager" in payload["detail"]
    assert payload["request_id"]
    assert r.headers.get("x-request-id") == payload["request_id"]


@pytest.mark.anyio
async def test_unknown_loan_and_unknown_approver_return_404():
    approvers = await create_approvers()
    app_id = await create_application()

    async with get_async_client() as client:
        r1 = await client.post("/api/v1/loan-approval", json=_body(uuid.uuid4(), approvers["manager"]))
        r2 = await client.post("/api/v1/loan-approval", json=_body(app_id, uuid.uuid4()))

    assert r1.status_code == 404, r1.text
    assert r1.json()["kind"] == "NotFound"
    assert r2.status_code == 404, r2.text
    assert r2.json()["kind"] == "NotFound"


@pytest.mark.anyio
async def test_decision_after_terminal_returns_409():
    approvers = await create_approvers()
    app_id = await create_application()

    async with get_async_client() as client:
        r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers["manager"], action="reject"))
        assert r.status_code == 200, r.text

        r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers["manager"]))

    assert r.status_code == 409, r.text
    assert r.json()["kind"] == "InvalidTransition"


@pytest.mark.anyio
async def test_inactive_approver_returns_403():
    app_id = await create_application()
    inactive = await create_user(role="manager", is_active=False)

    async with get_async_client() as client:
        r = await client.post("/api/v1/loan-approval", json=_body(app_id, inactive))

    assert r.status_code == 403, r.text


@pytest.mark.anyio
async def test_request_validation():
    async with get_async_client() as client:
        r1 = await client.post(
            "/api/v1/loan-approval",
            json={"loan_id": str(uuid.uuid4()), "action": "escalate", "approver_id": str(uuid.uuid4())},
        )
        r2 = await client.post("/api/v1/loan-approval", json={"loan_id": "not-a-uuid", "action": "approve"})

    assert r1.status_code == 422, r1.text
    assert r1.json()["request_id"]
    assert r2.status_code == 422, r2.text


@pytest.mark.anyio
async def test_store_failure_returns_503_and_changes_nothing(monkeypatch):
    approvers = await create_approvers()
    app_id = await create_application()

    def _boom(*args, **kwargs):
        raise OperationalError("UPDATE loan_applications", {}, Exception("connection lost"))

    monkeypatch.setattr(ApprovalWorkflowService, "_write_application", _boom)

    async with get_async_client() as client:
        r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers["manager"]))

    assert r.status_code == 503, r.text
    assert r.json()["kind"] == "PersistenceError"

    app, workflow, log = await load_state(app_id)
    assert app.status == "pending_manager"
    assert workflow is None
    assert log == []


@pytest.mark.anyio
async def test_decision_queues_applicant_notification(monkeypatch):
    approvers = await create_approvers()
    officer = approvers["field_officer"]
    app_id = await create_application(created_by=officer)

    sent: list[tuple[str, dict]] = []

    def _send_task(name, args=None, kwargs=None, **options):
        sent.append((name, kwargs))

    monkeypatch.setattr(settings, "celery_enabled", True)
    monkeypatch.setattr(celery_app, "send_task", _send_task)

    async with get_async_client() as client:
        r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers["manager"]))

    assert r.status_code == 200, r.text
    assert len(sent) == 1
    name, kwargs = sent[0]
    assert name == "loanflow.notify_decision"
    assert kwargs["application_id"] == str(app_id)
    assert kwargs["recipient_id"] == str(officer)
    assert kwargs["decision"] == "approve"
    assert kwargs["stage"] == "manager"
    assert kwargs["approver_name"] == "Test Manager"
    assert kwargs["is_final"] is False


@pytest.mark.anyio
async def test_broker_outage_does_not_fail_the_decision(monkeypatch):
    approvers = await create_approvers()
    app_id = await create_application(created_by=approvers["field_officer"])

    def _send_task(*args, **kwargs):
        raise ConnectionError("broker unavailable")

    monkeypatch.setattr(settings, "celery_enabled", True)
    monkeypatch.setattr(celery_app, "send_task", _send_task)

    async with get_async_client() as client:
        r = await client.post("/api/v1/loan-approval", json=_body(app_id, approvers["manager"]))

    assert r.status_code == 200, r.text
    app, _, _ = await load_state(app_id)
    assert app.status == "pending_director"
