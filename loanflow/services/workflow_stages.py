"""Approval stages, statuses and the transitions between them.

Stage order::

    field_officer -> manager -> director -> chairperson -> ceo
                                                           |
             any stage rejects -> rejected                 +-> approved

The field officer stage is approved when the workflow is created; the first
stage awaiting a human decision is ``manager``.
"""

from __future__ import annotations

from enum import Enum


class Stage(str, Enum):
    FIELD_OFFICER = "field_officer"
    MANAGER = "manager"
    DIRECTOR = "director"
    CHAIRPERSON = "chairperson"
    CEO = "ceo"


class Decision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class FinalResult(str, Enum):
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"


class ApplicationStatus(str, Enum):
    SUBMITTED = "submitted"
    PENDING_MANAGER = "pending_manager"
    PENDING_DIRECTOR = "pending_director"
    PENDING_CHAIRPERSON = "pending_chairperson"
    PENDING_CEO = "pending_ceo"
    APPROVED = "approved"
    REJECTED = "rejected"


class WorkflowOutcome(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


STAGE_ORDER: tuple[Stage, ...] = (
    Stage.FIELD_OFFICER,
    Stage.MANAGER,
    Stage.DIRECTOR,
    Stage.CHAIRPERSON,
    Stage.CEO,
)

# The stage a freshly created workflow waits on.
INITIAL_STAGE = Stage.MANAGER

TERMINAL_STATUSES: frozenset[ApplicationStatus] = frozenset(
    {ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}
)

STAGE_DISPLAY_NAMES: dict[Stage, str] = {
    Stage.FIELD_OFFICER: "Field Officer Review",
    Stage.MANAGER: "Manager Review",
    Stage.DIRECTOR: "Director Risk Assessment",
    Stage.CHAIRPERSON: "Chairperson Review",
    Stage.CEO: "CEO Final Approval",
}


def next_stage(stage: Stage) -> Stage | None:
    """Return the stage after ``stage``, or None once ``ceo`` has acted."""

    idx = STAGE_ORDER.index(stage)
    if idx == len(STAGE_ORDER) - 1:
        return None
    return STAGE_ORDER[idx + 1]


def pending_status(stage: Stage) -> ApplicationStatus:
    return ApplicationStatus(f"pending_{stage.value}")


def is_terminal_status(status: str) -> bool:
    return status in {s.value for s in TERMINAL_STATUSES}


def role_can_act(role: str | None, stage: Stage) -> bool:
    """Flat role check: the role name must equal the stage name exactly.

    There is no hierarchy; a director cannot act at the manager stage.
    """

    return bool(role) and role == stage.value
