"""Reconciliation and run outcome models."""

from enum import Enum

from pydantic import BaseModel

from hypermod_action.models.execution import ExecutionReport


class ReconcilePhase(str, Enum):
    """States of the branch/pull request reconciliation."""

    PREPARING_BRANCH = "preparing_branch"
    COMMITTING = "committing"
    SEARCHING_EXISTING_PR = "searching_existing_pr"
    CREATING = "creating"
    UPDATING = "updating"
    REPORTED = "reported"


class PullRequest(BaseModel):
    """An open pull request as returned by the search API."""

    number: int
    title: str = ""
    state: str = "open"
    html_url: str = ""


class ReconciliationState(BaseModel):
    """Per-run reconciliation state. Never persisted between runs."""

    branch_name: str
    base_branch: str
    head_sha: str
    phase: ReconcilePhase = ReconcilePhase.PREPARING_BRANCH
    existing_pr: PullRequest | None = None
    pull_request_number: int | None = None

    def advance(self, phase: ReconcilePhase) -> None:
        self.phase = phase


class RunStatus(str, Enum):
    """Terminal status of a run."""

    PULL_REQUEST = "pull_request"
    NO_CHANGES = "no_changes"
    FAILED = "failed"


class RunOutcome(BaseModel):
    """Observable result of one engine run."""

    status: RunStatus
    pull_request_number: int | None = None
    error: str | None = None
    execution: ExecutionReport | None = None

    @property
    def succeeded(self) -> bool:
        return self.status != RunStatus.FAILED
