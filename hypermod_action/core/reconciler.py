"""Branch and pull request reconciliation.

Converges the deterministic deployment branch and its pull request onto the
result of the current run:

1. preparing_branch - switch to (or create) ``hypermod-transform/<id>`` and
   hard reset it to the triggering commit. Branch content is recomputed on
   every run, never accumulated.
2. committing - commit the whole working tree.
3. searching_existing_pr - search for an open pull request from the branch
   into the triggering branch, concurrently with the force push.
4. creating / updating - create a pull request when none is open, otherwise
   update the open one in place. Creation is never attempted while one is
   open, so repeated runs converge on a single pull request.
5. reported - the pull request number is known.
"""

import asyncio
from collections.abc import Awaitable
from typing import Protocol, TypeVar

import httpx

from hypermod_action.config import BRANCH_PREFIX
from hypermod_action.core.exceptions import HypermodError, ReconciliationError
from hypermod_action.models.deployment import Deployment
from hypermod_action.models.reconciliation import (
    PullRequest,
    ReconcilePhase,
    ReconciliationState,
)
from hypermod_action.utils.logging import get_logger

T = TypeVar("T")


class BranchStore(Protocol):
    async def switch_to_maybe_existing_branch(self, branch: str) -> None: ...

    async def reset_hard(self, ref: str) -> None: ...

    async def commit_all(self, message: str) -> None: ...

    async def push(self, branch: str, force: bool = False) -> None: ...


class PullRequestService(Protocol):
    async def search_open_pull_request(self, head: str, base: str) -> PullRequest | None: ...

    async def create_pull_request(self, base: str, head: str, title: str, body: str) -> int: ...

    async def update_pull_request(self, number: int, title: str, body: str) -> None: ...


def branch_name_for(deployment_id: str) -> str:
    return f"{BRANCH_PREFIX}/{deployment_id}"


def commit_message_for(deployment: Deployment) -> str:
    return f"@hypermod {deployment.title}"


class Reconciler:
    """Runs the reconciliation state machine for one deployment."""

    def __init__(
        self,
        git: BranchStore,
        github: PullRequestService,
        deployment_id: str,
        base_branch: str,
        head_sha: str,
    ):
        self.git = git
        self.github = github
        self.state = ReconciliationState(
            branch_name=branch_name_for(deployment_id),
            base_branch=base_branch,
            head_sha=head_sha,
        )
        self.logger = get_logger("reconciler")

    async def prepare_branch(self) -> None:
        """Put the deployment branch at exactly the triggering commit.

        Must run before any command touches the tree: the hard reset
        discards uncommitted changes.
        """
        self.state.advance(ReconcilePhase.PREPARING_BRANCH)
        self.logger.info(
            "reconciler.preparing_branch",
            branch=self.state.branch_name,
            sha=self.state.head_sha,
        )
        await self._guarded(self.git.switch_to_maybe_existing_branch(self.state.branch_name))
        await self._guarded(self.git.reset_hard(self.state.head_sha))

    async def reconcile(self, deployment: Deployment) -> ReconciliationState:
        """Commit, push and create or update the pull request.

        Returns:
            The final state, with ``pull_request_number`` set

        Raises:
            ReconciliationError: If git or the pull request service fails
        """
        state = self.state

        state.advance(ReconcilePhase.COMMITTING)
        self.logger.info("reconciler.committing", branch=state.branch_name)
        await self._guarded(self.git.commit_all(commit_message_for(deployment)))

        state.advance(ReconcilePhase.SEARCHING_EXISTING_PR)
        search = asyncio.create_task(
            self.github.search_open_pull_request(state.branch_name, state.base_branch)
        )
        try:
            await self._guarded(self.git.push(state.branch_name, force=True))
        except BaseException:
            search.cancel()
            raise
        state.existing_pr = await self._guarded(search)

        if state.existing_pr is None:
            state.advance(ReconcilePhase.CREATING)
            self.logger.info(
                "reconciler.creating_pull_request",
                head=state.branch_name,
                base=state.base_branch,
            )
            state.pull_request_number = await self._guarded(
                self.github.create_pull_request(
                    base=state.base_branch,
                    head=state.branch_name,
                    title=deployment.title,
                    body=deployment.description,
                )
            )
        else:
            state.advance(ReconcilePhase.UPDATING)
            self.logger.info(
                "reconciler.updating_pull_request",
                number=state.existing_pr.number,
            )
            await self._guarded(
                self.github.update_pull_request(
                    state.existing_pr.number,
                    title=deployment.title,
                    body=deployment.description,
                )
            )
            state.pull_request_number = state.existing_pr.number

        state.advance(ReconcilePhase.REPORTED)
        self.logger.info(
            "reconciler.reported", pull_request_number=state.pull_request_number
        )
        return state

    async def _guarded(self, awaitable: Awaitable[T]) -> T:
        # Attribute git/API failures to the phase they happened in
        try:
            return await awaitable
        except ReconciliationError:
            raise
        except HypermodError as e:
            raise ReconciliationError(self.state.phase.value, e.message) from e
        except httpx.HTTPError as e:
            raise ReconciliationError(self.state.phase.value, str(e)) from e
