"""Deployment engine.

Coordinates a single run: fetch the deployment, prepare the branch, run the
planned commands, and reconcile any resulting changes into one pull request.
"""

import time

from hypermod_action.config import Settings
from hypermod_action.core.changes import ChangeDetector
from hypermod_action.core.exceptions import ConfigurationError, HypermodError
from hypermod_action.core.materializer import TransformMaterializer
from hypermod_action.core.planner import CommandPlanner
from hypermod_action.core.reconciler import Reconciler
from hypermod_action.core.runner import CommandRunner
from hypermod_action.models.deployment import Deployment
from hypermod_action.models.execution import ExecutionReport
from hypermod_action.models.reconciliation import RunOutcome, RunStatus
from hypermod_action.services.git import GitClient
from hypermod_action.services.github import GitHubClient
from hypermod_action.services.hypermod_api import HypermodAPI
from hypermod_action.services.tooling import Tooling
from hypermod_action.utils.logging import get_logger


class DeploymentEngine:
    """Runs one deployment against the workspace.

    Run phases:
    1. validate configuration and fetch the deployment
    2. bootstrap tooling
    3. prepare the deployment branch
    4. plan and execute commands (staging always cleaned up)
    5. detect changes, format them, reconcile the pull request
    6. report the pull request number back to the deployment source

    Collaborators default to the real implementations built from
    ``settings``; tests pass fakes.
    """

    def __init__(
        self,
        settings: Settings,
        git: GitClient | None = None,
        github: GitHubClient | None = None,
        source: HypermodAPI | None = None,
        tooling: Tooling | None = None,
    ):
        self.settings = settings
        self.git = git or GitClient(settings.workspace)
        self.github = github or GitHubClient(
            token=settings.github_token,
            repo=settings.github_repository,
            base_url=settings.github_api_url,
            max_retries=settings.rate_limit_retries,
            timeout=settings.http_timeout,
        )
        self.source = source or HypermodAPI(
            deployment_id=settings.deployment_id,
            deployment_key=settings.deployment_key,
            repo=settings.github_repository,
            base_url=settings.hypermod_api_url,
            timeout=settings.http_timeout,
        )
        self.tooling = tooling or Tooling(settings.workspace)
        self.materializer = TransformMaterializer(settings.staging_root)
        self.planner = CommandPlanner(self.materializer, settings.default_parser)
        self.runner = CommandRunner(settings.workspace)
        self.changes = ChangeDetector(self.git)
        self.reconciler = Reconciler(
            git=self.git,
            github=self.github,
            deployment_id=settings.deployment_id,
            base_branch=settings.base_branch,
            head_sha=settings.github_sha,
        )
        self.logger = get_logger("engine")
        # HTTP clients built here are closed by aclose(); injected ones are not
        self._owned_clients = [
            client
            for client, injected in ((self.github, github), (self.source, source))
            if injected is None
        ]

    async def __aenter__(self) -> "DeploymentEngine":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        for client in self._owned_clients:
            await client.aclose()

    async def run(self) -> RunOutcome:
        """Run the deployment end to end.

        Fatal errors (``HypermodError`` and ``OSError``) are turned into a
        failed outcome carrying one message; they are never raised to the
        caller.
        """
        start_time = time.time()
        self.logger.info(
            "engine.run.started",
            deployment_id=self.settings.deployment_id,
            repository=self.settings.github_repository,
            ref=self.settings.github_ref,
        )

        try:
            outcome = await self._run()
        except HypermodError as e:
            self.logger.error("engine.run.failed", error=e.message, details=e.details)
            outcome = RunOutcome(status=RunStatus.FAILED, error=e.message)
        except OSError as e:
            # Workspace or process-level failures outside the planned commands
            self.logger.error("engine.run.failed", error=str(e), exc_info=True)
            outcome = RunOutcome(status=RunStatus.FAILED, error=f"I/O error: {e}")

        self.logger.info(
            "engine.run.completed",
            status=outcome.status.value,
            pull_request_number=outcome.pull_request_number,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return outcome

    async def _run(self) -> RunOutcome:
        missing = self.settings.missing_required()
        if missing:
            raise ConfigurationError(missing)

        deployment = await self.source.fetch_deployment()

        await self._bootstrap()
        await self.reconciler.prepare_branch()

        report = await self.execute(deployment)

        if not await self.changes.has_changes():
            self.logger.warning("engine.no_changes", deployment_id=deployment.id)
            return self._finish(RunStatus.NO_CHANGES, report)

        if self.settings.format_changes:
            await self.tooling.format_files(await self.changes.changed_files())

        state = await self.reconciler.reconcile(deployment)
        await self.source.report_result(state.pull_request_number)

        return self._finish(RunStatus.PULL_REQUEST, report, state.pull_request_number)

    async def execute(self, deployment: Deployment) -> ExecutionReport:
        """Plan and run the deployment's commands.

        The staging root is removed whether planning or execution succeeds,
        fails, or raises.
        """
        try:
            commands = self.planner.plan(deployment)
            return await self.runner.run_all(commands)
        finally:
            self.materializer.cleanup()

    async def _bootstrap(self) -> None:
        if self.settings.write_netrc:
            self.tooling.write_netrc(self.settings.netrc_path, self.settings.github_token)
        await self.git.setup_user()
        if self.settings.install_tooling:
            await self.tooling.bootstrap()

    def _finish(
        self,
        status: RunStatus,
        report: ExecutionReport,
        pull_request_number: int | None = None,
    ) -> RunOutcome:
        # Failed commands fail the run even when a pull request was reconciled
        if report.has_failures:
            self.logger.error(
                "engine.commands_failed",
                failures=[result.command for result in report.failures],
                last_error=report.last_error,
            )
            return RunOutcome(
                status=RunStatus.FAILED,
                pull_request_number=pull_request_number,
                error=f"{len(report.failures)} command(s) failed: {report.last_error}",
                execution=report,
            )

        return RunOutcome(
            status=status,
            pull_request_number=pull_request_number,
            execution=report,
        )
