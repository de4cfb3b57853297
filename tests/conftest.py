"""Pytest configuration and fixtures."""

import shutil
import subprocess
from pathlib import Path

import pytest

from hypermod_action.config import Settings
from hypermod_action.models.deployment import Deployment
from hypermod_action.models.reconciliation import PullRequest


def make_settings(workspace: Path, **overrides) -> Settings:
    """Settings for a test run, independent of the runner environment."""
    values = {
        "github_token": "test-token",
        "deployment_id": "dep-1",
        "deployment_key": "key-1",
        "github_repository": "acme/widgets",
        "github_ref": "refs/heads/main",
        "github_sha": "abc123",
        "github_output": None,
        "workspace": workspace,
        "install_tooling": False,
        "format_changes": False,
        "write_netrc": False,
    }
    values.update(overrides)
    return Settings(_env_file=None).model_copy(update=values)


class FakeGit:
    """In-memory git collaborator that records every call."""

    def __init__(self, status: str = ""):
        self.status_output = status
        self.calls: list[tuple] = []
        self.branches: set[str] = {"main"}
        self.current_branch = "main"

    async def setup_user(self) -> None:
        self.calls.append(("setup_user",))

    async def switch_to_maybe_existing_branch(self, branch: str) -> None:
        self.calls.append(("switch", branch))
        self.branches.add(branch)
        self.current_branch = branch

    async def reset_hard(self, ref: str) -> None:
        self.calls.append(("reset_hard", ref))

    async def commit_all(self, message: str) -> None:
        self.calls.append(("commit_all", message))
        self.status_output = ""

    async def push(self, branch: str, force: bool = False) -> None:
        self.calls.append(("push", branch, force))

    async def status(self) -> str:
        self.calls.append(("status",))
        return self.status_output

    @property
    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeGitHub:
    """In-memory pull request service that enforces nothing but records state."""

    def __init__(self):
        self.pull_requests: dict[int, dict] = {}
        self.calls: list[tuple] = []
        self._next_number = 1

    async def search_open_pull_request(self, head: str, base: str) -> PullRequest | None:
        self.calls.append(("search", head, base))
        for number, pr in self.pull_requests.items():
            if pr["state"] == "open" and pr["head"] == head and pr["base"] == base:
                return PullRequest(number=number, title=pr["title"])
        return None

    async def create_pull_request(self, base: str, head: str, title: str, body: str) -> int:
        self.calls.append(("create", base, head, title, body))
        number = self._next_number
        self._next_number += 1
        self.pull_requests[number] = {
            "base": base,
            "head": head,
            "title": title,
            "body": body,
            "state": "open",
        }
        return number

    async def update_pull_request(self, number: int, title: str, body: str) -> None:
        self.calls.append(("update", number, title, body))
        self.pull_requests[number].update(title=title, body=body)

    def open_pull_requests(self) -> list[dict]:
        return [pr for pr in self.pull_requests.values() if pr["state"] == "open"]


class FakeSource:
    """Deployment source serving a fixed deployment."""

    def __init__(self, deployment: Deployment):
        self.deployment = deployment
        self.reported: list[int] = []

    async def fetch_deployment(self) -> Deployment:
        return self.deployment

    async def report_result(self, pull_request_number: int) -> bool:
        self.reported.append(pull_request_number)
        return True


class FakeTooling:
    """Tooling that installs nothing."""

    def __init__(self):
        self.bootstrapped = False
        self.formatted: list[list[str]] = []

    def write_netrc(self, path: Path, token: str) -> None:
        pass

    async def bootstrap(self) -> None:
        self.bootstrapped = True

    async def format_files(self, paths: list[str]) -> bool:
        self.formatted.append(paths)
        return True


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty workspace directory."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def settings(workspace: Path) -> Settings:
    return make_settings(workspace)


@pytest.fixture
def sample_deployment_payload() -> dict:
    """Deployment payload as served by the deployment source."""
    return {
        "id": "dep-1",
        "title": "Upgrade lodash",
        "description": "Bumps lodash and rewrites imports",
        "transforms": [
            {
                "deploymentId": "dep-1",
                "type": "ACTION",
                "actionId": "act-1",
                "action": {"name": "install-dependency"},
                "arguments": [
                    {"key": "dependency-name", "value": "lodash"},
                    {"key": "version", "value": "4.17.21"},
                ],
            },
            {
                "deploymentId": "dep-1",
                "type": "TRANSFORM",
                "transformId": "tr-1",
                "transform": {
                    "id": "tr-1",
                    "parser": "babel",
                    "sources": [
                        {"id": "s1", "name": "src/transform.ts", "code": "export default () => {};"},
                        {"id": "s2", "name": "src/utils.ts", "code": "export const x = 1;"},
                    ],
                },
                "arguments": [],
            },
        ],
    }


@pytest.fixture
def sample_deployment(sample_deployment_payload: dict) -> Deployment:
    return Deployment.model_validate(sample_deployment_payload)


def _git(cwd: Path, *args: str) -> str:
    p = subprocess.run(
        ["git", "-c", "user.name=test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        text=True,
        check=True,
        capture_output=True,
    )
    return p.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A repository on ``main`` with one commit and a bare ``origin``."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    remote = tmp_path / "remote.git"
    repo = tmp_path / "repo"
    repo.mkdir()

    subprocess.run(["git", "init", "--bare", str(remote)], check=True, capture_output=True)
    _git(repo, "init")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    (repo / "README.md").write_text("# widgets\n")
    _git(repo, "add", "-A")
    _git(repo, "commit", "-m", "initial")
    _git(repo, "remote", "add", "origin", str(remote))
    _git(repo, "push", "origin", "main")
    return repo


@pytest.fixture
def git():
    """Run a git command in a directory and return its stdout."""
    return _git


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def fake_tooling() -> FakeTooling:
    return FakeTooling()


@pytest.fixture
def fake_source(sample_deployment: Deployment) -> FakeSource:
    return FakeSource(sample_deployment)


@pytest.fixture
def settings_factory():
    """Build settings for an arbitrary workspace."""
    return make_settings
