"""Unit tests for the git client, against a real temporary repository."""

from pathlib import Path

import pytest

from hypermod_action.core.exceptions import GitCommandError
from hypermod_action.services.git import BOT_EMAIL, BOT_NAME, GitClient


class TestGitClient:
    """Tests for GitClient."""

    @pytest.fixture
    async def client(self, git_repo: Path) -> GitClient:
        client = GitClient(git_repo)
        await client.setup_user()
        return client

    @pytest.mark.asyncio
    async def test_setup_user(self, client: GitClient, git_repo: Path, git):
        assert git(git_repo, "config", "--local", "user.name") == BOT_NAME
        assert git(git_repo, "config", "--local", "user.email") == BOT_EMAIL

    @pytest.mark.asyncio
    async def test_switch_creates_missing_branch(self, client: GitClient, git_repo: Path, git):
        """Test a missing branch is created from the current position."""
        head = git(git_repo, "rev-parse", "HEAD")

        await client.switch_to_maybe_existing_branch("hypermod-transform/dep-1")

        assert git(git_repo, "rev-parse", "--abbrev-ref", "HEAD") == "hypermod-transform/dep-1"
        assert git(git_repo, "rev-parse", "HEAD") == head

    @pytest.mark.asyncio
    async def test_switch_to_existing_branch(self, client: GitClient, git_repo: Path, git):
        """Test an existing branch is checked out rather than recreated."""
        git(git_repo, "branch", "feature")
        (git_repo / "extra.txt").write_text("x")
        git(git_repo, "add", "-A")
        git(git_repo, "commit", "-m", "extra")
        main_head = git(git_repo, "rev-parse", "HEAD")

        await client.switch_to_maybe_existing_branch("feature")

        assert git(git_repo, "rev-parse", "--abbrev-ref", "HEAD") == "feature"
        assert git(git_repo, "rev-parse", "HEAD") != main_head

    @pytest.mark.asyncio
    async def test_reset_hard_discards_changes(self, client: GitClient, git_repo: Path, git):
        initial = git(git_repo, "rev-parse", "HEAD")
        (git_repo / "README.md").write_text("changed\n")
        git(git_repo, "commit", "-am", "change")

        await client.reset_hard(initial)

        assert git(git_repo, "rev-parse", "HEAD") == initial
        assert (git_repo / "README.md").read_text() == "# widgets\n"

    @pytest.mark.asyncio
    async def test_status_and_commit_all(self, client: GitClient, git_repo: Path, git):
        """Test status reports changes and commit_all stages everything."""
        assert await client.status() == ""

        (git_repo / "README.md").write_text("updated\n")
        (git_repo / "src").mkdir()
        (git_repo / "src" / "new.ts").write_text("export {};\n")

        assert sorted(await client.changed_files()) == ["README.md", "src/new.ts"]

        await client.commit_all("@hypermod Test")

        assert await client.status() == ""
        assert git(git_repo, "log", "-1", "--format=%s") == "@hypermod Test"

    @pytest.mark.asyncio
    async def test_push_force(self, client: GitClient, git_repo: Path, git):
        """Test force push overwrites diverged remote history."""
        await client.switch_to_maybe_existing_branch("hypermod-transform/dep-1")
        (git_repo / "a.txt").write_text("a")
        await client.commit_all("first")
        await client.push("hypermod-transform/dep-1", force=True)

        await client.reset_hard("main")
        (git_repo / "b.txt").write_text("b")
        await client.commit_all("second")
        await client.push("hypermod-transform/dep-1", force=True)

        remote_head = git(git_repo, "ls-remote", "origin", "refs/heads/hypermod-transform/dep-1")
        assert remote_head.split()[0] == git(git_repo, "rev-parse", "HEAD")

    @pytest.mark.asyncio
    async def test_failure_raises(self, client: GitClient):
        """Test a failing git command raises GitCommandError with stderr."""
        with pytest.raises(GitCommandError) as exc_info:
            await client.reset_hard("no-such-ref")

        assert exc_info.value.exit_code != 0
        assert exc_info.value.stderr


@pytest.mark.asyncio
async def test_unusable_workspace_raises_git_error(tmp_path: Path):
    """Test a spawn failure surfaces as GitCommandError, not OSError."""
    client = GitClient(tmp_path / "does-not-exist")

    with pytest.raises(GitCommandError) as exc_info:
        await client.status()

    assert exc_info.value.exit_code == 127
    assert exc_info.value.git_args == ["status", "--porcelain"]
