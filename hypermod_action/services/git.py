"""Git operations for the action.

Every method maps to one (or, for the fallback in
``switch_to_maybe_existing_branch``, two) ``git`` invocations in the
workspace, so callers can reason about side effects. Invocations go through
``_git``, which raises ``GitCommandError`` on a non-zero exit.
"""

import asyncio
from pathlib import Path

from hypermod_action.core.exceptions import GitCommandError
from hypermod_action.utils.logging import get_logger

BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "github-actions[bot]@users.noreply.github.com"


def parse_porcelain(status: str) -> list[str]:
    """Paths listed in ``git status --porcelain`` output.

    Renames (``R  old -> new``) report the new path.
    """
    paths: list[str] = []
    for line in status.splitlines():
        if len(line) < 4:
            continue
        path = line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        paths.append(path.strip('"'))
    return paths


class GitClient:
    """Runs git commands against the workspace repository."""

    def __init__(self, cwd: Path, remote: str = "origin"):
        self.cwd = cwd
        self.remote = remote
        self.logger = get_logger("git")

    async def setup_user(self) -> None:
        await self._git(["config", "user.name", BOT_NAME])
        await self._git(["config", "user.email", BOT_EMAIL])

    async def switch_to_maybe_existing_branch(self, branch: str) -> None:
        """Check out ``branch``, creating it from HEAD when it does not exist."""
        exit_code, _, _ = await self._run(["checkout", branch])
        if exit_code != 0:
            self.logger.info("git.branch.creating", branch=branch)
            await self._git(["checkout", "-b", branch])

    async def reset_hard(self, ref: str) -> None:
        # Destructive: discards every uncommitted change in the workspace.
        await self._git(["reset", "--hard", ref])

    async def commit_all(self, message: str) -> None:
        await self._git(["add", "-A"])
        await self._git(["commit", "-m", message])

    async def push(self, branch: str, force: bool = False) -> None:
        args = ["push", self.remote, f"HEAD:{branch}"]
        if force:
            args.append("--force")
        await self._git(args)

    async def status(self) -> str:
        """Return ``git status --porcelain``; empty means a clean tree."""
        return await self._git(["status", "--porcelain"])

    async def changed_files(self) -> list[str]:
        return parse_porcelain(await self.status())

    async def _git(self, args: list[str]) -> str:
        exit_code, stdout, stderr = await self._run(args)
        if exit_code != 0:
            raise GitCommandError(args, exit_code, stderr)
        return stdout

    async def _run(self, args: list[str]) -> tuple[int, str, str]:
        self.logger.debug("git.command", args=args)
        try:
            process = await asyncio.create_subprocess_exec(
                "git",
                *args,
                cwd=str(self.cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            # git missing from PATH or an unusable workspace
            raise GitCommandError(args, 127, str(e)) from e
        stdout, stderr = await process.communicate()
        return (
            process.returncode or 0,
            stdout.decode(errors="replace") if stdout else "",
            stderr.decode(errors="replace") if stderr else "",
        )
