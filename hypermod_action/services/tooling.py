"""Toolchain bootstrap and formatting of changed files."""

import asyncio
from pathlib import Path

from hypermod_action.core.exceptions import ToolingError
from hypermod_action.utils.logging import get_logger

FORMATTABLE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")

GLOBAL_PACKAGES = ("@hypermod/cli", "@antfu/ni")


def formattable(paths: list[str]) -> list[str]:
    """Changed paths the source formatter should rewrite."""
    return [path for path in paths if path.endswith(FORMATTABLE_SUFFIXES)]


class Tooling:
    """Installs the CLIs the planned commands rely on and formats output."""

    def __init__(self, cwd: Path):
        self.cwd = cwd
        self.logger = get_logger("tooling")

    def write_netrc(self, path: Path, token: str) -> None:
        """Let git authenticate pushes to github.com with ``token``.

        Raises:
            ToolingError: If the file cannot be written
        """
        try:
            path.write_text(
                f"machine github.com\nlogin github-actions[bot]\npassword {token}\n",
                encoding="utf-8",
            )
            path.chmod(0o600)
        except OSError as e:
            raise ToolingError("write .netrc", 1, str(e)) from e

    async def bootstrap(self) -> None:
        """Install global CLIs and the project's dependencies.

        Raises:
            ToolingError: If any install step fails
        """
        for package in GLOBAL_PACKAGES:
            self.logger.info("tooling.installing_global", package=package)
            await self._checked(f"npm install -g {package}", ["npm", "install", "-g", package])

        self.logger.info("tooling.installing_dependencies")
        await self._checked("ni --frozen", ["ni", "--frozen"])

    async def format_files(self, paths: list[str]) -> bool:
        """Run prettier over changed JS/TS files. Failures are logged only."""
        targets = formattable(paths)
        if not targets:
            return True

        exit_code, stderr = await self._run(["npx", "prettier", "--write", *targets])
        if exit_code != 0:
            self.logger.warning(
                "tooling.format_failed", exit_code=exit_code, stderr=stderr[:500]
            )
            return False

        self.logger.info("tooling.formatted", files=len(targets))
        return True

    async def _checked(self, step: str, argv: list[str]) -> None:
        exit_code, stderr = await self._run(argv)
        if exit_code != 0:
            raise ToolingError(step, exit_code, stderr)

    async def _run(self, argv: list[str]) -> tuple[int, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(self.cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return 127, str(e)

        _, stderr = await process.communicate()
        return process.returncode or 0, stderr.decode(errors="replace") if stderr else ""
