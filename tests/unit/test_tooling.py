"""Unit tests for tooling bootstrap and formatting."""

import stat
from pathlib import Path

import pytest

from hypermod_action.core.exceptions import ToolingError
from hypermod_action.services.tooling import Tooling, formattable


class TestTooling:
    """Tests for Tooling."""

    @pytest.fixture
    def tooling(self, tmp_path: Path) -> Tooling:
        return Tooling(tmp_path)

    @pytest.fixture
    def calls(self, tooling: Tooling, monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
        recorded: list[list[str]] = []

        async def fake_run(argv: list[str]) -> tuple[int, str]:
            recorded.append(argv)
            return 0, ""

        monkeypatch.setattr(tooling, "_run", fake_run)
        return recorded

    @pytest.mark.asyncio
    async def test_bootstrap_installs_tools_then_dependencies(self, tooling: Tooling, calls):
        await tooling.bootstrap()

        assert calls == [
            ["npm", "install", "-g", "@hypermod/cli"],
            ["npm", "install", "-g", "@antfu/ni"],
            ["ni", "--frozen"],
        ]

    @pytest.mark.asyncio
    async def test_bootstrap_failure_is_fatal(
        self, tooling: Tooling, monkeypatch: pytest.MonkeyPatch
    ):
        """Test a failed install raises ToolingError with its stderr."""

        async def failing_run(argv: list[str]) -> tuple[int, str]:
            return (1, "ERR_PNPM_OUTDATED_LOCKFILE") if argv[0] == "ni" else (0, "")

        monkeypatch.setattr(tooling, "_run", failing_run)

        with pytest.raises(ToolingError) as exc_info:
            await tooling.bootstrap()

        assert exc_info.value.step == "ni --frozen"
        assert exc_info.value.stderr == "ERR_PNPM_OUTDATED_LOCKFILE"

    @pytest.mark.asyncio
    async def test_format_only_js_and_ts(self, tooling: Tooling, calls):
        """Test prettier only runs over changed JS/TS sources."""
        await tooling.format_files(["src/a.ts", "README.md", "src/b.jsx", "package.json"])

        assert calls == [["npx", "prettier", "--write", "src/a.ts", "src/b.jsx"]]

    @pytest.mark.asyncio
    async def test_format_nothing(self, tooling: Tooling, calls):
        assert await tooling.format_files(["README.md"]) is True
        assert calls == []

    @pytest.mark.asyncio
    async def test_format_failure_is_not_fatal(
        self, tooling: Tooling, monkeypatch: pytest.MonkeyPatch
    ):
        async def failing_run(argv: list[str]) -> tuple[int, str]:
            return 2, "SyntaxError"

        monkeypatch.setattr(tooling, "_run", failing_run)

        assert await tooling.format_files(["a.ts"]) is False

    @pytest.mark.asyncio
    async def test_run_missing_program(self, tooling: Tooling):
        exit_code, stderr = await tooling._run(["definitely-not-a-real-binary-xyz"])
        assert exit_code == 127
        assert stderr

    def test_write_netrc(self, tooling: Tooling, tmp_path: Path):
        netrc = tmp_path / ".netrc"

        tooling.write_netrc(netrc, "ghs_token")

        assert netrc.read_text() == (
            "machine github.com\nlogin github-actions[bot]\npassword ghs_token\n"
        )
        assert stat.S_IMODE(netrc.stat().st_mode) == 0o600


def test_formattable():
    assert formattable(["a.ts", "b.tsx", "c.js", "d.jsx", "e.css", "f.ts.snap"]) == [
        "a.ts",
        "b.tsx",
        "c.js",
        "d.jsx",
    ]


def test_write_netrc_failure_is_tooling_error(tmp_path: Path):
    netrc = tmp_path / "missing-dir" / ".netrc"

    with pytest.raises(ToolingError) as exc_info:
        Tooling(tmp_path).write_netrc(netrc, "ghs_token")

    assert exc_info.value.step == "write .netrc"
    assert "ghs_token" not in exc_info.value.message
