"""Command line entry point for the GitHub Action."""

import argparse
import asyncio
import sys
from pathlib import Path

from hypermod_action import __version__
from hypermod_action.config import Settings, get_settings
from hypermod_action.core.engine import DeploymentEngine
from hypermod_action.models.reconciliation import RunOutcome
from hypermod_action.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hypermod-action",
        description="Apply a hypermod deployment and reconcile it into a pull request",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--deployment-id", help="Overrides INPUT_DEPLOYMENTID")
    parser.add_argument("--deployment-key", help="Overrides INPUT_DEPLOYMENTKEY")
    parser.add_argument("--workspace", type=Path, help="Repository to operate on")
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Assume the hypermod CLI, ni and project dependencies are installed",
    )
    parser.add_argument(
        "--no-format", action="store_true", help="Do not run prettier on changed files"
    )
    parser.add_argument("--log-format", choices=["console", "json"])
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command line flags applied."""
    overrides: dict[str, object] = {}
    if args.deployment_id:
        overrides["deployment_id"] = args.deployment_id
    if args.deployment_key:
        overrides["deployment_key"] = args.deployment_key
    if args.workspace:
        overrides["workspace"] = args.workspace.resolve()
    if args.skip_install:
        overrides["install_tooling"] = False
    if args.no_format:
        overrides["format_changes"] = False
    if args.log_format:
        overrides["log_format"] = args.log_format
    return settings.model_copy(update=overrides)


def write_outputs(settings: Settings, outcome: RunOutcome) -> None:
    """Expose the pull request number as a step output."""
    if not settings.github_output or outcome.pull_request_number is None:
        return
    with open(settings.github_output, "a", encoding="utf-8") as f:
        f.write(f"pullRequestNumber={outcome.pull_request_number}\n")


async def run(settings: Settings) -> RunOutcome:
    async with DeploymentEngine(settings) as engine:
        return await engine.run()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_overrides(get_settings(), args)
    configure_logging(settings)

    logger.info("action.starting", version=__version__)
    outcome = asyncio.run(run(settings))
    write_outputs(settings, outcome)

    if not outcome.succeeded:
        logger.error("action.failed", error=outcome.error)
        return 1

    logger.info(
        "action.succeeded",
        status=outcome.status.value,
        pull_request_number=outcome.pull_request_number,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
