"""Command planning.

Turns deployment entries into an ordered list of shell commands. Entry order
is preserved: actions such as dependency installs may be prerequisites of
transforms that follow them.
"""

import shlex
from pathlib import Path

from hypermod_action.core.actions import resolve_action
from hypermod_action.core.classifier import classify_entry
from hypermod_action.core.materializer import TransformMaterializer
from hypermod_action.models.deployment import (
    DEFAULT_PARSER,
    ActionOperation,
    Deployment,
    TransformOperation,
)
from hypermod_action.models.execution import PlannedCommand
from hypermod_action.utils.logging import get_logger


def transform_command(entry_point: Path, parser: str) -> str:
    """Command that runs a materialized transform over the working tree."""
    return f"hypermod -t {shlex.quote(str(entry_point))} --parser {shlex.quote(parser)} ./"


class CommandPlanner:
    """Builds the command list for a deployment."""

    def __init__(
        self,
        materializer: TransformMaterializer,
        default_parser: str = DEFAULT_PARSER,
    ):
        self.materializer = materializer
        self.default_parser = default_parser
        self.logger = get_logger("planner")

    def plan(self, deployment: Deployment) -> list[PlannedCommand]:
        """Plan commands for every supported entry, in entry order.

        Transform sources are written to the staging root as a side effect;
        the caller owns cleanup.
        """
        commands: list[PlannedCommand] = []

        for index, entry in enumerate(deployment.transforms):
            operation = classify_entry(entry)

            if isinstance(operation, ActionOperation):
                command = resolve_action(operation.action, operation.arguments)
                if not command:
                    self.logger.warning(
                        "planner.action_skipped",
                        index=index,
                        action=operation.action.name,
                    )
                    continue
                commands.append(
                    PlannedCommand(command=command, source=operation.label, index=index)
                )

            elif isinstance(operation, TransformOperation):
                entry_point = self.materializer.materialize(operation.transform)
                if entry_point is None:
                    self.logger.warning(
                        "planner.transform_skipped",
                        index=index,
                        transform_id=operation.transform.id,
                        reason="no transform file found",
                    )
                    continue
                parser = operation.transform.parser or self.default_parser
                commands.append(
                    PlannedCommand(
                        command=transform_command(entry_point, parser),
                        source=operation.label,
                        index=index,
                    )
                )

            else:
                self.logger.warning(
                    "planner.unsupported_entry",
                    index=index,
                    type=operation.entry_type,
                    reason=operation.reason,
                )

        self.logger.info(
            "planner.planned",
            deployment_id=deployment.id,
            entries=len(deployment.transforms),
            commands=len(commands),
        )
        return commands
