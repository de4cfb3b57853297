"""Data models for hypermod-action."""

from hypermod_action.models.deployment import (
    Action,
    ActionName,
    ActionOperation,
    Argument,
    ArgumentKey,
    Deployment,
    EntryType,
    Operation,
    Source,
    Transform,
    TransformOnDeployment,
    TransformOperation,
    UnsupportedOperation,
)
from hypermod_action.models.execution import (
    CommandResult,
    ExecutionReport,
    PlannedCommand,
)
from hypermod_action.models.reconciliation import (
    PullRequest,
    ReconcilePhase,
    ReconciliationState,
    RunOutcome,
    RunStatus,
)

__all__ = [
    # Deployment models
    "Action",
    "ActionName",
    "Argument",
    "ArgumentKey",
    "Deployment",
    "EntryType",
    "Source",
    "Transform",
    "TransformOnDeployment",
    # Operations
    "Operation",
    "TransformOperation",
    "ActionOperation",
    "UnsupportedOperation",
    # Execution models
    "PlannedCommand",
    "CommandResult",
    "ExecutionReport",
    # Reconciliation models
    "PullRequest",
    "ReconcilePhase",
    "ReconciliationState",
    "RunOutcome",
    "RunStatus",
]
