"""Action resolution.

Maps a named repository action and its arguments to a single shell command.
Pure string synthesis, no I/O.
"""

import re
import shlex
from collections.abc import Iterable

from hypermod_action.models.deployment import Action, ActionName, Argument, ArgumentKey
from hypermod_action.utils.logging import get_logger

logger = get_logger(__name__)

_DOUBLE_QUOTE_SPECIALS = re.compile(r'(["\\$`])')


def _quote(value: str | None) -> str:
    # Missing values substitute as empty; present ones are shell-quoted.
    if not value:
        return ""
    return shlex.quote(value)


def _escape_double_quoted(value: str | None) -> str:
    if not value:
        return ""
    return _DOUBLE_QUOTE_SPECIALS.sub(r"\\\1", value)


def _with_version(name: str | None, version: str | None) -> str:
    spec = _quote(name)
    if version:
        spec += "@" + _quote(version)
    return spec


def build_argument_map(arguments: Iterable[Argument]) -> dict[str, str]:
    """Map argument keys to values; the last duplicate wins."""
    return {argument.key: argument.value for argument in arguments}


def resolve_action(action: Action, arguments: Iterable[Argument]) -> str:
    """Resolve an action to a shell command.

    Args:
        action: The action to resolve
        arguments: Its key/value arguments, in declaration order

    Returns:
        The command string, or ``""`` for an unknown action
    """
    args = build_argument_map(arguments)
    kind = action.kind

    def arg(key: ArgumentKey) -> str | None:
        return args.get(key.value)

    if kind in (ActionName.INSTALL_DEPENDENCY, ActionName.UPGRADE_DEPENDENCY):
        tool = "ni" if kind == ActionName.INSTALL_DEPENDENCY else "nup"
        spec = _with_version(arg(ArgumentKey.DEPENDENCY_NAME), arg(ArgumentKey.VERSION))
        return f"{tool} {spec}".strip()

    if kind == ActionName.REMOVE_DEPENDENCY:
        return f"nun {_quote(arg(ArgumentKey.DEPENDENCY_NAME))}".strip()

    if kind == ActionName.FILE_CREATE:
        content = _escape_double_quoted(arg(ArgumentKey.FILE_CONTENT))
        return f'echo "{content}" > {_quote(arg(ArgumentKey.FILE_PATH))}'

    if kind == ActionName.FILE_DELETE:
        return f"rm {_quote(arg(ArgumentKey.FILE_PATH))}"

    if kind in (ActionName.FILE_MOVE, ActionName.FOLDER_MOVE):
        source = _quote(arg(ArgumentKey.SOURCE_PATH))
        destination = _quote(arg(ArgumentKey.DESTINATION_PATH))
        return f"mv {source} {destination}"

    if kind == ActionName.FOLDER_CREATE:
        return f"mkdir -p {_quote(arg(ArgumentKey.FOLDER_PATH))}"

    if kind == ActionName.FOLDER_DELETE:
        return f"rm -rf {_quote(arg(ArgumentKey.FOLDER_PATH))}"

    logger.error("actions.unknown_action", action=action.name)
    return ""
