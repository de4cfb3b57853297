"""Change detection over the working tree."""

from typing import Protocol

from hypermod_action.services.git import parse_porcelain
from hypermod_action.utils.logging import get_logger


class StatusSource(Protocol):
    async def status(self) -> str: ...


class ChangeDetector:
    """Reports whether the tree differs from its last commit.

    Call only after the staging root is removed, or staged transform
    sources would count as changes.
    """

    def __init__(self, git: StatusSource):
        self.git = git
        self.logger = get_logger("changes")

    async def has_changes(self) -> bool:
        status = await self.git.status()
        changed = bool(status.strip())
        if changed:
            self.logger.info("changes.detected", status=status)
        else:
            self.logger.info("changes.none")
        return changed

    async def changed_files(self) -> list[str]:
        return parse_porcelain(await self.git.status())
