"""Transform materialization.

Writes transform sources to ``<staging_root>/<transform_id>/<source_name>``
and locates each transform's entry point.
"""

import shutil
from pathlib import Path, PurePosixPath

from hypermod_action.models.deployment import Source, Transform
from hypermod_action.utils.logging import get_logger

ENTRY_POINT_NAMES = ("transform.ts", "transform.js")


def find_entry_point(sources: list[Source]) -> Source | None:
    """Return the first source whose basename is an entry point name."""
    for source in sources:
        if PurePosixPath(source.name).name in ENTRY_POINT_NAMES:
            return source
    return None


class TransformMaterializer:
    """Stages transform sources on disk for the duration of a run."""

    def __init__(self, staging_root: Path):
        self.staging_root = staging_root
        self.logger = get_logger("materializer")

    def transform_dir(self, transform: Transform) -> Path:
        return self.staging_root / transform.id

    def materialize(self, transform: Transform) -> Path | None:
        """Write a transform's sources and return its entry point path.

        Sources whose names are unusable or that cannot be written are
        skipped with a warning.

        Returns:
            Path of ``transform.ts``/``transform.js``, or None when the
            transform has no entry point (the caller skips it)
        """
        target_dir = self.transform_dir(transform)
        if not self._inside(target_dir, self.staging_root):
            self.logger.warning("materializer.unsafe_transform_id", transform_id=transform.id)
            return None

        written: list[str] = []

        for source in transform.sources:
            file_path = self._source_path(target_dir, source)
            if file_path is None:
                self.logger.warning(
                    "materializer.unsafe_source_name",
                    transform_id=transform.id,
                    name=source.name,
                )
                continue

            self.logger.info("materializer.writing", path=str(file_path))
            try:
                file_path.parent.mkdir(parents=True, exist_ok=True)
                file_path.write_text(source.code, encoding="utf-8")
            except OSError as e:
                self.logger.warning(
                    "materializer.write_failed",
                    transform_id=transform.id,
                    name=source.name,
                    error=str(e),
                )
                continue
            written.append(source.name)

        entry = find_entry_point([s for s in transform.sources if s.name in written])
        if entry is None:
            self.logger.warning(
                "materializer.entry_point_missing",
                transform_id=transform.id,
                expected=list(ENTRY_POINT_NAMES),
            )
            return None

        return self._source_path(target_dir, entry)

    def cleanup(self) -> None:
        """Remove the staging root and everything under it."""
        if self.staging_root.exists():
            shutil.rmtree(self.staging_root)
            self.logger.info("materializer.cleaned_up", path=str(self.staging_root))

    def _source_path(self, target_dir: Path, source: Source) -> Path | None:
        file_path = target_dir / source.name
        if not self._inside(file_path, target_dir):
            return None
        return file_path.resolve()

    @staticmethod
    def _inside(path: Path, root: Path) -> bool:
        # Strictly below root; root itself does not count
        resolved, root = path.resolve(), root.resolve()
        return resolved != root and resolved.is_relative_to(root)
