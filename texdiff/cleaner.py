"""Remove LaTeX build artifacts left behind by diff builds.

Two families of files are recognised in the working directory:

* the diff-output family, ``<diff_name>.*`` (``root-diff.tex``, ``root-diff.aux``, ...)
* the root family, ``<source stem>.*`` (``root.aux``, ``root.log``, ...)

The canonical source (``root.tex``) and every ``.pdf`` are kept, whichever
way the run goes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .config import CleanConfig
from .reporter import Reporter, RecordingReporter
from .types import CleanupPlan, CleanupResult

LOGGER = logging.getLogger("texdiff.cleaner")

Confirm = Callable[[str], bool]


def _decline(prompt: str) -> bool:
    return False


class ArtifactCleaner:
    """Plan, confirm and perform the removal of build artifacts.

    ``interactive`` says whether a person can answer ``confirm``; when it is
    false the cleaner proceeds without asking.
    """

    def __init__(
        self,
        config: CleanConfig,
        reporter: Optional[Reporter] = None,
        *,
        interactive: bool = False,
        confirm: Optional[Confirm] = None,
    ) -> None:
        self.config = config
        self.reporter: Reporter = reporter or RecordingReporter()
        self.interactive = interactive
        self.confirm: Confirm = confirm or _decline

    def _is_protected(self, path: Path) -> bool:
        return path.suffix.lower() == ".pdf" or path.name == self.config.source_name

    def _matching(self, pattern: str) -> List[Path]:
        return sorted(
            path for path in self.config.workdir.glob(pattern)
            if path.is_file() and not self._is_protected(path)
        )

    def plan(self) -> CleanupPlan:
        """Collect the files a cleanup would remove, without touching them."""

        diff_name = self.config.diff_name
        diff_files = self._matching(f"{diff_name}.*")
        # Each file belongs to one family only, even when the names overlap.
        root_files = [
            path for path in self._matching(f"{self.config.source_stem}.*")
            if path not in diff_files
        ]
        extra_logs = [
            path for path in self._matching(f"{diff_name}-*.log")
            if path not in diff_files and path not in root_files
        ]
        return CleanupPlan(diff_files=diff_files, root_files=root_files, extra_logs=extra_logs)

    def _remove(self, paths: Iterable[Path]) -> int:
        removed = 0
        for path in paths:
            if self._is_protected(path):
                LOGGER.error("Refusing to delete protected file: %s", path)
                continue
            path.unlink(missing_ok=True)
            LOGGER.debug("Removed %s", path)
            removed += 1
        return removed

    def clean(self) -> CleanupResult:
        reporter = self.reporter
        diff_name = self.config.diff_name
        source_name = self.config.source_name

        reporter.header("LaTeX Cleanup Script")
        reporter.blank()

        plan = self.plan()
        if plan.is_empty:
            reporter.success("Already clean - no files to remove")
            return CleanupResult(already_clean=True)

        reporter.warning("Files to be removed:")
        reporter.blank()
        if plan.diff_files:
            reporter.file_list(f"{diff_name} files (keeping .pdf):", plan.diff_files)
            reporter.blank()
        if plan.root_files:
            reporter.file_list(f"{self.config.source_stem} files (keeping {source_name} and .pdf):", plan.root_files)
            reporter.blank()
        reporter.warning(f"Total files to remove: {plan.total}")
        reporter.blank()

        if self.interactive and not self.confirm("Continue?"):
            reporter.info("Cleanup cancelled")
            return CleanupResult(cancelled=True)

        result = CleanupResult()
        if plan.diff_files:
            result.removed_diff = self._remove(plan.diff_files)
            result.removed_logs = self._remove(plan.extra_logs)
            reporter.success(f"Removed {result.removed_diff} {diff_name} file(s) (kept .pdf)")
        if plan.root_files:
            result.removed_root = self._remove(plan.root_files)
            reporter.success(
                f"Removed {result.removed_root} {self.config.source_stem} file(s) (kept {source_name} and .pdf)"
            )

        reporter.blank()
        reporter.header("Cleanup complete!", style="green")
        LOGGER.info("Cleanup finished: %s", result)
        return result


def clean_artifacts(
    config: CleanConfig,
    reporter: Optional[Reporter] = None,
    *,
    interactive: bool = False,
    confirm: Optional[Confirm] = None,
) -> CleanupResult:
    """Convenience wrapper around :class:`ArtifactCleaner`."""

    return ArtifactCleaner(
        config, reporter, interactive=interactive, confirm=confirm
    ).clean()


__all__ = ["ArtifactCleaner", "clean_artifacts"]
