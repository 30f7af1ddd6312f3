"""
Type definitions and dataclasses for texdiff.

This module defines data structures used throughout the library.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class StepStatus(Enum):
    """Outcome of a single build step."""

    SUCCESS = "success"
    SUCCESS_WITH_WARNINGS = "success_with_warnings"
    SKIPPED = "skipped"
    FATAL = "fatal"

    @property
    def is_fatal(self) -> bool:
        return self is StepStatus.FATAL


@dataclass
class StepResult:
    """
    Result of one step of a diff build.

    Attributes:
        number: Step number as shown to the user (1-9)
        name: Short step name, e.g. ``"typeset"`` or ``"bibliography"``
        status: Outcome of the step
        message: Human readable summary
        detail: Captured diagnostics (tool stderr), if any
        log_path: Log file the step wrote, if kept
    """
    number: int
    name: str
    status: StepStatus
    message: str = ""
    detail: Optional[str] = None
    log_path: Optional[Path] = None

    def __str__(self) -> str:
        return f"StepResult({self.number}, {self.name}, {self.status.value})"


@dataclass
class PDFSummary:
    """
    Information about the produced diff PDF.

    Attributes:
        path: Location of the PDF
        file_size: File size in bytes
        num_pages: Number of pages, ``None`` when the PDF could not be read
        error: Read error, if any
    """
    path: Path
    file_size: int
    num_pages: Optional[int] = None
    error: Optional[str] = None


@dataclass
class BuildResult:
    """
    Result of a complete diff build.

    Attributes:
        old_path: Resolved old source file
        new_path: Resolved new source file
        output_tex: Merged document written by latexdiff
        output_pdf: Expected PDF location
        steps: Step results in execution order
        typeset_passes: pdflatex invocations actually executed
        bibliography_passes: bibtex invocations actually executed
        pdf: Summary of the PDF when one was produced
    """
    old_path: Path
    new_path: Path
    output_tex: Path
    output_pdf: Path
    steps: List[StepResult] = field(default_factory=list)
    typeset_passes: int = 0
    bibliography_passes: int = 0
    pdf: Optional[PDFSummary] = None

    @property
    def success(self) -> bool:
        return not any(step.status.is_fatal for step in self.steps)

    @property
    def warnings(self) -> List[StepResult]:
        return [
            step for step in self.steps
            if step.status is StepStatus.SUCCESS_WITH_WARNINGS
        ]

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def __str__(self) -> str:
        if self.success:
            return f"BuildResult(success=True, pdf='{self.output_pdf}')"
        return f"BuildResult(success=False, error='{self.steps[-1].message}')"


@dataclass
class CleanupPlan:
    """
    Files the cleaner intends to remove.

    Attributes:
        diff_files: Diff-output family (``root-diff.*`` without PDFs)
        root_files: Root family (``root.*`` without the source and PDFs)
        extra_logs: Pass logs (``root-diff-*.log``) swept with the diff family
    """
    diff_files: List[Path] = field(default_factory=list)
    root_files: List[Path] = field(default_factory=list)
    extra_logs: List[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.diff_files) + len(self.root_files)

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass
class CleanupResult:
    """Result of a cleanup run."""
    removed_diff: int = 0
    removed_root: int = 0
    removed_logs: int = 0
    cancelled: bool = False
    already_clean: bool = False

    @property
    def total_removed(self) -> int:
        return self.removed_diff + self.removed_root + self.removed_logs

    def __str__(self) -> str:
        return (
            "CleanupResult(diff={diff}, root={root}, logs={logs}, "
            "cancelled={cancelled}, already_clean={clean})"
        ).format(
            diff=self.removed_diff,
            root=self.removed_root,
            logs=self.removed_logs,
            cancelled=self.cancelled,
            clean=self.already_clean,
        )
