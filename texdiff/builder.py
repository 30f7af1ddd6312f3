"""Build a marked-up PDF showing the changes between two LaTeX versions."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .config import BIBLIOGRAPHY_PASSES, TYPESET_PASSES, DiffConfig
from .exceptions import (
    DiffGenerationError,
    MissingAuxiliaryError,
    MissingSourceError,
    ToolNotFoundError,
)
from .patching import needs_bibliography, patch_bibliography
from .reporter import Reporter, RecordingReporter
from .runner import ToolRunner, which
from .types import BuildResult, StepResult, StepStatus
from .utils import get_pdf_summary

LOGGER = logging.getLogger("texdiff.builder")

TOTAL_STEPS = 9

# Exit status used when an executable could not be started, as a shell would.
COMMAND_NOT_FOUND = 127


class PassKind(Enum):
    TYPESET = "typeset"
    BIBLIOGRAPHY = "bibliography"


class PassPolicy(Enum):
    """How a convergence pass judges its own outcome."""

    REQUIRE_AUX = "require_aux"
    CITED_ONLY = "cited_only"
    CHECK_PDF = "check_pdf"
    FINAL = "final"
    BEST_EFFORT = "best_effort"


@dataclass(frozen=True)
class ConvergencePass:
    """One pdflatex or bibtex invocation in the convergence schedule."""

    number: int
    kind: PassKind
    policy: PassPolicy
    description: str
    log_suffix: Optional[str] = None
    discard_logs: Tuple[str, ...] = ()


# Six pdflatex passes and two bibtex passes. Citations only settle after the
# bibliography has been re-read twice.
CONVERGENCE_SCHEDULE: Tuple[ConvergencePass, ...] = (
    ConvergencePass(
        2, PassKind.TYPESET, PassPolicy.REQUIRE_AUX,
        "Compiling LaTeX (pass 1/6)...", log_suffix="-pass1.log",
    ),
    ConvergencePass(
        3, PassKind.BIBLIOGRAPHY, PassPolicy.CITED_ONLY,
        "Processing bibliography...", log_suffix="-bibtex.log",
        discard_logs=("-pass1.log", "-bibtex.log"),
    ),
    ConvergencePass(
        4, PassKind.TYPESET, PassPolicy.CHECK_PDF,
        "Compiling LaTeX (pass 2/6)...",
    ),
    ConvergencePass(
        5, PassKind.TYPESET, PassPolicy.FINAL,
        "Compiling LaTeX (pass 3/6)...", log_suffix="-final.log",
    ),
    ConvergencePass(
        6, PassKind.TYPESET, PassPolicy.BEST_EFFORT,
        "Additional compilation for bibliography resolution (pass 4/6)...",
    ),
    ConvergencePass(
        7, PassKind.BIBLIOGRAPHY, PassPolicy.BEST_EFFORT,
        "Re-processing bibliography...",
    ),
    ConvergencePass(
        8, PassKind.TYPESET, PassPolicy.BEST_EFFORT,
        "Compiling with updated bibliography (pass 5/6)...",
    ),
    ConvergencePass(
        9, PassKind.TYPESET, PassPolicy.BEST_EFFORT,
        "Final compilation pass (pass 6/6)...",
    ),
)


def schedule_counts(schedule: Tuple[ConvergencePass, ...] = CONVERGENCE_SCHEDULE) -> Tuple[int, int]:
    """Return ``(typeset, bibliography)`` pass counts of *schedule*."""

    typeset = sum(1 for item in schedule if item.kind is PassKind.TYPESET)
    return typeset, len(schedule) - typeset


if schedule_counts() != (TYPESET_PASSES, BIBLIOGRAPHY_PASSES):
    raise RuntimeError("Convergence schedule does not match the configured pass counts")


class DiffBuilder:
    """Run latexdiff, repair its output and typeset the result.

    ``build`` never raises for tool failures. Each stage yields a
    :class:`StepResult`; the first ``FATAL`` one ends the build.
    """

    def __init__(
        self,
        config: DiffConfig,
        reporter: Optional[Reporter] = None,
        runner: Optional[ToolRunner] = None,
    ) -> None:
        self.config = config
        self.reporter: Reporter = reporter or RecordingReporter()
        self.runner = runner or ToolRunner(config.workdir)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def diff_command(self) -> List[str]:
        return [
            self.config.latexdiff,
            "--flatten",
            *self.config.latexdiff_args,
            str(self.config.old_path),
            str(self.config.new_path),
        ]

    def typeset_command(self) -> List[str]:
        return [self.config.pdflatex, "-interaction=nonstopmode", self.config.tex_path.name]

    def bibliography_command(self) -> List[str]:
        return [self.config.bibtex, self.config.output_name]

    def missing_tools(self) -> List[str]:
        tools = (self.config.latexdiff, self.config.pdflatex, self.config.bibtex)
        return [tool for tool in tools if which(tool) is None]

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def resolve_sources(self) -> Tuple[Path, Path]:
        """Return the old and new source paths, raising if either is missing."""

        old_path, new_path = self.config.old_path, self.config.new_path
        if not old_path.is_file():
            raise MissingSourceError(f"Old file not found: {old_path}", path=str(old_path))
        if not new_path.is_file():
            raise MissingSourceError(f"New file not found: {new_path}", path=str(new_path))
        return old_path, new_path

    def run_diff(self) -> StepStatus:
        """Write the latexdiff output, tolerating failures that still produced it."""

        tex_path = self.config.tex_path
        warnings_file = self.config.warnings_file
        command = self.diff_command()

        with tex_path.open("w", encoding="utf-8") as out, \
                warnings_file.open("w", encoding="utf-8") as err:
            try:
                returncode = self.runner.run(command, stdout=out, stderr=err).returncode
            except ToolNotFoundError as exc:
                err.write(f"{exc}\n")
                returncode = COMMAND_NOT_FOUND

        if returncode == 0:
            status = StepStatus.SUCCESS
        elif tex_path.is_file() and tex_path.stat().st_size > 0:
            LOGGER.warning("latexdiff exited with %s but produced %s", returncode, tex_path)
            status = StepStatus.SUCCESS_WITH_WARNINGS
        else:
            raise DiffGenerationError(
                "Failed to create diff file",
                warnings=warnings_file.read_text(encoding="utf-8", errors="replace"),
            )

        warnings_file.unlink(missing_ok=True)
        return status

    def check_auxiliary(self) -> None:
        if not self.config.aux_path.is_file():
            raise MissingAuxiliaryError(
                f"Error in first pass - {self.config.aux_path.name} file not created"
            )

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------
    def build(self) -> BuildResult:
        config = self.config
        result = BuildResult(
            old_path=config.old_path,
            new_path=config.new_path,
            output_tex=config.tex_path,
            output_pdf=config.pdf_path,
        )

        self.reporter.header("LaTeX Diff Generator")
        self.reporter.blank()
        self.reporter.info(f"Old: {result.old_path}")
        self.reporter.info(f"New: {result.new_path}")
        self.reporter.blank()

        try:
            self.resolve_sources()
        except MissingSourceError as exc:
            self._record(result, StepResult(0, "sources", StepStatus.FATAL, f"Error: {exc}"))
            return result

        for tool in self.missing_tools():
            LOGGER.warning("%s not found on PATH", tool)

        step = self._diff_step()
        self._record(result, step)
        if step.status.is_fatal:
            return result

        self._record(result, self._patch_step())
        self.reporter.blank()

        for item in CONVERGENCE_SCHEDULE:
            self.reporter.step(item.number, TOTAL_STEPS, item.description)
            step = self._run_pass(item, result)
            self._record(result, step)
            if step.status.is_fatal:
                return result
            for suffix in item.discard_logs:
                config.output(suffix).unlink(missing_ok=True)
            self.reporter.blank()

        self._finish(result)
        return result

    def _diff_step(self) -> StepResult:
        self.reporter.step(1, TOTAL_STEPS, "Creating latexdiff file...")
        name = self.config.tex_path.name
        try:
            status = self.run_diff()
        except DiffGenerationError as exc:
            detail = f"Try running manually: {shlex.join(self.diff_command())}"
            if exc.warnings.strip():
                detail += f"\nWarnings:\n{exc.warnings}"
            return StepResult(1, "diff", StepStatus.FATAL, f"Error: {exc}", detail=detail)

        if status is StepStatus.SUCCESS:
            return StepResult(1, "diff", status, f"Diff file created: {name}")
        return StepResult(1, "diff", status, "Diff created with warnings (usually harmless)")

    def _patch_step(self) -> StepResult:
        if patch_bibliography(self.config.tex_path, self.config.bibliography):
            return StepResult(1, "patch", StepStatus.SUCCESS, "Fixed missing bibliography reference")
        return StepResult(1, "patch", StepStatus.SKIPPED)

    def _invoke(self, item: ConvergencePass) -> int:
        command = self.typeset_command() if item.kind is PassKind.TYPESET else self.bibliography_command()
        try:
            if item.log_suffix:
                return self.runner.run_to_file(command, self.config.output(item.log_suffix))
            return self.runner.run_quietly(command)
        except ToolNotFoundError as exc:
            LOGGER.warning("%s", exc)
            return COMMAND_NOT_FOUND

    def _run_pass(self, item: ConvergencePass, result: BuildResult) -> StepResult:
        config = self.config
        log_path = config.output(item.log_suffix) if item.log_suffix else None

        def make(status: StepStatus, message: str) -> StepResult:
            return StepResult(item.number, item.kind.value, status, message, log_path=log_path)

        if item.policy is PassPolicy.CITED_ONLY and not needs_bibliography(config.aux_path):
            return make(StepStatus.SKIPPED, "No bibliography needed")

        returncode = self._invoke(item)
        if item.kind is PassKind.TYPESET:
            result.typeset_passes += 1
        else:
            result.bibliography_passes += 1

        if item.policy is PassPolicy.REQUIRE_AUX:
            try:
                self.check_auxiliary()
            except MissingAuxiliaryError as exc:
                step = make(StepStatus.FATAL, str(exc))
                step.detail = f"Check {log_path.name} for details"
                return step
            return make(StepStatus.SUCCESS, "First pass complete")

        if item.policy is PassPolicy.CITED_ONLY:
            if returncode == 0:
                return make(StepStatus.SUCCESS, "Bibliography processed")
            if config.bbl_path.is_file():
                return make(StepStatus.SUCCESS_WITH_WARNINGS, "BibTeX completed with warnings")
            step = make(StepStatus.SUCCESS_WITH_WARNINGS, "BibTeX failed - continuing without bibliography")
            step.detail = f"(Check {log_path.name} for details)"
            return step

        if item.policy is PassPolicy.CHECK_PDF:
            if returncode == 0 or config.pdf_path.is_file():
                return make(StepStatus.SUCCESS, "Second pass complete")
            return make(StepStatus.SUCCESS_WITH_WARNINGS, "Warnings in second pass (continuing...)")

        if item.policy is PassPolicy.FINAL:
            if returncode == 0:
                return make(StepStatus.SUCCESS, "Final pass complete")
            if config.pdf_path.is_file():
                return make(StepStatus.SUCCESS_WITH_WARNINGS, "Warnings in final pass (PDF created)")
            return make(StepStatus.SUCCESS_WITH_WARNINGS, "Error in final pass")

        if returncode != 0:
            LOGGER.debug("Best-effort %s pass %s exited with %s", item.kind.value, item.number, returncode)
        if item.kind is PassKind.BIBLIOGRAPHY:
            return make(StepStatus.SUCCESS, "Bibliography updated")
        return make(StepStatus.SUCCESS, f"Pass {result.typeset_passes} complete")

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def _record(self, result: BuildResult, step: StepResult) -> None:
        result.steps.append(step)
        if step.status is StepStatus.SKIPPED:
            if step.message:
                self.reporter.info(step.message)
        elif step.status is StepStatus.SUCCESS:
            if step.name == "patch":
                self.reporter.info(step.message)
            else:
                self.reporter.success(step.message)
        elif step.status is StepStatus.SUCCESS_WITH_WARNINGS:
            self.reporter.warning(step.message)
        else:
            self.reporter.error(step.message)
        if step.detail:
            self.reporter.detail(step.detail)

    def _finish(self, result: BuildResult) -> None:
        pdf_path = self.config.pdf_path
        if pdf_path.is_file() and pdf_path.stat().st_size > 0:
            result.pdf = get_pdf_summary(pdf_path)
            self.reporter.summary(result.pdf)
            if result.pdf.error:
                self.reporter.warning(f"Could not read {pdf_path.name}: {result.pdf.error}")
            self.reporter.header("Diff PDF created!", style="green")
        else:
            final_log = self.config.output("-final.log").name
            self.reporter.warning(f"No PDF was produced - check {final_log} for details")
            self.reporter.header("Diff finished without a PDF", style="yellow")
        LOGGER.info("Build finished: %s", result)


def build_diff(config: DiffConfig, reporter: Optional[Reporter] = None) -> BuildResult:
    """Convenience wrapper around :class:`DiffBuilder`."""

    return DiffBuilder(config, reporter=reporter).build()


__all__ = [
    "CONVERGENCE_SCHEDULE",
    "ConvergencePass",
    "DiffBuilder",
    "PassKind",
    "PassPolicy",
    "build_diff",
    "schedule_counts",
]
