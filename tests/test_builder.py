from __future__ import annotations

from pathlib import Path

import pytest

from texdiff.builder import (
    CONVERGENCE_SCHEDULE,
    DiffBuilder,
    PassKind,
    schedule_counts,
)
from texdiff.config import BIBLIOGRAPHY_PASSES, TYPESET_PASSES, DiffConfig
from texdiff.exceptions import DiffGenerationError, MissingSourceError
from texdiff.reporter import RecordingReporter
from texdiff.types import StepResult, StepStatus

from conftest import FakeToolchain

EXPECTED_TOOLS = [
    "latexdiff",
    "pdflatex",
    "bibtex",
    "pdflatex",
    "pdflatex",
    "pdflatex",
    "bibtex",
    "pdflatex",
    "pdflatex",
]


def _build(config: DiffConfig) -> tuple:
    reporter = RecordingReporter()
    result = DiffBuilder(config, reporter=reporter).build()
    return result, reporter


def test_schedule_has_six_typeset_and_two_bibliography_passes() -> None:
    assert schedule_counts() == (TYPESET_PASSES, BIBLIOGRAPHY_PASSES) == (6, 2)
    assert [item.number for item in CONVERGENCE_SCHEDULE] == list(range(2, 10))
    assert CONVERGENCE_SCHEDULE[0].kind is PassKind.TYPESET


def test_build_produces_pdf(diff_config: DiffConfig, toolchain: FakeToolchain) -> None:
    result, reporter = _build(diff_config)

    assert result.success
    assert result.exit_code == 0
    assert toolchain.tools == EXPECTED_TOOLS
    assert result.typeset_passes == 6
    assert result.bibliography_passes == 2
    assert result.output_pdf.exists()
    assert result.output_pdf.stat().st_size > 0
    assert result.pdf is not None and result.pdf.num_pages == 1
    assert reporter.messages("summary") == [str(result.output_pdf)]


def test_build_commands(diff_config: DiffConfig, toolchain: FakeToolchain) -> None:
    _build(diff_config)

    latexdiff, pdflatex, bibtex = toolchain.calls[0], toolchain.calls[1], toolchain.calls[2]
    assert latexdiff == [
        "latexdiff",
        "--flatten",
        str(diff_config.workdir / "v1" / "root.tex"),
        str(diff_config.workdir / "root.tex"),
    ]
    assert pdflatex == ["pdflatex", "-interaction=nonstopmode", "root-diff.tex"]
    assert bibtex == ["bibtex", "root-diff"]


def test_build_restores_bibliography(diff_config: DiffConfig, toolchain: FakeToolchain) -> None:
    result, reporter = _build(diff_config)

    text = result.output_tex.read_text(encoding="utf-8")
    lines = text.splitlines()
    index = lines.index("\\bibliographystyle{IEEEtran}")
    assert lines[index + 1] == "\\bibliography{references}"
    assert text.count("\\bibliography{") == 1
    assert "Fixed missing bibliography reference" in reporter.messages("info")


def test_build_without_bibliography_style_skips_patch(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    toolchain.latexdiff_output = "\\documentclass{article}\n\\begin{document}\nHi\n\\end{document}\n"

    result, reporter = _build(diff_config)

    assert result.success
    assert result.output_tex.read_text(encoding="utf-8") == toolchain.latexdiff_output
    patch = [step for step in result.steps if step.name == "patch"]
    assert patch[0].status is StepStatus.SKIPPED
    assert "Fixed missing bibliography reference" not in reporter.text


def test_build_cleans_intermediate_logs(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    _build(diff_config)

    workdir = diff_config.workdir
    assert not (workdir / "root-diff-pass1.log").exists()
    assert not (workdir / "root-diff-bibtex.log").exists()
    assert (workdir / "root-diff-final.log").exists()
    assert not diff_config.warnings_file.exists()


def test_custom_directories_and_output_name(project: Path, toolchain: FakeToolchain, tmp_path: Path) -> None:
    (project / "v2").mkdir()
    (project / "v2" / "root.tex").write_text((project / "root.tex").read_text())
    config = DiffConfig(
        workdir=project,
        old_dir="v1",
        new_dir="v2",
        output_name="paper-diff",
        warnings_file=tmp_path / "w.txt",
    )

    result, _ = _build(config)

    assert result.success
    assert toolchain.calls[0][-1] == str(project / "v2" / "root.tex")
    assert (project / "paper-diff.pdf").exists()
    assert toolchain.calls[2] == ["bibtex", "paper-diff"]


def test_same_directory_on_both_sides(project: Path, toolchain: FakeToolchain, tmp_path: Path) -> None:
    config = DiffConfig(workdir=project, old_dir=".", new_dir=".", warnings_file=tmp_path / "w.txt")

    result, _ = _build(config)

    assert result.success
    assert toolchain.calls[0][-2] == toolchain.calls[0][-1] == str(project / "root.tex")


@pytest.mark.parametrize("missing", ["v1", "."])
def test_missing_source_is_fatal(
    diff_config: DiffConfig, toolchain: FakeToolchain, missing: str
) -> None:
    source = diff_config.resolve_source(missing)
    source.unlink()

    result, reporter = _build(diff_config)

    assert not result.success
    assert result.exit_code == 1
    assert toolchain.calls == []
    assert not diff_config.tex_path.exists()
    assert not diff_config.pdf_path.exists()
    assert str(source) in reporter.messages("error")[0]


def test_resolve_sources_raises(diff_config: DiffConfig) -> None:
    (diff_config.workdir / "v1" / "root.tex").unlink()

    with pytest.raises(MissingSourceError) as excinfo:
        DiffBuilder(diff_config).resolve_sources()

    assert "Old file not found" in str(excinfo.value)
    assert excinfo.value.path == str(diff_config.workdir / "v1" / "root.tex")


def test_latexdiff_failure_with_output_is_a_warning(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    toolchain.latexdiff_returncode = 2
    toolchain.latexdiff_stderr = "Warning: unmatched brace\n"

    result, reporter = _build(diff_config)

    assert result.success
    assert result.steps[0].status is StepStatus.SUCCESS_WITH_WARNINGS
    assert "Diff created with warnings (usually harmless)" in reporter.messages("warning")
    assert toolchain.tools == EXPECTED_TOOLS
    assert not diff_config.warnings_file.exists()


def test_latexdiff_failure_without_output_is_fatal(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    toolchain.latexdiff_returncode = 255
    toolchain.latexdiff_output = ""
    toolchain.latexdiff_stderr = "Cannot parse preamble\n"

    result, reporter = _build(diff_config)

    assert not result.success
    assert toolchain.tools == ["latexdiff"]
    assert result.steps[-1].status is StepStatus.FATAL
    assert "Cannot parse preamble" in result.steps[-1].detail
    assert "Try running manually: latexdiff --flatten" in reporter.messages("detail")[0]
    # Diagnostics stay on disk for inspection.
    assert diff_config.warnings_file.exists()


def test_run_diff_raises_with_warnings(diff_config: DiffConfig, toolchain: FakeToolchain) -> None:
    toolchain.latexdiff_returncode = 1
    toolchain.latexdiff_output = ""
    toolchain.latexdiff_stderr = "boom"

    with pytest.raises(DiffGenerationError) as excinfo:
        DiffBuilder(diff_config).run_diff()

    assert excinfo.value.warnings == "boom"


def test_missing_latexdiff_is_fatal(diff_config: DiffConfig, toolchain: FakeToolchain) -> None:
    toolchain.latexdiff_missing = True

    result, _ = _build(diff_config)

    assert not result.success
    assert "latexdiff not found on PATH" in result.steps[-1].detail


def test_missing_aux_after_first_pass_is_fatal(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    toolchain.write_aux = False
    toolchain.write_pdf = False
    toolchain.pdflatex_returncode = 1

    result, reporter = _build(diff_config)

    assert not result.success
    assert result.exit_code == 1
    assert toolchain.tools == ["latexdiff", "pdflatex"]
    assert result.steps[-1].number == 2
    assert "root-diff.aux file not created" in reporter.messages("error")[0]
    assert (diff_config.workdir / "root-diff-pass1.log").exists()


def test_later_pdflatex_failures_are_not_fatal(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    toolchain.pdflatex_returncode = 1

    result, reporter = _build(diff_config)

    assert result.success
    assert toolchain.tools == EXPECTED_TOOLS
    assert "Warnings in final pass (PDF created)" in reporter.messages("warning")


def test_final_pass_without_pdf_is_a_warning(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    toolchain.pdflatex_returncode = 1
    toolchain.write_pdf = False

    result, reporter = _build(diff_config)

    assert result.success
    assert result.pdf is None
    warnings = reporter.messages("warning")
    assert "Warnings in second pass (continuing...)" in warnings
    assert "Error in final pass" in warnings
    assert any("No PDF was produced" in message for message in warnings)


def test_unreadable_pdf_is_reported_as_a_warning(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    toolchain.write_pdf = False
    diff_config.pdf_path.write_bytes(b"not a pdf at all")

    result, reporter = _build(diff_config)

    assert result.success
    assert result.exit_code == 0
    assert result.pdf is not None
    assert result.pdf.num_pages is None
    assert result.pdf.error
    assert any(m.startswith("Could not read root-diff.pdf") for m in reporter.messages("warning"))


def test_no_citations_skips_first_bibliography_pass(
    diff_config: DiffConfig, toolchain: FakeToolchain
) -> None:
    toolchain.citations = False

    result, reporter = _build(diff_config)

    assert result.success
    assert "No bibliography needed" in reporter.messages("info")
    assert toolchain.tools.count("bibtex") == 1
    assert result.bibliography_passes == 1
    assert result.typeset_passes == 6


def test_bibtex_failure_with_bbl(diff_config: DiffConfig, toolchain: FakeToolchain) -> None:
    toolchain.bibtex_returncode = 2

    result, reporter = _build(diff_config)

    assert result.success
    assert "BibTeX completed with warnings" in reporter.messages("warning")
    assert result.steps[-1].status is not StepStatus.FATAL


def test_bibtex_failure_without_bbl(diff_config: DiffConfig, toolchain: FakeToolchain) -> None:
    toolchain.bibtex_returncode = 2
    toolchain.write_bbl = False

    result, reporter = _build(diff_config)

    assert result.success
    assert "BibTeX failed - continuing without bibliography" in reporter.messages("warning")
    assert toolchain.tools == EXPECTED_TOOLS


def test_result_string(diff_config: DiffConfig, toolchain: FakeToolchain) -> None:
    result, _ = _build(diff_config)
    assert str(result).startswith("BuildResult(success=True")


def test_step_result_string() -> None:
    step = StepResult(3, "bibliography", StepStatus.SKIPPED, "No bibliography needed")
    assert str(step) == "StepResult(3, bibliography, skipped)"


def test_output_name_cannot_overwrite_a_source(project: Path, toolchain: FakeToolchain) -> None:
    source = project / "root.tex"
    before = source.read_bytes()

    with pytest.raises(ValueError, match="Invalid output name: 'root' would overwrite"):
        DiffConfig(workdir=project, output_name="root")

    assert source.read_bytes() == before
    assert toolchain.calls == []


def test_output_name_cannot_overwrite_old_source(project: Path) -> None:
    with pytest.raises(ValueError, match="would overwrite"):
        DiffConfig(workdir=project, old_dir=".", new_dir="v1", output_name="root")
