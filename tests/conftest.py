from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, List
import sys

import pytest
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from texdiff.config import DiffConfig  # noqa: E402


def write_tex(path: Path, body: str, bibliography: bool = True) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    tail = ""
    if bibliography:
        tail = "\\bibliographystyle{IEEEtran}\n\\bibliography{references}\n"
    path.write_text(
        "\\documentclass{article}\n"
        "\\begin{document}\n"
        + body + "\n"
        + tail
        + "\\end{document}\n",
        encoding="utf-8",
    )
    return path


def write_pdf(path: Path, pages: int = 1) -> Path:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    with path.open("wb") as handle:
        writer.write(handle)
    return path


@dataclass
class FakeToolchain:
    """Stand-in for latexdiff, pdflatex and bibtex.

    Each fake writes the files the real tool would write into the working
    directory passed as ``cwd`` and records the command it received.
    """

    calls: List[List[str]] = field(default_factory=list)
    latexdiff_returncode: int = 0
    latexdiff_output: str | None = None
    latexdiff_stderr: str = ""
    latexdiff_missing: bool = False
    pdflatex_returncode: int = 0
    write_aux: bool = True
    write_pdf: bool = True
    citations: bool = True
    bibtex_returncode: int = 0
    write_bbl: bool = True

    @property
    def tools(self) -> List[str]:
        return [Path(command[0]).name for command in self.calls]

    def __call__(self, command: List[str], **kwargs: object) -> SimpleNamespace:
        self.calls.append(list(command))
        tool = Path(command[0]).name
        cwd = Path(kwargs["cwd"])
        if tool == "latexdiff":
            return self._latexdiff(command, kwargs)
        if tool == "pdflatex":
            return self._pdflatex(cwd, command[-1])
        if tool == "bibtex":
            return self._bibtex(cwd, command[-1])
        raise FileNotFoundError(command[0])

    def _latexdiff(self, command: List[str], kwargs: dict) -> SimpleNamespace:
        if self.latexdiff_missing:
            raise FileNotFoundError(command[0])
        output = self.latexdiff_output
        if output is None:
            # --flatten drops the \bibliography line
            new_text = Path(command[-1]).read_text(encoding="utf-8")
            output = "".join(
                line for line in new_text.splitlines(keepends=True)
                if not line.startswith("\\bibliography{")
            )
        kwargs["stdout"].write(output)
        kwargs["stderr"].write(self.latexdiff_stderr)
        return SimpleNamespace(returncode=self.latexdiff_returncode)

    def _pdflatex(self, cwd: Path, tex_name: str) -> SimpleNamespace:
        stem = Path(tex_name).stem
        if self.write_aux:
            aux = "\\relax\n"
            if self.citations:
                aux += "\\citation{knuth1984}\n\\bibdata{references}\n"
            (cwd / f"{stem}.aux").write_text(aux, encoding="utf-8")
        if self.write_pdf:
            write_pdf(cwd / f"{stem}.pdf")
        return SimpleNamespace(returncode=self.pdflatex_returncode)

    def _bibtex(self, cwd: Path, stem: str) -> SimpleNamespace:
        if self.write_bbl:
            (cwd / f"{stem}.bbl").write_text("\\begin{thebibliography}{1}\n\\end{thebibliography}\n")
        return SimpleNamespace(returncode=self.bibtex_returncode)


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """Working directory with an old version in v1/ and the new one at the top."""

    workdir = tmp_path / "paper"
    write_tex(workdir / "v1" / "root.tex", "Old text \\cite{knuth1984}.")
    write_tex(workdir / "root.tex", "New text \\cite{knuth1984}.")
    return workdir


@pytest.fixture()
def toolchain(monkeypatch: pytest.MonkeyPatch) -> FakeToolchain:
    fake = FakeToolchain()
    monkeypatch.setattr("texdiff.runner.subprocess.run", fake)
    monkeypatch.setattr("texdiff.builder.which", lambda tool: f"/usr/bin/{tool}")
    return fake


@pytest.fixture()
def diff_config(project: Path, tmp_path: Path) -> DiffConfig:
    return DiffConfig(workdir=project, warnings_file=tmp_path / "latexdiff-warnings.txt")


@pytest.fixture()
def touch(tmp_path: Path) -> Callable[..., Path]:
    def _touch(*names: str, content: str = "x") -> Path:
        for name in names:
            target = tmp_path / name
            if target.suffix == ".pdf":
                write_pdf(target)
            else:
                target.write_text(content)
        return tmp_path

    return _touch
