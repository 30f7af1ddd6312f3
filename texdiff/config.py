"""Configuration objects for the diff builder and the artifact cleaner."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Tuple

DEFAULT_OLD_DIR = "v1"
DEFAULT_NEW_DIR = "."
DEFAULT_OUTPUT_NAME = "root-diff"
DEFAULT_SOURCE_NAME = "root.tex"
DEFAULT_BIBLIOGRAPHY = "references"

LATEXDIFF = "latexdiff"
PDFLATEX = "pdflatex"
BIBTEX = "bibtex"

# Load-bearing for citation resolution; see builder.CONVERGENCE_SCHEDULE.
TYPESET_PASSES = 6
BIBLIOGRAPHY_PASSES = 2

WARNINGS_FILENAME = "latexdiff-warnings.txt"


@dataclass
class DiffConfig:
    """Settings for one diff build.

    Version directories are relative to ``workdir`` unless absolute; ``"."``
    refers to ``workdir`` itself. All outputs are written to ``workdir``.
    """

    workdir: Path = field(default_factory=Path.cwd)
    old_dir: str = DEFAULT_OLD_DIR
    new_dir: str = DEFAULT_NEW_DIR
    output_name: str = DEFAULT_OUTPUT_NAME
    source_name: str = DEFAULT_SOURCE_NAME
    bibliography: str = DEFAULT_BIBLIOGRAPHY
    latexdiff: str = LATEXDIFF
    pdflatex: str = PDFLATEX
    bibtex: str = BIBTEX
    latexdiff_args: Tuple[str, ...] = ()
    warnings_file: Optional[Path] = None

    def __post_init__(self) -> None:
        self.workdir = Path(self.workdir).expanduser().resolve()
        if not self.output_name or os.sep in self.output_name:
            raise ValueError(f"Invalid output name: {self.output_name!r}")
        tex_path = self.tex_path.resolve()
        for source in (self.old_path, self.new_path):
            if tex_path == source.resolve():
                raise ValueError(
                    f"Invalid output name: {self.output_name!r} would overwrite {source}"
                )
        if self.warnings_file is None:
            self.warnings_file = Path(tempfile.gettempdir()) / WARNINGS_FILENAME
        else:
            self.warnings_file = Path(self.warnings_file)

    @classmethod
    def from_options(
        cls,
        old_dir: Optional[str] = None,
        new_dir: Optional[str] = None,
        output_name: Optional[str] = None,
        *,
        workdir: Optional[os.PathLike[str] | str] = None,
        latexdiff_args: Sequence[str] = (),
        **overrides: Optional[str],
    ) -> "DiffConfig":
        """Build a config from CLI values, ignoring options left unset."""

        values = {key: value for key, value in overrides.items() if value is not None}
        return cls(
            workdir=Path(workdir) if workdir is not None else Path.cwd(),
            old_dir=old_dir or DEFAULT_OLD_DIR,
            new_dir=new_dir or DEFAULT_NEW_DIR,
            output_name=output_name or DEFAULT_OUTPUT_NAME,
            latexdiff_args=tuple(latexdiff_args),
            **values,
        )

    def resolve_source(self, version_dir: str) -> Path:
        if version_dir == ".":
            return self.workdir / self.source_name
        return self.workdir / version_dir / self.source_name

    @property
    def old_path(self) -> Path:
        return self.resolve_source(self.old_dir)

    @property
    def new_path(self) -> Path:
        return self.resolve_source(self.new_dir)

    def output(self, suffix: str) -> Path:
        """Return ``<workdir>/<output_name><suffix>``, e.g. ``output(".aux")``."""

        return self.workdir / f"{self.output_name}{suffix}"

    @property
    def tex_path(self) -> Path:
        return self.output(".tex")

    @property
    def aux_path(self) -> Path:
        return self.output(".aux")

    @property
    def bbl_path(self) -> Path:
        return self.output(".bbl")

    @property
    def pdf_path(self) -> Path:
        return self.output(".pdf")


@dataclass
class CleanConfig:
    """Settings for the artifact cleaner."""

    workdir: Path = field(default_factory=Path.cwd)
    diff_name: str = DEFAULT_OUTPUT_NAME
    source_name: str = DEFAULT_SOURCE_NAME

    def __post_init__(self) -> None:
        self.workdir = Path(self.workdir).expanduser().resolve()

    @property
    def source_stem(self) -> str:
        return Path(self.source_name).stem

    @property
    def source_path(self) -> Path:
        return self.workdir / self.source_name
