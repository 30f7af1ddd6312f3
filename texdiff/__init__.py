"""
texdiff - Marked-up LaTeX diff PDFs from two document versions.

The library drives ``latexdiff``, ``pdflatex`` and ``bibtex`` to turn two
versions of a LaTeX document into a single PDF that shows what changed, and
cleans up the build artifacts afterwards.

Quick Start:
    >>> from texdiff import DiffBuilder, DiffConfig
    >>> result = DiffBuilder(DiffConfig(old_dir='v1', new_dir='.')).build()
    >>> result.output_pdf
    PosixPath('.../root-diff.pdf')

Main Classes:
    - DiffBuilder: Diff generation and the typesetting schedule
    - ArtifactCleaner: Removal of generated files

Configuration:
    - DiffConfig: Settings for a diff build
    - CleanConfig: Settings for a cleanup

Data Classes:
    - StepResult / StepStatus: Outcome of each build step
    - BuildResult: Outcome of a diff build
    - CleanupPlan / CleanupResult: Cleanup candidates and outcome

Exceptions:
    - TexDiffException: Base exception
    - MissingSourceError: A LaTeX source file does not exist
    - ToolNotFoundError: An external tool cannot be started
    - DiffGenerationError: latexdiff produced no output
    - MissingAuxiliaryError: pdflatex produced no .aux file

For CLI usage, use the 'texdiff', 'diff-builder' or 'artifact-cleaner'
commands after installation.
"""

__version__ = "1.0.0"
__author__ = "texdiff Contributors"
__license__ = "MIT"

# Core classes
from texdiff.builder import DiffBuilder, build_diff
from texdiff.cleaner import ArtifactCleaner, clean_artifacts

# Configuration
from texdiff.config import CleanConfig, DiffConfig

# Data types
from texdiff.types import (
    BuildResult,
    CleanupPlan,
    CleanupResult,
    PDFSummary,
    StepResult,
    StepStatus,
)

# Exceptions
from texdiff.exceptions import (
    TexDiffException,
    MissingSourceError,
    ToolNotFoundError,
    DiffGenerationError,
    MissingAuxiliaryError,
)

# Reporting
from texdiff.reporter import ConsoleReporter, RecordingReporter

__all__ = [
    # Main classes
    "DiffBuilder",
    "ArtifactCleaner",
    "build_diff",
    "clean_artifacts",
    # Configuration
    "DiffConfig",
    "CleanConfig",
    # Data types
    "BuildResult",
    "CleanupPlan",
    "CleanupResult",
    "PDFSummary",
    "StepResult",
    "StepStatus",
    # Exceptions
    "TexDiffException",
    "MissingSourceError",
    "ToolNotFoundError",
    "DiffGenerationError",
    "MissingAuxiliaryError",
    # Reporting
    "ConsoleReporter",
    "RecordingReporter",
    # Version info
    "__version__",
]
