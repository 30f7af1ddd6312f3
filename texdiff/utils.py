"""Utility functions shared by the texdiff commands."""

from __future__ import annotations

import logging
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError
from rich.console import Console
from rich.logging import RichHandler

from .types import PDFSummary

LOGGER = logging.getLogger("texdiff.utils")


def get_logger(name: str = "texdiff", level: int = logging.WARNING) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        # stderr is looked up per record, so redirected streams keep working.
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level)
    return logger


def get_pdf_summary(pdf_path: Path) -> PDFSummary:
    """Return size and page count of *pdf_path*.

    Read failures are recorded on the summary rather than raised: a PDF that
    pdflatex left half-written is still worth reporting.
    """

    summary = PDFSummary(path=pdf_path, file_size=pdf_path.stat().st_size)
    try:
        reader = PdfReader(str(pdf_path))
        summary.num_pages = len(reader.pages)
    except (PyPdfError, OSError, ValueError) as exc:
        LOGGER.warning("Could not read %s: %s", pdf_path, exc)
        summary.error = str(exc) or exc.__class__.__name__
    return summary


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500 KB")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"
