"""Repairs applied to latexdiff output and inspection of typesetting files.

``latexdiff --flatten`` inlines included files and in doing so drops the
``\\bibliography{...}`` directive, which leaves bibtex with no database to
read. The style directive survives, so the missing line is restored right
after it.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Tuple

LOGGER = logging.getLogger("texdiff.patching")

BIBLIOGRAPHY_RE = re.compile(r"\\bibliography\{")
BIBLIOGRAPHY_STYLE_RE = re.compile(r"\\bibliographystyle\b")
CITATION_RE = re.compile(r"\\citation\b")


def has_bibliography(text: str) -> bool:
    return BIBLIOGRAPHY_RE.search(text) is not None


def has_bibliography_style(text: str) -> bool:
    return BIBLIOGRAPHY_STYLE_RE.search(text) is not None


def insert_bibliography(text: str, resource: str) -> Tuple[str, bool]:
    """Return *text* with ``\\bibliography{resource}`` restored.

    The directive is inserted on its own line directly after the first
    ``\\bibliographystyle`` line. Text that already has a bibliography
    directive, or has no style directive, is returned unchanged. The second
    element of the tuple tells whether a change was made.
    """

    if has_bibliography(text) or not has_bibliography_style(text):
        return text, False

    lines = text.splitlines(keepends=True)
    for index, line in enumerate(lines):
        if not has_bibliography_style(line):
            continue
        if not line.endswith("\n"):
            lines[index] = line + "\n"
        newline = "\r\n" if line.endswith("\r\n") else "\n"
        lines.insert(index + 1, f"\\bibliography{{{resource}}}{newline}")
        LOGGER.debug("Inserted \\bibliography{%s} after line %d", resource, index + 1)
        return "".join(lines), True

    return text, False


def patch_bibliography(tex_path: Path, resource: str) -> bool:
    """Restore the bibliography directive in *tex_path* in place."""

    text = tex_path.read_text(encoding="utf-8", errors="surrogateescape")
    patched, changed = insert_bibliography(text, resource)
    if changed:
        tex_path.write_text(patched, encoding="utf-8", errors="surrogateescape")
    return changed


def needs_bibliography(aux_path: Path) -> bool:
    """Whether the auxiliary file records any ``\\citation`` entries."""

    try:
        text = aux_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False
    return CITATION_RE.search(text) is not None


__all__ = [
    "has_bibliography",
    "has_bibliography_style",
    "insert_bibliography",
    "patch_bibliography",
    "needs_bibliography",
]
