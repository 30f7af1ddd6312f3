"""
Custom exceptions for texdiff.

This module defines all custom exceptions used throughout the library.
"""


class TexDiffException(Exception):
    """Base exception for all texdiff errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown texdiff error occurred."


class MissingSourceError(TexDiffException):
    """Raised when a resolved LaTeX source file does not exist."""

    def __init__(self, message: str = "", path: str = "") -> None:
        super().__init__(message)
        self.path = path

    @property
    def default_message(self) -> str:
        return "LaTeX source file not found."


class ToolNotFoundError(TexDiffException):
    """Raised when an external executable cannot be started."""

    @property
    def default_message(self) -> str:
        return "Required external tool is not installed or not on PATH."


class DiffGenerationError(TexDiffException):
    """Raised when latexdiff produces no usable output."""

    def __init__(self, message: str = "", warnings: str = "") -> None:
        super().__init__(message)
        self.warnings = warnings

    @property
    def default_message(self) -> str:
        return "Failed to create diff file."


class MissingAuxiliaryError(TexDiffException):
    """Raised when the first typesetting pass does not create an .aux file."""

    @property
    def default_message(self) -> str:
        return "Typesetting pass did not create an auxiliary file."
