from typing import Any, Optional


class ExontoError(Exception):
    """Base class for every error raised by the analysis and validation pipeline."""


class ConfigurationError(ExontoError):
    """
    Caller misuse.

    Raised when an operation is invoked with an unusable configuration
    (e.g. `walk` without any callback, an empty base IRI, an unknown output format).
    Never retried.
    """


class ParseError(ExontoError):
    """
    Malformed source text.

    Recoverable per file: project-wide analysis records it next to the file path
    and moves on when `continue_on_error` is enabled.
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None, file: Optional[str] = None):
        self.message = message
        self.line = line
        self.column = column
        self.file = file
        super().__init__(self._format())

    def _format(self) -> str:
        where = self.file or "nofile"
        if self.line is not None:
            where = f"{where}:{self.line}"
            if self.column is not None:
                where = f"{where}:{self.column}"
        return f"{where}: {self.message}"


class EvaluationError(ExontoError):
    """A query-based constraint could not be executed for one focus node."""

    def __init__(self, message: str, constraint: Any = None, focus_node: Any = None):
        self.message = message
        self.constraint = constraint
        self.focus_node = focus_node
        super().__init__(message)


class ShapeParseError(ExontoError):
    """The shapes graph is malformed (missing sh:path, broken RDF list, invalid regex)."""
