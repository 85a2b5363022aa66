from .analyzer import JsonAstParser, ProjectAnalyzer, walk
from .builders import Context
from .config import Config
from .errors import ConfigurationError, EvaluationError, ExontoError, ParseError, ShapeParseError
from .shacl import ValidationReport, parse_shapes, validate

__all__ = [
    "JsonAstParser", "ProjectAnalyzer", "walk",
    "Context",
    "Config",
    "ExontoError", "ConfigurationError", "EvaluationError", "ParseError", "ShapeParseError",
    "ValidationReport", "parse_shapes", "validate",
]
