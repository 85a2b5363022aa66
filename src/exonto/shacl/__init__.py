from .model import (
    NodeShape,
    PropertyShape,
    Severity,
    SparqlConstraint,
    ValidationReport,
    ValidationResult,
)
from .reader import parse_shapes
from .validator import Validator, run, select_focus_nodes, validate
from .writer import to_graph, to_turtle

__all__ = [
    "NodeShape",
    "PropertyShape",
    "Severity",
    "SparqlConstraint",
    "ValidationReport",
    "ValidationResult",
    "Validator",
    "parse_shapes",
    "run",
    "select_focus_nodes",
    "to_graph",
    "to_turtle",
    "validate",
]
