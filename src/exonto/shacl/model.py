from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Pattern, Union

from rdflib import BNode, Literal, URIRef

from ..errors import EvaluationError
from ..ns import SH

ShapeId = Union[URIRef, BNode]
Term = Union[URIRef, BNode, Literal]


class Severity(Enum):
    """Result severity. Only `VIOLATION` affects conformance."""

    VIOLATION = "violation"
    WARNING = "warning"
    INFO = "info"

    @property
    def iri(self) -> URIRef:
        return SEVERITY_IRIS[self]

    @classmethod
    def from_iri(cls, iri: Any) -> "Severity":
        for severity, severity_iri in SEVERITY_IRIS.items():
            if iri == severity_iri:
                return severity
        raise ValueError(f"Unknown severity {iri}")


SEVERITY_IRIS = {
    Severity.VIOLATION: SH.Violation,
    Severity.WARNING: SH.Warning,
    Severity.INFO: SH.Info,
}


@dataclass
class PropertyShape:
    """
    Constraints on the values reachable from a focus node through `path`.

    Every facet is optional; a shape with no facet set always passes.
    """

    id: ShapeId
    path: URIRef
    message: Optional[str] = None
    severity: Severity = Severity.VIOLATION

    # Cardinality
    min_count: Optional[int] = None
    max_count: Optional[int] = None

    # Type
    datatype: Optional[URIRef] = None
    class_: Optional[URIRef] = None

    # String
    pattern: Optional[Pattern] = None
    min_length: Optional[int] = None

    # Value
    min_inclusive: Optional[Union[int, float]] = None
    max_inclusive: Optional[Union[int, float]] = None
    in_: List[Term] = field(default_factory=list)
    has_value: Optional[Term] = None

    # Qualified
    qualified_class: Optional[URIRef] = None
    qualified_min_count: Optional[int] = None


@dataclass
class SparqlConstraint:
    """
    A SELECT query expressing the failure condition for `$this`.

    Each returned row is one violation; no rows means the focus node passes.
    """

    source_shape_id: ShapeId
    select_query: str
    message: Optional[str] = None
    # prefix -> namespace, prepended to the query as PREFIX declarations
    prefixes: Dict[str, str] = field(default_factory=dict)


@dataclass
class NodeShape:
    id: ShapeId
    target_classes: List[URIRef] = field(default_factory=list)
    property_shapes: List[PropertyShape] = field(default_factory=list)
    sparql_constraints: List[SparqlConstraint] = field(default_factory=list)
    # Set when the shape is itself an rdfs:Class: its instances are targets too.
    implicit_class_target: Optional[URIRef] = None


@dataclass
class ValidationResult:
    focus_node: Term
    source_shape: ShapeId
    message: str
    path: Optional[URIRef] = None
    severity: Severity = Severity.VIOLATION
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_violation(self) -> bool:
        return self.severity is Severity.VIOLATION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "focus_node": str(self.focus_node),
            "path": str(self.path) if self.path is not None else None,
            "source_shape": str(self.source_shape),
            "severity": self.severity.value,
            "message": self.message,
            "details": {k: str(v) if isinstance(v, (URIRef, BNode, Literal)) else v for k, v in self.details.items()},
        }


@dataclass
class ValidationReport:
    """
    Outcome of a validation run.

    `conforms` is derived from `results` on every access. `errors` lists
    constraints that could not be evaluated; they never affect conformance.
    """

    results: List[ValidationResult] = field(default_factory=list)
    errors: List[EvaluationError] = field(default_factory=list)

    @property
    def conforms(self) -> bool:
        return not any(r.severity is Severity.VIOLATION for r in self.results)

    @property
    def violations(self) -> List[ValidationResult]:
        return [r for r in self.results if r.severity is Severity.VIOLATION]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conforms": self.conforms,
            "results": [r.to_dict() for r in self.results],
            "errors": [str(e) for e in self.errors],
        }
