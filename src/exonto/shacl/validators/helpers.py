from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from rdflib import Graph, Literal, URIRef
from rdflib.namespace import RDF, XSD

from ..model import PropertyShape, Term, ValidationResult


def _term_sort_key(term: Term):
    return (type(term).__name__, str(term))


def get_property_values(graph: Graph, focus_node: Term, path: URIRef) -> List[Term]:
    """Objects of `(focus_node, path, ?)`, in a stable order."""
    if isinstance(focus_node, Literal):
        return []
    return sorted(set(graph.objects(focus_node, path)), key=_term_sort_key)


def build_violation(focus_node: Term, shape: PropertyShape, default_message: str, details: Dict[str, Any]) -> ValidationResult:
    return ValidationResult(
        focus_node=focus_node,
        path=shape.path,
        source_shape=shape.id,
        severity=shape.severity,
        message=shape.message or default_message,
        details=details,
    )


def extract_string(term: Term) -> Optional[str]:
    """Lexical form of a literal; `None` for IRIs and blank nodes."""
    if isinstance(term, Literal):
        return str(term)
    return None


def extract_number(term: Term) -> Optional[Union[int, float]]:
    if not isinstance(term, Literal):
        return None
    value = term.toPython()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def literal_datatype(term: Literal) -> URIRef:
    if term.datatype is not None:
        return term.datatype
    # Untyped literals are xsd:string, or rdf:langString when tagged.
    return RDF.langString if term.language else XSD.string


def is_datatype(term: Term, datatype: URIRef) -> bool:
    return isinstance(term, Literal) and literal_datatype(term) == datatype


def is_instance_of(graph: Graph, term: Term, class_iri: URIRef) -> bool:
    if isinstance(term, Literal):
        return False
    return (term, RDF.type, class_iri) in graph
