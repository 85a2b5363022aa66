import logging
import re
from typing import Dict, List, Optional

from rdflib import Graph, Literal, URIRef
from rdflib.namespace import RDF, RDFS

from ..errors import ShapeParseError
from ..ns import SH
from .model import NodeShape, PropertyShape, Severity, ShapeId, SparqlConstraint, Term

logger = logging.getLogger(__name__)


def parse_shapes(graph: Graph) -> List[NodeShape]:
    """
    Reads every `sh:NodeShape` of a shapes graph.

    Raises:
        ShapeParseError: a property shape without `sh:path`, an invalid
            `sh:pattern`, a malformed `sh:in` list or a query constraint
            without `sh:select`.
    """
    shapes = []
    for shape_id in sorted(set(graph.subjects(RDF.type, SH.NodeShape)), key=str):
        shapes.append(_parse_node_shape(graph, shape_id))
    logger.info(f"Read {len(shapes)} node shapes")
    return shapes


def _parse_node_shape(graph: Graph, shape_id: ShapeId) -> NodeShape:
    targets = sorted((t for t in graph.objects(shape_id, SH.targetClass) if isinstance(t, URIRef)), key=str)
    properties = [
        _parse_property_shape(graph, p) for p in sorted(graph.objects(shape_id, SH.property), key=str)
    ]
    constraints = [
        _parse_sparql_constraint(graph, shape_id, c) for c in sorted(graph.objects(shape_id, SH.sparql), key=str)
    ]
    implicit = shape_id if isinstance(shape_id, URIRef) and (shape_id, RDF.type, RDFS.Class) in graph else None

    return NodeShape(
        id=shape_id,
        target_classes=targets,
        property_shapes=properties,
        sparql_constraints=constraints,
        implicit_class_target=implicit,
    )


def _parse_property_shape(graph: Graph, shape_id: ShapeId) -> PropertyShape:
    path = graph.value(shape_id, SH.path)
    if not isinstance(path, URIRef):
        raise ShapeParseError(f"Property shape {shape_id} has no sh:path IRI")

    shape = PropertyShape(id=shape_id, path=path)
    shape.message = _string(graph.value(shape_id, SH.message))
    shape.min_count = _int(graph.value(shape_id, SH.minCount))
    shape.max_count = _int(graph.value(shape_id, SH.maxCount))
    shape.datatype = _iri(graph.value(shape_id, SH.datatype))
    shape.class_ = _iri(graph.value(shape_id, SH["class"]))
    shape.min_length = _int(graph.value(shape_id, SH.minLength))
    shape.min_inclusive = _number(graph.value(shape_id, SH.minInclusive))
    shape.max_inclusive = _number(graph.value(shape_id, SH.maxInclusive))
    shape.has_value = graph.value(shape_id, SH.hasValue)

    pattern = graph.value(shape_id, SH.pattern)
    if pattern is not None:
        try:
            shape.pattern = re.compile(str(pattern))
        except re.error as e:
            raise ShapeParseError(f"Invalid sh:pattern {str(pattern)!r} on {shape_id}: {e}") from e

    in_list = graph.value(shape_id, SH["in"])
    if in_list is not None:
        shape.in_ = read_rdf_list(graph, in_list)

    qualified = graph.value(shape_id, SH.qualifiedValueShape)
    if qualified is not None:
        shape.qualified_class = _iri(graph.value(qualified, SH["class"]))
        shape.qualified_min_count = _int(graph.value(shape_id, SH.qualifiedMinCount))

    severity = graph.value(shape_id, SH.severity)
    if severity is not None:
        try:
            shape.severity = Severity.from_iri(severity)
        except ValueError as e:
            raise ShapeParseError(str(e)) from e

    return shape


def _parse_sparql_constraint(graph: Graph, shape_id: ShapeId, node: Term) -> SparqlConstraint:
    select = graph.value(node, SH.select)
    if select is None:
        raise ShapeParseError(f"SPARQL constraint on {shape_id} has no sh:select")

    prefixes: Dict[str, str] = {}
    for prefixes_node in graph.objects(node, SH.prefixes):
        for decl in graph.objects(prefixes_node, SH.declare):
            prefix = graph.value(decl, SH.prefix)
            namespace = graph.value(decl, SH.namespace)
            if prefix is not None and namespace is not None:
                prefixes[str(prefix)] = str(namespace)

    return SparqlConstraint(
        source_shape_id=shape_id,
        select_query=str(select),
        message=_string(graph.value(node, SH.message)),
        prefixes=prefixes,
    )


def read_rdf_list(graph: Graph, head: Term) -> List[Term]:
    """Members of an rdf:first / rdf:rest chain. Raises ShapeParseError on broken or cyclic lists."""
    items: List[Term] = []
    visited = set()
    node = head
    while node != RDF.nil:
        if node in visited:
            raise ShapeParseError(f"Cyclic RDF list at {node}")
        visited.add(node)
        first = graph.value(node, RDF.first)
        rest = graph.value(node, RDF.rest)
        if first is None or rest is None:
            raise ShapeParseError(f"Malformed RDF list node {node}")
        items.append(first)
        node = rest
    return items


# ==============================================================================
#  LITERAL COERCION
# ==============================================================================


def _string(term: Optional[Term]) -> Optional[str]:
    return str(term) if term is not None else None


def _iri(term: Optional[Term]) -> Optional[URIRef]:
    return term if isinstance(term, URIRef) else None


def _int(term: Optional[Term]) -> Optional[int]:
    if term is None:
        return None
    try:
        return int(term.toPython() if isinstance(term, Literal) else term)
    except (TypeError, ValueError) as e:
        raise ShapeParseError(f"Expected an integer, got {term!r}") from e


def _number(term: Optional[Term]):
    if not isinstance(term, Literal):
        return None
    value = term.toPython()
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        try:
            return float(str(term))
        except ValueError as e:
            raise ShapeParseError(f"Expected a number, got {term!r}") from e
    return value
