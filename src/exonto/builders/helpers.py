import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from rdflib import BNode, Literal, URIRef
from rdflib.namespace import RDF, XSD

from .. import iri as IRI
from ..ns import CORE

Subject = Union[URIRef, BNode]
Term = Union[URIRef, BNode, Literal]
Triple = Tuple[Subject, URIRef, Term]


def type_triple(subject: Subject, rdf_class: URIRef) -> Triple:
    return (subject, RDF.type, rdf_class)


def datatype_property(subject: Subject, predicate: URIRef, value: Any, datatype: Optional[URIRef] = None) -> Triple:
    if isinstance(value, Literal):
        return (subject, predicate, value)
    literal = Literal(value, datatype=datatype) if datatype is not None else to_literal(value)
    return (subject, predicate, literal)


def object_property(subject: Subject, predicate: URIRef, obj: Union[URIRef, BNode]) -> Triple:
    return (subject, predicate, obj)


def blank_node(label: Optional[str] = None) -> BNode:
    # Labels are prefixes only: each call still yields a fresh node.
    if label:
        return BNode(f"{label}_{BNode()}")
    return BNode()


def build_rdf_list(items: Sequence[Term]) -> Tuple[Union[URIRef, BNode], List[Triple]]:
    """
    Encodes `items` as an rdf:first / rdf:rest chain.

    Returns `(head, triples)`; an empty sequence yields `(rdf:nil, [])`.
    """
    if not items:
        return RDF.nil, []

    nodes = [BNode() for _ in items]
    triples: List[Triple] = []
    for i, item in enumerate(items):
        rest = nodes[i + 1] if i + 1 < len(nodes) else RDF.nil
        triples.append((nodes[i], RDF.first, item))
        triples.append((nodes[i], RDF.rest, rest))
    return nodes[0], triples


def to_literal(value: Any) -> Literal:
    if isinstance(value, bool):
        return Literal(value, datatype=XSD.boolean)
    if isinstance(value, int):
        return Literal(value, datatype=XSD.integer)
    if isinstance(value, float):
        return Literal(value, datatype=XSD.double)
    if isinstance(value, str):
        return Literal(value, datatype=XSD.string)
    if isinstance(value, datetime.datetime):
        return Literal(value, datatype=XSD.dateTime)
    if isinstance(value, datetime.date):
        return Literal(value, datatype=XSD.date)
    return Literal(value)


def elixir_term(value: Any) -> str:
    """
    Renders a plain Python value the way Elixir's `inspect/1` prints the equivalent term.

    `None` -> "nil", `True` -> "true", `"x"` -> `"x"` (double-quoted), lists as
    `[1, 2]`, tuples as `{1, 2}`, dicts as `%{"k" => 1}`.
    """
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\t", "\\t")
        return f'"{escaped}"'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return "[" + ", ".join(elixir_term(v) for v in value) + "]"
    if isinstance(value, tuple):
        return "{" + ", ".join(elixir_term(v) for v in value) + "}"
    if isinstance(value, dict):
        return "%{" + ", ".join(f"{elixir_term(k)} => {elixir_term(v)}" for k, v in value.items()) + "}"
    return str(value)


def deduplicate_triples(triple_lists: Iterable[Any]) -> List[Triple]:
    return _unique(_flatten(triple_lists))


def finalize_triples(triples: Iterable[Any]) -> List[Triple]:
    """Flattens nested lists, drops `None`, removes duplicates keeping the first occurrence."""
    return _unique(t for t in _flatten(triples) if t is not None)


def dual_type_triples(subject: Subject, base_class: URIRef, specialized_class: URIRef) -> List[Triple]:
    return [type_triple(subject, base_class), type_triple(subject, specialized_class)]


def optional_datetime_property(subject: Subject, predicate: URIRef, value: Optional[datetime.datetime]) -> Optional[Triple]:
    if value is None:
        return None
    return datatype_property(subject, predicate, value, XSD.dateTime)


def optional_string_property(subject: Subject, predicate: URIRef, value: Optional[str]) -> Optional[Triple]:
    if value is None:
        return None
    return datatype_property(subject, predicate, value, XSD.string)


def filter_by_subject(triples: Iterable[Triple], subject: Subject) -> List[Triple]:
    return [t for t in triples if t[0] == subject]


def in_namespace(term: Any, namespace: str) -> bool:
    return isinstance(term, URIRef) and str(term).startswith(str(namespace))


def location_triples(subject: Subject, location: Any, context) -> List[Triple]:
    """
    `core:hasSourceLocation` link for `subject`.

    Empty unless both a location with a start line and a file path are known.
    Accepts a `SourceLocation` or a mapping with `start_line` / `line` / `end_line`.
    """
    if location is None or not context.file_path:
        return []

    if isinstance(location, dict):
        start_line = location.get("start_line") or location.get("line")
        end_line = location.get("end_line")
    else:
        start_line = getattr(location, "start_line", None)
        end_line = getattr(location, "end_line", None)

    if not isinstance(start_line, int) or start_line <= 0:
        return []

    file_iri = IRI.for_source_file(context.base_iri, context.file_path)
    location_iri = IRI.for_source_location(file_iri, start_line, end_line or start_line)
    return [object_property(subject, CORE.hasSourceLocation, location_iri)]


def _flatten(items: Iterable[Any]):
    for item in items:
        if isinstance(item, list):
            yield from _flatten(item)
        else:
            yield item


def _unique(triples: Iterable[Triple]) -> List[Triple]:
    seen = set()
    result = []
    for t in triples:
        if t not in seen:
            seen.add(t)
            result.append(t)
    return result
