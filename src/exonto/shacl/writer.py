from rdflib import BNode, Graph, Literal
from rdflib.namespace import RDF, XSD

from ..ns import SH, bind_prefixes
from .model import ValidationReport


def to_graph(report: ValidationReport) -> Graph:
    """Standard `sh:ValidationReport` rendering of a report."""
    graph = bind_prefixes(Graph())
    report_node = BNode()
    graph.add((report_node, RDF.type, SH.ValidationReport))
    graph.add((report_node, SH.conforms, Literal(report.conforms, datatype=XSD.boolean)))

    for result in report.results:
        node = BNode()
        graph.add((report_node, SH.result, node))
        graph.add((node, RDF.type, SH.ValidationResult))
        graph.add((node, SH.focusNode, result.focus_node))
        graph.add((node, SH.sourceShape, result.source_shape))
        graph.add((node, SH.resultSeverity, result.severity.iri))
        if result.path is not None:
            graph.add((node, SH.resultPath, result.path))
        if result.message:
            graph.add((node, SH.resultMessage, Literal(result.message)))
        component = result.details.get("constraint_component")
        if component is not None:
            graph.add((node, SH.sourceConstraintComponent, component))

    return graph


def to_turtle(report: ValidationReport) -> str:
    return to_graph(report).serialize(format="turtle")
