import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

from opentelemetry import trace
from rdflib import Graph
from rdflib.namespace import RDF

from ..errors import EvaluationError
from .model import NodeShape, Term, ValidationReport, ValidationResult
from .reader import parse_shapes
from .validators import PROPERTY_VALIDATORS
from .validators import sparql as sparql_validator
from .validators.sparql import QueryExecutor

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class Validator:
    """
    Evaluates node shapes against a data graph.

    **Key Responsibilities**:
    *   **Targeting**: selects focus nodes by asserted `rdf:type`.
    *   **Evaluation**: runs every property facet and query constraint of a shape on each focus node.
    *   **Isolation**: a failing query constraint becomes an `EvaluationError`; the run continues.

    Shapes are independent of each other, so `parallel=True` evaluates them
    on a thread pool. Results are sorted, so both modes produce the same report.
    """

    def __init__(self, executor: Optional[QueryExecutor] = None, parallel: bool = False, max_workers: Optional[int] = None):
        self.executor = executor
        self.parallel = parallel
        self.max_workers = max_workers

    def validate(self, data_graph: Graph, shapes: Sequence[NodeShape]) -> ValidationReport:
        with tracer.start_as_current_span("shacl.validate") as span:
            span.set_attribute("shacl.shapes", len(shapes))
            span.set_attribute("shacl.parallel", self.parallel)

            if self.parallel and len(shapes) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                    outcomes = list(pool.map(lambda s: self._validate_shape(data_graph, s), shapes))
            else:
                outcomes = [self._validate_shape(data_graph, s) for s in shapes]

            results: List[ValidationResult] = []
            errors: List[EvaluationError] = []
            for shape_results, shape_errors in outcomes:
                results.extend(shape_results)
                errors.extend(shape_errors)

            results.sort(key=_result_sort_key)
            report = ValidationReport(results=results, errors=errors)

            span.set_attribute("shacl.results", len(results))
            span.set_attribute("shacl.errors", len(errors))
            span.set_attribute("shacl.conforms", report.conforms)
            logger.info(
                f"Validation finished: {len(shapes)} shapes, {len(results)} results, "
                f"{len(errors)} evaluation errors, conforms={report.conforms}"
            )
            return report

    def _validate_shape(self, data_graph: Graph, shape: NodeShape) -> Tuple[List[ValidationResult], List[EvaluationError]]:
        results: List[ValidationResult] = []
        errors: List[EvaluationError] = []

        for focus_node in select_focus_nodes(data_graph, shape):
            for prop in shape.property_shapes:
                for check in PROPERTY_VALIDATORS:
                    results.extend(check(data_graph, focus_node, prop))

            if shape.sparql_constraints:
                with tracer.start_as_current_span("shacl.sparql") as span:
                    span.set_attribute("shacl.shape", str(shape.id))
                    found = sparql_validator.validate(data_graph, focus_node, shape.sparql_constraints, self.executor, errors)
                    span.set_attribute("shacl.results", len(found))
                    results.extend(found)

        return results, errors


def select_focus_nodes(data_graph: Graph, shape: NodeShape) -> List[Term]:
    """Subjects typed with any target class (or the implicit class target), deduplicated, in stable order."""
    classes = list(shape.target_classes)
    if shape.implicit_class_target is not None and shape.implicit_class_target not in classes:
        classes.append(shape.implicit_class_target)

    seen = set()
    nodes: List[Term] = []
    for cls in classes:
        for subject in sorted(data_graph.subjects(RDF.type, cls), key=str):
            if subject not in seen:
                seen.add(subject)
                nodes.append(subject)
    return nodes


def _result_sort_key(result: ValidationResult):
    return (
        str(result.focus_node),
        str(result.source_shape),
        str(result.details.get("constraint_component", "")),
        str(result.path or ""),
    )


def validate(
    data_graph: Graph,
    shapes: Sequence[NodeShape],
    executor: Optional[QueryExecutor] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> ValidationReport:
    return Validator(executor=executor, parallel=parallel, max_workers=max_workers).validate(data_graph, shapes)


def run(data_graph: Graph, shapes_graph: Graph, **opts) -> ValidationReport:
    """Reads the shapes from `shapes_graph`, then validates."""
    return validate(data_graph, parse_shapes(shapes_graph), **opts)
