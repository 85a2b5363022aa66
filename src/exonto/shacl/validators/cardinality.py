from typing import List

from rdflib import Graph

from ...ns import SH
from ..model import PropertyShape, Term, ValidationResult
from .helpers import build_violation, get_property_values


def validate(graph: Graph, focus_node: Term, shape: PropertyShape) -> List[ValidationResult]:
    """sh:minCount / sh:maxCount."""
    if shape.min_count is None and shape.max_count is None:
        return []

    count = len(get_property_values(graph, focus_node, shape.path))
    results = []

    if shape.min_count is not None and count < shape.min_count:
        results.append(
            build_violation(
                focus_node,
                shape,
                f"Property has too few values (expected at least {shape.min_count}, found {count})",
                {
                    "constraint_component": SH.MinCountConstraintComponent,
                    "min_count": shape.min_count,
                    "actual_count": count,
                },
            )
        )

    if shape.max_count is not None and count > shape.max_count:
        results.append(
            build_violation(
                focus_node,
                shape,
                f"Property has too many values (expected at most {shape.max_count}, found {count})",
                {
                    "constraint_component": SH.MaxCountConstraintComponent,
                    "max_count": shape.max_count,
                    "actual_count": count,
                },
            )
        )

    return results
