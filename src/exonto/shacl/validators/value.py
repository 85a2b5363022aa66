from typing import List

from rdflib import Graph

from ...ns import SH
from ..model import PropertyShape, Term, ValidationResult
from .helpers import build_violation, extract_number, get_property_values


def validate(graph: Graph, focus_node: Term, shape: PropertyShape) -> List[ValidationResult]:
    """sh:in / sh:hasValue / sh:minInclusive / sh:maxInclusive."""
    if not shape.in_ and shape.has_value is None and shape.min_inclusive is None and shape.max_inclusive is None:
        return []

    values = get_property_values(graph, focus_node, shape.path)
    results = []

    if shape.in_:
        for value in values:
            if value not in shape.in_:
                results.append(
                    build_violation(
                        focus_node,
                        shape,
                        "Value is not one of the allowed values",
                        {
                            "constraint_component": SH.InConstraintComponent,
                            "allowed_values": list(shape.in_),
                            "actual_value": value,
                        },
                    )
                )

    if shape.has_value is not None and shape.has_value not in values:
        results.append(
            build_violation(
                focus_node,
                shape,
                "Required value is missing",
                {
                    "constraint_component": SH.HasValueConstraintComponent,
                    "required_value": shape.has_value,
                },
            )
        )

    numbers = [n for n in (extract_number(v) for v in values) if n is not None]

    if shape.min_inclusive is not None:
        for num in numbers:
            if num < shape.min_inclusive:
                results.append(
                    build_violation(
                        focus_node,
                        shape,
                        f"Value is below minimum (expected >= {shape.min_inclusive}, found {num})",
                        {
                            "constraint_component": SH.MinInclusiveConstraintComponent,
                            "min_inclusive": shape.min_inclusive,
                            "actual_value": num,
                        },
                    )
                )

    if shape.max_inclusive is not None:
        for num in numbers:
            if num > shape.max_inclusive:
                results.append(
                    build_violation(
                        focus_node,
                        shape,
                        f"Value exceeds maximum (expected <= {shape.max_inclusive}, found {num})",
                        {
                            "constraint_component": SH.MaxInclusiveConstraintComponent,
                            "max_inclusive": shape.max_inclusive,
                            "actual_value": num,
                        },
                    )
                )

    return results
