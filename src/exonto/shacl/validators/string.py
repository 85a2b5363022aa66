from typing import List

from rdflib import Graph

from ...ns import SH
from ..model import PropertyShape, Term, ValidationResult
from .helpers import build_violation, extract_string, get_property_values


def validate(graph: Graph, focus_node: Term, shape: PropertyShape) -> List[ValidationResult]:
    """sh:pattern (unanchored search) / sh:minLength. Non-literal values are ignored."""
    if shape.pattern is None and shape.min_length is None:
        return []

    strings = [s for s in (extract_string(v) for v in get_property_values(graph, focus_node, shape.path)) if s is not None]
    results = []

    if shape.pattern is not None:
        for text in strings:
            if not shape.pattern.search(text):
                results.append(
                    build_violation(
                        focus_node,
                        shape,
                        f"Value does not match required pattern {shape.pattern.pattern!r}",
                        {
                            "constraint_component": SH.PatternConstraintComponent,
                            "pattern": shape.pattern.pattern,
                            "actual_value": text,
                        },
                    )
                )

    if shape.min_length is not None:
        for text in strings:
            if len(text) < shape.min_length:
                results.append(
                    build_violation(
                        focus_node,
                        shape,
                        f"Value is too short (expected at least {shape.min_length} characters, found {len(text)})",
                        {
                            "constraint_component": SH.MinLengthConstraintComponent,
                            "min_length": shape.min_length,
                            "actual_length": len(text),
                            "actual_value": text,
                        },
                    )
                )

    return results
