from typing import List

from rdflib import Graph

from ...ns import SH
from ..model import PropertyShape, Term, ValidationResult
from .helpers import build_violation, get_property_values, is_instance_of


def validate(graph: Graph, focus_node: Term, shape: PropertyShape) -> List[ValidationResult]:
    """sh:qualifiedValueShape restricted to a class, with sh:qualifiedMinCount."""
    if shape.qualified_class is None or shape.qualified_min_count is None:
        return []

    values = get_property_values(graph, focus_node, shape.path)
    qualified_count = sum(1 for v in values if is_instance_of(graph, v, shape.qualified_class))

    if qualified_count >= shape.qualified_min_count:
        return []

    return [
        build_violation(
            focus_node,
            shape,
            f"Property has too few values of required type (expected at least {shape.qualified_min_count} "
            f"instances of {shape.qualified_class}, found {qualified_count})",
            {
                "constraint_component": SH.QualifiedMinCountConstraintComponent,
                "qualified_class": shape.qualified_class,
                "qualified_min_count": shape.qualified_min_count,
                "actual_count": qualified_count,
            },
        )
    ]
