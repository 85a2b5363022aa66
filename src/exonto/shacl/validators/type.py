from typing import List

from rdflib import Graph

from ...ns import SH
from ..model import PropertyShape, Term, ValidationResult
from .helpers import build_violation, get_property_values, is_datatype, is_instance_of


def validate(graph: Graph, focus_node: Term, shape: PropertyShape) -> List[ValidationResult]:
    """sh:datatype / sh:class, checked per value."""
    if shape.datatype is None and shape.class_ is None:
        return []

    values = get_property_values(graph, focus_node, shape.path)
    results = []

    if shape.datatype is not None:
        for value in values:
            if not is_datatype(value, shape.datatype):
                results.append(
                    build_violation(
                        focus_node,
                        shape,
                        f"Value does not have required datatype {shape.datatype}",
                        {
                            "constraint_component": SH.DatatypeConstraintComponent,
                            "expected_datatype": shape.datatype,
                            "actual_value": value,
                        },
                    )
                )

    if shape.class_ is not None:
        for value in values:
            if not is_instance_of(graph, value, shape.class_):
                results.append(
                    build_violation(
                        focus_node,
                        shape,
                        f"Value is not an instance of class {shape.class_}",
                        {
                            "constraint_component": SH.ClassConstraintComponent,
                            "expected_class": shape.class_,
                            "actual_value": value,
                        },
                    )
                )

    return results
