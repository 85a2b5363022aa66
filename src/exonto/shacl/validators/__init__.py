"""
Per-facet property constraint checks.

Each module exposes `validate(graph, focus_node, shape)` returning a list of
`ValidationResult`; a shape without the module's facets yields `[]`.
"""

from . import cardinality, qualified, string, type, value

PROPERTY_VALIDATORS = (
    cardinality.validate,
    type.validate,
    string.validate,
    value.validate,
    qualified.validate,
)

__all__ = ["PROPERTY_VALIDATORS", "cardinality", "type", "string", "value", "qualified"]
