import logging
from typing import List, Tuple

from rdflib import BNode, URIRef
from rdflib.namespace import XSD

from .. import iri as IRI
from ..models import ClauseInfo, ParameterInfo
from ..ns import CORE, STRUCTURE
from . import helpers as H
from .context import Context

logger = logging.getLogger(__name__)

PARAMETER_CLASSES = {
    "simple": STRUCTURE.Parameter,
    "default": STRUCTURE.DefaultParameter,
    "pattern": STRUCTURE.PatternParameter,
    "pin": STRUCTURE.PatternParameter,
}


class ClauseBuilder:
    """
    Emits triples for one clause of a named function.

    Structure:
    *   `<fn>/clause/<order-1>` typed `FunctionClause`, linked from the function.
    *   A `FunctionHead` blank node holding the ordered parameter list and the guard.
    *   A `FunctionBody` blank node.
    """

    def build_clause(self, clause: ClauseInfo, function_iri: URIRef, context: Context) -> Tuple[URIRef, List[H.Triple]]:
        clause_iri = IRI.for_clause(function_iri, clause.order - 1)

        triples = [
            H.type_triple(clause_iri, STRUCTURE.FunctionClause),
            H.datatype_property(clause_iri, STRUCTURE.clauseOrder, clause.order, XSD.positiveInteger),
            H.object_property(function_iri, STRUCTURE.hasClause, clause_iri),
        ]

        head, head_triples = self._build_head(clause_iri, clause)
        triples += head_triples
        triples.append(H.object_property(clause_iri, STRUCTURE.hasHead, head))

        body = H.blank_node("function_body")
        triples.append(H.type_triple(body, STRUCTURE.FunctionBody))
        triples.append(H.object_property(clause_iri, STRUCTURE.hasBody, body))

        triples += H.location_triples(clause_iri, clause.location, context)

        return clause_iri, H.finalize_triples(triples)

    def _build_head(self, clause_iri: URIRef, clause: ClauseInfo) -> Tuple[BNode, List[H.Triple]]:
        head = H.blank_node("function_head")

        param_iris = []
        param_triples = []
        for param in clause.parameters:
            if param.kind not in PARAMETER_CLASSES:
                logger.warning(
                    f"Skipping parameter at position {param.position} in {clause.name}/{clause.arity}: "
                    f"unknown kind {param.kind!r}"
                )
                continue
            param_iri = IRI.for_parameter(clause_iri, param.position)
            param_iris.append(param_iri)
            param_triples += self._parameter_triples(param_iri, param)

        list_head, list_triples = H.build_rdf_list(param_iris)

        triples = [
            H.type_triple(head, STRUCTURE.FunctionHead),
            H.object_property(head, STRUCTURE.hasParameters, list_head),
        ]
        if clause.guard is not None:
            guard = H.blank_node("guard")
            triples += [
                H.type_triple(guard, CORE.GuardClause),
                H.object_property(head, CORE.hasGuard, guard),
            ]

        return head, triples + param_triples + list_triples

    def _parameter_triples(self, param_iri: URIRef, param: ParameterInfo) -> List[H.Triple]:
        triples = [
            H.type_triple(param_iri, PARAMETER_CLASSES[param.kind]),
            H.datatype_property(param_iri, STRUCTURE.parameterPosition, param.position + 1, XSD.positiveInteger),
        ]
        if param.name:
            triples.append(H.datatype_property(param_iri, STRUCTURE.parameterName, param.name, XSD.string))
        return triples
