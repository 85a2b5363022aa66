from typing import List, Tuple

from rdflib import URIRef
from rdflib.namespace import XSD

from .. import iri as IRI
from ..models import AnonymousFunctionInfo
from ..ns import CORE, STRUCTURE
from . import helpers as H
from .context import Context


class AnonymousFunctionBuilder:
    """
    Emits triples for `fn ... end` expressions.

    The IRI hangs off the enclosing scope (see `Context.get_context_iri`) with a
    0-based index: `base#MyApp/anon/0`. Clause IRIs are `<anon>/clause/<i>` while the
    recorded `clauseOrder` is `i + 1`. A multi-clause function additionally gets an
    ordered `hasClauses` list.
    """

    def build(self, anon: AnonymousFunctionInfo, context: Context, index: int) -> Tuple[URIRef, List[H.Triple]]:
        anon_iri = IRI.for_anonymous_function(context.get_context_iri("anonymous"), index)

        triples = [
            H.type_triple(anon_iri, STRUCTURE.AnonymousFunction),
            H.datatype_property(anon_iri, STRUCTURE.arity, anon.arity, XSD.nonNegativeInteger),
        ]
        triples += self._clause_triples(anon_iri, anon)
        triples += H.location_triples(anon_iri, anon.location, context)

        return anon_iri, H.finalize_triples(triples)

    def _clause_triples(self, anon_iri: URIRef, anon: AnonymousFunctionInfo) -> List[H.Triple]:
        triples = []
        clause_iris = []
        for idx, clause in enumerate(anon.clauses):
            clause_iri = IRI.for_anonymous_clause(anon_iri, idx)
            clause_iris.append(clause_iri)
            triples += [
                H.type_triple(clause_iri, STRUCTURE.FunctionClause),
                H.datatype_property(clause_iri, STRUCTURE.clauseOrder, idx + 1, XSD.positiveInteger),
                H.datatype_property(clause_iri, CORE.hasGuard, clause.guard is not None, XSD.boolean),
            ]

        triples += [H.object_property(anon_iri, STRUCTURE.hasClause, c) for c in clause_iris]

        if len(clause_iris) > 1:
            head, list_triples = H.build_rdf_list(clause_iris)
            triples += list_triples
            triples.append(H.object_property(anon_iri, STRUCTURE.hasClauses, head))

        return triples
