from typing import List, Optional, Tuple

from rdflib import URIRef
from rdflib.namespace import XSD

from .. import iri as IRI
from ..models import HygieneViolation, QuoteOptions, QuotedExpression, UnquoteExpression
from ..ns import STRUCTURE
from . import helpers as H
from .context import Context


class QuoteBuilder:
    """
    Emits triples for `quote` blocks, their `unquote` sites and hygiene violations.

    Quote options are recorded only when they differ from the `quote` defaults
    (no context, no bind_quoted, location not kept, unquote enabled, not generated).
    """

    def build(
        self,
        quote: QuotedExpression,
        context: Context,
        index: int = 0,
        hygiene_violations: Optional[List[HygieneViolation]] = None,
    ) -> Tuple[URIRef, List[H.Triple]]:
        # Scoped like anonymous functions: module, parent scope, source file, then a placeholder.
        quote_iri = URIRef(f"{context.get_context_iri('Unknown')}/quote/{index}")

        triples = [H.type_triple(quote_iri, STRUCTURE.QuotedExpression)]
        triples += self._option_triples(quote_iri, quote.options)

        for idx, unquote in enumerate(quote.unquotes):
            unquote_iri, unquote_triples = self.build_unquote(unquote, context, quote_iri, idx)
            triples.append(H.object_property(quote_iri, STRUCTURE.containsUnquote, unquote_iri))
            triples += unquote_triples

        for idx, violation in enumerate(hygiene_violations or []):
            violation_iri, violation_triples = self.build_hygiene_violation(violation, context, quote_iri, idx)
            triples.append(H.object_property(quote_iri, STRUCTURE.hasHygieneViolation, violation_iri))
            triples += violation_triples

        triples += H.location_triples(quote_iri, quote.location, context)
        return quote_iri, H.finalize_triples(triples)

    def build_unquote(
        self, unquote: UnquoteExpression, context: Context, quote_iri: URIRef, index: int = 0
    ) -> Tuple[URIRef, List[H.Triple]]:
        unquote_iri = IRI.for_unquote(quote_iri, index)
        rdf_class = STRUCTURE.UnquoteSplicingExpression if unquote.kind == "unquote_splicing" else STRUCTURE.UnquoteExpression
        triples = [
            H.type_triple(unquote_iri, rdf_class),
            H.datatype_property(unquote_iri, STRUCTURE.unquoteDepth, unquote.depth, XSD.positiveInteger),
        ]
        triples += H.location_triples(unquote_iri, unquote.location, context)
        return unquote_iri, H.finalize_triples(triples)

    def build_hygiene_violation(
        self, violation: HygieneViolation, context: Context, quote_iri: URIRef, index: int = 0
    ) -> Tuple[URIRef, List[H.Triple]]:
        violation_iri = IRI.for_hygiene_violation(quote_iri, index)
        triples = [
            H.type_triple(violation_iri, STRUCTURE.Hygiene),
            H.datatype_property(violation_iri, STRUCTURE.violationType, violation.type, XSD.string),
            H.optional_string_property(violation_iri, STRUCTURE.unhygienicVariable, violation.variable),
            H.optional_string_property(violation_iri, STRUCTURE.hygieneContext, violation.context),
        ]
        triples += H.location_triples(violation_iri, violation.location, context)
        return violation_iri, H.finalize_triples(triples)

    def _option_triples(self, quote_iri: URIRef, options: QuoteOptions) -> List[H.Triple]:
        triples = []
        if options.context:
            triples.append(H.datatype_property(quote_iri, STRUCTURE.quoteContext, options.context, XSD.string))
        if options.bind_quoted:
            triples.append(H.datatype_property(quote_iri, STRUCTURE.hasBindQuoted, True, XSD.boolean))
        if options.location == "keep":
            triples.append(H.datatype_property(quote_iri, STRUCTURE.locationKeep, True, XSD.boolean))
        if options.unquote is False:
            triples.append(H.datatype_property(quote_iri, STRUCTURE.unquoteEnabled, False, XSD.boolean))
        if options.generated:
            triples.append(H.datatype_property(quote_iri, STRUCTURE.isGenerated, True, XSD.boolean))
        return triples
