from typing import List, Tuple

from rdflib import URIRef
from rdflib.namespace import XSD

from .. import iri as IRI
from ..models import StructInfo
from ..ns import STRUCTURE
from . import helpers as H
from .context import Context


class StructBuilder:
    """
    Emits triples for `defstruct` / `defexception`.

    The struct shares its module's IRI. Fields are named, not indexed:
    `<module>/field/<name>`.
    """

    def build_struct(self, info: StructInfo, module_iri: URIRef, context: Context) -> Tuple[URIRef, List[H.Triple]]:
        return module_iri, H.finalize_triples(self._common(info, module_iri, STRUCTURE.Struct, context))

    def build_exception(self, info: StructInfo, module_iri: URIRef, context: Context) -> Tuple[URIRef, List[H.Triple]]:
        triples = self._common(info, module_iri, STRUCTURE.Exception, context)
        triples.append(H.optional_string_property(module_iri, STRUCTURE.exceptionMessage, info.default_message))
        return module_iri, H.finalize_triples(triples)

    def _common(self, info: StructInfo, struct_iri: URIRef, rdf_class: URIRef, context: Context) -> List:
        triples = [
            H.type_triple(struct_iri, rdf_class),
            H.object_property(struct_iri, STRUCTURE.containsStruct, struct_iri),
        ]

        for f in info.fields:
            field_iri = IRI.for_struct_field(struct_iri, f.name)
            triples += [
                H.type_triple(field_iri, STRUCTURE.StructField),
                H.datatype_property(field_iri, STRUCTURE.fieldName, f.name, XSD.string),
                H.object_property(struct_iri, STRUCTURE.hasField, field_iri),
            ]
            if f.has_default:
                triples.append(
                    H.datatype_property(field_iri, STRUCTURE.hasDefaultFieldValue, H.elixir_term(f.default_value), XSD.string)
                )
            triples += H.location_triples(field_iri, f.location, context)

        for key in info.enforce_keys:
            key_iri = IRI.for_struct_field(struct_iri, key)
            triples += [
                H.type_triple(key_iri, STRUCTURE.EnforcedKey),
                H.object_property(struct_iri, STRUCTURE.hasEnforcedKey, key_iri),
            ]

        for protocol in info.derives:
            triples.append(
                H.object_property(struct_iri, STRUCTURE.derivesProtocol, IRI.for_module(context.base_iri, protocol))
            )

        return triples
