from typing import List, Optional, Tuple

from rdflib import URIRef
from rdflib.namespace import XSD

from .. import iri as IRI
from ..models import ModuleInfo
from ..ns import CORE, STRUCTURE
from . import helpers as H
from .context import Context


class ModuleBuilder:
    def build(self, module: ModuleInfo, context: Context, parent_iri: Optional[URIRef] = None) -> Tuple[URIRef, List[H.Triple]]:
        module_iri = IRI.for_module(context.base_iri, module.name)

        triples = [
            H.type_triple(module_iri, STRUCTURE.NestedModule if module.nested else STRUCTURE.Module),
            H.datatype_property(module_iri, STRUCTURE.moduleName, module.name, XSD.string),
            H.optional_string_property(module_iri, STRUCTURE.docstring, module.docstring),
        ]
        if parent_iri is not None:
            triples.append(H.object_property(module_iri, STRUCTURE.parentModule, parent_iri))
        if context.file_path:
            file_iri = IRI.for_source_file(context.base_iri, context.file_path)
            triples.append(H.object_property(module_iri, CORE.definedInFile, file_iri))
        triples += H.location_triples(module_iri, module.location, context)

        return module_iri, H.finalize_triples(triples)
