from typing import List, Optional, Sequence, Tuple

from rdflib import URIRef
from rdflib.namespace import XSD

from .. import iri as IRI
from ..models import ChildOrder, ChildSpec, StrategyInfo, SupervisorInfo
from ..ns import OTP
from . import helpers as H
from .context import Context

# OTP runtime defaults when `max_restarts` / `max_seconds` are not given.
DEFAULT_MAX_RESTARTS = 3
DEFAULT_MAX_SECONDS = 5

SUPERVISOR_CLASSES = {
    "supervisor": OTP.Supervisor,
    "dynamic_supervisor": OTP.DynamicSupervisor,
}

STRATEGIES = {
    "one_for_one": OTP.OneForOne,
    "one_for_all": OTP.OneForAll,
    "rest_for_one": OTP.RestForOne,
}

RESTART_STRATEGIES = {
    "permanent": OTP.Permanent,
    "temporary": OTP.Temporary,
    "transient": OTP.Transient,
}

CHILD_TYPES = {
    "worker": OTP.WorkerType,
    "supervisor": OTP.SupervisorType,
}


def _module_literal(name) -> str:
    text = str(name)
    return text[len("Elixir."):] if text.startswith("Elixir.") else text


class SupervisorBuilder:
    """
    Emits OTP supervision triples.

    **Key Responsibilities**:
    *   **Supervisor Identity**: type, implemented behaviour, location.
    *   **Strategy**: restart strategy plus restart intensity (OTP defaults 3 / 5).
    *   **Child Specs**: one `<sup>/child/<id>/<position>` node per child.
    *   **Ordering**: children are also linked through an RDF list (`hasChildren`),
        which is the authoritative start order.
    *   **Tree**: `supervises` / `supervisedBy` and the root-of-tree links.
    """

    def build_supervisor(self, info: SupervisorInfo, module_iri: URIRef, context: Context) -> Tuple[URIRef, List[H.Triple]]:
        triples = [
            H.type_triple(module_iri, SUPERVISOR_CLASSES[info.supervisor_type]),
            H.object_property(module_iri, OTP.implementsOTPBehaviour, OTP.SupervisorBehaviour),
        ]
        triples += H.location_triples(module_iri, info.location, context)
        return module_iri, H.finalize_triples(triples)

    def build_strategy(self, strategy: StrategyInfo, supervisor_iri: URIRef, context: Context) -> Tuple[URIRef, List[H.Triple]]:
        strategy_iri = STRATEGIES[strategy.type]
        return strategy_iri, [H.object_property(supervisor_iri, OTP.hasStrategy, strategy_iri)]

    def build_supervision_strategy(
        self, strategy: StrategyInfo, supervisor_iri: URIRef, context: Context
    ) -> Tuple[URIRef, List[H.Triple]]:
        strategy_iri, triples = self.build_strategy(strategy, supervisor_iri, context)
        max_restarts = DEFAULT_MAX_RESTARTS if strategy.max_restarts is None else strategy.max_restarts
        max_seconds = DEFAULT_MAX_SECONDS if strategy.max_seconds is None else strategy.max_seconds
        triples += [
            H.datatype_property(supervisor_iri, OTP.maxRestarts, max_restarts, XSD.nonNegativeInteger),
            H.datatype_property(supervisor_iri, OTP.maxSeconds, max_seconds, XSD.positiveInteger),
        ]
        return strategy_iri, triples

    # ==============================================================================
    #  CHILD SPECS
    # ==============================================================================

    def build_child_spec(
        self, spec: ChildSpec, supervisor_iri: URIRef, context: Context, index: int = 0
    ) -> Tuple[URIRef, List[H.Triple]]:
        child_id = spec.id or spec.module or "unknown"
        spec_iri = IRI.for_child_spec(supervisor_iri, _module_literal(child_id), index)

        start_module = (spec.start.module if spec.start else None) or spec.module
        start_function = spec.start.function if spec.start else None

        triples = [
            H.type_triple(spec_iri, OTP.ChildSpec),
            H.object_property(supervisor_iri, OTP.hasChildSpec, spec_iri),
            H.datatype_property(spec_iri, OTP.childId, _module_literal(child_id), XSD.string),
            H.optional_string_property(spec_iri, OTP.startModule, _module_literal(start_module) if start_module else None),
            H.optional_string_property(spec_iri, OTP.startFunction, start_function),
            H.object_property(spec_iri, OTP.hasRestartStrategy, RESTART_STRATEGIES.get(spec.restart, OTP.Permanent)),
            H.object_property(spec_iri, OTP.hasChildType, CHILD_TYPES.get(spec.type, OTP.WorkerType)),
        ]
        return spec_iri, H.finalize_triples(triples)

    def build_child_specs(
        self, specs: Sequence[ChildSpec], supervisor_iri: URIRef, context: Context
    ) -> Tuple[List[URIRef], List[H.Triple]]:
        iris, triples = [], []
        for index, spec in enumerate(specs):
            spec_iri, spec_triples = self.build_child_spec(spec, supervisor_iri, context, index)
            iris.append(spec_iri)
            triples += spec_triples
        return iris, H.finalize_triples(triples)

    def build_supervision_relationships(
        self, specs: Sequence[ChildSpec], supervisor_iri: URIRef, context: Context
    ) -> List[H.Triple]:
        triples = []
        for spec in specs:
            if not spec.module:
                continue
            child_iri = IRI.for_module(context.base_iri, _module_literal(spec.module))
            triples += [
                H.object_property(supervisor_iri, OTP.supervises, child_iri),
                H.object_property(child_iri, OTP.supervisedBy, supervisor_iri),
            ]
        return H.finalize_triples(triples)

    def build_ordered_children(
        self, children: Sequence[ChildOrder], supervisor_iri: URIRef, context: Context
    ) -> Tuple[Optional[URIRef], List[H.Triple]]:
        if not children:
            return None, []

        ordered = sorted(children, key=lambda c: c.position)
        spec_iris = [
            IRI.for_child_spec(supervisor_iri, _module_literal(c.id or "unknown"), c.position) for c in ordered
        ]
        head, list_triples = H.build_rdf_list(spec_iris)
        return head, H.finalize_triples([H.object_property(supervisor_iri, OTP.hasChildren, head)] + list_triples)

    # ==============================================================================
    #  SUPERVISION TREE
    # ==============================================================================

    def build_supervision_tree(
        self,
        children: Sequence[ChildOrder],
        supervisor_iri: URIRef,
        context: Context,
        is_root: bool = False,
        tree_iri: Optional[URIRef] = None,
        app_name: Optional[str] = None,
    ) -> Tuple[Optional[URIRef], List[H.Triple]]:
        specs = [c.child_spec for c in children if c.child_spec is not None]

        triples = self.build_supervision_relationships(specs, supervisor_iri, context)
        _, children_triples = self.build_ordered_children(children, supervisor_iri, context)
        triples += children_triples

        final_tree_iri = None
        if is_root:
            final_tree_iri = tree_iri or (IRI.for_supervision_tree(context.base_iri, app_name) if app_name else None)
            if final_tree_iri is not None:
                triples += self.build_root_supervisor(supervisor_iri, final_tree_iri, context)

        return final_tree_iri, H.finalize_triples(triples)

    def build_root_supervisor(self, supervisor_iri: URIRef, tree_iri: URIRef, context: Context) -> List[H.Triple]:
        return [
            H.type_triple(tree_iri, OTP.SupervisionTree),
            H.object_property(tree_iri, OTP.rootSupervisor, supervisor_iri),
            H.object_property(supervisor_iri, OTP.partOfTree, tree_iri),
        ]
