import logging
import re
from typing import Any, Callable, Iterable, List, Optional

from rdflib import BNode, Graph

from ...errors import EvaluationError
from ..model import SparqlConstraint, Term, ValidationResult

logger = logging.getLogger(__name__)

# (query, graph) -> rows. Each row is a mapping of variable name -> term.
QueryExecutor = Callable[[str, Graph], Iterable[Any]]

DEFAULT_MESSAGE = "SPARQL constraint violated"

_WHERE_OPEN = re.compile(r"WHERE\s*\{", re.IGNORECASE)


def rdflib_executor(query: str, graph: Graph) -> List[dict]:
    """Runs a SELECT through rdflib's own engine."""
    return [row.asdict() for row in graph.query(query)]


def substitute_this(query: str, focus_node: Term) -> str:
    """
    Binds `$this` to the focus node.

    For IRIs `$this` becomes `<iri>`; a projected `SELECT $this` stays a
    variable and is bound with `BIND(<iri> AS ?this)` at the top of the
    WHERE block. Blank nodes become `_:id`.
    """
    if isinstance(focus_node, BNode):
        return query.replace("$this", f"_:{focus_node}")

    iri = f"<{focus_node}>"
    query = query.replace("SELECT $this", "SELECT ?this")
    query = query.replace("$this", iri)

    if "SELECT ?this" in query:
        query = _WHERE_OPEN.sub(lambda m: f"{m.group(0)}\n  BIND({iri} AS ?this) .", query, count=1)
    return query


def with_prefixes(query: str, prefixes: dict) -> str:
    if not prefixes:
        return query
    declarations = "\n".join(f"PREFIX {prefix}: <{ns}>" for prefix, ns in sorted(prefixes.items()))
    return f"{declarations}\n{query}"


def _row_details(row: Any) -> dict:
    if isinstance(row, dict):
        return dict(row)
    if hasattr(row, "asdict"):
        return row.asdict()
    return {}


def validate(
    graph: Graph,
    focus_node: Term,
    constraints: List[SparqlConstraint],
    executor: Optional[QueryExecutor] = None,
    errors: Optional[List[EvaluationError]] = None,
) -> List[ValidationResult]:
    """
    Evaluates every query constraint of one shape against one focus node.

    An executor failure is recorded in `errors` (when given) and logged;
    the remaining constraints are still evaluated.
    """
    run = executor or rdflib_executor
    results: List[ValidationResult] = []

    for constraint in constraints:
        query = with_prefixes(substitute_this(constraint.select_query, focus_node), constraint.prefixes)
        try:
            rows = list(run(query, graph))
        except Exception as e:
            logger.warning(f"SPARQL constraint {constraint.source_shape_id} failed on {focus_node}: {e}")
            if errors is not None:
                errors.append(EvaluationError(str(e), constraint=constraint, focus_node=focus_node))
            continue

        for row in rows:
            results.append(
                ValidationResult(
                    focus_node=focus_node,
                    path=None,
                    source_shape=constraint.source_shape_id,
                    message=constraint.message or DEFAULT_MESSAGE,
                    details=_row_details(row),
                )
            )

    return results
