import inspect
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, TypeVar, Union

from ..errors import ConfigurationError
from .nodes import Composite, Node

T = TypeVar("T")


@dataclass(frozen=True)
class TraversalContext:
    """
    Position of the node currently being visited.

    A fresh copy is produced on every descent; instances are never mutated.

    *   **depth**: number of ancestors (`0` at the root).
    *   **parent**: the immediate ancestor, `None` at the root.
    *   **parents**: every ancestor, nearest first.
    *   **path**: tags of the ancestors, root first.
    """

    depth: int = 0
    parent: Optional[Node] = None
    parents: Tuple[Node, ...] = ()
    path: Tuple[str, ...] = ()

    @classmethod
    def root(cls) -> "TraversalContext":
        return cls()

    @property
    def at_root(self) -> bool:
        return self.depth == 0

    def descend(self, node: Node) -> "TraversalContext":
        tag = node.tag if isinstance(node, Composite) else "leaf"
        return TraversalContext(
            depth=self.depth + 1,
            parent=node,
            parents=(node,) + self.parents,
            path=self.path + (tag,),
        )


# ==============================================================================
#  WALK ACTIONS
# ==============================================================================


@dataclass(frozen=True)
class Continue:
    acc: Any


@dataclass(frozen=True)
class Skip:
    acc: Any


@dataclass(frozen=True)
class Halt:
    acc: Any


WalkAction = Union[Continue, Skip, Halt]
Visitor = Callable[[Node, TraversalContext, Any], WalkAction]


def _call(visitor: Optional[Visitor], node: Node, ctx: TraversalContext, acc: Any) -> WalkAction:
    if visitor is None:
        return Continue(acc)
    action = visitor(node, ctx, acc)
    if not isinstance(action, (Continue, Skip, Halt)):
        raise ConfigurationError(f"Visitor must return Continue, Skip or Halt, got {type(action).__name__}")
    return action


_ENTER = 0
_EXIT = 1


def _visit(root: Node, ctx: TraversalContext, acc: Any, pre: Optional[Visitor], post: Optional[Visitor]) -> WalkAction:
    # Explicit stack of (node, context, phase) frames; tree depth is not bounded by the interpreter stack.
    stack = [(root, ctx, _ENTER)]
    while stack:
        node, node_ctx, phase = stack.pop()

        if phase == _EXIT:
            action = _call(post, node, node_ctx, acc)
            if isinstance(action, Halt):
                return action
            acc = action.acc
            continue

        action = _call(pre, node, node_ctx, acc)
        if isinstance(action, Halt):
            return action
        acc = action.acc

        # post also runs for a node whose pre returned Skip; its children are never entered.
        stack.append((node, node_ctx, _EXIT))
        if isinstance(action, Continue) and isinstance(node, Composite):
            child_ctx = node_ctx.descend(node)
            for child in reversed(node.children):
                stack.append((child, child_ctx, _ENTER))

    return Continue(acc)


def walk(
    root: Node,
    acc: Any,
    visitor: Optional[Visitor] = None,
    *,
    pre: Optional[Visitor] = None,
    post: Optional[Visitor] = None,
) -> Tuple[Node, Any]:
    """
    Depth-first traversal with a threaded accumulator.

    `visitor` is shorthand for `pre=visitor`. Callbacks receive `(node, context, acc)`
    and return `Continue(acc)`, `Skip(acc)` (do not enter the node's children) or
    `Halt(acc)` (stop everything; `acc` becomes the final result).

    Returns `(root, final_acc)`.
    """
    if visitor is not None:
        if pre is not None:
            raise ConfigurationError("Pass either a visitor or pre=, not both")
        pre = visitor
    if pre is None and post is None:
        raise ConfigurationError("walk requires at least one of pre or post")

    result = _visit(root, TraversalContext.root(), acc, pre, post)
    return root, result.acc


# ==============================================================================
#  CONVENIENCE TRAVERSALS
# ==============================================================================


def _accepts_context(predicate: Callable) -> bool:
    try:
        params = inspect.signature(predicate).parameters.values()
    except (TypeError, ValueError):
        return False
    # Defaulted parameters are not slots for the context.
    required = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    ]
    has_varargs = any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params)
    return len(required) >= 2 or has_varargs


def _as_context_predicate(predicate: Callable) -> Callable[[Node, TraversalContext], bool]:
    if _accepts_context(predicate):
        return predicate
    return lambda node, _ctx: predicate(node)


def find_all(root: Node, predicate: Callable[..., bool]) -> List[Node]:
    """
    Every node matching `predicate`, in pre-order.

    `predicate` takes `(node)` or `(node, context)`. A match does not stop descent,
    so nested matches are returned after their enclosing match.
    """
    check = _as_context_predicate(predicate)

    def visit(node, ctx, found):
        if check(node, ctx):
            found.append(node)
        return Continue(found)

    _, found = walk(root, [], visit)
    return found


def collect(root: Node, predicate: Callable[..., bool], transform: Callable[[Node], T]) -> List[T]:
    check = _as_context_predicate(predicate)

    def visit(node, ctx, values):
        if check(node, ctx):
            values.append(transform(node))
        return Continue(values)

    _, values = walk(root, [], visit)
    return values


@dataclass(frozen=True)
class Found:
    depth: int


class _NotFound:
    def __repr__(self) -> str:
        return "NotFound"

    def __bool__(self) -> bool:
        return False


NotFound = _NotFound()


def depth_of(root: Node, target: Node) -> Union[Found, _NotFound]:
    """Depth of the first node (pre-order) equal to `target`; the root is depth 0."""

    def visit(node, ctx, acc):
        if node == target:
            return Halt(Found(ctx.depth))
        return Continue(acc)

    _, result = walk(root, NotFound, visit)
    return result


def count_nodes(root: Node) -> int:
    _, count = walk(root, 0, lambda _node, _ctx, acc: Continue(acc + 1))
    return count


def max_depth(root: Node) -> int:
    _, deepest = walk(root, 0, lambda _node, ctx, acc: Continue(max(ctx.depth, acc)))
    return deepest
