from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

# Tag given to composites that stand for a plain list of expressions.
LIST_TAG = "__list__"


@dataclass(frozen=True)
class Symbol:
    """An atom-like identifier leaf (`:ok`, `nil`-free names, module aliases)."""

    name: str

    def __str__(self) -> str:
        return self.name


LeafValue = Union[Symbol, int, float, str, bool, None]


@dataclass(frozen=True)
class Leaf:
    value: LeafValue

    @property
    def kind(self) -> str:
        v = self.value
        if v is None:
            return "nil"
        if isinstance(v, bool):
            return "boolean"
        if isinstance(v, Symbol):
            return "symbol"
        if isinstance(v, int):
            return "integer"
        if isinstance(v, float):
            return "float"
        return "string"


@dataclass(frozen=True)
class Composite:
    """
    Tagged syntax-tree node.

    `metadata` is an insertion-ordered mapping (at least `line` / `column` when the
    parser tracks them). `children` order is significant and preserved by every traversal.
    """

    tag: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    children: Tuple["Node", ...] = ()

    def __post_init__(self):
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @property
    def line(self) -> Optional[int]:
        return self.metadata.get("line")

    @property
    def column(self) -> Optional[int]:
        return self.metadata.get("column")


Node = Union[Composite, Leaf]


def is_composite(node: Node, tag: Optional[str] = None) -> bool:
    if not isinstance(node, Composite):
        return False
    return tag is None or node.tag == tag


# ==============================================================================
#  JSON INTERCHANGE
# ==============================================================================


def from_json(obj: Any) -> Node:
    """
    Decodes the JSON interchange form into a tree.

    *   `{"tag": "defmodule", "meta": {"line": 1}, "children": [...]}` -> Composite
    *   `{"symbol": "ok"}` -> Leaf(Symbol("ok"))
    *   `[...]` -> Composite(LIST_TAG)
    *   scalars -> Leaf
    """
    if isinstance(obj, dict):
        if "tag" in obj:
            meta = obj.get("meta") or {}
            children = obj.get("children") or []
            if not isinstance(meta, dict):
                raise ValueError(f"Node meta must be an object, got {type(meta).__name__}")
            if not isinstance(children, list):
                raise ValueError(f"Node children must be a list, got {type(children).__name__}")
            return Composite(str(obj["tag"]), dict(meta), tuple(from_json(c) for c in children))
        if "symbol" in obj:
            return Leaf(Symbol(str(obj["symbol"])))
        raise ValueError(f"Unrecognized node object with keys {sorted(obj.keys())}")
    if isinstance(obj, list):
        return Composite(LIST_TAG, {}, tuple(from_json(c) for c in obj))
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return Leaf(obj)
    raise ValueError(f"Unsupported JSON value of type {type(obj).__name__}")


def to_json(node: Node) -> Any:
    if isinstance(node, Composite):
        if node.tag == LIST_TAG and not node.metadata:
            return [to_json(c) for c in node.children]
        return {"tag": node.tag, "meta": dict(node.metadata), "children": [to_json(c) for c in node.children]}
    if isinstance(node.value, Symbol):
        return {"symbol": node.value.name}
    return node.value
