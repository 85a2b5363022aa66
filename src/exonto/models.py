from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

# Records produced by the extraction step and consumed by the builders.
# They are plain data: no tree nodes, no RDF terms.

ParameterKind = Literal["simple", "default", "pattern", "pin"]
SupervisorKind = Literal["supervisor", "dynamic_supervisor"]
StrategyKind = Literal["one_for_one", "one_for_all", "rest_for_one"]
RestartKind = Literal["permanent", "temporary", "transient"]
ChildKind = Literal["worker", "supervisor"]
UnquoteKind = Literal["unquote", "unquote_splicing"]


@dataclass
class SourceLocation:
    """
    Line span of a construct in its source file.

    `end_line` defaults to `start_line` when the parser did not report an end.
    """

    start_line: int
    end_line: Optional[int] = None
    start_column: Optional[int] = None
    end_column: Optional[int] = None

    @property
    def effective_end_line(self) -> int:
        return self.end_line if self.end_line is not None else self.start_line

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ModuleInfo:
    name: str
    location: Optional[SourceLocation] = None
    docstring: Optional[str] = None
    nested: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ==============================================================================
#  FUNCTIONS
# ==============================================================================


@dataclass
class AnonymousClause:
    arity: int = 0
    guard: Any = None


@dataclass
class AnonymousFunctionInfo:
    arity: int
    clauses: List[AnonymousClause] = field(default_factory=list)
    location: Optional[SourceLocation] = None


@dataclass
class ParameterInfo:
    position: int
    name: Optional[str] = None
    kind: ParameterKind = "simple"


@dataclass
class ClauseInfo:
    """One clause of a named function. `order` is 1-based."""

    name: str
    arity: int
    order: int
    parameters: List[ParameterInfo] = field(default_factory=list)
    guard: Any = None
    body: Any = None
    location: Optional[SourceLocation] = None


# ==============================================================================
#  STRUCTS
# ==============================================================================


@dataclass
class StructField:
    name: str
    has_default: bool = False
    default_value: Any = None
    location: Optional[SourceLocation] = None


@dataclass
class StructInfo:
    fields: List[StructField] = field(default_factory=list)
    enforce_keys: List[str] = field(default_factory=list)
    derives: List[str] = field(default_factory=list)
    # Only set for exceptions (`defexception message: ...`)
    default_message: Optional[str] = None


# ==============================================================================
#  OTP SUPERVISION
# ==============================================================================


@dataclass
class SupervisorInfo:
    supervisor_type: SupervisorKind = "supervisor"
    location: Optional[SourceLocation] = None


@dataclass
class StrategyInfo:
    type: StrategyKind = "one_for_one"
    max_restarts: Optional[int] = None
    max_seconds: Optional[int] = None


@dataclass
class StartSpec:
    module: Optional[str] = None
    function: Optional[str] = None
    args: List[Any] = field(default_factory=list)


@dataclass
class ChildSpec:
    id: Optional[str] = None
    module: Optional[str] = None
    start: Optional[StartSpec] = None
    restart: RestartKind = "permanent"
    type: ChildKind = "worker"


@dataclass
class ChildOrder:
    """A child spec together with its 0-based position in the supervisor's child list."""

    position: int
    id: Optional[str] = None
    child_spec: Optional[ChildSpec] = None


# ==============================================================================
#  QUOTE / UNQUOTE
# ==============================================================================


@dataclass
class QuoteOptions:
    context: Optional[str] = None
    bind_quoted: List[str] = field(default_factory=list)
    location: Optional[str] = None
    unquote: bool = True
    generated: bool = False


@dataclass
class UnquoteExpression:
    kind: UnquoteKind = "unquote"
    depth: int = 1
    location: Optional[SourceLocation] = None


@dataclass
class HygieneViolation:
    type: str
    variable: Optional[str] = None
    context: Optional[str] = None
    location: Optional[SourceLocation] = None


@dataclass
class QuotedExpression:
    options: QuoteOptions = field(default_factory=QuoteOptions)
    unquotes: List[UnquoteExpression] = field(default_factory=list)
    location: Optional[SourceLocation] = None
