from .anonymous_function import AnonymousFunctionBuilder
from .clause import ClauseBuilder
from .context import Context
from .module import ModuleBuilder
from .quote import QuoteBuilder
from .struct import StructBuilder
from .supervisor import SupervisorBuilder

__all__ = [
    "Context",
    "AnonymousFunctionBuilder",
    "ClauseBuilder",
    "ModuleBuilder",
    "QuoteBuilder",
    "StructBuilder",
    "SupervisorBuilder",
]
