from .nodes import LIST_TAG, Composite, Leaf, Node, Symbol, from_json, to_json
from .parser import JsonAstParser, ParsedFile, ParseOptions, SourceParser
from .path_utils import PathUtils
from .project import FileAnalyzer, Project, ProjectAnalyzer, ProjectResult
from .walker import (
    Continue,
    Halt,
    Skip,
    TraversalContext,
    collect,
    count_nodes,
    depth_of,
    find_all,
    max_depth,
    walk,
)

__all__ = [
    "LIST_TAG", "Composite", "Leaf", "Node", "Symbol", "from_json", "to_json",
    "JsonAstParser", "ParsedFile", "ParseOptions", "SourceParser",
    "PathUtils",
    "FileAnalyzer", "Project", "ProjectAnalyzer", "ProjectResult",
    "Continue", "Halt", "Skip", "TraversalContext",
    "collect", "count_nodes", "depth_of", "find_all", "max_depth", "walk",
]
