import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..errors import ParseError
from .nodes import Composite, Node, from_json

UTF8_BOM = "\ufeff"


@dataclass(frozen=True)
class ParseOptions:
    track_columns: bool = True
    track_token_metadata: bool = True
    emit_warnings: bool = False
    source_file_label: str = "nofile"


@dataclass(slots=True)
class ParsedFile:
    """A source file together with the tree parsed from it."""

    path: str
    source: str
    tree: Node
    size: int
    mtime: float


class SourceParser(ABC):
    """
    Turns source text into a syntax tree.

    Implementations only have to provide `parse`; file handling (reading,
    BOM stripping, labelling errors with the path) is shared.
    """

    # File extensions this parser accepts, used by project-wide discovery.
    extensions: Tuple[str, ...] = (".ex", ".exs")

    @abstractmethod
    def parse(self, source: str, options: Optional[ParseOptions] = None) -> Node:
        """Parses `source`. Raises ParseError on malformed input."""

    def parse_file(self, path: str, options: Optional[ParseOptions] = None) -> ParsedFile:
        options = options or ParseOptions(source_file_label=path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                source = f.read()
            st = os.stat(path)
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Cannot read file: {e}", file=path) from e

        if source.startswith(UTF8_BOM):
            source = source[len(UTF8_BOM):]

        try:
            tree = self.parse(source, options)
        except ParseError as e:
            if e.file is None:
                raise ParseError(e.message, line=e.line, column=e.column, file=path) from e
            raise
        return ParsedFile(path=path, source=source, tree=tree, size=st.st_size, mtime=st.st_mtime)


class JsonAstParser(SourceParser):
    """
    Reads trees serialized in the JSON interchange format.

    The format is what an external `Code.string_to_quoted/2` dump produces
    (see `nodes.from_json`), so projects can be analyzed without a BEAM runtime.
    """

    extensions = (".json",)

    def parse(self, source: str, options: Optional[ParseOptions] = None) -> Node:
        options = options or ParseOptions()
        label = options.source_file_label if options.source_file_label != "nofile" else None

        try:
            data = json.loads(source)
        except json.JSONDecodeError as e:
            raise ParseError(e.msg, line=e.lineno, column=e.colno, file=label) from e
        except RecursionError as e:
            raise ParseError("Tree is nested too deeply to decode", file=label) from e

        try:
            tree = from_json(data)
            if not options.track_columns or not options.track_token_metadata:
                tree = _strip_metadata(tree, options)
        except (ValueError, TypeError) as e:
            raise ParseError(str(e), file=label) from e
        except RecursionError as e:
            raise ParseError("Tree is nested too deeply to decode", file=label) from e
        return tree


def _strip_metadata(node: Node, options: ParseOptions) -> Node:
    if not isinstance(node, Composite):
        return node
    keep: Any
    if options.track_token_metadata:
        keep = {k: v for k, v in node.metadata.items() if k != "column"}
    else:
        # Position only.
        keep = {k: v for k, v in node.metadata.items() if k == "line" or (k == "column" and options.track_columns)}
    return Composite(node.tag, keep, tuple(_strip_metadata(c, options) for c in node.children))
