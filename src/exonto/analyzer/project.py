import json
import logging
import os
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from opentelemetry import trace
from rdflib import Graph, Literal as RDFLiteral, URIRef
from rdflib.namespace import RDF, XSD

from .. import iri as IRI
from ..builders import Context, ModuleBuilder
from ..collector.collector import SourceCollector
from ..config import Config
from ..errors import ParseError
from ..models import ModuleInfo, SourceLocation
from ..ns import CORE, EVOLUTION, bind_prefixes
from ..utils.git import GitClient, Repository
from ..utils.id_generator import content_id
from .nodes import Composite, Leaf, Node, Symbol, to_json
from .parser import SourceParser
from .path_utils import PathUtils
from .source_url import for_repository_file
from .walker import Continue, Halt, Skip, TraversalContext, count_nodes, max_depth, walk

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

MIX_FILE = "mix.exs"

_APP_RE = re.compile(r"\bapp:\s*:([a-zA-Z_][a-zA-Z0-9_]*)")
_VERSION_RE = re.compile(r"\bversion:\s*\"([^\"]+)\"")
_APPS_PATH_RE = re.compile(r"\bapps_path:\s*\"([^\"]+)\"")

FileStatus = Literal["ok", "error", "skipped"]


# ==============================================================================
#  PROJECT DETECTION
# ==============================================================================


@dataclass
class Project:
    """
    A Mix project located on disk.

    `mix.exs` is read as text, never evaluated: `app:`, `version:` and
    `apps_path:` are picked out with regular expressions.
    """

    path: str
    name: str
    version: Optional[str] = None
    mix_file: Optional[str] = None
    umbrella: bool = False
    apps: List[str] = field(default_factory=list)
    source_dirs: List[str] = field(default_factory=list)

    @classmethod
    def find_mix_file(cls, path: str) -> Optional[str]:
        current = os.path.abspath(path)
        if os.path.isfile(current):
            current = os.path.dirname(current)
        while True:
            candidate = os.path.join(current, MIX_FILE)
            if os.path.isfile(candidate):
                return candidate
            parent = os.path.dirname(current)
            if parent == current:
                return None
            current = parent

    @classmethod
    def detect(cls, path: str) -> Optional["Project"]:
        """Nearest enclosing Mix project, or `None`."""
        if not os.path.exists(path):
            return None
        mix_file = cls.find_mix_file(path)
        if mix_file is None:
            return None

        root = os.path.dirname(mix_file)
        with open(mix_file, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()

        app = _APP_RE.search(content)
        version = _VERSION_RE.search(content)
        apps_path = _APPS_PATH_RE.search(content)

        apps_dir = apps_path.group(1) if apps_path else "apps"
        apps: List[str] = []
        if os.path.isdir(os.path.join(root, apps_dir)):
            apps = sorted(
                d for d in os.listdir(os.path.join(root, apps_dir))
                if os.path.isfile(os.path.join(root, apps_dir, d, MIX_FILE))
            )
        umbrella = apps_path is not None or bool(apps)

        if umbrella:
            source_dirs = [f"{apps_dir}/{app_name}/lib" for app_name in apps]
        else:
            source_dirs = ["lib"]

        return cls(
            path=root,
            name=app.group(1) if app else os.path.basename(root),
            version=version.group(1) if version else None,
            mix_file=mix_file,
            umbrella=umbrella,
            apps=apps,
            source_dirs=source_dirs,
        )


# ==============================================================================
#  RESULTS
# ==============================================================================


@dataclass
class FileAnalysis:
    file_path: str
    relative_path: str
    modules: List[ModuleInfo]
    graph: Graph
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class FileResult:
    file_path: str
    relative_path: str
    status: FileStatus
    analysis: Optional[FileAnalysis] = None
    error: Optional[Exception] = None


@dataclass
class ProjectResult:
    project: Project
    files: List[FileResult]
    graph: Graph
    errors: List[Tuple[str, Exception]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def successful(self) -> List[FileResult]:
        return [f for f in self.files if f.status == "ok"]


# ==============================================================================
#  MODULE EXTRACTION
# ==============================================================================


def alias_name(node: Node) -> Optional[str]:
    """`{"tag": "__aliases__", children: [MyApp, Users]}` -> "MyApp.Users"."""
    if isinstance(node, Leaf):
        return str(node.value) if isinstance(node.value, (Symbol, str)) else None
    if isinstance(node, Composite) and node.tag == "__aliases__":
        parts = [str(c.value) for c in node.children if isinstance(c, Leaf) and c.value is not None]
        return ".".join(parts) if parts else None
    return None


def moduledoc(module_node: Composite) -> Optional[str]:
    """String given to `@moduledoc` directly inside `module_node` (not in nested modules)."""

    def visit(node, ctx, acc):
        if not ctx.at_root and isinstance(node, Composite) and node.tag == "defmodule":
            return Skip(acc)
        if isinstance(node, Composite) and node.tag == "@" and node.children:
            attr = node.children[0]
            if isinstance(attr, Composite) and attr.tag == "moduledoc" and attr.children:
                value = attr.children[0]
                if isinstance(value, Leaf) and isinstance(value.value, str):
                    return Halt(value.value)
        return Continue(acc)

    _, doc = walk(module_node, None, visit)
    return doc


def extract_modules(tree: Node) -> List[Tuple[ModuleInfo, Optional[str]]]:
    """
    Every `defmodule` in pre-order, as `(info, parent_module_name)`.

    Nested modules get their enclosing module's name as prefix, so
    `defmodule Inner` inside `defmodule Outer` is `Outer.Inner`.
    """
    found: List[Tuple[Composite, TraversalContext]] = []

    def visit(node, ctx, acc):
        if isinstance(node, Composite) and node.tag == "defmodule":
            acc.append((node, ctx))
        return Continue(acc)

    walk(tree, found, visit)

    full_names: Dict[int, str] = {}
    modules = []
    for node, ctx in found:
        local = alias_name(node.children[0]) if node.children else None
        if local is None:
            logger.warning(f"Skipping defmodule without a literal name at line {node.line}")
            continue

        enclosing = next(
            (p for p in ctx.parents if isinstance(p, Composite) and p.tag == "defmodule" and id(p) in full_names),
            None,
        )
        parent_name = full_names[id(enclosing)] if enclosing is not None else None
        name = f"{parent_name}.{local}" if parent_name else local
        full_names[id(node)] = name

        location = SourceLocation(
            start_line=node.line, end_line=node.metadata.get("end_line"), start_column=node.column
        ) if node.line else None
        modules.append(
            (ModuleInfo(name=name, location=location, docstring=moduledoc(node), nested=parent_name is not None), parent_name)
        )
    return modules


# ==============================================================================
#  ANALYZERS
# ==============================================================================


def source_path(relative_path: str) -> str:
    """`lib/foo.ex.json` -> `lib/foo.ex`; a dumped tree stands for the file it came from."""
    stem, ext = os.path.splitext(relative_path)
    if ext == ".json" and stem.endswith((".ex", ".exs")):
        return stem
    return relative_path


class FileAnalyzer:
    """
    Turns one source file into an RDF graph.

    **Key Responsibilities**:
    *   **Parsing**: delegates to the configured `SourceParser`.
    *   **Extraction**: finds `defmodule` nodes, nested ones included.
    *   **Emission**: builds module and source-file triples into a fresh `Graph`.
    """

    def __init__(self, parser: SourceParser, config: Optional[Config] = None, repository: Optional[Repository] = None):
        self.parser = parser
        self.config = config or Config.default()
        self.repository = repository
        self.module_builder = ModuleBuilder()

    def analyze(self, file_path: str, relative_path: Optional[str] = None) -> FileAnalysis:
        relative_path = source_path(relative_path or os.path.basename(file_path))

        with tracer.start_as_current_span("analyzer.analyze_file") as span:
            span.set_attribute("file.path", relative_path)
            start = time.perf_counter()

            parsed = self.parser.parse_file(file_path)
            context = Context(
                base_iri=self.config.base_iri,
                file_path=relative_path,
                config=self.config.to_dict(),
            ).validate()

            graph = bind_prefixes(Graph())
            file_iri = IRI.for_source_file(context.base_iri, relative_path)
            graph.add((file_iri, RDF.type, CORE.SourceFile))
            graph.add((file_iri, CORE.filePath, RDFLiteral(relative_path, datatype=XSD.string)))
            if self.config.include_source_text:
                text = self._source_text(file_path, parsed.source)
                if text is not None:
                    graph.add((file_iri, CORE.sourceText, RDFLiteral(text, datatype=XSD.string)))
            if self.config.should_extract_full(relative_path):
                tree_json = json.dumps(to_json(parsed.tree), separators=(",", ":"))
                graph.add((file_iri, CORE.syntaxTree, RDFLiteral(tree_json, datatype=XSD.string)))

            modules = extract_modules(parsed.tree)
            for info, parent_name in modules:
                parent_iri = IRI.for_module(context.base_iri, parent_name) if parent_name else None
                module_iri, triples = self.module_builder.build(info, context, parent_iri)
                for triple in triples:
                    graph.add(triple)
                url = self._source_url(file_path, relative_path, info.location)
                if url:
                    graph.add((module_iri, CORE.sourceUrl, RDFLiteral(url, datatype=XSD.anyURI)))

            metadata = {
                "node_count": count_nodes(parsed.tree),
                "max_depth": max_depth(parsed.tree),
                "module_count": len(modules),
                "size_bytes": parsed.size,
                "content_hash": content_id(parsed.source),
                "duration_ms": round((time.perf_counter() - start) * 1000, 3),
            }
            span.set_attribute("analyzer.modules", len(modules))
            span.set_attribute("analyzer.nodes", metadata["node_count"])
            logger.debug(f"Analyzed {relative_path}: {len(modules)} modules, {len(graph)} triples")

            return FileAnalysis(
                file_path=file_path,
                relative_path=relative_path,
                modules=[m for m, _ in modules],
                graph=graph,
                metadata=metadata,
            )

    def _source_text(self, file_path: str, source: str) -> Optional[str]:
        """Elixir text of the file; for a JSON dump, the sibling source it was dumped from (if present)."""
        if not file_path.endswith(".json"):
            return source
        original = file_path[: -len(".json")]
        if original.endswith((".ex", ".exs")) and os.path.isfile(original):
            with open(original, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        return None

    def _source_url(self, file_path: str, relative_path: str, location: Optional[SourceLocation]) -> Optional[str]:
        if self.repository is None:
            return None
        # Hosting URLs are relative to the git root, not to the Mix project.
        if self.repository.path:
            repo_relative = PathUtils.relative_to_root(file_path, self.repository.path)
            if repo_relative is not None:
                relative_path = source_path(repo_relative)
        if location is None:
            return for_repository_file(self.repository, relative_path)
        return for_repository_file(self.repository, relative_path, location.start_line, location.end_line)


class ProjectAnalyzer:
    """
    Analyzes every source file of a Mix project into one merged graph.

    Per-file failures are collected (`continue_on_error=True`) or re-raised.
    """

    def __init__(self, parser: SourceParser, config: Optional[Config] = None):
        self.parser = parser
        self.config = config or Config.default()

    def analyze(self, path: str, continue_on_error: bool = True, exclude_tests: bool = True) -> ProjectResult:
        with tracer.start_as_current_span("analyzer.analyze_project") as span:
            project = Project.detect(path)
            if project is None:
                raise FileNotFoundError(f"No {MIX_FILE} found at or above {path}")
            span.set_attribute("project.name", project.name)
            logger.info(f"Analyzing project {project.name} at {project.path}")

            repository = self._repository(project)

            collector = SourceCollector(
                project.path,
                source_dirs=project.source_dirs,
                extensions=self.parser.extensions,
                exclude_tests=exclude_tests,
            )
            collected = collector.collect()

            file_analyzer = FileAnalyzer(self.parser, self.config, repository)
            graph = bind_prefixes(Graph())
            files: List[FileResult] = []
            errors: List[Tuple[str, Exception]] = []

            for item in collected:
                try:
                    analysis = file_analyzer.analyze(item.full_path, item.rel_path)
                except (ParseError, OSError) as e:
                    if not continue_on_error:
                        span.record_exception(e)
                        span.set_status(trace.Status(trace.StatusCode.ERROR))
                        raise
                    logger.warning(f"Failed to analyze {item.rel_path}: {e}")
                    errors.append((item.rel_path, e))
                    files.append(FileResult(item.full_path, item.rel_path, "error", error=e))
                    continue

                graph += analysis.graph
                files.append(FileResult(item.full_path, item.rel_path, "ok", analysis=analysis))

            if repository is not None:
                for triple in self._repository_triples(repository):
                    graph.add(triple)

            metadata = {
                "file_count": len(collected),
                "analyzed": sum(1 for f in files if f.status == "ok"),
                "failed": len(errors),
                "triple_count": len(graph),
                "has_repository": repository is not None,
            }
            span.set_attribute("project.files", metadata["file_count"])
            span.set_attribute("project.failed", metadata["failed"])
            logger.info(
                f"Project {project.name}: {metadata['analyzed']}/{metadata['file_count']} files, "
                f"{metadata['triple_count']} triples"
            )
            return ProjectResult(project=project, files=files, graph=graph, errors=errors, metadata=metadata)

    def _repository(self, project: Project) -> Optional[Repository]:
        if not self.config.include_git_info:
            return None
        repository = GitClient(project.path).repository()
        if repository is None or repository.remote_url is None:
            return None
        return repository

    def _repository_triples(self, repository: Repository) -> List[Tuple[URIRef, URIRef, Any]]:
        repo_iri = IRI.for_repository(self.config.base_iri, repository.remote_url)
        triples = [
            (repo_iri, RDF.type, EVOLUTION.Repository),
            (repo_iri, EVOLUTION.repositoryUrl, RDFLiteral(repository.remote_url, datatype=XSD.anyURI)),
        ]
        if repository.name:
            triples.append((repo_iri, EVOLUTION.repositoryName, RDFLiteral(repository.name, datatype=XSD.string)))
        if repository.current_commit:
            commit_iri = IRI.for_commit(repo_iri, repository.current_commit)
            triples += [
                (commit_iri, RDF.type, EVOLUTION.Commit),
                (commit_iri, EVOLUTION.commitHash, RDFLiteral(repository.current_commit, datatype=XSD.string)),
                (commit_iri, EVOLUTION.inRepository, repo_iri),
            ]
        return triples
