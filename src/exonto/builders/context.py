from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, Optional

from rdflib import URIRef

from .. import iri as IRI
from ..config import project_file
from ..errors import ConfigurationError


@dataclass(frozen=True)
class Context:
    """
    Naming context threaded through every builder.

    **Key Responsibilities**:
    *   **IRI Scope**: resolves the IRI that nested constructs hang off
        (module segments, then an explicit parent scope, then the source file).
    *   **Settings**: carries builder-level config and per-call metadata.
    *   **Cross-module Linking**: optionally knows which modules exist in the project.

    Every `with_*` method returns a new context.
    """

    base_iri: str
    file_path: Optional[str] = None
    parent_module: Optional[str] = None
    config: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    known_modules: Optional[FrozenSet[str]] = None

    def with_parent_module(self, parent_module: Optional[str]) -> "Context":
        return replace(self, parent_module=parent_module)

    def with_file_path(self, file_path: Optional[str]) -> "Context":
        return replace(self, file_path=file_path)

    def with_metadata(self, **metadata: Any) -> "Context":
        return replace(self, metadata={**self.metadata, **metadata})

    def with_config(self, **config: Any) -> "Context":
        return replace(self, config={**self.config, **config})

    def with_known_modules(self, modules: Iterable[str]) -> "Context":
        return replace(self, known_modules=frozenset(modules))

    def get_config(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def validate(self) -> "Context":
        if not isinstance(self.base_iri, str) or not self.base_iri:
            raise ConfigurationError("Context requires a non-empty base_iri")
        return self

    def module_known(self, module_name: str) -> Optional[bool]:
        """`None` when no module set was configured, otherwise membership."""
        if self.known_modules is None:
            return None
        return module_name in self.known_modules

    @property
    def cross_module_linking_enabled(self) -> bool:
        return self.known_modules is not None

    def full_mode_for_file(self, file_path: Optional[str] = None) -> bool:
        path = file_path if file_path is not None else self.file_path
        return bool(self.get_config("include_expressions", False)) and project_file(path)

    def get_context_iri(self, fallback: str) -> URIRef:
        """
        Scope IRI for constructs with no name of their own (anonymous functions, quotes).

        Resolution order: module segments in metadata, parent scope (verbatim),
        source file, `base_iri + fallback`.
        """
        module = self.metadata.get("module")
        if module:
            name = module if isinstance(module, str) else ".".join(str(part) for part in module)
            return IRI.for_module(self.base_iri, name)
        if self.parent_module:
            return URIRef(self.parent_module)
        if self.file_path:
            return IRI.for_source_file(self.base_iri, self.file_path)
        return URIRef(f"{self.base_iri}{fallback}")
