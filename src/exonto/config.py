import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError

# ==============================================================================
#  ANALYSIS CONFIGURATION & DEFAULTS
# ==============================================================================

"""
Defines the runtime configuration for the analyzer.

Values come from (lowest to highest precedence): the defaults below, `EXONTO_*`
environment variables (a `.env` file is loaded by the CLI), explicit keyword overrides.
"""

DEFAULT_BASE_IRI = "https://example.org/code#"
VALID_OUTPUT_FORMATS = ("turtle", "ntriples", "jsonld")

# Output format -> rdflib serializer name
RDFLIB_FORMATS = {
    "turtle": "turtle",
    "ntriples": "nt",
    "jsonld": "json-ld",
}

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Config:
    base_iri: str = DEFAULT_BASE_IRI
    include_source_text: bool = False
    include_git_info: bool = True
    output_format: str = "turtle"
    # Full expression extraction, applied to project files only (never deps/).
    include_expressions: bool = False

    @classmethod
    def default(cls) -> "Config":
        return cls()

    @classmethod
    def from_env(cls) -> "Config":
        """Reads `EXONTO_*` variables; missing ones keep their defaults."""
        return cls(
            base_iri=os.getenv("EXONTO_BASE_IRI", DEFAULT_BASE_IRI),
            include_source_text=_env_flag("EXONTO_INCLUDE_SOURCE_TEXT", False),
            include_git_info=_env_flag("EXONTO_INCLUDE_GIT_INFO", True),
            output_format=os.getenv("EXONTO_OUTPUT_FORMAT", "turtle"),
            include_expressions=_env_flag("EXONTO_INCLUDE_EXPRESSIONS", False),
        )

    @classmethod
    def new(cls, **opts: Any) -> "Config":
        return cls.default().merge(**opts).validate_or_raise()

    def merge(self, **opts: Any) -> "Config":
        """Returns a copy with the known keys of `opts` applied; unknown keys are ignored."""
        valid = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in opts.items() if k in valid and v is not None})

    def validate(self) -> List[str]:
        errors = []
        if not isinstance(self.base_iri, str) or not self.base_iri:
            errors.append("base_iri must be a non-empty string")
        for name in ("include_source_text", "include_git_info", "include_expressions"):
            if not isinstance(getattr(self, name), bool):
                errors.append(f"{name} must be a boolean")
        if self.output_format not in VALID_OUTPUT_FORMATS:
            errors.append(f"output_format must be one of: {', '.join(VALID_OUTPUT_FORMATS)}")
        return errors

    def validate_or_raise(self) -> "Config":
        errors = self.validate()
        if errors:
            raise ConfigurationError(f"Invalid config: {'; '.join(errors)}")
        return self

    @property
    def rdflib_format(self) -> str:
        return RDFLIB_FORMATS[self.output_format]

    def should_extract_full(self, file_path: Optional[str]) -> bool:
        return self.include_expressions and project_file(file_path)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def project_file(file_path: Optional[str]) -> bool:
    """False for dependency sources (anything under a `deps/` directory) and for `None`."""
    if file_path is None:
        return False
    return not (
        "/deps/" in file_path
        or "\\deps\\" in file_path
        or file_path.startswith("deps/")
        or file_path.startswith("deps\\")
    )
