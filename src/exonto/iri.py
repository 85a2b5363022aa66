"""
IRI generation for code elements.

Every structural fact gets a deterministic IRI derived from its naming context:
the same (scope, role, index) always rebuilds the same string, and different
roles or indices under the same scope never collide.

Patterns (base `https://example.org/code#`):

*   Module:      `base#MyApp.Users`
*   Function:    `base#MyApp.Users/get_user/1`
*   Clause:      `base#MyApp.Users/get_user/1/clause/0`
*   Parameter:   `base#MyApp.Users/get_user/1/clause/0/param/0`
*   Anonymous:   `base#MyApp/anon/0`
*   Field:       `base#MyApp.User/field/name`
*   Child spec:  `base#MyApp.Sup/child/MyApp.Worker/0`
*   File:        `base#file/lib/users.ex`
*   Location:    `base#file/lib/users.ex/L10-25`
*   Repository:  `base#repo/a1b2c3d4`
*   Commit:      `base#repo/a1b2c3d4/commit/abc123`

Clause and position indices in IRIs are 0-based; the recorded ordinal properties
(`clauseOrder`, `parameterPosition`) are 1-based.
"""

import re
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import unquote

from rdflib import URIRef

from .utils.id_generator import short_id

IriLike = Union[str, URIRef]

_SAFE_CHARS = frozenset(b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_.-")


def escape_name(name: Any) -> str:
    """
    Percent-encodes every character outside `[A-Za-z0-9_.-]`.

    `escape_name("valid?")` -> "valid%3F", `escape_name("|>")` -> "%7C%3E".
    """
    raw = _name_to_string(name).encode("utf-8")
    return "".join(chr(b) if b in _SAFE_CHARS else f"%{b:02X}" for b in raw)


def unescape_name(name: str) -> str:
    return unquote(name)


def _name_to_string(name: Any) -> str:
    text = str(name)
    if text.startswith("Elixir."):
        text = text[len("Elixir."):]
    return text


def _encode_path(path: str) -> str:
    return "/".join(escape_name(segment) for segment in path.split("/"))


# ==============================================================================
#  GENERATORS
# ==============================================================================


def for_module(base_iri: IriLike, module_name: Any) -> URIRef:
    return URIRef(f"{base_iri}{escape_name(module_name)}")


def for_function(base_iri: IriLike, module: Any, function_name: Any, arity: int) -> URIRef:
    return URIRef(f"{base_iri}{escape_name(module)}/{escape_name(function_name)}/{arity}")


def for_clause(function_iri: IriLike, clause_index: int) -> URIRef:
    return URIRef(f"{function_iri}/clause/{clause_index}")


def for_parameter(clause_iri: IriLike, position: int) -> URIRef:
    return URIRef(f"{clause_iri}/param/{position}")


def for_source_file(base_iri: IriLike, relative_path: str) -> URIRef:
    path = _encode_path(relative_path.replace("\\", "/"))
    return URIRef(f"{base_iri}file/{path}")


def for_source_location(file_iri: IriLike, start_line: int, end_line: int) -> URIRef:
    return URIRef(f"{file_iri}/L{start_line}-{end_line}")


def for_repository(base_iri: IriLike, repo_url: str) -> URIRef:
    return URIRef(f"{base_iri}repo/{short_id(repo_url)}")


def for_commit(repo_iri: IriLike, sha: str) -> URIRef:
    return URIRef(f"{repo_iri}/commit/{sha}")


def for_anonymous_function(scope_iri: IriLike, index: int) -> URIRef:
    return URIRef(f"{scope_iri}/anon/{index}")


def for_anonymous_clause(anon_iri: IriLike, index: int) -> URIRef:
    return URIRef(f"{anon_iri}/clause/{index}")


def for_struct_field(scope_iri: IriLike, field_name: Any) -> URIRef:
    return URIRef(f"{scope_iri}/field/{escape_name(field_name)}")


def for_child_spec(supervisor_iri: IriLike, child_id: Any, position: int) -> URIRef:
    # Ids repeat when the same worker is started several times; the position keeps them apart.
    return URIRef(f"{supervisor_iri}/child/{escape_name(child_id)}/{position}")


def for_supervision_tree(base_iri: IriLike, app_name: Any) -> URIRef:
    return URIRef(f"{base_iri}tree/{escape_name(app_name)}")


def for_quote(base_iri: IriLike, module_name: Any, index: int) -> URIRef:
    return URIRef(f"{base_iri}{escape_name(module_name)}/quote/{index}")


def for_unquote(quote_iri: IriLike, index: int) -> URIRef:
    return URIRef(f"{quote_iri}/unquote/{index}")


def for_hygiene_violation(quote_iri: IriLike, index: int) -> URIRef:
    return URIRef(f"{quote_iri}/hygiene/{index}")


# ==============================================================================
#  PARSING
# ==============================================================================

_MODULE = r"[A-Z][A-Za-z0-9_.%]*"

_PARAMETER_RE = re.compile(r"^(.+)/clause/(\d+)/param/(\d+)$")
_CLAUSE_RE = re.compile(r"^(.+)/(\d+)/clause/(\d+)$")
_LOCATION_RE = re.compile(r"^(.+)/L(\d+)-(\d+)$")
_COMMIT_RE = re.compile(r"^(.+#repo/[a-f0-9]+)/commit/([a-f0-9]+)$")
_REPOSITORY_RE = re.compile(r"^(.+#)repo/([a-f0-9]+)$")
_FILE_RE = re.compile(r"^(.+#)file/(.+)$")
_FUNCTION_RE = re.compile(rf"^(.+#)({_MODULE})/([^/]+)/(\d+)$")
_FUNCTION_NAME_RE = re.compile(rf"^(.+#)({_MODULE})/([^/]+)$")
_MODULE_RE = re.compile(rf"^(.+#)({_MODULE})$")


def parse(iri: IriLike) -> Dict[str, Any]:
    """
    Splits an IRI back into its components.

    The result always has a `type` key: `parameter`, `clause`, `location`,
    `commit`, `repository`, `file`, `function` or `module`.
    Raises `ValueError` for anything else.
    """
    text = str(iri)

    m = _PARAMETER_RE.match(text)
    if m:
        return _parse_parameter(m.group(1), int(m.group(2)), int(m.group(3)))

    m = _CLAUSE_RE.match(text)
    if m:
        return _parse_clause(m.group(1), int(m.group(2)), int(m.group(3)))

    m = _LOCATION_RE.match(text)
    if m:
        return _parse_location(m.group(1), int(m.group(2)), int(m.group(3)))

    m = _COMMIT_RE.match(text)
    if m:
        result = {"type": "commit", "sha": m.group(2)}
        repo = _REPOSITORY_RE.match(m.group(1))
        if repo:
            result.update(base_iri=repo.group(1), repo_hash=repo.group(2))
        return result

    m = _REPOSITORY_RE.match(text)
    if m:
        return {"type": "repository", "base_iri": m.group(1), "repo_hash": m.group(2)}

    m = _FILE_RE.match(text)
    if m:
        return {"type": "file", "base_iri": m.group(1), "path": unquote(m.group(2))}

    m = _FUNCTION_RE.match(text)
    if m:
        return {
            "type": "function",
            "base_iri": m.group(1),
            "module": unquote(m.group(2)),
            "function": unquote(m.group(3)),
            "arity": int(m.group(4)),
        }

    m = _MODULE_RE.match(text)
    if m:
        return {"type": "module", "base_iri": m.group(1), "module": unquote(m.group(2))}

    raise ValueError(f"Unknown IRI pattern: {text}")


def _parse_parameter(clause_parent: str, clause: int, param: int) -> Dict[str, Any]:
    result = {"type": "parameter", "clause": clause, "parameter": param}
    m = _FUNCTION_RE.match(clause_parent)
    if m:
        result.update(
            base_iri=m.group(1),
            module=unquote(m.group(2)),
            function=unquote(m.group(3)),
            arity=int(m.group(4)),
        )
    return result


def _parse_clause(function_parent: str, arity: int, clause: int) -> Dict[str, Any]:
    result = {"type": "clause", "arity": arity, "clause": clause}
    m = _FUNCTION_NAME_RE.match(function_parent)
    if m:
        result.update(base_iri=m.group(1), module=unquote(m.group(2)), function=unquote(m.group(3)))
    return result


def _parse_location(file_iri: str, start_line: int, end_line: int) -> Dict[str, Any]:
    result = {"type": "location", "start_line": start_line, "end_line": end_line}
    m = _FILE_RE.match(file_iri)
    if m:
        result.update(base_iri=m.group(1), path=unquote(m.group(2)))
    return result


def module_from_iri(iri: IriLike) -> Optional[str]:
    """Module name from a module, function, clause or parameter IRI; `None` otherwise."""
    try:
        parsed = parse(iri)
    except ValueError:
        return None
    return parsed.get("module") if parsed["type"] in ("module", "function", "clause", "parameter") else None


def function_from_iri(iri: IriLike) -> Optional[Tuple[str, str, int]]:
    """`(module, function, arity)` from a function, clause or parameter IRI; `None` otherwise."""
    try:
        parsed = parse(iri)
    except ValueError:
        return None
    if parsed["type"] not in ("function", "clause", "parameter") or "function" not in parsed:
        return None
    return parsed["module"], parsed["function"], parsed["arity"]


def is_valid(iri: Any) -> bool:
    """An absolute IRI: a scheme followed by ':' and no whitespace or angle brackets."""
    if not isinstance(iri, str):
        return False
    return re.match(r"^[A-Za-z][A-Za-z0-9+.-]*:[^\s<>\"{}|\\^`]+$", iri) is not None
