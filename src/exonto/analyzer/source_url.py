"""
Permalinks to files, lines and line ranges on git hosting platforms.

    for_file("github", "elixir-lang", "elixir", "abc123", "lib/elixir.ex")
    -> "https://github.com/elixir-lang/elixir/blob/abc123/lib/elixir.ex"

Nothing in here raises: invalid input yields `None`, and the `*_result`
variants say why with one of the `UrlError` reasons.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Pattern, Tuple
from urllib.parse import quote_plus

from ..utils.git import Repository

Platform = Literal["github", "gitlab", "bitbucket", "unknown"]
UrlError = Literal[
    "unsupported_platform",
    "invalid_segment",
    "invalid_line_number",
    "invalid_line_range",
    "url_generation_failed",
]
UrlResult = Tuple[Optional[str], Optional[UrlError]]

MAX_LINE_NUMBER = 1_000_000

_VALID_SEGMENT = re.compile(r"^[a-zA-Z0-9._-]+$")
_DOT_RUN = re.compile(r"\.\.+")
_PARENT_SEGMENT = re.compile(r"(^|/)\.\.($|/)")
_MULTI_SLASH = re.compile(r"/+")

# host suffixes are matched strictly: "my-github-clone.com" is not GitHub
_KNOWN_HOSTS: Dict[str, Tuple[str, ...]] = {
    "github": ("github.com", ".github.com", ".github.io"),
    "gitlab": ("gitlab.com", ".gitlab.com", ".gitlab.io"),
    "bitbucket": ("bitbucket.org", ".bitbucket.org", ".bitbucket.io"),
}


@dataclass
class CustomPlatform:
    platform: Platform
    host: Optional[str] = None
    host_pattern: Optional[Pattern] = None
    host_suffix: Optional[str] = None

    def matches(self, host: str) -> bool:
        if self.host is not None and host == self.host:
            return True
        if self.host_pattern is not None and self.host_pattern.search(host):
            return True
        return self.host_suffix is not None and host.endswith(self.host_suffix)


_custom_platforms: List[CustomPlatform] = []


def register_platform(
    platform: Platform,
    host: Optional[str] = None,
    host_pattern: Optional[str] = None,
    host_suffix: Optional[str] = None,
) -> CustomPlatform:
    """Maps a self-hosted instance onto a known URL scheme. Checked before the built-in hosts."""
    if platform not in _KNOWN_HOSTS:
        raise ValueError(f"Unsupported platform {platform!r}")
    if host is None and host_pattern is None and host_suffix is None:
        raise ValueError("One of host, host_pattern or host_suffix is required")
    entry = CustomPlatform(
        platform=platform,
        host=host.lower() if host else None,
        host_pattern=re.compile(host_pattern) if host_pattern else None,
        host_suffix=host_suffix.lower() if host_suffix else None,
    )
    _custom_platforms.append(entry)
    return entry


def get_custom_platforms() -> List[CustomPlatform]:
    return list(_custom_platforms)


def clear_custom_platforms() -> None:
    _custom_platforms.clear()


def detect_platform(host: Optional[str]) -> Platform:
    if not isinstance(host, str):
        return "unknown"
    host = host.lower()

    for custom in _custom_platforms:
        if custom.matches(host):
            return custom.platform

    for platform, (exact, *suffixes) in _KNOWN_HOSTS.items():
        if host == exact or any(host.endswith(s) for s in suffixes):
            return platform
    return "unknown"


# ==============================================================================
#  URL GENERATION
# ==============================================================================


def _valid_segment(segment) -> bool:
    return isinstance(segment, str) and bool(_VALID_SEGMENT.match(segment))


def _valid_line(line) -> bool:
    return isinstance(line, int) and not isinstance(line, bool) and 0 < line <= MAX_LINE_NUMBER


def _valid_range(start_line, end_line) -> bool:
    return _valid_line(start_line) and _valid_line(end_line) and start_line <= end_line


def normalize_path(path: str) -> str:
    """Strips traversal and redundant separators, then form-encodes each segment."""
    if path.startswith("/"):
        path = path[1:]
    if path.startswith("./"):
        path = path[2:]
    path = _DOT_RUN.sub("", path)
    path = _PARENT_SEGMENT.sub("/", path)
    path = _MULTI_SLASH.sub("/", path)
    return "/".join(quote_plus(segment) for segment in path.split("/"))


def _blob_url(platform: Platform, owner: str, repo: str, commit: str, path: str) -> Optional[str]:
    if not (_valid_segment(owner) and _valid_segment(repo) and _valid_segment(commit)):
        return None
    path = normalize_path(path)
    if platform == "github":
        return f"https://github.com/{owner}/{repo}/blob/{commit}/{path}"
    if platform == "gitlab":
        return f"https://gitlab.com/{owner}/{repo}/-/blob/{commit}/{path}"
    if platform == "bitbucket":
        return f"https://bitbucket.org/{owner}/{repo}/src/{commit}/{path}"
    return None


def for_file(platform: Platform, owner: str, repo: str, commit: str, path: str) -> Optional[str]:
    return _blob_url(platform, owner, repo, commit, path)


def for_line(platform: Platform, owner: str, repo: str, commit: str, path: str, line: int) -> Optional[str]:
    if not _valid_line(line):
        return None
    url = _blob_url(platform, owner, repo, commit, path)
    if url is None:
        return None
    if platform == "bitbucket":
        return f"{url}#lines-{line}"
    return f"{url}#L{line}"


def for_range(
    platform: Platform, owner: str, repo: str, commit: str, path: str, start_line: int, end_line: int
) -> Optional[str]:
    if not _valid_range(start_line, end_line):
        return None
    url = _blob_url(platform, owner, repo, commit, path)
    if url is None:
        return None
    if platform == "github":
        return f"{url}#L{start_line}-L{end_line}"
    if platform == "gitlab":
        return f"{url}#L{start_line}-{end_line}"
    return f"{url}#lines-{start_line}:{end_line}"


def _explain(platform, owner, repo, commit) -> Optional[UrlError]:
    if platform not in _KNOWN_HOSTS:
        return "unsupported_platform"
    if not (_valid_segment(owner) and _valid_segment(repo) and _valid_segment(commit)):
        return "invalid_segment"
    return None


def for_file_result(platform: Platform, owner: str, repo: str, commit: str, path: str) -> UrlResult:
    url = for_file(platform, owner, repo, commit, path)
    if url is not None:
        return url, None
    return None, _explain(platform, owner, repo, commit) or "url_generation_failed"


def for_line_result(platform: Platform, owner: str, repo: str, commit: str, path: str, line: int) -> UrlResult:
    url = for_line(platform, owner, repo, commit, path, line)
    if url is not None:
        return url, None
    reason = _explain(platform, owner, repo, commit)
    if reason is None and not _valid_line(line):
        reason = "invalid_line_number"
    return None, reason or "url_generation_failed"


def for_range_result(
    platform: Platform, owner: str, repo: str, commit: str, path: str, start_line: int, end_line: int
) -> UrlResult:
    url = for_range(platform, owner, repo, commit, path, start_line, end_line)
    if url is not None:
        return url, None
    reason = _explain(platform, owner, repo, commit)
    if reason is None and not _valid_range(start_line, end_line):
        reason = "invalid_line_range"
    return None, reason or "url_generation_failed"


# ==============================================================================
#  REPOSITORY-BASED
# ==============================================================================


def for_repository_file(
    repo: Repository, path: str, line: Optional[int] = None, end_line: Optional[int] = None
) -> Optional[str]:
    """File, line or range URL, depending on which of `line` / `end_line` are given."""
    platform = detect_platform(repo.host)
    if platform == "unknown" or not (repo.owner and repo.name and repo.current_commit):
        return None
    if line is None:
        return for_file(platform, repo.owner, repo.name, repo.current_commit, path)
    if end_line is None:
        return for_line(platform, repo.owner, repo.name, repo.current_commit, path, line)
    return for_range(platform, repo.owner, repo.name, repo.current_commit, path, line, end_line)
