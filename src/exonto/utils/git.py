import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

# remote URL forms: (regex, protocol)
_REMOTE_PATTERNS = (
    (re.compile(r"^https://([^/]+)/([^/]+)/([^/]+?)(?:\.git)?$"), "https"),
    (re.compile(r"^ssh://(?:[^@]+@)?([^/]+)/([^/]+)/([^/]+?)(?:\.git)?$"), "ssh"),
    (re.compile(r"^git@([^:]+):([^/]+)/([^/]+?)(?:\.git)?$"), "ssh"),
    (re.compile(r"^git://([^/]+)/([^/]+)/([^/]+?)(?:\.git)?$"), "git"),
)


@dataclass
class ParsedRemote:
    host: str
    owner: str
    repo: str
    protocol: str


@dataclass
class Repository:
    """Hosting coordinates of a git checkout."""

    host: Optional[str] = None
    owner: Optional[str] = None
    name: Optional[str] = None
    current_commit: Optional[str] = None
    remote_url: Optional[str] = None
    path: Optional[str] = None
    current_branch: Optional[str] = None
    default_branch: Optional[str] = None


def parse_remote_url(url: str) -> Optional[ParsedRemote]:
    """
    Splits a remote URL into host, owner and repository name.

    Accepts `https://`, `ssh://`, `git@host:owner/repo` and `git://` forms,
    with or without a trailing `.git`. Returns `None` for anything else.
    """
    url = url.strip()
    for pattern, protocol in _REMOTE_PATTERNS:
        match = pattern.match(url)
        if match:
            host, owner, repo = match.groups()
            return ParsedRemote(host=host, owner=owner, repo=repo, protocol=protocol)
    return None


def find_git_root(path: str) -> Optional[str]:
    """Nearest ancestor of `path` (inclusive) containing a `.git` directory."""
    current = os.path.abspath(path)
    if os.path.isfile(current):
        current = os.path.dirname(current)
    while True:
        if os.path.isdir(os.path.join(current, ".git")):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


class GitClient:
    def __init__(self, repo_path: str):
        self.repo_path = repo_path

    def _run_git(self, args: List[str]) -> str:
        try:
            return subprocess.check_output(
                ["git"] + args, cwd=self.repo_path, text=True, stderr=subprocess.DEVNULL
            ).strip()
        except (subprocess.CalledProcessError, OSError):
            return ""

    def is_repository(self) -> bool:
        return find_git_root(self.repo_path) is not None

    def get_remote_url(self) -> Optional[str]:
        return self._run_git(["config", "--get", "remote.origin.url"]) or None

    def get_current_commit(self) -> Optional[str]:
        return self._run_git(["rev-parse", "HEAD"]) or None

    def get_current_branch(self) -> Optional[str]:
        return self._run_git(["rev-parse", "--abbrev-ref", "HEAD"]) or None

    def get_default_branch(self) -> Optional[str]:
        ref = self._run_git(["symbolic-ref", "refs/remotes/origin/HEAD", "--short"])
        if ref:
            return ref[len("origin/"):] if ref.startswith("origin/") else ref
        for candidate in ("main", "master"):
            if self._run_git(["rev-parse", "--verify", candidate]):
                return candidate
        return None

    def repository(self) -> Optional[Repository]:
        """Full metadata for the checkout, or `None` when the path is not inside one."""
        root = find_git_root(self.repo_path)
        if root is None:
            return None

        remote = self.get_remote_url()
        parsed = parse_remote_url(remote) if remote else None
        if remote and parsed is None:
            logger.warning(f"Unrecognized git remote URL: {remote}")

        return Repository(
            host=parsed.host if parsed else None,
            owner=parsed.owner if parsed else None,
            name=parsed.repo if parsed else os.path.basename(root),
            current_commit=self.get_current_commit(),
            remote_url=remote,
            path=root,
            current_branch=self.get_current_branch(),
            default_branch=self.get_default_branch(),
        )
