import os
import re
from typing import Optional, Tuple

_MULTI_SLASH = re.compile(r"/+")
_DOT_RUN = re.compile(r"\.\.+")
_PARENT_SEGMENT = re.compile(r"(^|/)\.\.($|/)")


class PathUtils:
    """Path helpers for files inside a repository. Separators are always `/` on output."""

    @staticmethod
    def normalize(path: str) -> str:
        """
        `lib\\foo.ex`, `lib//foo.ex`, `./lib/./foo.ex` -> `lib/foo.ex`.

        Backslashes become slashes, repeated separators collapse, a trailing
        separator and `.` components are dropped.
        """
        path = path.replace("\\", "/")
        path = _MULTI_SLASH.sub("/", path)
        path = path.rstrip("/")
        path = path.replace("/./", "/")
        if path.startswith("./"):
            path = path[2:]
        return path

    @staticmethod
    def relative_to_root_result(file_path: str, repo_path: str) -> Tuple[Optional[str], Optional[str]]:
        """`(relative, None)` or `(None, "outside_repo")`. The repository root itself is `"."`."""
        expanded_file = os.path.abspath(os.path.expanduser(file_path))
        expanded_repo = os.path.abspath(os.path.expanduser(repo_path))
        repo_prefix = PathUtils.ensure_trailing_separator(expanded_repo)

        if expanded_file == expanded_repo:
            return ".", None
        if expanded_file.startswith(repo_prefix):
            return PathUtils.normalize(expanded_file[len(repo_prefix):]), None
        if not os.path.isabs(file_path):
            resolved = os.path.abspath(os.path.join(expanded_repo, file_path))
            if resolved.startswith(repo_prefix) or resolved == expanded_repo:
                return PathUtils.normalize(file_path), None
        return None, "outside_repo"

    @staticmethod
    def relative_to_root(file_path: str, repo_path: str) -> Optional[str]:
        relative, _ = PathUtils.relative_to_root_result(file_path, repo_path)
        return relative

    @staticmethod
    def in_repo(file_path: str, repo_path: str) -> bool:
        return PathUtils.relative_to_root(file_path, repo_path) is not None

    @staticmethod
    def ensure_trailing_separator(path: str) -> str:
        return path if path.endswith("/") else path + "/"

    @staticmethod
    def remove_traversal(path: str) -> str:
        """`lib/../etc/passwd` -> `lib/etc/passwd`; never yields a leading `/`."""
        path = _DOT_RUN.sub("", path)
        path = _PARENT_SEGMENT.sub("/", path)
        path = _MULTI_SLASH.sub("/", path)
        return path.lstrip("/")

    @staticmethod
    def join(base: str, path: str) -> str:
        return PathUtils.normalize(os.path.join(base, path))
