import os
import subprocess
import logging
import stat
from typing import Generator, Iterable, List, Optional, Sequence, Tuple

# [OTEL] Trace API
from opentelemetry import trace

from .schema import CollectedFile, FileCategory
from .config import SUPPORTED_EXTENSIONS, BLOCKLIST_DIRS, MAX_FILE_SIZE_BYTES, TEST_DIRS

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

class SourceCollector:
    """
    Handles discovery and validation of project source files.

    Inside a git checkout it uses 'git ls-files' (tracked files come with their
    blob hash for free); elsewhere it falls back to a plain directory walk.
    Both paths go through the same safety filters (blocklist, size limit,
    regular files only) before files reach the analyzer.
    """

    def __init__(
        self,
        repo_root: str,
        source_dirs: Optional[Sequence[str]] = None,
        extensions: Optional[Iterable[str]] = None,
        exclude_tests: bool = True,
    ):
        self.repo_root = os.path.abspath(repo_root)
        # Relative roots to scan; None scans the whole tree.
        self.source_dirs = [d.strip("/") for d in source_dirs] if source_dirs else None
        self.valid_exts = {e.lower() for e in extensions} if extensions else SUPPORTED_EXTENSIONS
        self.blocklist = BLOCKLIST_DIRS
        self.max_size = MAX_FILE_SIZE_BYTES
        self.exclude_tests = exclude_tests

    def collect(self) -> List[CollectedFile]:
        files = [f for batch in self.stream_files() for f in batch]
        return sorted(files, key=lambda f: f.rel_path)

    def stream_files(self, chunk_size: int = 2000) -> Generator[List[CollectedFile], None, None]:
        """
        Main Generator. Yields batches of valid CollectedFile objects.

        Args:
            chunk_size: Number of files per batch (default: 2000).
        """
        with tracer.start_as_current_span("collector.stream_files") as span:
            span.set_attribute("repo.root", self.repo_root)

            count = 0
            buffer = []

            use_git = os.path.isdir(os.path.join(self.repo_root, ".git"))
            span.set_attribute("collector.git", use_git)

            for rel_path, git_hash in self._candidates(use_git):
                file_obj = self._validate_and_build(rel_path, git_hash)
                if file_obj:
                    buffer.append(file_obj)
                    count += 1
                    if len(buffer) >= chunk_size:
                        yield buffer
                        buffer = []

            # Final Flush
            if buffer:
                yield buffer

            span.set_attribute("collector.total_files", count)
            logger.info(f"Collection complete. Found {count} valid files.")

    def _candidates(self, use_git: bool) -> Generator[Tuple[str, Optional[str]], None, None]:
        if not use_git:
            yield from self._walk()
            return

        pathspec = ["--"] + self.source_dirs if self.source_dirs else []

        # --- PHASE 1: Tracked Files (With Git Hash) ---
        cmd_tracked = [
            "git", "-C", self.repo_root,
            "ls-files", "-s", "-z", "--exclude-standard"
        ] + pathspec
        yield from self._run_git_stream(cmd_tracked, parse_staged=True)

        # --- PHASE 2: Untracked Files (Without Hash) ---
        cmd_untracked = [
            "git", "-C", self.repo_root,
            "ls-files", "-o", "-z", "--exclude-standard"
        ] + pathspec
        yield from self._run_git_stream(cmd_untracked, parse_staged=False)

    def _walk(self) -> Generator[Tuple[str, Optional[str]], None, None]:
        roots = [os.path.join(self.repo_root, d) for d in self.source_dirs] if self.source_dirs else [self.repo_root]
        for root in roots:
            if not os.path.isdir(root):
                continue
            for dirpath, dirnames, filenames in os.walk(root):
                # Prune in place so os.walk never enters blocked directories.
                dirnames[:] = sorted(d for d in dirnames if d not in self.blocklist)
                for name in sorted(filenames):
                    full = os.path.join(dirpath, name)
                    yield os.path.relpath(full, self.repo_root).replace(os.sep, "/"), None

    def _run_git_stream(self, cmd: List[str], parse_staged: bool) -> Generator[Tuple[str, Optional[str]], None, None]:
        """
        Executes the Git command and parses the raw binary stream.
        """
        try:
            with subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE) as proc:
                stdout, stderr = proc.communicate()

                if proc.returncode != 0:
                    err_msg = stderr.decode(errors='replace')
                    logger.warning(f"Git command failed: {err_msg}")
                    trace.get_current_span().record_exception(Exception(err_msg))
                    return

                for entry in stdout.split(b'\0'):
                    if not entry:
                        continue
                    try:
                        if parse_staged:
                            # Format: "100644 <hash> 0\t<path>"
                            meta, path_bytes = entry.split(b'\t', 1)
                            meta_parts = meta.split(b' ')
                            if len(meta_parts) >= 2:
                                yield path_bytes.decode('utf-8', errors='replace'), meta_parts[1].decode('ascii')
                        else:
                            yield entry.decode('utf-8', errors='replace'), None
                    except ValueError:
                        continue

        except OSError as e:
            logger.error(f"Error in git stream: {e}")
            trace.get_current_span().record_exception(e)

    def _validate_and_build(self, rel_path: str, git_hash: Optional[str]) -> Optional[CollectedFile]:
        """
        Applies the collection funnel: Metadata Filter -> Filesystem Check -> Enrichment.
        """
        # 1. Extension Filter
        _, ext = os.path.splitext(rel_path)
        ext = ext.lower()
        if ext not in self.valid_exts:
            return None

        # 2. Blocklist Filter
        parts = rel_path.split("/")
        if any(p in self.blocklist for p in parts[:-1]):
            return None

        category = self._determine_category(rel_path)
        if self.exclude_tests and category == 'test':
            return None

        full_path = os.path.join(self.repo_root, rel_path)

        # 3. Filesystem Safety Check
        try:
            # lstat does NOT follow symlinks (loop prevention)
            st = os.lstat(full_path)

            if not stat.S_ISREG(st.st_mode):
                return None

            if st.st_size == 0 or st.st_size > self.max_size:
                return None

            return CollectedFile(
                rel_path=rel_path,
                full_path=full_path,
                extension=ext,
                size_bytes=st.st_size,
                git_hash=git_hash,
                category=category
            )

        except OSError:
            # File might have been deleted between listing and lstat
            return None

    def _determine_category(self, rel_path: str) -> FileCategory:
        """
        Heuristically determines the semantic category of a file based on its path.
        """
        parts = rel_path.lower().split("/")
        name = parts[-1]
        source_name = name[:-len(".json")] if name.endswith(".json") else name

        if any(p in TEST_DIRS for p in parts[:-1]) or source_name.endswith('_test.exs'):
            return 'test'
        if source_name.endswith('.exs'):
            return 'script'
        if source_name.endswith('.ex'):
            return 'source'
        return 'unknown'
