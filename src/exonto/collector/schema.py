from dataclasses import dataclass
from typing import Optional, Literal

# Semantic categories for files
FileCategory = Literal['source', 'script', 'test', 'unknown']

@dataclass(slots=True)
class CollectedFile:
    """
    Represents a validated source file.
    Output of the SourceCollector stream.
    """
    rel_path: str         # Path relative to project root (e.g., "lib/my_app.ex")
    full_path: str        # Absolute path on disk (for content reading)
    extension: str        # Normalized extension (e.g., ".ex")
    size_bytes: int       # File size in bytes
    git_hash: Optional[str] # SHA-1 Blob ID (None if untracked or not in git)
    category: FileCategory  # Semantic classification (e.g., 'test')

    @property
    def is_tracked(self) -> bool:
        """Returns True if the file is tracked by Git and has a valid hash."""
        return self.git_hash is not None

    @property
    def is_test(self) -> bool:
        return self.category == 'test'
