"""Source file discovery and file-importance scoring."""

import os
from collections.abc import Iterable
from pathlib import Path

from .collector_logging import LogCategory, get_category_logger
from .exceptions import DebtCollectorError
from .performance.timing import timed

logger = get_category_logger(LogCategory.PIPELINE)

DEFAULT_EXCLUDE_DIRS = (".git", "node_modules", "vendor", "build", ".venv", ".next")

DEFAULT_EXTENSIONS = (
    ".go",
    ".py",
    ".js",
    ".ts",
    ".java",
    ".c",
    ".cpp",
    ".h",
    ".hpp",
    ".rs",
    ".rb",
    ".php",
    ".sh",
)

# Any of these in the lower-cased path marks a file as most important
CRITICAL_PATH_FRAGMENTS = (
    "main.go",
    "main.py",
    "index.js",
    "/core/",
    "/kernel/",
    "/engine/",
    "/models/",
    "/handlers/",
    "/routers/",
    "config",
    "setup",
    "init",
)


class RepositoryNotFoundError(DebtCollectorError):
    """The repository root does not exist or is not a directory."""

    def __init__(self, path: str | Path):
        self.path = str(path)
        super().__init__(f"repository path does not exist: {self.path}")


class RepositoryScanner:
    """Walk a repository and yield the source files worth scanning."""

    def __init__(
        self,
        root_path: str | Path,
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
        include_extensions: Iterable[str] = (),
        skip_hidden: bool = True,
    ):
        self.root_path = Path(root_path)
        self.exclude_dirs = set(exclude_dirs)
        self.include_extensions = set(include_extensions) or set(DEFAULT_EXTENSIONS)
        self.skip_hidden = skip_hidden

    def _skip_name(self, name: str) -> bool:
        return self.skip_hidden and name.startswith(".")

    @timed("scan_files")
    def scan_files(self) -> list[str]:
        """Return matching file paths in deterministic walk order.

        The root itself is never treated as hidden, so scanning ``.`` works.
        Unreadable subdirectories are skipped.

        Raises:
            RepositoryNotFoundError: The root is missing or not a directory.
        """
        if not self.root_path.is_dir():
            raise RepositoryNotFoundError(self.root_path)

        files: list[str] = []
        for dirpath, dirnames, filenames in os.walk(
            self.root_path,
            onerror=lambda e: logger.debug(f"Skipping unreadable path: {e}"),
        ):
            dirnames[:] = sorted(
                d
                for d in dirnames
                if d not in self.exclude_dirs and not self._skip_name(d)
            )
            for filename in sorted(filenames):
                if self._skip_name(filename):
                    continue
                if os.path.splitext(filename)[1] in self.include_extensions:
                    files.append(os.path.join(dirpath, filename))

        logger.debug(f"Found {len(files)} source files under {self.root_path}")
        return files

    @staticmethod
    def file_importance(file_path: str | Path) -> int:
        """Score a path from 1 (peripheral) to 5 (core).

        Critical fragments win; otherwise deeper paths score lower.
        """
        path = str(file_path)
        lower = path.lower()
        if any(fragment in lower for fragment in CRITICAL_PATH_FRAGMENTS):
            return 5

        depth = path.count(os.sep)
        if depth > 5:
            return 1
        if depth > 3:
            return 2
        return 3
