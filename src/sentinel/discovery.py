"""PHP file discovery with .gitignore support.

Files are found by walking the analyzed root, skipping excluded directory
names, and filtering out paths matched by ``.gitignore`` patterns. Patterns
from every ``.gitignore`` apply to paths below the directory holding it and
are evaluated in load order, so a later ``!pattern`` re-includes a path an
earlier pattern ignored.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from sentinel.config import DiscoveryConfig
from sentinel.exceptions import DirectoryNotFoundError
from sentinel.parsers import PHP_EXTENSIONS

logger = logging.getLogger(__name__)

GITIGNORE_FILE = ".gitignore"
MAX_GITIGNORE_DEPTH = 20
MAX_CACHE_SIZE = 10000


@dataclass
class GitignorePattern:
    """One compiled line of a .gitignore file."""
    pattern: str
    base: Path  # Directory containing the .gitignore
    negated: bool
    regex: re.Pattern | None


def compile_gitignore_pattern(pattern: str) -> re.Pattern | None:
    """Compile a gitignore pattern to a regex over ``/``-separated relative paths.

    - a trailing ``/`` matches directories only (and everything beneath them)
    - a leading or inner ``/`` anchors the pattern to the .gitignore directory
    - ``**`` matches across path segments, ``*`` and ``?`` within one segment

    Args:
        pattern: Pattern text without negation marker

    Returns:
        Compiled regex, or None for an empty pattern.
    """
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    pattern = pattern.rstrip("/")
    if not pattern:
        return None

    anchored = "/" in pattern
    pattern = pattern.lstrip("/")

    regex = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if pattern.startswith("**/", i):
            regex.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            regex.append(".*")
            i += 2
        elif char == "*":
            regex.append("[^/]*")
            i += 1
        elif char == "?":
            regex.append("[^/]")
            i += 1
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                regex.append(re.escape(char))
                i += 1
            else:
                body = pattern[i + 1:end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                regex.append(f"[{body}]")
                i = end + 1
        elif char == "\\" and i + 1 < len(pattern):
            regex.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            regex.append(re.escape(char))
            i += 1

    prefix = "^" if anchored else "(?:^|/)"
    suffix = "/" if directory_only else "(?:/|$)"

    try:
        return re.compile(prefix + "".join(regex) + suffix)
    except re.error:
        return None


class GitignoreMatcher:
    """Evaluates .gitignore patterns against absolute file paths.

    Answers are memoized. Past ``max_cache_size`` entries the oldest half of
    the cache is dropped.
    """

    def __init__(self, max_cache_size: int = MAX_CACHE_SIZE):
        self.patterns: list[GitignorePattern] = []
        self.max_cache_size = max_cache_size
        self._cache: dict[str, bool] = {}

    def load(self, root: Path, exclude_dirs: tuple[str, ...] = (), recursive: bool = True) -> None:
        """Load .gitignore files from root (and below it when recursive)."""
        self.patterns = []
        self._cache = {}

        if recursive:
            self._load_recursively(root, exclude_dirs, 0)
        else:
            self.add_file(root / GITIGNORE_FILE, root)

        logger.debug(f"Loaded {len(self.patterns)} gitignore patterns under {root}")

    def _load_recursively(self, directory: Path, exclude_dirs: tuple[str, ...], depth: int) -> None:
        if depth > MAX_GITIGNORE_DEPTH:
            return

        self.add_file(directory / GITIGNORE_FILE, directory)

        try:
            children = sorted(entry for entry in directory.iterdir() if entry.is_dir())
        except OSError as e:
            logger.warning(f"Cannot list {directory}: {e}")
            return

        for child in children:
            if child.name in exclude_dirs or child.is_symlink():
                continue
            self._load_recursively(child, exclude_dirs, depth + 1)

    def add_file(self, gitignore_path: Path, base: Path) -> None:
        """Read patterns from one .gitignore file; unreadable files are skipped."""
        if not gitignore_path.is_file():
            return

        try:
            with open(gitignore_path, "r", encoding="utf-8", errors="replace") as f:
                content = f.read()
        except OSError as e:
            logger.warning(f"Cannot read {gitignore_path}: {e}")
            return

        for line in content.splitlines():
            self.add_pattern(line, base)

    def add_pattern(self, line: str, base: Path) -> None:
        """Add one .gitignore line; blank lines and comments are ignored."""
        pattern = line.strip()
        if not pattern or pattern.startswith("#"):
            return

        negated = pattern.startswith("!")
        if negated:
            pattern = pattern[1:]
        elif pattern.startswith("\\!") or pattern.startswith("\\#"):
            pattern = pattern[1:]

        self.patterns.append(GitignorePattern(
            pattern=pattern,
            base=base,
            negated=negated,
            regex=compile_gitignore_pattern(pattern),
        ))
        self._cache = {}

    def is_ignored(self, path: Path) -> bool:
        """Check whether an absolute path is ignored by the loaded patterns."""
        if not self.patterns:
            return False

        key = str(path)
        if key in self._cache:
            return self._cache[key]

        if len(self._cache) > self.max_cache_size:
            keep = self.max_cache_size // 2
            self._cache = dict(list(self._cache.items())[-keep:])

        ignored = False
        for entry in self.patterns:
            if entry.regex is None:
                continue
            try:
                relative = path.relative_to(entry.base).as_posix()
            except ValueError:
                continue
            if entry.regex.search(relative):
                ignored = not entry.negated

        self._cache[key] = ignored
        return ignored

    @property
    def cache_size(self) -> int:
        return len(self._cache)


def find_php_files(root: Path, config: DiscoveryConfig | None = None) -> list[Path]:
    """Find PHP files under root.

    Args:
        root: Directory to search
        config: Discovery settings (defaults if None)

    Returns:
        Sorted list of absolute paths

    Raises:
        DirectoryNotFoundError: If root is not an existing directory
    """
    if config is None:
        config = DiscoveryConfig()

    if not root.is_dir():
        raise DirectoryNotFoundError(str(root))

    root = root.resolve()
    matcher = None
    if config.use_gitignore:
        matcher = GitignoreMatcher()
        matcher.load(root, config.exclude_dirs, recursive=config.preload_gitignores)

    files = []
    for directory, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in config.exclude_dirs)

        for filename in filenames:
            path = Path(directory) / filename
            if path.suffix.lower() not in PHP_EXTENSIONS:
                continue
            if matcher is not None and matcher.is_ignored(path):
                continue
            files.append(path)

    files.sort(key=lambda p: str(p))
    logger.debug(f"Discovered {len(files)} PHP files under {root}")
    return files


def relative_path(file_path: Path, root: Path) -> str:
    """Path of file relative to root, POSIX-style.

    Falls back to a ``..`` walk when the file is outside root.
    """
    file_path = file_path.resolve()
    root = root.resolve()

    try:
        return file_path.relative_to(root).as_posix()
    except ValueError:
        return Path(os.path.relpath(file_path, root)).as_posix()
