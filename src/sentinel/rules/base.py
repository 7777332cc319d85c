import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable

from sentinel.config import DiscoveryConfig, RuleConfig
from sentinel.discovery import find_php_files, relative_path
from sentinel.exceptions import DirectoryNotFoundError, SentinelError
from sentinel.models import Issue
from sentinel.source import SourceFile

logger = logging.getLogger(__name__)


class Rule(ABC):
    """Base class for analysis rules.

    A rule discovers the PHP files under a root, loads and parses each one and
    hands it to ``check``, which reports problems through ``add_issue``. A file
    that cannot be read is recorded in ``errors()`` and skipped; the remaining
    files are still analyzed.

    Subclasses set ``name`` and implement ``check``.
    """

    def __init__(self, config: RuleConfig | None = None, discovery: DiscoveryConfig | None = None):
        self.config = config if config is not None else RuleConfig()
        self.discovery = discovery if discovery is not None else DiscoveryConfig()
        self._issues: list[Issue] = []
        self._errors: dict[str, str] = {}
        self._files = 0

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable rule name."""
        pass

    @abstractmethod
    def check(self, source: SourceFile, file: str) -> None:
        """Analyze one parsed file.

        Args:
            source: Loaded file with its lines and model
            file: Path of the file relative to the analyzed root
        """
        pass

    def detect(self, root: Path) -> bool:
        """Run the rule over every PHP file under root.

        Args:
            root: Directory to analyze

        Returns:
            True if no issues were found

        Raises:
            DirectoryNotFoundError: If root is not an existing directory
        """
        if not root.is_dir():
            raise DirectoryNotFoundError(str(root))

        return self.check_files(find_php_files(root, self.discovery), root)

    def check_files(self, paths: Iterable[Path], root: Path) -> bool:
        """Run the rule over an explicit list of files.

        Previous results are discarded first, so running twice over the same
        files gives the same issues.

        Returns:
            True if no issues were found
        """
        self._issues = []
        self._errors = {}
        self._files = 0

        for path in paths:
            file = relative_path(path, root)
            try:
                source = SourceFile.load(path)
            except (SentinelError, OSError) as e:
                logger.warning(f"{self.name}: skipping {file}: {e}")
                self._errors[file] = str(e)
                continue

            start = len(self._issues)
            self.check(source, file)
            self._issues[start:] = sorted(self._issues[start:], key=lambda issue: issue.line)
            self._files += 1

        logger.debug(f"{self.name}: {len(self._issues)} issues in {self._files} files")
        return not self._issues

    def add_issue(self, file: str, line: int, message: str) -> None:
        self._issues.append(Issue(file=file, line=line, message=message))

    def issues(self) -> list[Issue]:
        return list(self._issues)

    def files(self) -> int:
        """Number of files analyzed by the last run (unreadable files excluded)."""
        return self._files

    def errors(self) -> dict[str, str]:
        """Files that could not be analyzed, mapped to the reason."""
        return dict(self._errors)

    # Thresholds are fixed at construction time
    @property
    def max_class_length(self) -> int:
        return self.config.max_class_length

    @property
    def max_method_length(self) -> int:
        return self.config.max_method_length

    @property
    def max_complexity(self) -> int:
        return self.config.max_complexity

    @property
    def max_line_length(self) -> int:
        return self.config.max_line_length
