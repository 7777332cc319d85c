"""Loading of PHP source files into lines and a parsed model."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from sentinel.exceptions import FileReadError, OutOfRangeLineError, SourceFileNotFoundError
from sentinel.models import SourceModel
from sentinel.parsers import get_parser_for_file
from sentinel.parsers.base import BaseParser
from sentinel.parsers.php_parser import PhpParser

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(content: str) -> list[str]:
    """Split text on CRLF, CR or LF uniformly.

    A trailing line terminator does not produce an extra empty line.
    """
    lines = _LINE_BREAK.split(content)
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


@dataclass
class SourceFile:
    """A source file's lines together with its parsed model."""
    path: Path
    lines: list[str]
    model: SourceModel

    @classmethod
    def load(cls, path: Path, parser: BaseParser | None = None) -> "SourceFile":
        """Read and parse a file.

        Args:
            path: File to load
            parser: Parser to use; chosen from the file extension if None

        Returns:
            SourceFile with lines and model

        Raises:
            SourceFileNotFoundError: If the path is missing or not a regular file
            FileReadError: If the file cannot be read
        """
        if not path.is_file():
            raise SourceFileNotFoundError(str(path))

        try:
            with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
                content = f.read()
        except OSError as e:
            raise FileReadError(str(path), e.strerror or str(e)) from e

        return cls.from_text(content, path, parser)

    @classmethod
    def from_text(cls, content: str, path: Path | None = None, parser: BaseParser | None = None) -> "SourceFile":
        """Build a SourceFile from in-memory text (used by tests and stdin input)."""
        path = path if path is not None else Path("<memory>.php")
        if parser is None:
            parser = get_parser_for_file(path) or PhpParser()

        lines = split_lines(content)
        logger.debug(f"Parsing {path} ({len(lines)} lines)")
        return cls(path=path, lines=lines, model=parser.parse(lines))

    def line(self, number: int) -> str:
        """Text of a 1-indexed line.

        Raises:
            OutOfRangeLineError: If the line does not exist
        """
        if number < 1 or number > len(self.lines):
            raise OutOfRangeLineError(str(self.path), number)
        return self.lines[number - 1]

    @property
    def line_count(self) -> int:
        return len(self.lines)
