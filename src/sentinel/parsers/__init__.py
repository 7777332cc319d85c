from pathlib import Path

from sentinel.parsers.base import BaseParser
from sentinel.parsers.php_parser import PhpParser

PHP_EXTENSIONS = {".php"}


def get_parser_for_file(file_path: Path) -> BaseParser | None:
    """Get the parser for a file based on its extension.

    Args:
        file_path: Path to the source file

    Returns:
        Parser instance, or None if the file type is not supported
    """
    if file_path.suffix.lower() in PHP_EXTENSIONS:
        return PhpParser()
    return None
