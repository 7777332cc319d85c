from abc import ABC, abstractmethod

from sentinel.models import SourceModel


class BaseParser(ABC):
    """Abstract base class for line-oriented source parsers."""

    @abstractmethod
    def parse(self, lines: list[str]) -> SourceModel:
        """Build the source model of one file.

        Args:
            lines: Physical source lines, without line terminators

        Returns:
            SourceModel with everything the parser recognized
        """
        pass
