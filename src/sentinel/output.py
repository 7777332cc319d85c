"""Console reporting for analysis runs."""

from rich.console import Console

from sentinel.models import Issue

WIDTH = 50


class Output:
    """Writes run progress and results to a rich Console.

    With ``displayable=False`` nothing is written. With ``colorable=False``
    messages are written as plain text, without styles or status symbols.
    Message text is never interpreted as rich markup or emoji codes.
    """

    def __init__(self, console: Console | None = None, displayable: bool = True, colorable: bool = True):
        self.console = console if console is not None else Console(highlight=False, soft_wrap=True)
        self.displayable = displayable
        self.colorable = colorable

    def write(self, message: str, style: str | None = None) -> None:
        if not self.displayable:
            return
        self.console.print(
            message,
            style=style if self.colorable else None,
            end="",
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )

    def writeln(self, message: str = "", style: str | None = None) -> None:
        self.write(message + "\n", style)

    def _status(self, symbol: str, message: str, style: str) -> None:
        if self.colorable:
            self.writeln(f"{symbol} {message}", style)
        else:
            self.writeln(message)

    def success(self, message: str) -> None:
        self._status("✓", message, "green")

    def error(self, message: str) -> None:
        self._status("✗", message, "red")

    def warning(self, message: str) -> None:
        self._status("⚠", message, "yellow")

    def info(self, message: str) -> None:
        self._status("ℹ", message, "blue")

    def separator(self) -> None:
        self.writeln("=" * WIDTH)

    def header(self, title: str) -> None:
        padding = max(0, (WIDTH - len(title)) // 2 - 1)
        self.separator()
        self.writeln(" " * padding + title, "bold")
        self.separator()

    def section(self, title: str) -> None:
        self.writeln()
        self.writeln(title, "bold")
        self.writeln("-" * len(title))

    def summary(self, label: str, count: int, is_success: bool = False) -> None:
        message = f"{label}: {count}"
        if is_success:
            self.success(message)
        else:
            self.error(message)

    def issue(self, issue: Issue) -> None:
        self.writeln(str(issue))

    def issues(self, issues: list[Issue]) -> None:
        for issue in issues:
            self.issue(issue)
