"""Comment/string stripping and brace-balanced block scanning.

Both the structural parser and several rules need to count braces without
being fooled by braces inside string literals or comments. ``CodeStripper``
blanks those regions line by line while remembering an unterminated block
comment or string across lines; ``scan_block`` uses it to find where a
function body closes.
"""

import re
from dataclasses import dataclass

HEREDOC_START = re.compile(r"""<<<[ \t]*(["']?)([A-Za-z_]\w*)\1""")


class CodeStripper:
    """Stateful remover of comments and string contents.

    String literals keep their quotes but lose their contents (``"a{b"``
    becomes ``""``), comments are removed. A heredoc or nowdoc opener is
    replaced by ``""`` and its body lines are blanked up to the closing
    identifier. Attribute syntax (``#[...]``) is kept as code.
    """

    def __init__(self):
        self.in_block_comment = False
        self.string_quote: str | None = None
        self.heredoc_id: str | None = None

    def _closes_heredoc(self, line: str) -> int:
        """Index just past the closing identifier on ``line``, or -1."""
        match = re.match(rf"[ \t]*{re.escape(self.heredoc_id)}(?!\w)", line)
        return match.end() if match else -1

    def strip(self, line: str) -> str:
        out: list[str] = []
        i = 0
        length = len(line)

        if self.heredoc_id is not None:
            i = self._closes_heredoc(line)
            if i == -1:
                return ""
            self.heredoc_id = None

        while i < length:
            char = line[i]

            if self.in_block_comment:
                end = line.find("*/", i)
                if end == -1:
                    return "".join(out)
                self.in_block_comment = False
                i = end + 2
                continue

            if self.string_quote is not None:
                if char == "\\":
                    i += 2
                    continue
                if char == self.string_quote:
                    out.append(char)
                    self.string_quote = None
                i += 1
                continue

            if char == "<" and line.startswith("<<<", i):
                match = HEREDOC_START.match(line, i)
                if match:
                    # The body starts on the next line
                    self.heredoc_id = match.group(2)
                    out.append('""')
                    return "".join(out)

            if char in ("'", '"', "`"):
                self.string_quote = char
                out.append(char)
                i += 1
                continue

            if char == "/" and line.startswith("//", i):
                break

            if char == "#" and not line.startswith("#[", i):
                break

            if char == "/" and line.startswith("/*", i):
                self.in_block_comment = True
                i += 2
                continue

            out.append(char)
            i += 1

        return "".join(out)


def strip_code(line: str) -> str:
    """Strip comments and string contents from a single, self-contained line."""
    return CodeStripper().strip(line)


def brace_delta(stripped: str) -> int:
    """Net brace depth change of already-stripped text."""
    return stripped.count("{") - stripped.count("}")


@dataclass
class Block:
    """Extent of a brace-delimited body found by ``scan_block`` (0-indexed lines)."""
    start: int
    end: int
    has_body: bool


def scan_block(lines: list[str], start: int) -> Block:
    """Find the extent of the body opened at or after ``lines[start]``.

    Scanning stops when brace depth returns to zero after having opened. A
    declaration that reaches a top-level ``;`` before any ``{`` (abstract or
    interface methods) has no body and ends on that line. An unterminated body
    runs to the last line.

    Args:
        lines: Physical source lines.
        start: 0-indexed line of the declaration.

    Returns:
        Block describing the scanned extent.
    """
    stripper = CodeStripper()
    depth = 0
    parens = 0
    opened = False

    for index in range(start, len(lines)):
        stripped = stripper.strip(lines[index])

        for char in stripped:
            if char == "(":
                parens += 1
            elif char == ")":
                parens = max(0, parens - 1)
            elif char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
                if opened and depth <= 0:
                    return Block(start=start, end=index, has_body=True)
            elif char == ";" and not opened and parens == 0:
                return Block(start=start, end=index, has_body=False)

    return Block(start=start, end=max(start, len(lines) - 1), has_body=opened)


def body_segments(lines: list[str], block: Block) -> list[tuple[int, str]]:
    """Stripped code of a block's body, paired with 0-indexed line numbers.

    The declaration part before the opening brace is excluded, so parameter
    lists and return types never count as body code.
    """
    if not block.has_body:
        return []

    stripper = CodeStripper()
    segments = []
    opened = False

    for index in range(block.start, block.end + 1):
        stripped = stripper.strip(lines[index])

        if not opened:
            brace = stripped.find("{")
            if brace == -1:
                continue
            opened = True
            stripped = stripped[brace + 1:]

        segments.append((index, stripped))

    return segments
