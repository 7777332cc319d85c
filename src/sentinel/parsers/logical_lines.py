"""Reassembly of multi-line declarations into logical lines.

A function signature whose parameter list spans several lines, a class
header whose opening brace sits on a later line, or a grouped import spread
over several lines is joined into one logical line carrying the number of its
first physical line. Everything else passes through one physical line at a
time. Recognizers downstream only ever see logical lines.
"""

import re
from dataclasses import dataclass

from sentinel.parsers.scanner import CodeStripper, brace_delta

FUNCTION_START = re.compile(
    r"^\s*(?:(?:public|protected|private|static|abstract|final)\s+)*function\s+&?\s*[A-Za-z_]\w*\s*\("
)
CLASS_START = re.compile(
    r"^\s*(?:(?:abstract|final|readonly)\s+)*(?:class|interface|trait|enum)\s+[A-Za-z_]\w*"
)
GROUP_USE_START = re.compile(r"^\s*use\s+[A-Za-z_\\][\w\\]*\\\{")


@dataclass
class LogicalLine:
    """One declaration or statement line, possibly spanning several physical lines."""
    start: int  # 1-indexed first physical line
    end: int  # 1-indexed last physical line
    text: str
    code: str  # ``text`` with comments and string contents removed
    brace_delta: int
    opens_brace: bool

    @property
    def is_multiline(self) -> bool:
        return self.end > self.start


@dataclass
class _Buffer:
    kind: str  # "function", "class" or "use"
    start: int
    parts: list[str]
    code_parts: list[str]
    delta: int
    parens: int
    opened: bool


def _paren_balance(code: str) -> int:
    return code.count("(") - code.count(")")


def iter_logical_lines(lines: list[str]):
    """Yield ``LogicalLine`` objects for a file's physical lines.

    Args:
        lines: Physical source lines (without line terminators).

    Yields:
        LogicalLine in source order. A buffer still open at end of input is
        flushed as-is so later lines are never lost.
    """
    stripper = CodeStripper()
    buffer: _Buffer | None = None

    for index, line in enumerate(lines):
        number = index + 1
        code = stripper.strip(line)

        if buffer is not None:
            buffer.parts.append(line.strip())
            buffer.code_parts.append(code.strip())
            buffer.delta += brace_delta(code)
            buffer.parens += _paren_balance(code)
            buffer.opened = buffer.opened or "{" in code

            if _buffer_complete(buffer, code):
                yield _flush(buffer, number)
                buffer = None
            continue

        started = _start_buffer(line, code, number)
        if started is not None:
            buffer = started
            continue

        yield LogicalLine(
            start=number,
            end=number,
            text=line,
            code=code,
            brace_delta=brace_delta(code),
            opens_brace="{" in code,
        )

    if buffer is not None:
        yield _flush(buffer, buffer.start + len(buffer.parts) - 1)


def _start_buffer(line: str, code: str, number: int) -> _Buffer | None:
    """Begin buffering when a declaration's parentheses or header are still open."""
    if FUNCTION_START.match(code):
        parens = _paren_balance(code)
        if parens <= 0:
            return None
        kind = "function"
    elif CLASS_START.match(code):
        if "{" in code or ";" in code:
            return None
        parens = _paren_balance(code)
        kind = "class"
    elif GROUP_USE_START.match(code):
        if "}" in code:
            return None
        parens = 0
        kind = "use"
    else:
        return None

    return _Buffer(
        kind=kind,
        start=number,
        parts=[line.rstrip()],
        code_parts=[code.rstrip()],
        delta=brace_delta(code),
        parens=parens,
        opened="{" in code,
    )


def _buffer_complete(buffer: _Buffer, code: str) -> bool:
    if buffer.kind == "function":
        return buffer.parens <= 0
    if buffer.kind == "use":
        return "}" in code
    return "{" in code


def _flush(buffer: _Buffer, end: int) -> LogicalLine:
    # The first part keeps its indentation so anchored patterns still apply
    text = " ".join(part for part in buffer.parts if part)
    code = " ".join(part for part in buffer.code_parts if part)
    return LogicalLine(
        start=buffer.start,
        end=end,
        text=text,
        code=code,
        brace_delta=buffer.delta,
        opens_brace=buffer.opened,
    )
