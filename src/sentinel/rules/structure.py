"""Size, complexity and file-organization rules."""

import re

from sentinel.models import FunctionEntity, Import
from sentinel.parsers.scanner import CodeStripper, body_segments, scan_block
from sentinel.rules.base import Rule
from sentinel.source import SourceFile

BRANCH_KEYWORD = re.compile(r"\b(if|elseif|for|foreach|while|case)\b")
CATCH = re.compile(r"\bcatch\b")
BOOLEAN_OPERATOR = re.compile(r"(&&|\|\|)\s")
TERNARY = re.compile(r"\?.*?:")
NULL_COALESCE = re.compile(r"\?\?=?")
NULLSAFE = re.compile(r"\?->")
NULLABLE_TYPE = re.compile(r"([(,:]\s*)\?(?=\s*[A-Za-z_\\])")

SKIPPED_USAGE_LINE = re.compile(r"^\s*(//|/\*|\*)")


def method_length(lines: list[str], function: FunctionEntity) -> int:
    """Non-blank lines from the declaration line to the end of the body."""
    block = scan_block(lines, function.line - 1)
    return sum(1 for line in lines[block.start:block.end + 1] if line.strip())


def _branch_points(code: str) -> int:
    count = len(BRANCH_KEYWORD.findall(code))
    count += len(CATCH.findall(code))
    count += len(BOOLEAN_OPERATOR.findall(code))

    # ``??``, ``?->`` and nullable types use ``?`` without branching
    code = NULL_COALESCE.sub("", code)
    code = NULLSAFE.sub("->", code)
    code = NULLABLE_TYPE.sub(r"\1", code)
    count += len(TERNARY.findall(code))

    return count


def cyclomatic_complexity(lines: list[str], function: FunctionEntity) -> int:
    """Cyclomatic complexity of a function body.

    Starts at 1 and adds one per branch keyword, ``catch``, short-circuit
    operator and ternary. Comments and string contents are ignored. A
    function without a body has complexity 1.
    """
    block = scan_block(lines, function.line - 1)
    return 1 + sum(_branch_points(code) for _, code in body_segments(lines, block))


class ClassLengthRule(Rule):
    """Classes and methods must stay under the configured line counts."""

    name = "Class Length"

    def check(self, source: SourceFile, file: str) -> None:
        for entity in source.model.classes:
            count = entity.line_count
            if count is None or count <= self.max_class_length:
                continue
            self.add_issue(
                file,
                entity.start,
                f'Class "{entity.name}" is too long. ({count} lines, max: {self.max_class_length})',
            )

        for function in source.model.functions:
            if not function.is_method:
                continue

            length = method_length(source.lines, function)
            if length <= self.max_method_length:
                continue
            self.add_issue(
                file,
                function.line,
                f'Method "{function.qualified_name}" is too long. ({length} lines, max: {self.max_method_length})',
            )


class CyclomaticComplexityRule(Rule):
    """Functions and methods must stay under the configured cyclomatic complexity."""

    name = "Cyclomatic Complexity"

    def check(self, source: SourceFile, file: str) -> None:
        for function in source.model.functions:
            complexity = cyclomatic_complexity(source.lines, function)
            if complexity <= self.max_complexity:
                continue
            self.add_issue(
                file,
                function.line,
                f'Function "{function.qualified_name}" has cyclomatic complexity of {complexity}. '
                f"(max: {self.max_complexity})",
            )


class NamespaceRule(Rule):
    """Files declaring a class, interface, trait or enum must declare a namespace."""

    name = "Namespace"

    def check(self, source: SourceFile, file: str) -> None:
        model = source.model
        if not model.classes or model.namespace is not None:
            return
        self.add_issue(file, 1, "Missing namespace declaration")


def _code_start(lines: list[str], imports: list[Import]) -> int:
    """0-indexed line just after the statement of the last import."""
    last = max(imports, key=lambda item: item.line)
    stripper = CodeStripper()

    for index in range(last.line - 1, len(lines)):
        if ";" in stripper.strip(lines[index]):
            return index + 1

    return len(lines)


class UnusedImportsRule(Rule):
    """Imports whose effective name never appears after the import block.

    The search is a whole-word match on the alias (or the short name) over
    every line after the last import statement except comment lines. Trait
    ``use`` lines inside a class body count as usage.
    """

    name = "Unused Imports"

    def check(self, source: SourceFile, file: str) -> None:
        imports = source.model.imports
        if not imports:
            return

        lines = source.lines
        candidates = [
            line for line in lines[_code_start(lines, imports):]
            if not SKIPPED_USAGE_LINE.match(line)
        ]

        for item in imports:
            pattern = re.compile(rf"\b{re.escape(item.effective_name)}\b")
            if any(pattern.search(line) for line in candidates):
                continue
            self.add_issue(file, item.line, f'Unused import "{item.full_name}".')
