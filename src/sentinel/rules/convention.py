"""Naming and formatting conventions."""

import re

from sentinel.naming import is_camel_case, is_constant_case, is_pascal_case, is_snake_case
from sentinel.parsers.scanner import CodeStripper
from sentinel.rules.base import Rule
from sentinel.source import SourceFile

CONST_DECLARATION = re.compile(r"\bconst\s+(?:[A-Za-z_\\?][\w\\|?]*\s+)?([A-Za-z_]\w*)\s*=")
DEFINE_CALL = re.compile(r"\bdefine\s*\(\s*['\"]([^'\"]+)['\"]")
VARIABLE = re.compile(r"\$([a-zA-Z_][a-zA-Z0-9_]*)")
COMMENT_LINE = re.compile(r"^\s*(?://|/\*|\*|#(?!\[))")
LEADING_WHITESPACE = re.compile(r"^(\s+)")

SUPERGLOBALS = frozenset({
    "GLOBALS",
    "_SERVER",
    "_GET",
    "_POST",
    "_FILES",
    "_COOKIE",
    "_SESSION",
    "_REQUEST",
    "_ENV",
})


class NamingConventionRule(Rule):
    """Classes in PascalCase; functions, methods and properties in camelCase.

    Magic methods (``__construct``, ``__toString``, ...) are exempt.
    """

    name = "Naming Convention"

    def check(self, source: SourceFile, file: str) -> None:
        model = source.model

        for entity in model.classes:
            if is_pascal_case(entity.name):
                continue
            self.add_issue(
                file,
                entity.start,
                f'{entity.kind.capitalize()} "{entity.name}" should be in PascalCase.',
            )

        for function in model.functions:
            if function.name.startswith("__") or is_camel_case(function.name):
                continue
            self.add_issue(
                file,
                function.line,
                f'{function.kind_label.capitalize()} "{function.qualified_name}" should be in camelCase.',
            )

        for prop in model.properties:
            if is_camel_case(prop.name):
                continue
            self.add_issue(file, prop.line, f'Property "{prop.qualified_name}" should be in camelCase.')


class ConstantNamingRule(Rule):
    """Constants declared with ``const`` or ``define()`` must be CONSTANT_CASE."""

    name = "Constant Naming"

    def check(self, source: SourceFile, file: str) -> None:
        stripper = CodeStripper()

        for number, line in enumerate(source.lines, start=1):
            code = stripper.strip(line)

            match = CONST_DECLARATION.search(code)
            if match and not is_constant_case(match.group(1)):
                self.add_issue(file, number, f'Constant "{match.group(1)}" should be in CONSTANT_CASE.')

            # The define() name lives inside a string, so match the raw line
            if "define" not in code:
                continue
            match = DEFINE_CALL.search(line)
            if not match:
                continue
            constant = match.group(1)
            # Namespaced constants follow the namespace's own casing
            if "\\" in constant or is_constant_case(constant):
                continue
            self.add_issue(file, number, f'Constant "{constant}" should be in CONSTANT_CASE.')


class VariableNamingRule(Rule):
    """Variables must be camelCase (snake_case is tolerated).

    Superglobals and ``$this`` are exempt. Comment lines are skipped; every
    occurrence is reported, not only the first assignment.
    """

    name = "Variable Naming"

    def check(self, source: SourceFile, file: str) -> None:
        for number, line in enumerate(source.lines, start=1):
            if COMMENT_LINE.match(line):
                continue

            for variable in VARIABLE.findall(line):
                if variable in SUPERGLOBALS or variable == "this":
                    continue
                if is_camel_case(variable) or is_snake_case(variable):
                    continue
                self.add_issue(file, number, f'Variable "${variable}" should be in camelCase.')


class Psr12ComplianceRule(Rule):
    """Basic PSR-12 layout: opening tag, strict_types placement, indentation, line length."""

    name = "PSR-12 Compliance"

    def check(self, source: SourceFile, file: str) -> None:
        lines = source.lines

        self._check_file_structure(source, file)

        for number, line in enumerate(lines, start=1):
            self._check_indentation(line, number, file)
            self._check_line_length(line, number, file)

    def _check_file_structure(self, source: SourceFile, file: str) -> None:
        lines = source.lines

        if lines and not lines[0].strip().startswith("<?php"):
            self.add_issue(file, 1, "File must start with <?php tag.")

        if not source.model.strict_types:
            return

        for index, line in enumerate(lines[:5]):
            if "declare(strict_types=1)" not in line:
                continue
            if index > 2:
                self.add_issue(file, index + 1, "declare(strict_types=1) must be on line 2 or 3.")
            break

    def _check_indentation(self, line: str, number: int, file: str) -> None:
        if not line.strip():
            return

        match = LEADING_WHITESPACE.match(line)
        if not match:
            return

        indent = match.group(1)
        if "\t" in indent:
            self.add_issue(file, number, "Indentation must use spaces, not tabs.")
            return

        # DocBlock continuation lines are aligned one space past the opener
        if line.lstrip().startswith("*"):
            return

        if len(indent) % 4 != 0:
            self.add_issue(file, number, "Indentation must be in multiples of 4 spaces.")

    def _check_line_length(self, line: str, number: int, file: str) -> None:
        length = len(line.rstrip())
        if length <= self.max_line_length:
            return

        self.add_issue(
            file,
            number,
            f"Line exceeds {self.max_line_length} characters. ({length} characters)",
        )
