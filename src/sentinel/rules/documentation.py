"""DocBlock presence and consistency between DocBlocks and declarations."""

import re

from sentinel.models import FunctionEntity
from sentinel.parsers.scanner import body_segments, scan_block
from sentinel.rules.base import Rule
from sentinel.source import SourceFile
from sentinel.typestrings import (
    is_class_type,
    normalize_type_name,
    short_name,
    split_top_level,
    strip_member_markers,
)

THROW_NEW = re.compile(r"\bthrow\s+new\s+\\?([A-Z][\w\\]*)")

EXEMPT_FROM_RETURN = ("__construct", "__destruct")
ARRAY_LIKE = ("array", "iterable")
ARRAY_SHAPES = ("array<", "array{", "list<", "iterable<", "non-empty-array<", "non-empty-list<")
SELF_REFERENCES = ("$this", "self", "static")


class MissingDocBlockRule(Rule):
    """Every class, function, method and property needs a DocBlock."""

    name = "Missing DocBlock"

    def check(self, source: SourceFile, file: str) -> None:
        model = source.model

        for entity in model.classes:
            if entity.has_docblock:
                continue
            self.add_issue(file, entity.start, f'Missing PHPDoc for {entity.kind} "{entity.name}".')

        for function in model.functions:
            if function.has_docblock:
                continue
            self.add_issue(
                file,
                function.line,
                f'Missing PHPDoc for {function.kind_label} "{function.qualified_name}".',
            )

        for prop in model.properties:
            if prop.has_docblock:
                continue
            self.add_issue(file, prop.line, f'Missing PHPDoc for property "{prop.qualified_name}".')


class ParamDocRule(Rule):
    """@param tags and declared parameters must match one to one by name."""

    name = "Param Doc"

    def check(self, source: SourceFile, file: str) -> None:
        for function in source.model.functions:
            if not function.has_docblock:
                continue

            docblock = function.docblock
            label = f'{function.kind_label} "{function.qualified_name}"'

            for parameter in function.parameters.values():
                if docblock.has_param(parameter.name):
                    continue
                self.add_issue(
                    file,
                    docblock.start,
                    f'Missing @param tag for parameter "{parameter.variable_name}" in {label}.',
                )

            for tag in docblock.params.values():
                if tag.name in function.parameters:
                    continue
                self.add_issue(
                    file,
                    docblock.start,
                    f'Documented parameter "{tag.variable_name}" does not exist in {label}.',
                )


def _doc_members(type_text: str) -> list[tuple[str, bool]]:
    """Split a type into (normalized member, is array-like) pairs, dropping null."""
    members = []
    for member in split_top_level(type_text.strip().lstrip("?")):
        member = member.lstrip("?").strip()
        lowered = member.lower()
        array_like = (
            member.endswith("[]")
            or lowered in ARRAY_LIKE
            or lowered.startswith(ARRAY_SHAPES)
        )
        name = normalize_type_name(strip_member_markers(member))
        if name == "null":
            continue
        members.append((name, array_like))
    return members


def _compatible(documented: tuple[str, bool], declared: tuple[str, bool]) -> bool:
    doc_name, doc_array_like = documented
    actual_name, _ = declared

    if doc_name == actual_name:
        return True

    if "mixed" in (doc_name, actual_name):
        return True

    if actual_name in ARRAY_LIKE and doc_array_like:
        return True

    if doc_name in SELF_REFERENCES and actual_name in SELF_REFERENCES:
        return True

    if is_class_type(doc_name) and is_class_type(actual_name) and not doc_array_like:
        return short_name(doc_name) == short_name(actual_name)

    return False


def is_obvious_mismatch(documented: str, declared: str) -> bool:
    """Whether a documented return type plainly contradicts the declared one.

    Aliases are normalized, nullability is ignored, ``mixed`` matches
    anything, array-like doc types match ``array``/``iterable`` and class
    names are compared by short name. For unions, each member on either side
    must have a compatible member on the other side.

    Examples:
        >>> is_obvious_mismatch("integer", "int")
        False
        >>> is_obvious_mismatch("User[]", "array")
        False
        >>> is_obvious_mismatch("string", "int")
        True
    """
    doc_members = _doc_members(documented)
    declared_members = _doc_members(declared)

    if not doc_members or not declared_members:
        return False

    for member in declared_members:
        if not any(_compatible(doc, member) for doc in doc_members):
            return True

    for doc in doc_members:
        if not any(_compatible(doc, member) for member in declared_members):
            return True

    return False


class ReturnDocRule(Rule):
    """A function declaring a non-void return type needs a matching @return tag.

    Constructors and destructors are exempt. Only obvious type contradictions
    are reported (see ``is_obvious_mismatch``).
    """

    name = "Return Doc"

    def check(self, source: SourceFile, file: str) -> None:
        for function in source.model.functions:
            if function.name in EXEMPT_FROM_RETURN or not function.has_docblock:
                continue

            docblock = function.docblock

            if not docblock.has_return:
                if function.has_return_type and function.return_type.lower() != "void":
                    self.add_issue(
                        file,
                        docblock.start,
                        f'Missing @return tag for {function.kind_label} "{function.qualified_name}"',
                    )
                continue

            if not function.has_return_type:
                continue

            documented = docblock.return_tag.type
            if is_obvious_mismatch(documented, function.return_type):
                self.add_issue(
                    file,
                    docblock.start,
                    f'@return type mismatch in "{function.qualified_name}": '
                    f'documented "{documented}" vs actual "{function.return_type}".',
                )


def find_thrown_exceptions(lines: list[str], function: FunctionEntity) -> list[str]:
    """Short names of exceptions raised with ``throw new`` in a function body.

    The body is found by an independent brace scan from the declaration line;
    nested closures count as part of the enclosing body. Each name appears
    once, in order of first occurrence.
    """
    block = scan_block(lines, function.line - 1)
    exceptions = []

    for _, code in body_segments(lines, block):
        for match in THROW_NEW.finditer(code):
            exception = short_name(match.group(1))
            if exception not in exceptions:
                exceptions.append(exception)

    return exceptions


class ThrowsDocRule(Rule):
    """Every ``throw new X`` in a documented function needs an ``@throws X`` tag."""

    name = "Throws Doc"

    def check(self, source: SourceFile, file: str) -> None:
        for function in source.model.functions:
            if not function.has_docblock:
                continue

            docblock = function.docblock
            for exception in find_thrown_exceptions(source.lines, function):
                if docblock.has_throws(exception):
                    continue
                self.add_issue(
                    file,
                    docblock.start,
                    f'Missing @throws tag for "{exception}" in {function.kind_label} "{function.qualified_name}".',
                )
