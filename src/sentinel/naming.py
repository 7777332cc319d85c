"""Identifier case predicates used by the naming rules."""

import re

_CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
_PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_SNAKE_CASE = re.compile(r"^[a-z][a-z0-9_]*$")
_CONSTANT_CASE = re.compile(r"^[A-Z][A-Z0-9_]*$")


def is_camel_case(name: str) -> bool:
    return _CAMEL_CASE.match(name) is not None


def is_pascal_case(name: str) -> bool:
    return _PASCAL_CASE.match(name) is not None


def is_snake_case(name: str) -> bool:
    return _SNAKE_CASE.match(name) is not None


def is_constant_case(name: str) -> bool:
    return _CONSTANT_CASE.match(name) is not None
