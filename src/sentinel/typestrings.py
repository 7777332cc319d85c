"""Helpers for PHP type strings as they appear in declarations and doc tags.

Doc types are loose: ``?int``, ``Foo|Bar[]``, ``array<int, string|null>``,
``integer``. These helpers split them into members and normalize each member
so that rules can compare documented and declared types.
"""

# Legacy aliases accepted by phpDocumentor, keyed in lower case
TYPE_ALIASES = {
    "boolean": "bool",
    "integer": "int",
    "double": "float",
    "real": "float",
    "null": "null",
}

BUILTIN_TYPES = frozenset({
    "array",
    "bool",
    "callable",
    "false",
    "float",
    "int",
    "iterable",
    "mixed",
    "never",
    "null",
    "object",
    "parent",
    "resource",
    "self",
    "static",
    "string",
    "true",
    "void",
})

# Types that are not class-like when comparing declared and documented types
SCALAR_TYPES = frozenset({
    "bool",
    "int",
    "float",
    "string",
    "array",
    "callable",
    "iterable",
    "void",
    "mixed",
    "never",
    "null",
    "object",
})

_OPENERS = "(<{"
_CLOSERS = ")>}"


def split_top_level(text: str, separator: str = "|") -> list[str]:
    """Split text on a separator, ignoring separators nested in brackets.

    Args:
        text: Text to split, e.g. ``array<int|string>|null``.
        separator: Single-character separator.

    Returns:
        Stripped, non-empty parts in order of appearance.

    Examples:
        >>> split_top_level("array<int|string>|null")
        ['array<int|string>', 'null']
    """
    parts = []
    depth = 0
    current = []

    for char in text:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS and depth > 0:
            depth -= 1

        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue

        current.append(char)

    parts.append("".join(current))

    return [part.strip() for part in parts if part.strip()]


def normalize_type_name(name: str) -> str:
    """Map a single type member to its canonical spelling.

    Aliases (``boolean``, ``integer``, ``double``, ``real``, ``NULL``) are
    resolved case-insensitively, built-in names are lower-cased and class-like
    names are returned unchanged.
    """
    lowered = name.lower()

    if lowered in TYPE_ALIASES:
        return TYPE_ALIASES[lowered]

    if lowered in BUILTIN_TYPES:
        return lowered

    return name


def strip_member_markers(member: str) -> str:
    """Remove trailing ``[]`` and ``...`` markers from a type member."""
    changed = True
    while changed:
        changed = False
        if member.endswith("[]"):
            member = member[:-2].rstrip()
            changed = True
        if member.endswith("..."):
            member = member[:-3].rstrip()
            changed = True
    return member


def parse_type_string(raw: str) -> tuple[list[str], bool]:
    """Split and normalize a raw type string.

    Args:
        raw: Type string as written, e.g. ``?Foo|Bar[]``.

    Returns:
        Tuple of (deduplicated member list, nullable flag). The nullable flag
        is set by a leading ``?`` or an explicit ``null`` member.

    Examples:
        >>> parse_type_string("Foo|Bar[]")
        (['Foo', 'Bar'], False)
        >>> parse_type_string("?integer")
        (['int'], True)
    """
    text = raw.strip()
    nullable = False

    if text.startswith("?"):
        nullable = True
        text = text[1:]

    types: list[str] = []
    for member in split_top_level(text):
        if member.startswith("?"):
            nullable = True
            member = member[1:]

        member = strip_member_markers(member)
        if not member:
            continue

        member = normalize_type_name(member)
        if member == "null":
            nullable = True

        if member not in types:
            types.append(member)

    return types, nullable


def short_name(name: str) -> str:
    """Return the last segment of a namespaced name.

    Examples:
        >>> short_name("\\\\App\\\\Models\\\\User")
        'User'
    """
    return name.rstrip("\\").rsplit("\\", 1)[-1]


def is_class_type(name: str) -> bool:
    """Check whether a type member names a class rather than a scalar."""
    return name.lower() not in SCALAR_TYPES
