import re
from dataclasses import dataclass, field

from sentinel.exceptions import ParamTagNotFoundError, ThrowsTagNotFoundError
from sentinel.typestrings import parse_type_string, short_name

_DNF_GROUP = re.compile(r"\([^()]+[|&][^()]+\)")


@dataclass(frozen=True)
class Issue:
    """A single reported problem (1-indexed line, path relative to the analyzed root)."""
    file: str
    line: int
    message: str

    def to_dict(self) -> dict:
        return {"file": self.file, "line": self.line, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.file}:{self.line}] {self.message}"


@dataclass(frozen=True)
class Import:
    """Represents a ``use`` import declaration."""
    line: int
    full_name: str  # Leading namespace separator removed
    alias: str | None = None

    @property
    def has_alias(self) -> bool:
        return self.alias is not None

    @property
    def short_name(self) -> str:
        return short_name(self.full_name)

    @property
    def effective_name(self) -> str:
        """Name the import is referenced by in code: alias if present, else the short name."""
        return self.alias if self.alias is not None else self.short_name

    @property
    def namespace(self) -> str:
        parts = self.full_name.split("\\")
        return "\\".join(parts[:-1])


# ---------------------------------------------------------------------------
# Doc tags
# ---------------------------------------------------------------------------

@dataclass
class ParamTag:
    """Represents an ``@param`` tag."""
    name: str  # Without the leading $
    type: str
    description: str | None = None
    variadic_form: bool = False  # Written as ``type ...$name``
    types: list[str] = field(init=False)
    nullable: bool = field(init=False)

    def __post_init__(self):
        self.types, self.nullable = parse_type_string(self.type)

    @property
    def variable_name(self) -> str:
        return f"${self.name}"

    @property
    def is_variadic(self) -> bool:
        return self.variadic_form or self.type.endswith("[]") or "..." in self.type


@dataclass
class ReturnTag:
    """Represents an ``@return`` tag."""
    type: str
    description: str | None = None
    types: list[str] = field(init=False)
    nullable: bool = field(init=False)

    def __post_init__(self):
        self.types, self.nullable = parse_type_string(self.type)


@dataclass
class ThrowsTag:
    """Represents an ``@throws`` tag."""
    exception: str  # Leading namespace separator removed
    description: str | None = None
    types: list[str] = field(init=False)
    nullable: bool = field(init=False)

    def __post_init__(self):
        self.exception = self.exception.lstrip("\\")
        self.types, self.nullable = parse_type_string(self.exception)

    @property
    def type(self) -> str:
        return self.exception

    @property
    def short_name(self) -> str:
        return short_name(self.exception)


@dataclass
class VarTag:
    """Represents an ``@var`` tag; the variable name is optional."""
    type: str
    name: str | None = None
    description: str | None = None
    types: list[str] = field(init=False)
    nullable: bool = field(init=False)

    def __post_init__(self):
        self.types, self.nullable = parse_type_string(self.type)

    @property
    def variable_name(self) -> str | None:
        return f"${self.name}" if self.name is not None else None


@dataclass
class DocBlock:
    """A parsed documentation comment (``/** ... */``).

    ``start`` and ``end`` are the 1-indexed lines of the opening and closing
    markers. Parameter and throws tags are keyed by parameter name and
    exception short name respectively.
    """
    content: str
    start: int
    end: int
    summary: str | None = None
    description: str | None = None
    params: dict[str, ParamTag] = field(default_factory=dict)
    return_tag: ReturnTag | None = None
    throws: dict[str, ThrowsTag] = field(default_factory=dict)
    var_tag: VarTag | None = None
    deprecated: bool = False
    deprecated_message: str | None = None
    other_tags: dict[str, list[str]] = field(default_factory=dict)

    def has_param(self, name: str) -> bool:
        return name.lstrip("$") in self.params

    def param(self, name: str) -> ParamTag:
        """Get the @param tag for a parameter.

        Raises:
            ParamTagNotFoundError: If no tag documents the parameter.
        """
        if not self.has_param(name):
            raise ParamTagNotFoundError(name.lstrip("$"))
        return self.params[name.lstrip("$")]

    @property
    def has_any_params(self) -> bool:
        return bool(self.params)

    @property
    def has_return(self) -> bool:
        return self.return_tag is not None

    def has_throws(self, exception: str) -> bool:
        return short_name(exception) in self.throws

    def throws_tag(self, exception: str) -> ThrowsTag:
        """Get the @throws tag for an exception, compared by short name.

        Raises:
            ThrowsTagNotFoundError: If the exception is not documented.
        """
        if not self.has_throws(exception):
            raise ThrowsTagNotFoundError(exception)
        return self.throws[short_name(exception)]

    @property
    def has_any_throws(self) -> bool:
        return bool(self.throws)

    @property
    def has_var(self) -> bool:
        return self.var_tag is not None

    def tags(self, name: str) -> list[str]:
        """Raw bodies of a non-typed tag such as ``@see`` or ``@since``."""
        return list(self.other_tags.get(name, []))


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

def _is_dnf(type_text: str | None) -> bool:
    return type_text is not None and _DNF_GROUP.search(type_text) is not None


@dataclass
class ParameterEntity:
    """Represents a function/method parameter."""
    name: str  # Without the leading $
    nullable: bool = False
    type: str | None = None  # None if no type declaration
    default: str | None = None  # None if no default value
    variadic: bool = False
    by_reference: bool = False
    promoted: bool = False  # Constructor property promotion

    @property
    def variable_name(self) -> str:
        return f"${self.name}"

    @property
    def has_type(self) -> bool:
        return self.type is not None

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def is_union_type(self) -> bool:
        return self.type is not None and "|" in self.type

    @property
    def is_intersection_type(self) -> bool:
        return self.type is not None and "&" in self.type

    @property
    def is_dnf_type(self) -> bool:
        return _is_dnf(self.type)


@dataclass
class FunctionEntity:
    """Represents a function or method declaration."""
    line: int
    name: str
    visibility: str | None = None  # None for free functions
    is_static: bool = False
    class_name: str | None = None  # None for free functions
    return_type: str | None = None
    return_type_declared: bool = False
    parameters: dict[str, ParameterEntity] = field(default_factory=dict)
    docblock: DocBlock | None = None

    @property
    def is_method(self) -> bool:
        return self.class_name is not None

    @property
    def kind_label(self) -> str:
        return "method" if self.is_method else "function"

    @property
    def qualified_name(self) -> str:
        if self.class_name is not None:
            return f"{self.class_name}::{self.name}"
        return self.name

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"

    @property
    def is_protected(self) -> bool:
        return self.visibility == "protected"

    @property
    def is_private(self) -> bool:
        return self.visibility == "private"

    @property
    def has_return_type(self) -> bool:
        return self.return_type_declared

    @property
    def has_docblock(self) -> bool:
        return self.docblock is not None

    def parameter(self, name: str) -> ParameterEntity | None:
        return self.parameters.get(name.lstrip("$"))


@dataclass
class PropertyEntity:
    """Represents a class property declaration."""
    line: int
    name: str  # Without the leading $
    visibility: str = "public"
    is_static: bool = False
    is_readonly: bool = False
    class_name: str | None = None
    type: str | None = None  # None if no type declaration
    default: str | None = None
    docblock: DocBlock | None = None

    @property
    def variable_name(self) -> str:
        return f"${self.name}"

    @property
    def qualified_name(self) -> str:
        if self.class_name is not None:
            return f"{self.class_name}::{self.variable_name}"
        return self.variable_name

    @property
    def has_type(self) -> bool:
        return self.type is not None

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def has_docblock(self) -> bool:
        return self.docblock is not None

    @property
    def is_nullable(self) -> bool:
        if self.type is None:
            return False
        return self.type.startswith("?") or "|null" in self.type.lower() or self.type.lower().startswith("null|")

    @property
    def is_union_type(self) -> bool:
        return self.type is not None and "|" in self.type

    @property
    def is_intersection_type(self) -> bool:
        return self.type is not None and "&" in self.type

    @property
    def is_dnf_type(self) -> bool:
        return _is_dnf(self.type)


@dataclass
class ClassEntity:
    """Represents a class, interface, trait or enum declaration.

    ``end`` stays None when the file ends before the matching closing brace.
    """
    name: str
    kind: str  # "class", "interface", "trait" or "enum"
    start: int
    end: int | None = None
    modifier: str | None = None  # "abstract" or "final"
    is_readonly: bool = False
    namespace: str | None = None
    parent: str | None = None
    interfaces: list[str] = field(default_factory=list)
    traits: list[str] = field(default_factory=list)
    docblock: DocBlock | None = None

    def __post_init__(self):
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Class {self.name} cannot end ({self.end}) before it starts ({self.start})")

    def close(self, end: int) -> None:
        """Record the line of the matching closing brace."""
        if end < self.start:
            raise ValueError(f"Class {self.name} cannot end ({end}) before it starts ({self.start})")
        self.end = end

    @property
    def line_count(self) -> int | None:
        if self.end is None:
            return None
        return self.end - self.start + 1

    @property
    def is_abstract(self) -> bool:
        return self.modifier == "abstract"

    @property
    def is_final(self) -> bool:
        return self.modifier == "final"

    @property
    def fully_qualified_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}\\{self.name}"
        return self.name

    @property
    def has_docblock(self) -> bool:
        return self.docblock is not None


@dataclass
class SourceModel:
    """Everything the structural parser extracted from one file."""
    namespace: str | None = None
    strict_types: bool = False
    imports: list[Import] = field(default_factory=list)
    classes: list[ClassEntity] = field(default_factory=list)
    properties: list[PropertyEntity] = field(default_factory=list)
    functions: list[FunctionEntity] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the file declares no class, function or property."""
        return not (self.classes or self.functions or self.properties)
