import re
from dataclasses import dataclass

from sentinel.models import (
    ClassEntity,
    DocBlock,
    FunctionEntity,
    Import,
    ParameterEntity,
    PropertyEntity,
    SourceModel,
)
from sentinel.parsers.base import BaseParser
from sentinel.parsers.docblock_parser import DocBlockParser
from sentinel.parsers.logical_lines import LogicalLine, iter_logical_lines

STRICT_TYPES = re.compile(r"declare\s*\(\s*strict_types\s*=\s*1\s*\)")
NAMESPACE = re.compile(r"^\s*namespace\s+([A-Za-z_\\][\w\\]*)\s*[;{]")
USE = re.compile(r"^\s*use\s+(?:(?:function|const)\s+)?(?P<body>[A-Za-z_\\][^;]*?)\s*;")
TRAIT_USE = re.compile(r"^\s*use\s+(?P<body>[A-Za-z_\\][^;{]*)")
IMPORT_ITEM = re.compile(r"^\\?(?P<name>[A-Za-z_]\w*(?:\\[A-Za-z_]\w*)*)(?:\s+as\s+(?P<alias>[A-Za-z_]\w*))?$")
QUALIFIED_NAME = re.compile(r"^\\?[A-Za-z_][\w\\]*$")

CLASS = re.compile(
    r"^\s*(?P<modifiers>(?:(?:abstract|final|readonly)\s+)*)"
    r"(?P<kind>class|interface|trait|enum)\s+(?P<name>[A-Za-z_]\w*)(?P<rest>.*)$"
)
EXTENDS = re.compile(r"\bextends\s+([A-Za-z_\\][\w\\]*)")
IMPLEMENTS = re.compile(r"\bimplements\s+([^{]+)")

PROPERTY_START = re.compile(r"^\s*(?:public|protected|private|var|static|readonly)\b")
PROPERTY_EXCLUDED = re.compile(r"\b(?:function|const)\b")
PROPERTY = re.compile(
    r"^\s*(?P<modifiers>(?:(?:public|protected|private|var|static|readonly|final|abstract)(?:\(set\))?\s+)+)"
    r"(?:(?P<type>\??[A-Za-z_\\(][\w\\|&()?]*)\s+)?"
    r"&?\$(?P<name>[A-Za-z_]\w*)"
    r"(?:\s*=\s*(?P<default>[^;]*))?"
)
VISIBILITY = re.compile(r"\b(public|protected|private)\b")

FUNCTION = re.compile(
    r"^\s*(?P<modifiers>(?:(?:public|protected|private|static|abstract|final)\s+)*)"
    r"function\s+&?\s*(?P<name>[A-Za-z_]\w*)\s*\("
)
RETURN_TYPE = re.compile(r"^\s*:\s*(?P<type>\??[A-Za-z_\\(][\w\\|&()?]*)")
PARAMETER = re.compile(
    r"^(?:#\[.*?\]\s*)*"
    r"(?P<promotion>(?:(?:public|protected|private|readonly)(?:\(set\))?\s+)*)"
    r"(?:(?P<nullable>\?)\s*)?"
    r"(?:(?P<type>[A-Za-z_\\(][\w\\|&()]*?)\s*)?"
    r"(?P<reference>&)?\s*(?P<variadic>\.\.\.)?\s*\$(?P<name>[A-Za-z_]\w*)"
    r"(?:\s*=\s*(?P<default>.+))?$",
    re.S,
)

_OPENERS = "([{<"
_CLOSERS = ")]}>"


@dataclass
class ParserState:
    """Scan state threaded through the logical lines of one file."""
    depth: int = 0
    current_class: ClassEntity | None = None
    class_depth: int = 0  # Depth just before the class's opening brace
    class_entered: bool = False

    @property
    def in_class(self) -> bool:
        return self.current_class is not None

    def in_class_body(self, depth: int) -> bool:
        """Whether ``depth`` is directly inside the open class's braces."""
        return self.current_class is not None and self.class_entered and depth == self.class_depth + 1

    def open_class(self, entity: ClassEntity, depth: int, entered: bool) -> None:
        self.current_class = entity
        self.class_depth = depth
        self.class_entered = entered

    def close_class(self, end: int) -> None:
        self.current_class.close(end)
        self.current_class = None
        self.class_entered = False


def _matching_paren(text: str, open_index: int) -> int:
    """Index of the parenthesis closing the one at ``open_index``, or -1."""
    depth = 0
    quote = None
    index = open_index
    while index < len(text):
        char = text[index]
        if quote is not None:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return -1


def split_parameters(text: str) -> list[str]:
    """Split a parameter list on commas that are not nested in brackets or strings."""
    parts = []
    current: list[str] = []
    depth = 0
    quote = None
    escaped = False

    for char in text:
        if quote is not None:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue

        if char in ("'", '"'):
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS and depth > 0:
            # ``=>`` inside array defaults is not a closing angle bracket
            if not (char == ">" and current and current[-1] in "=-"):
                depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue

        current.append(char)

    parts.append("".join(current).strip())
    return [part for part in parts if part]


class PhpParser(BaseParser):
    """Single-pass, line-oriented parser for PHP source files.

    The parser never builds a syntax tree. It walks logical lines, tracks
    brace depth on comment/string-stripped code and recognizes declarations
    with patterns. Anything it cannot recognize only affects brace depth.
    """

    def __init__(self):
        self.docblock_parser = DocBlockParser()

    def parse(self, lines: list[str]) -> SourceModel:
        """Parse a file's lines into a SourceModel.

        Args:
            lines: Physical source lines, without line terminators

        Returns:
            SourceModel with namespace, imports, classes, properties and functions
        """
        model, _ = self.parse_with_state(lines)
        return model

    def parse_with_state(self, lines: list[str]) -> tuple[SourceModel, ParserState]:
        """Parse a file and also return the final scan state (for diagnostics)."""
        model = SourceModel()
        state = ParserState()

        for logical in iter_logical_lines(lines):
            depth_before = state.depth
            state.depth += logical.brace_delta

            self._parse_strict_types(logical, model)
            self._parse_namespace(logical, model)
            self._parse_use(logical, state, model, depth_before)
            self._parse_class(logical, state, model, depth_before, lines)
            self._parse_property(logical, state, model, depth_before, lines)
            self._parse_function(logical, state, model, lines)
            self._close_class(logical, state)

        return model, state

    def _close_class(self, logical: LogicalLine, state: ParserState) -> None:
        if not state.in_class:
            return

        if not state.class_entered and logical.opens_brace:
            state.class_entered = True

        if state.class_entered and state.depth <= state.class_depth:
            state.close_class(logical.end)

    # ------------------------------------------------------------------
    # File-level declarations
    # ------------------------------------------------------------------

    def _parse_strict_types(self, logical: LogicalLine, model: SourceModel) -> None:
        if model.strict_types:
            return
        if STRICT_TYPES.search(logical.code):
            model.strict_types = True

    def _parse_namespace(self, logical: LogicalLine, model: SourceModel) -> None:
        match = NAMESPACE.match(logical.code)
        if match:
            model.namespace = match.group(1).strip("\\")

    def _parse_use(self, logical: LogicalLine, state: ParserState, model: SourceModel, depth: int) -> None:
        if state.in_class:
            if state.in_class_body(depth):
                self._parse_trait_use(logical, state)
            return

        match = USE.match(logical.code)
        if not match:
            return

        body = match.group("body")
        if "{" in body:
            prefix, _, group = body.partition("{")
            prefix = prefix.strip().rstrip("\\")
            items = [f"{prefix}\\{item.strip()}" for item in group.rstrip("} ").split(",") if item.strip()]
        else:
            items = [item.strip() for item in body.split(",") if item.strip()]

        for item in items:
            item_match = IMPORT_ITEM.match(item)
            if not item_match:
                continue
            model.imports.append(Import(
                line=logical.start,
                full_name=item_match.group("name"),
                alias=item_match.group("alias"),
            ))

    def _parse_trait_use(self, logical: LogicalLine, state: ParserState) -> None:
        match = TRAIT_USE.match(logical.code)
        if not match:
            return

        for name in match.group("body").split(","):
            name = name.strip()
            if QUALIFIED_NAME.match(name):
                state.current_class.traits.append(name.lstrip("\\"))

    # ------------------------------------------------------------------
    # Classes
    # ------------------------------------------------------------------

    def _parse_class(
        self,
        logical: LogicalLine,
        state: ParserState,
        model: SourceModel,
        depth: int,
        lines: list[str],
    ) -> None:
        if state.in_class:
            return

        match = CLASS.match(logical.code)
        if not match:
            return

        modifiers = match.group("modifiers").split()
        modifier = next((m for m in modifiers if m in ("abstract", "final")), None)
        rest = match.group("rest")

        entity = ClassEntity(
            name=match.group("name"),
            kind=match.group("kind"),
            start=logical.start,
            modifier=modifier,
            is_readonly="readonly" in modifiers,
            namespace=model.namespace,
        )

        extends = EXTENDS.search(rest)
        if extends:
            entity.parent = extends.group(1)

        implements = IMPLEMENTS.search(rest)
        if implements:
            for name in implements.group(1).split(","):
                name = name.strip()
                if QUALIFIED_NAME.match(name) and name not in entity.interfaces:
                    entity.interfaces.append(name)

        entity.docblock = self._find_docblock(lines, logical.start)

        model.classes.append(entity)
        state.open_class(entity, depth, logical.opens_brace)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def _parse_property(
        self,
        logical: LogicalLine,
        state: ParserState,
        model: SourceModel,
        depth: int,
        lines: list[str],
    ) -> None:
        if not state.in_class_body(depth):
            return
        if not PROPERTY_START.match(logical.code) or PROPERTY_EXCLUDED.search(logical.code):
            return
        if "$" not in logical.code:
            return

        match = PROPERTY.match(logical.text)
        if not match:
            return

        modifiers = match.group("modifiers")
        visibility = VISIBILITY.search(modifiers)
        default = match.group("default")

        model.properties.append(PropertyEntity(
            line=logical.start,
            name=match.group("name"),
            visibility=visibility.group(1) if visibility else "public",
            is_static=re.search(r"\bstatic\b", modifiers) is not None,
            is_readonly=re.search(r"\breadonly\b", modifiers) is not None,
            class_name=state.current_class.name,
            type=match.group("type"),
            default=default.strip() if default is not None and default.strip() else None,
            docblock=self._find_docblock(lines, logical.start),
        ))

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def _parse_function(self, logical: LogicalLine, state: ParserState, model: SourceModel, lines: list[str]) -> None:
        if not FUNCTION.match(logical.code):
            return

        match = FUNCTION.match(logical.text)
        if not match:
            return

        open_index = match.end() - 1
        close_index = _matching_paren(logical.text, open_index)
        if close_index == -1:
            return

        name = match.group("name")
        modifiers = match.group("modifiers").split()
        in_class = state.in_class
        is_constructor = in_class and name.lower() == "__construct"

        visibility = next((m for m in modifiers if m in ("public", "protected", "private")), None)
        if visibility is None and in_class:
            visibility = "public"

        function = FunctionEntity(
            line=logical.start,
            name=name,
            visibility=visibility,
            is_static="static" in modifiers,
            class_name=state.current_class.name if in_class else None,
            parameters=self._parse_parameters(logical.text[open_index + 1:close_index], is_constructor),
        )

        return_type = RETURN_TYPE.match(logical.text[close_index + 1:])
        if return_type:
            function.return_type = return_type.group("type")
            function.return_type_declared = True

        function.docblock = self._find_docblock(lines, logical.start)

        model.functions.append(function)

    def _parse_parameters(self, text: str, is_constructor: bool) -> dict[str, ParameterEntity]:
        parameters: dict[str, ParameterEntity] = {}

        for part in split_parameters(text):
            match = PARAMETER.match(part.strip())
            if not match:
                continue

            name = match.group("name")
            if name in parameters:
                continue

            type_text = match.group("type")
            nullable = match.group("nullable") is not None
            if type_text is not None and "null" in [t.strip().lower() for t in type_text.split("|")]:
                nullable = True

            default = match.group("default")
            parameters[name] = ParameterEntity(
                name=name,
                nullable=nullable,
                type=type_text,
                default=default.strip() if default is not None else None,
                variadic=match.group("variadic") is not None,
                by_reference=match.group("reference") is not None,
                promoted=is_constructor and bool(match.group("promotion").strip()),
            )

        return parameters

    # ------------------------------------------------------------------
    # DocBlocks
    # ------------------------------------------------------------------

    def _find_docblock(self, lines: list[str], line_number: int) -> DocBlock | None:
        """Find the documentation comment directly above a declaration.

        Blank lines and attribute lines (``#[...]``) between the comment and
        the declaration are skipped. Any other code or a plain ``/* */``
        comment in between means the declaration is undocumented.

        Args:
            lines: Physical source lines
            line_number: 1-indexed line of the declaration

        Returns:
            Parsed DocBlock, or None if there is none.
        """
        index = line_number - 2
        while index >= 0:
            stripped = lines[index].strip()
            if stripped and not stripped.startswith("#["):
                break
            index -= 1

        if index < 0:
            return None

        closing = lines[index].strip()
        if not closing.endswith("*/"):
            return None

        end = index
        while index >= 0:
            stripped = lines[index].strip()

            if stripped.startswith("/**"):
                content = "\n".join(lines[index:end + 1])
                return self.docblock_parser.parse(content, index + 1, end + 1)

            if stripped and not stripped.startswith("*"):
                return None

            index -= 1

        return None
