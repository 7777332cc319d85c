"""Parser for PHP documentation comments (``/** ... */``)."""

import re

from sentinel.models import DocBlock, ParamTag, ReturnTag, ThrowsTag, VarTag
from sentinel.typestrings import split_top_level

_TAG_LINE = re.compile(r"^@([A-Za-z][\w\-\\]*)(?:\s+(.*))?$")
_OPENING = re.compile(r"^\s*/\*\*+")
_CLOSING = re.compile(r"\s*\*+/\s*$")
_LEADING_STAR = re.compile(r"^\s*\*(?!/)")

_PARAM_REST = re.compile(r"^&?(?P<variadic>\.\.\.)?&?\$(?P<name>[A-Za-z_]\w*)(?:\s+(?P<desc>.*))?$", re.S)
_VAR_NAME_FIRST = re.compile(r"^\$(?P<name>[A-Za-z_]\w*)\s+(?P<rest>\S.*)$", re.S)
_VAR_NAME = re.compile(r"^\$(?P<name>[A-Za-z_]\w*)(?:\s+(?P<desc>.*))?$", re.S)


def _split_type(body: str) -> tuple[str, str]:
    """Split a tag body into its leading type token and the remainder.

    The type ends at the first whitespace outside ``<>``, ``()`` and ``{}``
    so that ``array<int, string> $x`` keeps its generic arguments together.
    """
    depth = 0
    for index, char in enumerate(body):
        if char in "<({":
            depth += 1
        elif char in ">)}" and depth > 0:
            depth -= 1
        elif char.isspace() and depth == 0:
            return body[:index], body[index:].strip()
    return body, ""


def _is_unbalanced(text: str) -> bool:
    depth = 0
    for char in text:
        if char in "<({":
            depth += 1
        elif char in ">)}":
            depth -= 1
    return depth > 0


def _is_continuation_eligible(name: str, body: str) -> bool:
    """Whether a tag looks unfinished, so following text lines belong to it."""
    if _is_unbalanced(body):
        return True

    if name == "deprecated":
        return not body

    if name not in ("param", "return", "throws", "var"):
        return False

    rest = _split_type(body)[1]
    if not rest:
        return True

    if name == "param":
        match = _PARAM_REST.match(rest)
        return match is not None and match.group("desc") is None

    if name == "var":
        match = _VAR_NAME.match(rest)
        return match is not None and match.group("desc") is None

    return False


class DocBlockParser:
    """Turns the raw text of a documentation comment into a ``DocBlock``.

    Leading free text becomes the summary (first paragraph) and description
    (later paragraphs). ``@param``, ``@return``, ``@throws``, ``@var`` and
    ``@deprecated`` are parsed into typed tags; anything else is collected
    verbatim under its tag name. Tags that look unfinished absorb every
    following text line up to the next tag or the end of the comment.
    """

    def parse(self, content: str, start: int, end: int) -> DocBlock:
        """Parse documentation comment text.

        Args:
            content: Comment text including the ``/**`` and ``*/`` markers.
            start: 1-indexed line of the opening marker.
            end: 1-indexed line of the closing marker.

        Returns:
            DocBlock with all recognized tags.
        """
        block = DocBlock(content=content, start=start, end=end)

        summary_lines: list[str] = []
        description_lines: list[str] = []
        in_description = False
        seen_tag = False
        pending: tuple[str, list[str]] | None = None

        for raw in content.splitlines():
            line = self._clean(raw)

            match = _TAG_LINE.match(line)
            if match:
                if pending is not None:
                    self._apply_tag(block, pending[0], " ".join(pending[1]))
                seen_tag = True
                name, body = match.group(1), (match.group(2) or "").strip()
                if _is_continuation_eligible(name, body):
                    pending = (name, [body] if body else [])
                else:
                    pending = None
                    self._apply_tag(block, name, body)
                continue

            if not line:
                if summary_lines and pending is None:
                    in_description = True
                continue

            # A pending tag owns every text line up to the next tag
            if pending is not None:
                pending[1].append(line)
                continue

            if not in_description and not seen_tag:
                summary_lines.append(line)
            else:
                description_lines.append(line)

        if pending is not None:
            self._apply_tag(block, pending[0], " ".join(pending[1]))

        block.summary = " ".join(summary_lines) if summary_lines else None
        block.description = "\n".join(description_lines) if description_lines else None

        return block

    def _clean(self, raw: str) -> str:
        line = _OPENING.sub("", raw)
        line = _CLOSING.sub("", line)
        line = _LEADING_STAR.sub("", line)
        return line.strip()

    def _apply_tag(self, block: DocBlock, name: str, body: str) -> None:
        body = body.strip()

        if name == "param":
            self._parse_param(block, body)
        elif name == "return":
            self._parse_return(block, body)
        elif name == "throws":
            self._parse_throws(block, body)
        elif name == "var":
            self._parse_var(block, body)
        elif name == "deprecated":
            block.deprecated = True
            block.deprecated_message = body or None
        else:
            block.other_tags.setdefault(name, []).append(body)

    def _parse_param(self, block: DocBlock, body: str) -> None:
        type_text, rest = _split_type(body)
        if not type_text or type_text.startswith("$"):
            return

        match = _PARAM_REST.match(rest)
        if not match:
            return

        name = match.group("name")
        block.params[name] = ParamTag(
            name=name,
            type=type_text,
            description=match.group("desc") or None,
            variadic_form=match.group("variadic") is not None,
        )

    def _parse_return(self, block: DocBlock, body: str) -> None:
        type_text, rest = _split_type(body)
        if not type_text:
            return

        # A repeated @return replaces the earlier one
        block.return_tag = ReturnTag(type=type_text, description=rest or None)

    def _parse_throws(self, block: DocBlock, body: str) -> None:
        type_text, rest = _split_type(body)
        if not type_text:
            return

        for exception in split_top_level(type_text):
            tag = ThrowsTag(exception=exception, description=rest or None)
            block.throws[tag.short_name] = tag

    def _parse_var(self, block: DocBlock, body: str) -> None:
        if not body:
            return

        # type $name desc
        type_text, rest = _split_type(body)
        if not type_text.startswith("$"):
            match = _VAR_NAME.match(rest)
            if match:
                block.var_tag = VarTag(type=type_text, name=match.group("name"), description=match.group("desc") or None)
                return

        # $name type desc
        match = _VAR_NAME_FIRST.match(body)
        if match:
            type_text, rest = _split_type(match.group("rest"))
            block.var_tag = VarTag(type=type_text, name=match.group("name"), description=rest or None)
            return

        # type desc
        if type_text.startswith("$"):
            return
        block.var_tag = VarTag(type=type_text, description=rest or None)


def parse_docblock(content: str, start: int, end: int) -> DocBlock:
    """Convenience wrapper around ``DocBlockParser().parse``."""
    return DocBlockParser().parse(content, start, end)
