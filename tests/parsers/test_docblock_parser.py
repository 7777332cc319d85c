import pytest

from sentinel.exceptions import ParamTagNotFoundError, ThrowsTagNotFoundError
from sentinel.parsers.docblock_parser import DocBlockParser, parse_docblock

FULL_DOCBLOCK = """/**
 * Summary line.
 *
 * Longer description
 * over two lines.
 *
 * @param int $a The first.
 * @param string ...$rest
 * @return bool|null
 * @throws \\App\\Errors\\NotFound when missing
 * @deprecated use other()
 * @see Other
 * @see Another
 */"""


class TestDocBlockParser:
    """Tests for DocBlockParser.parse."""

    def test_records_span(self):
        block = DocBlockParser().parse(FULL_DOCBLOCK, 10, 23)

        assert block.start == 10
        assert block.end == 23
        assert block.content == FULL_DOCBLOCK

    def test_summary_and_description(self):
        block = parse_docblock(FULL_DOCBLOCK, 1, 14)

        assert block.summary == "Summary line."
        assert block.description == "Longer description\nover two lines."

    def test_param_tags(self):
        block = parse_docblock(FULL_DOCBLOCK, 1, 14)

        assert list(block.params) == ["a", "rest"]
        assert block.param("a").type == "int"
        assert block.param("$a").description == "The first."
        assert block.param("rest").variadic_form
        assert block.param("rest").is_variadic

    def test_return_tag(self):
        block = parse_docblock(FULL_DOCBLOCK, 1, 14)

        assert block.has_return
        assert block.return_tag.type == "bool|null"
        assert block.return_tag.types == ["bool", "null"]
        assert block.return_tag.nullable

    def test_throws_tag_keyed_by_short_name(self):
        block = parse_docblock(FULL_DOCBLOCK, 1, 14)

        assert list(block.throws) == ["NotFound"]
        tag = block.throws_tag("\\Other\\NotFound")
        assert tag.exception == "App\\Errors\\NotFound"
        assert tag.description == "when missing"

    def test_deprecated_and_generic_tags(self):
        block = parse_docblock(FULL_DOCBLOCK, 1, 14)

        assert block.deprecated
        assert block.deprecated_message == "use other()"
        assert block.tags("see") == ["Other", "Another"]
        assert block.tags("since") == []

    def test_deprecated_without_message(self):
        block = parse_docblock("/**\n * @deprecated\n */", 1, 3)

        assert block.deprecated
        assert block.deprecated_message is None

    def test_single_line_docblock(self):
        block = parse_docblock("/** @var string */", 5, 5)

        assert block.var_tag.type == "string"
        assert block.var_tag.name is None
        assert block.summary is None

    def test_param_description_continues_on_next_line(self):
        content = "/**\n * @param int $a\n *        the description continues\n */"

        block = parse_docblock(content, 1, 4)

        assert block.param("a").description == "the description continues"
        assert block.description is None

    def test_param_description_spanning_several_lines(self):
        content = "/**\n * @param int $a\n *     first line\n *     second line\n * @return bool\n */"

        block = parse_docblock(content, 1, 6)

        assert block.param("a").description == "first line second line"
        assert block.return_tag.type == "bool"
        assert block.description is None

    def test_unbalanced_generic_type_continues_on_next_line(self):
        content = "/**\n * @return array<int,\n *     string>\n */"

        block = parse_docblock(content, 1, 4)

        assert block.return_tag.type == "array<int, string>"

    def test_text_after_complete_tag_is_description(self):
        content = "/**\n * Summary.\n * @see Other\n * Trailing note.\n */"

        block = parse_docblock(content, 1, 5)

        assert block.summary == "Summary."
        assert block.description == "Trailing note."

    def test_duplicate_return_last_wins(self):
        content = "/**\n * @return int first\n * @return string second\n */"

        block = parse_docblock(content, 1, 4)

        assert block.return_tag.type == "string"
        assert block.return_tag.description == "second"

    def test_repeated_throws_overwrite(self):
        content = "/**\n * @throws Foo first\n * @throws \\Ns\\Foo second\n */"

        block = parse_docblock(content, 1, 4)

        assert len(block.throws) == 1
        assert block.throws["Foo"].description == "second"

    def test_union_throws_split_per_exception(self):
        block = parse_docblock("/** @throws FooError|BarError */", 1, 1)

        assert block.has_throws("FooError")
        assert block.has_throws("BarError")

    def test_union_param_type_normalization(self):
        block = parse_docblock("/** @param Foo|Bar[] $items */", 1, 1)

        tag = block.param("items")
        assert tag.types == ["Foo", "Bar"]
        assert not tag.nullable

    def test_generic_param_type_kept_together(self):
        block = parse_docblock("/** @param array<string, int|null> $map Lookup */", 1, 1)

        tag = block.param("map")
        assert tag.type == "array<string, int|null>"
        assert tag.description == "Lookup"

    def test_param_without_name_is_skipped(self):
        block = parse_docblock("/**\n * @param int\n */", 1, 3)

        assert not block.has_any_params

    def test_lookup_miss_raises(self):
        block = parse_docblock("/** Nothing here. */", 1, 1)

        with pytest.raises(ParamTagNotFoundError):
            block.param("missing")
        with pytest.raises(ThrowsTagNotFoundError):
            block.throws_tag("RuntimeException")


class TestVarTagOrderings:
    """@var accepts type-first, name-first and name-less forms."""

    def test_type_then_name(self):
        block = parse_docblock("/** @var int $count Number of items */", 1, 1)

        assert block.var_tag.type == "int"
        assert block.var_tag.name == "count"
        assert block.var_tag.description == "Number of items"

    def test_name_then_type(self):
        block = parse_docblock("/** @var $count int */", 1, 1)

        assert block.var_tag.type == "int"
        assert block.var_tag.variable_name == "$count"

    def test_type_with_description(self):
        block = parse_docblock("/** @var string Some text */", 1, 1)

        assert block.var_tag.type == "string"
        assert block.var_tag.name is None
        assert block.var_tag.description == "Some text"
