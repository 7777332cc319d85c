from sentinel.parsers.logical_lines import iter_logical_lines


def test_single_lines_pass_through():
    lines = ["<?php", "$a = 1;", "echo $a;"]

    logical = list(iter_logical_lines(lines))

    assert [(line.start, line.end) for line in logical] == [(1, 1), (2, 2), (3, 3)]
    assert logical[1].text == "$a = 1;"
    assert not logical[1].is_multiline


def test_multiline_function_signature_is_joined():
    lines = [
        "<?php",
        "function build(",
        "    array $items,",
        "    ?string $label = null,",
        "): array {",
        "    return [];",
        "}",
    ]

    logical = list(iter_logical_lines(lines))

    assert [(line.start, line.end) for line in logical] == [(1, 1), (2, 5), (6, 6), (7, 7)]
    signature = logical[1]
    assert signature.is_multiline
    assert signature.text == "function build( array $items, ?string $label = null, ): array {"
    assert signature.brace_delta == 1
    assert signature.opens_brace


def test_class_header_with_brace_on_next_line_is_joined():
    lines = ["class User extends Model", "    implements Countable", "{", "}"]

    logical = list(iter_logical_lines(lines))

    assert (logical[0].start, logical[0].end) == (1, 3)
    assert logical[0].text == "class User extends Model implements Countable {"
    assert logical[0].opens_brace
    assert (logical[1].start, logical[1].end) == (4, 4)


def test_grouped_import_spanning_lines_is_joined():
    lines = ["use App\\Models\\{", "    User,", "    Post as Article,", "};"]

    logical = list(iter_logical_lines(lines))

    assert len(logical) == 1
    assert logical[0].text == "use App\\Models\\{ User, Post as Article, };"
    assert logical[0].brace_delta == 0


def test_parentheses_inside_strings_do_not_start_buffer():
    lines = ["function f($a = ')') {", "}"]

    logical = list(iter_logical_lines(lines))

    assert [(line.start, line.end) for line in logical] == [(1, 1), (2, 2)]


def test_unfinished_declaration_is_flushed_at_end_of_input():
    lines = ["<?php", "function broken(", "    $a,"]

    logical = list(iter_logical_lines(lines))

    assert (logical[-1].start, logical[-1].end) == (2, 3)
    assert logical[-1].text == "function broken( $a,"


def test_braces_in_comments_do_not_count():
    lines = ["if ($a) { // }", "}"]

    logical = list(iter_logical_lines(lines))

    assert logical[0].brace_delta == 1
    assert logical[1].brace_delta == -1
