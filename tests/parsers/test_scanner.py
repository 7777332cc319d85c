from sentinel.parsers.scanner import CodeStripper, body_segments, brace_delta, scan_block, strip_code


class TestCodeStripper:
    """Tests for comment and string removal."""

    def test_blanks_string_contents_but_keeps_quotes(self):
        assert strip_code('$a = "x{y";') == '$a = "";'
        assert strip_code("$b = 'z}';") == "$b = '';"

    def test_removes_line_comments(self):
        assert strip_code("$a = 1; // {") == "$a = 1; "
        assert strip_code("$a = 1; # }") == "$a = 1; "

    def test_keeps_attributes(self):
        assert strip_code("#[Route('/x')]") == "#[Route('')]"

    def test_handles_escaped_quotes(self):
        assert strip_code(r'$a = "say \"{\"";') == '$a = "";'

    def test_block_comment_spanning_lines(self):
        stripper = CodeStripper()

        assert stripper.strip("$a = 1; /* start {") == "$a = 1; "
        assert stripper.in_block_comment
        assert stripper.strip("still { inside") == ""
        assert stripper.strip("end } */ $b = 2;") == " $b = 2;"
        assert not stripper.in_block_comment

    def test_heredoc_body_is_blanked(self):
        stripper = CodeStripper()

        assert stripper.strip("$a = <<<EOT") == '$a = ""'
        assert stripper.strip("    if (x) {") == ""
        assert stripper.strip("    EOTX {") == ""
        assert stripper.strip("    EOT;") == ";"
        assert stripper.heredoc_id is None
        assert stripper.strip("$b = 1;") == "$b = 1;"

    def test_quoted_heredoc_and_nowdoc_openers(self):
        stripper = CodeStripper()

        assert stripper.strip('foo(<<<"HTML"') == 'foo(""'
        assert stripper.strip("<div>{</div>") == ""
        assert stripper.strip("HTML);") == ");"

        assert stripper.strip("$sql = <<<'SQL'") == '$sql = ""'
        assert stripper.heredoc_id == "SQL"
        assert stripper.strip("SQL;") == ";"

    def test_shift_operator_is_not_a_heredoc(self):
        assert strip_code("$a = $b << 2;") == "$a = $b << 2;"

    def test_string_spanning_lines(self):
        stripper = CodeStripper()

        assert stripper.strip("$sql = '{") == "$sql = '"
        assert stripper.strip("}';") == "';"


def test_brace_delta():
    assert brace_delta("if ($a) {") == 1
    assert brace_delta("} else {") == 0
    assert brace_delta("}}") == -2


class TestScanBlock:
    """Tests for the independent brace-balanced body scan."""

    def test_finds_end_of_body(self):
        lines = [
            "function f()",
            "{",
            "    if ($a) {",
            "        return '}';",
            "    }",
            "}",
            "function g() {}",
        ]

        block = scan_block(lines, 0)

        assert block.start == 0
        assert block.end == 5
        assert block.has_body

    def test_declaration_without_body(self):
        lines = ["abstract public function f(): int;", "public function g()", "{", "}"]

        block = scan_block(lines, 0)

        assert block.end == 0
        assert not block.has_body

    def test_semicolon_in_default_value_does_not_end_declaration(self):
        lines = ["function f($a = [1, 2], $b = ';') {", "    return 1;", "}"]

        block = scan_block(lines, 0)

        assert block.end == 2
        assert block.has_body

    def test_unterminated_body_runs_to_last_line(self):
        lines = ["function f() {", "    $a = 1;", "    $b = 2;"]

        block = scan_block(lines, 0)

        assert block.end == 2

    def test_nested_closure_is_part_of_body(self):
        lines = [
            "public function run(): void",
            "{",
            "    $fn = function () {",
            "        return 1;",
            "    };",
            "    $fn();",
            "}",
        ]

        block = scan_block(lines, 0)

        assert block.end == 6


def test_body_segments_exclude_signature():
    lines = ["function f(int $a = 1): int { return $a;", "}"]

    segments = body_segments(lines, scan_block(lines, 0))

    assert segments == [(0, " return $a;"), (1, "}")]


def test_body_segments_empty_without_body():
    lines = ["abstract function f();"]

    assert body_segments(lines, scan_block(lines, 0)) == []
