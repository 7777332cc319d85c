import io

import pytest
from rich.console import Console

from sentinel.exceptions import DirectoryNotFoundError
from sentinel.output import Output
from sentinel.rules.base import Rule
from sentinel.rules.structure import NamespaceRule
from sentinel.rules.type_declarations import StrictTypesRule
from sentinel.runner import Runner


class ExplodingRule(Rule):
    name = "Exploding"

    def check(self, source, file):
        raise RuntimeError("boom")


def make_runner(*rules):
    buffer = io.StringIO()
    output = Output(Console(file=buffer, width=200, force_terminal=False, color_system=None))
    return Runner(output, list(rules)), buffer


@pytest.fixture
def project(php_tree):
    return php_tree({
        "src/Clean.php": "<?php\ndeclare(strict_types=1);\n\nnamespace App;\n\nclass Clean {}\n",
        "src/Loose.php": "<?php\nclass Loose {}\n",
    })


def test_missing_directory_raises(tmp_path):
    runner, _ = make_runner(NamespaceRule())

    with pytest.raises(DirectoryNotFoundError):
        runner.run(tmp_path / "missing")


def test_no_rules_configured(tmp_path):
    runner, buffer = make_runner()

    assert runner.run(tmp_path)
    assert "No rules configured" in buffer.getvalue()


def test_collects_issues_in_rule_order(project):
    runner, buffer = make_runner(StrictTypesRule(), NamespaceRule())

    passed = runner.run(project)

    assert not passed
    assert not runner.passed()
    assert [str(issue) for issue in runner.issues()] == [
        "[src/Loose.php:1] Missing declare(strict_types=1) declaration",
        "[src/Loose.php:1] Missing namespace declaration",
    ]
    assert runner.total_files() == 4
    assert runner.failures() == {}


def test_progress_and_summary(project):
    runner, buffer = make_runner(StrictTypesRule(), NamespaceRule())

    runner.run(project)

    text = buffer.getvalue()
    assert "Sentinel - PHP Code Quality Checks" in text
    assert f"Target: {project.resolve()}" in text
    assert "Rules: 2" in text
    assert "[1/2] Strict Types... ✗ 1 issue(s)" in text
    assert "[2/2] Namespace... ✗ 1 issue(s)" in text
    assert "Rules: 0 passed, 2 failed" in text
    assert "Issues: 2 total" in text
    assert "✗ Quality checks failed" in text


def test_passing_run(php_tree):
    root = php_tree({"a.php": "<?php\nnamespace App;\nclass A {}\n"})
    runner, buffer = make_runner(NamespaceRule())

    assert runner.run(root)
    assert runner.passed()
    assert "Rules: 1 passed, 0 failed" in buffer.getvalue()
    assert "All quality checks passed!" in buffer.getvalue()


def test_exception_in_rule_does_not_stop_others(project):
    runner, buffer = make_runner(ExplodingRule(), NamespaceRule())

    passed = runner.run(project)

    assert not passed
    assert runner.failures() == {"Exploding": "boom"}
    assert len(runner.issues()) == 1
    assert "Exception: boom" in buffer.getvalue()
    assert "Exploding (failed to run)" in buffer.getvalue()


def test_add_rule_is_chainable(tmp_path):
    runner = Runner(Output(displayable=False))

    runner.add_rule(NamespaceRule()).add_rule(StrictTypesRule())

    assert [rule.name for rule in runner.rules()] == ["Namespace", "Strict Types"]
