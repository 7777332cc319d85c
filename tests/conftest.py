from pathlib import Path

import pytest


COMPLIANT_USER = """<?php
declare(strict_types=1);

namespace App\\Models;

/**
 * A registered user.
 */
final class User
{
    /**
     * Display name.
     */
    private string $name;

    /**
     * Create a user.
     *
     * @param string $name Display name
     */
    public function __construct(string $name)
    {
        $this->name = $name;
    }

    /**
     * Get the display name.
     *
     * @return string
     */
    public function getName(): string
    {
        return $this->name;
    }
}
"""

NONCOMPLIANT_SOURCE = """<?php
class bad_name
{
    public function Run($x)
    {
        return $x;
    }
}
"""


@pytest.fixture
def compliant_php():
    """A file that passes every rule."""
    return COMPLIANT_USER


@pytest.fixture
def noncompliant_php():
    return NONCOMPLIANT_SOURCE


@pytest.fixture
def php_tree(tmp_path):
    """Write a {relative path: content} mapping below tmp_path and return the root."""

    def write(files: dict[str, str]) -> Path:
        for name, content in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return write


@pytest.fixture
def check_source(tmp_path):
    """Run one rule over PHP source written to example.php and return its issues."""

    def run(rule_class, content: str, config=None):
        path = tmp_path / "example.php"
        path.write_text(content, encoding="utf-8")
        rule = rule_class(config)
        rule.check_files([path], tmp_path)
        assert rule.errors() == {}
        return rule.issues()

    return run
