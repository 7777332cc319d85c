"""Tests for the Rule base class and the rule registry."""

import pytest

from sentinel.config import RuleConfig
from sentinel.exceptions import DirectoryNotFoundError
from sentinel.rules import RULE_CLASSES, default_rules, get_rule_class
from sentinel.rules.base import Rule
from sentinel.rules.convention import NamingConventionRule
from sentinel.rules.documentation import MissingDocBlockRule, ParamDocRule, ReturnDocRule, ThrowsDocRule
from sentinel.rules.structure import NamespaceRule
from sentinel.rules.type_declarations import ParameterTypeRule, ReturnTypeRule, StrictTypesRule


class TestRuleBase:
    """Tests for Rule.detect and Rule.check_files."""

    def test_cannot_instantiate_abstract_base(self):
        with pytest.raises(TypeError):
            Rule()

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(DirectoryNotFoundError):
            NamespaceRule().detect(tmp_path / "missing")

    def test_detect_reports_relative_paths(self, php_tree):
        root = php_tree({
            "src/A.php": "<?php\nclass A {}\n",
            "src/B.php": "<?php\nnamespace App;\nclass B {}\n",
        })

        rule = NamespaceRule()
        passed = rule.detect(root)

        assert not passed
        assert [str(issue) for issue in rule.issues()] == ["[src/A.php:1] Missing namespace declaration"]
        assert rule.files() == 2
        assert rule.errors() == {}

    def test_clean_tree_passes(self, php_tree):
        root = php_tree({"a.php": "<?php\nnamespace App;\nclass A {}\n"})

        assert NamespaceRule().detect(root)

    def test_unreadable_file_recorded_and_skipped(self, tmp_path):
        rule = StrictTypesRule()

        passed = rule.check_files([tmp_path / "gone.php"], tmp_path)

        assert passed
        assert rule.files() == 0
        assert list(rule.errors()) == ["gone.php"]
        assert "File not found" in rule.errors()["gone.php"]

    def test_repeated_runs_are_identical(self, php_tree):
        root = php_tree({
            "a.php": "<?php\nclass A {}\n",
            "b.php": "<?php\nclass B {}\n",
        })
        rule = NamespaceRule()

        rule.detect(root)
        first = rule.issues()
        rule.detect(root)

        assert rule.issues() == first
        assert len(first) == 2

    def test_issues_sorted_by_line_within_each_file(self, php_tree):
        """Naming checks methods before properties, but output follows line order."""
        source = "<?php\nclass User\n{\n    private $First_name;\n    public function Save() {}\n}\n"
        root = php_tree({"a.php": source, "b.php": source})

        rule = NamingConventionRule()
        rule.detect(root)

        assert [(issue.file, issue.line) for issue in rule.issues()] == [
            ("a.php", 4), ("a.php", 5), ("b.php", 4), ("b.php", 5),
        ]

    def test_issues_returns_a_copy(self, php_tree):
        root = php_tree({"a.php": "<?php\nclass A {}\n"})
        rule = NamespaceRule()
        rule.detect(root)

        rule.issues().clear()

        assert len(rule.issues()) == 1

    def test_thresholds_come_from_config(self):
        rule = NamespaceRule(RuleConfig(max_class_length=1, max_method_length=2, max_complexity=3, max_line_length=4))

        assert rule.max_class_length == 1
        assert rule.max_method_length == 2
        assert rule.max_complexity == 3
        assert rule.max_line_length == 4
        with pytest.raises(AttributeError):
            rule.max_complexity = 10


class TestRegistry:
    """Tests for rule lookup and construction."""

    def test_names_are_unique(self):
        names = [rule_class.name for rule_class in RULE_CLASSES]
        assert len(names) == len(set(names)) == 16

    def test_default_rules_share_config(self):
        config = RuleConfig(max_complexity=4)

        rules = default_rules(config)

        assert [type(rule) for rule in rules] == RULE_CLASSES
        assert all(rule.max_complexity == 4 for rule in rules)

    @pytest.mark.parametrize("name", [
        "Naming Convention",
        "naming convention",
        "naming-convention",
        "naming_convention",
        "NamingConventionRule",
    ])
    def test_lookup_variants(self, name):
        assert get_rule_class(name).name == "Naming Convention"

    def test_lookup_psr12(self):
        assert get_rule_class("psr-12-compliance").name == "PSR-12 Compliance"

    def test_unknown_rule(self):
        assert get_rule_class("nope") is None


class TestRulesAreIndependent:
    """Each problem is reported once, by the rule that owns it."""

    def test_undocumented_untyped_function(self, check_source):
        source = "<?php\nfunction do_something($x) {}\n"

        messages = []
        for rule_class in (MissingDocBlockRule, ReturnTypeRule, ParameterTypeRule):
            messages.extend(issue.message for issue in check_source(rule_class, source))

        assert messages == [
            'Missing PHPDoc for function "do_something".',
            'Missing return type declaration for function "do_something".',
            'Missing type declaration for parameter "$x" in function "do_something".',
        ]

    def test_only_the_undocumented_parameter_is_reported(self, check_source):
        source = "<?php\n/** @param int $a\n * @return bool */\nfunction f(int $a, string $b): bool {}\n"

        issues = []
        for rule_class in (MissingDocBlockRule, ParamDocRule, ReturnDocRule, ThrowsDocRule):
            issues.extend(check_source(rule_class, source))

        assert [(issue.line, issue.message) for issue in issues] == [
            (2, 'Missing @param tag for parameter "$b" in function "f".'),
        ]
