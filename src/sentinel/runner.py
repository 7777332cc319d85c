import logging
import time
from pathlib import Path

from sentinel.exceptions import DirectoryNotFoundError
from sentinel.models import Issue
from sentinel.output import Output
from sentinel.rules.base import Rule

logger = logging.getLogger(__name__)

TITLE = "Sentinel - PHP Code Quality Checks"


class Runner:
    """Runs a sequence of rules over one directory and reports the outcome.

    Rules run one after another in registration order. A rule that raises
    an unexpected exception fails the run but does not stop the remaining
    rules.
    """

    def __init__(self, output: Output | None = None, rules: list[Rule] | None = None):
        self.output = output if output is not None else Output()
        self._rules: list[Rule] = list(rules) if rules else []
        self._results: dict[str, list[Issue]] = {}
        self._errors: dict[str, dict[str, str]] = {}
        self._failures: dict[str, str] = {}

    def add_rule(self, rule: Rule) -> "Runner":
        self._rules.append(rule)
        return self

    def rules(self) -> list[Rule]:
        return list(self._rules)

    def run(self, root: Path) -> bool:
        """Run every rule over root.

        Args:
            root: Directory to analyze

        Returns:
            True if every rule passed

        Raises:
            DirectoryNotFoundError: If root is not an existing directory
        """
        if not root.is_dir():
            raise DirectoryNotFoundError(str(root))

        self._results = {}
        self._errors = {}
        self._failures = {}

        total = len(self._rules)
        if total == 0:
            self.output.warning("No rules configured")
            return True

        self.output.header(TITLE)
        self.output.writeln()
        self.output.info(f"Target: {root.resolve()}")
        self.output.info(f"Rules: {total}")
        self.output.writeln()

        all_passed = True
        for index, rule in enumerate(self._rules, start=1):
            self.output.write(f"[{index}/{total}] {rule.name}... ")
            started = time.perf_counter()

            try:
                passed = rule.detect(root)
            except Exception as e:
                logger.exception(f"Rule {rule.name} failed")
                self._failures[rule.name] = str(e)
                self.output.error(f"Exception: {e}")
                all_passed = False
                continue

            elapsed = time.perf_counter() - started
            issues = rule.issues()
            self._results[rule.name] = issues
            if rule.errors():
                self._errors[rule.name] = rule.errors()

            if passed:
                self.output.success(f"({elapsed:.2f}s)")
            else:
                all_passed = False
                self.output.error(f"{len(issues)} issue(s) ({elapsed:.2f}s)")

        self._display_summary(all_passed)
        return all_passed

    def _display_summary(self, all_passed: bool) -> None:
        self.output.section("Summary")

        total_issues = 0
        passed_count = 0
        failed_count = len(self._failures)

        for name, issues in self._results.items():
            total_issues += len(issues)
            if issues:
                failed_count += 1
                self.output.writeln(f"  ✗ {name} ({len(issues)} issues)")
            else:
                passed_count += 1

        for name in self._failures:
            self.output.writeln(f"  ✗ {name} (failed to run)")

        self.output.writeln()
        self.output.writeln(f"Rules: {passed_count} passed, {failed_count} failed")
        if total_issues > 0:
            self.output.writeln(f"Issues: {total_issues} total")

        error_count = sum(len(files) for files in self._errors.values())
        if error_count > 0:
            self.output.writeln(f"Unreadable files: {error_count}")

        self.output.writeln()
        if all_passed:
            self.output.header("✓ All quality checks passed!")
        else:
            self.output.header("✗ Quality checks failed")

    def issues(self) -> list[Issue]:
        """All issues of the last run, grouped by rule in registration order."""
        all_issues = []
        for issues in self._results.values():
            all_issues.extend(issues)
        return all_issues

    def errors(self) -> dict[str, dict[str, str]]:
        """Unreadable files of the last run: rule name -> file -> reason."""
        return {name: dict(files) for name, files in self._errors.items()}

    def failures(self) -> dict[str, str]:
        """Rules that raised instead of completing: rule name -> message."""
        return dict(self._failures)

    def total_files(self) -> int:
        return sum(rule.files() for rule in self._rules)

    def passed(self) -> bool:
        return not self.issues() and not self._failures
