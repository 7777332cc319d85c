import json
import logging

from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler
from typing import List, Optional

import typer

from sentinel import __version__
from sentinel.config import load_config, with_overrides
from sentinel.output import Output
from sentinel.rules import RULE_CLASSES, default_rules, get_rule_class
from sentinel.runner import Runner

app = typer.Typer(
    help="Sentinel - static analysis for PHP code style, documentation and structure",
    no_args_is_help=True,
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def check(
    path: Path = typer.Argument(Path("."), help="Directory to analyze"),
    rule: Optional[List[str]] = typer.Option(
        None, "--rule", "-r", help="Run only this rule (repeatable). See `sentinel rules`."
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="Additional directory name to skip (repeatable)"
    ),
    no_gitignore: bool = typer.Option(False, "--no-gitignore", help="Analyze files matched by .gitignore"),
    no_preload: bool = typer.Option(False, "--no-preload", help="Only honor the root .gitignore"),
    max_class_length: Optional[int] = typer.Option(None, min=1, help="Maximum lines per class"),
    max_method_length: Optional[int] = typer.Option(None, min=1, help="Maximum non-blank lines per method"),
    max_complexity: Optional[int] = typer.Option(None, min=1, help="Maximum cyclomatic complexity"),
    max_line_length: Optional[int] = typer.Option(None, min=1, help="Maximum characters per line"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    no_color: bool = typer.Option(False, "--no-color", help="Plain output without colors or symbols"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print issues"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """Analyze the PHP files under PATH.

    Exits with 0 when every rule passes, 1 when issues are found and 2 when
    the analysis could not run.

    Examples:
        sentinel check src
        sentinel check . --rule "Naming Convention" --max-complexity 15
    """
    _configure_logging(verbose)

    if not path.is_dir():
        typer.echo(f"Error: Directory not found: {path}", err=True)
        raise typer.Exit(code=2)

    config = load_config(path)
    exclude_dirs = config.discovery.exclude_dirs + tuple(exclude) if exclude else None
    config = with_overrides(
        config,
        max_class_length=max_class_length,
        max_method_length=max_method_length,
        max_complexity=max_complexity,
        max_line_length=max_line_length,
        exclude_dirs=exclude_dirs,
        use_gitignore=False if no_gitignore else None,
        preload_gitignores=False if no_preload else None,
    )

    if rule:
        rule_classes = []
        for name in rule:
            rule_class = get_rule_class(name)
            if rule_class is None:
                typer.echo(f"Error: Unknown rule: {name}", err=True)
                raise typer.Exit(code=2)
            if rule_class not in rule_classes:
                rule_classes.append(rule_class)
        rules = [rule_class(config.rules, config.discovery) for rule_class in rule_classes]
    else:
        rules = default_rules(config.rules, config.discovery)

    output = Output(console, displayable=not (quiet or as_json), colorable=not no_color)
    runner = Runner(output, rules)

    try:
        passed = runner.run(path)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    issues = runner.issues()

    if as_json:
        result = {
            "passed": passed,
            "files": runner.total_files(),
            "issues": [issue.to_dict() for issue in issues],
            "errors": runner.errors(),
        }
        typer.echo(json.dumps(result, indent=2))
    elif issues:
        listing = Output(console, colorable=not no_color)
        if not quiet:
            listing.section("Issues")
        listing.issues(issues)

    if runner.failures():
        raise typer.Exit(code=2)
    if not passed:
        raise typer.Exit(code=1)


@app.command("rules")
def list_rules():
    """List the available rules in the order they run."""
    for rule_class in RULE_CLASSES:
        summary = (rule_class.__doc__ or "").strip().splitlines()
        if summary:
            typer.echo(f"{rule_class.name}: {summary[0]}")
        else:
            typer.echo(rule_class.name)


def _version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"sentinel version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    )):
    pass
