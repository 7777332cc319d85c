"""Configuration management for sentinel rules and file discovery."""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".sentinel.yml"

DEFAULT_EXCLUDE_DIRS = ("vendor", "node_modules", ".git", ".svn", ".hg")


@dataclass(frozen=True)
class RuleConfig:
    """Thresholds for the structural and convention rules.

    Attributes:
        max_class_length: Maximum lines of a class, from declaration line to
            closing brace.
        max_method_length: Maximum non-blank lines of a method, including its
            signature.
        max_complexity: Maximum cyclomatic complexity of a function or method.
        max_line_length: Maximum characters per line (PSR-12 soft limit).
    """
    max_class_length: int = 500
    max_method_length: int = 50
    max_complexity: int = 10
    max_line_length: int = 120


@dataclass(frozen=True)
class DiscoveryConfig:
    """Which files under the analyzed root are considered.

    Attributes:
        exclude_dirs: Directory names never descended into.
        use_gitignore: Skip paths matched by .gitignore files.
        preload_gitignores: Load every .gitignore below the root up front
            instead of only the root one.
    """
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS
    use_gitignore: bool = True
    preload_gitignores: bool = True


@dataclass(frozen=True)
class SentinelConfig:
    """Complete configuration of a run."""
    rules: RuleConfig = field(default_factory=RuleConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _load_rule_config(data: Any) -> RuleConfig:
    if not isinstance(data, dict):
        return RuleConfig()

    defaults = RuleConfig()
    return RuleConfig(
        max_class_length=_positive_int(data.get("max_class_length"), defaults.max_class_length),
        max_method_length=_positive_int(data.get("max_method_length"), defaults.max_method_length),
        max_complexity=_positive_int(data.get("max_complexity"), defaults.max_complexity),
        max_line_length=_positive_int(data.get("max_line_length"), defaults.max_line_length),
    )


def _load_discovery_config(data: Any) -> DiscoveryConfig:
    if not isinstance(data, dict):
        return DiscoveryConfig()

    defaults = DiscoveryConfig()
    exclude_dirs = data.get("exclude_dirs", defaults.exclude_dirs)
    if not isinstance(exclude_dirs, (list, tuple)) or not all(isinstance(d, str) for d in exclude_dirs):
        exclude_dirs = defaults.exclude_dirs

    use_gitignore = data.get("use_gitignore", defaults.use_gitignore)
    preload = data.get("preload_gitignores", defaults.preload_gitignores)

    return DiscoveryConfig(
        exclude_dirs=tuple(exclude_dirs),
        use_gitignore=use_gitignore if isinstance(use_gitignore, bool) else defaults.use_gitignore,
        preload_gitignores=preload if isinstance(preload, bool) else defaults.preload_gitignores,
    )


def load_config(root: Path | None = None) -> SentinelConfig:
    """Load configuration from the .sentinel.yml file in the analyzed root.

    Args:
        root: Directory being analyzed. If None, uses current directory.

    Returns:
        SentinelConfig with loaded or default values.

    Notes:
        If the file doesn't exist or can't be parsed, returns default config.
        Invalid individual values fall back to their defaults.
        Expected YAML structure:

        ```yaml
        rules:
          max_class_length: 500
          max_method_length: 50
          max_complexity: 10
          max_line_length: 120
        discovery:
          exclude_dirs: [vendor, node_modules]
          use_gitignore: true
          preload_gitignores: true
        ```
    """
    if root is None:
        root = Path.cwd()

    config_path = root / CONFIG_FILE_NAME

    if not config_path.exists():
        return SentinelConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"Ignoring unreadable config {config_path}: {e}")
        return SentinelConfig()

    if not isinstance(data, dict):
        if data is not None:
            logger.warning(f"Ignoring {config_path}: expected a mapping at the top level")
        return SentinelConfig()

    return SentinelConfig(
        rules=_load_rule_config(data.get("rules")),
        discovery=_load_discovery_config(data.get("discovery")),
    )


def with_overrides(config: SentinelConfig, **overrides: Any) -> SentinelConfig:
    """Return a copy of config with non-None rule/discovery values replaced.

    Keys are matched against RuleConfig fields first, then DiscoveryConfig.
    """
    rule_fields = set(RuleConfig.__dataclass_fields__)
    discovery_fields = set(DiscoveryConfig.__dataclass_fields__)

    rule_changes = {k: v for k, v in overrides.items() if v is not None and k in rule_fields}
    discovery_changes = {k: v for k, v in overrides.items() if v is not None and k in discovery_fields}

    unknown = set(overrides) - rule_fields - discovery_fields
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    return SentinelConfig(
        rules=replace(config.rules, **rule_changes),
        discovery=replace(config.discovery, **discovery_changes),
    )
