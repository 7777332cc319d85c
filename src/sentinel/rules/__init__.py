from sentinel.config import DiscoveryConfig, RuleConfig
from sentinel.rules.base import Rule
from sentinel.rules.convention import (
    ConstantNamingRule,
    NamingConventionRule,
    Psr12ComplianceRule,
    VariableNamingRule,
)
from sentinel.rules.documentation import (
    MissingDocBlockRule,
    ParamDocRule,
    ReturnDocRule,
    ThrowsDocRule,
)
from sentinel.rules.structure import (
    ClassLengthRule,
    CyclomaticComplexityRule,
    NamespaceRule,
    UnusedImportsRule,
)
from sentinel.rules.type_declarations import (
    ParameterTypeRule,
    PropertyTypeRule,
    ReturnTypeRule,
    StrictTypesRule,
)

# Registration order is the reporting order
RULE_CLASSES: list[type[Rule]] = [
    NamingConventionRule,
    ConstantNamingRule,
    VariableNamingRule,
    Psr12ComplianceRule,
    MissingDocBlockRule,
    ParamDocRule,
    ReturnDocRule,
    ThrowsDocRule,
    ClassLengthRule,
    CyclomaticComplexityRule,
    NamespaceRule,
    UnusedImportsRule,
    ParameterTypeRule,
    PropertyTypeRule,
    ReturnTypeRule,
    StrictTypesRule,
]


def default_rules(config: RuleConfig | None = None, discovery: DiscoveryConfig | None = None) -> list[Rule]:
    """Instantiate every registered rule with shared configuration."""
    return [rule_class(config, discovery) for rule_class in RULE_CLASSES]


def get_rule_class(name: str) -> type[Rule] | None:
    """Look up a rule class by display name, case-insensitively.

    Also accepts the class name (``NamingConventionRule``) and the display
    name with dashes instead of spaces (``naming-convention``).
    """
    wanted = name.strip().lower().replace("-", " ").replace("_", " ")
    for rule_class in RULE_CLASSES:
        display = rule_class.name.lower()
        if wanted in (display, display.replace("-", " "), rule_class.__name__.lower()):
            return rule_class
    return None
