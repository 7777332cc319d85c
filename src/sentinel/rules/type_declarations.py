"""Explicit type declarations and strict typing."""

from sentinel.rules.base import Rule
from sentinel.source import SourceFile

EXEMPT_FROM_RETURN_TYPE = ("__construct", "__destruct")


class ParameterTypeRule(Rule):
    """Every function and method parameter must declare a type."""

    name = "Parameter Type"

    def check(self, source: SourceFile, file: str) -> None:
        for function in source.model.functions:
            for parameter in function.parameters.values():
                if parameter.has_type:
                    continue
                self.add_issue(
                    file,
                    function.line,
                    f'Missing type declaration for parameter "{parameter.variable_name}" '
                    f'in {function.kind_label} "{function.qualified_name}".',
                )


class PropertyTypeRule(Rule):
    """Every class property must declare a type."""

    name = "Property Type"

    def check(self, source: SourceFile, file: str) -> None:
        for prop in source.model.properties:
            if prop.has_type:
                continue
            self.add_issue(
                file,
                prop.line,
                f'Missing type declaration for {prop.visibility} property "{prop.variable_name}" '
                f'in class "{prop.class_name or "unknown"}".',
            )


class ReturnTypeRule(Rule):
    """Every function except constructors and destructors must declare a return type."""

    name = "Return Type"

    def check(self, source: SourceFile, file: str) -> None:
        for function in source.model.functions:
            if function.name in EXEMPT_FROM_RETURN_TYPE or function.has_return_type:
                continue
            self.add_issue(
                file,
                function.line,
                f'Missing return type declaration for {function.kind_label} "{function.qualified_name}".',
            )


class StrictTypesRule(Rule):
    """Files declaring anything must opt into ``declare(strict_types=1)``."""

    name = "Strict Types"

    def check(self, source: SourceFile, file: str) -> None:
        model = source.model
        if model.strict_types or model.is_empty:
            return
        self.add_issue(file, 1, "Missing declare(strict_types=1) declaration")
