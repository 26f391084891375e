"""Pattern library: compiled rules tagged with a violation kind and default severity."""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from rust_compliance_scanner.domain.entities import Severity, ViolationKind
from rust_compliance_scanner.domain.errors import ConfigurationError

FUNCTION_DEF = "function_def"
UNDERSCORE_PARAM = "underscore_param"
UNDERSCORE_LET = "underscore_let"
UNWRAP_CALL = "unwrap_call"
EXPECT_CALL = "expect_call"


@dataclass(frozen=True)
class CustomPatternSpec:
    """A user-supplied rule as read from configuration, not yet compiled."""

    name: str
    pattern: str
    message: str
    severity: Severity = Severity.WARNING
    enabled: bool = True


@dataclass(frozen=True)
class PatternRule:
    """A compiled search pattern with the violation it reports."""

    name: str
    regex: re.Pattern[str]
    kind: ViolationKind
    severity: Severity
    message: str
    literal: Optional[str] = None
    """Substring handed to the lexical classifier; falls back to the match text."""
    custom: bool = False

    def search(self, line: str) -> Optional[re.Match[str]]:
        return self.regex.search(line)

    def is_match(self, line: str) -> bool:
        return self.regex.search(line) is not None


_BUILTIN_SOURCES: tuple[tuple[str, str, ViolationKind, Severity, str, Optional[str]], ...] = (
    (
        FUNCTION_DEF,
        r"^\s*(pub(\([^)]*\))?\s+)?(const\s+)?(async\s+)?(unsafe\s+)?fn\s+",
        ViolationKind.FUNCTION_TOO_LARGE,
        Severity.ERROR,
        "Function has {length} lines, maximum allowed is {limit}",
        None,
    ),
    (
        UNDERSCORE_PARAM,
        r"fn\s+\w+[^{]*?\b(_\w+)\s*:",
        ViolationKind.UNDERSCORE_BANDAID,
        Severity.ERROR,
        "BANNED: Underscore parameter ({name}) - fix the design instead of hiding warnings",
        None,
    ),
    (
        UNDERSCORE_LET,
        r"^\s*let\s+_\s*=",
        ViolationKind.UNDERSCORE_BANDAID,
        Severity.ERROR,
        "BANNED: `let _ =` discards a value - handle the result instead of silencing it",
        "let",
    ),
    (
        UNWRAP_CALL,
        r"\.unwrap\(\)",
        ViolationKind.UNWRAP_IN_PRODUCTION,
        Severity.ERROR,
        "BANNED: .unwrap() in production code - use proper error handling with ?",
        ".unwrap()",
    ),
    (
        EXPECT_CALL,
        r"\.expect\(",
        ViolationKind.UNWRAP_IN_PRODUCTION,
        Severity.ERROR,
        "BANNED: .expect() in production code - use proper error handling with ?",
        ".expect(",
    ),
)


class PatternLibrary:
    """
    Immutable set of compiled rules, constructed once per run and passed into every scan.

    Built-ins always compile; custom patterns are validated here so a bad regex
    surfaces as a ConfigurationError before the first file is read.
    """

    def __init__(
        self,
        custom_patterns: Iterable[CustomPatternSpec] = (),
        enabled_kinds: Optional[Iterable[ViolationKind]] = None,
    ) -> None:
        builtins = tuple(
            PatternRule(
                name=name,
                regex=re.compile(source),
                kind=kind,
                severity=severity,
                message=message,
                literal=literal,
            )
            for name, source, kind, severity, message, literal in _BUILTIN_SOURCES
        )
        self._builtins: dict[str, PatternRule] = {rule.name: rule for rule in builtins}
        self._custom: tuple[PatternRule, ...] = PatternLibrary.compile_custom(custom_patterns)
        self._enabled_kinds: frozenset[ViolationKind] = (
            frozenset(ViolationKind) if enabled_kinds is None else frozenset(enabled_kinds)
        )

    @staticmethod
    def compile_custom(specs: Iterable[CustomPatternSpec]) -> tuple[PatternRule, ...]:
        """Compile enabled custom specs; an invalid regex names the offending pattern."""
        rules: list[PatternRule] = []
        seen: set[str] = set()
        for spec in specs:
            if spec.name in seen:
                raise ConfigurationError(
                    f"Duplicate custom pattern name '{spec.name}'", pattern_name=spec.name
                )
            seen.add(spec.name)
            if not spec.enabled:
                continue
            try:
                regex = re.compile(spec.pattern)
            except re.error as exc:
                raise ConfigurationError(
                    f"Invalid regex for custom pattern '{spec.name}': {exc}",
                    pattern_name=spec.name,
                ) from exc
            if regex.match("") is not None:
                raise ConfigurationError(
                    f"Custom pattern '{spec.name}' matches the empty string and would flag every line",
                    pattern_name=spec.name,
                )
            rules.append(
                PatternRule(
                    name=spec.name,
                    regex=regex,
                    kind=ViolationKind.CUSTOM_PATTERN,
                    severity=spec.severity,
                    message=spec.message,
                    custom=True,
                )
            )
        return tuple(rules)

    @property
    def function_def(self) -> PatternRule:
        return self._builtins[FUNCTION_DEF]

    @property
    def underscore_param(self) -> PatternRule:
        return self._builtins[UNDERSCORE_PARAM]

    @property
    def underscore_let(self) -> PatternRule:
        return self._builtins[UNDERSCORE_LET]

    @property
    def unwrap_call(self) -> PatternRule:
        return self._builtins[UNWRAP_CALL]

    @property
    def expect_call(self) -> PatternRule:
        return self._builtins[EXPECT_CALL]

    @property
    def custom_rules(self) -> tuple[PatternRule, ...]:
        return self._custom

    @property
    def enabled_kinds(self) -> frozenset[ViolationKind]:
        return self._enabled_kinds

    def is_enabled(self, kind: ViolationKind) -> bool:
        return kind in self._enabled_kinds

    def rules(self) -> list[PatternRule]:
        """Every active rule, built-ins first, in a stable order."""
        return [
            rule
            for rule in (*self._builtins.values(), *self._custom)
            if self.is_enabled(rule.kind)
        ]

    def get(self, name: str) -> PatternRule:
        for rule in (*self._builtins.values(), *self._custom):
            if rule.name == name:
                return rule
        raise KeyError(name)
