"""Configuration for scanner settings. Immutable value object created by Infrastructure."""

from __future__ import annotations

import logging
from typing import Optional

from rust_compliance_scanner.domain.entities import Severity, ViolationKind
from rust_compliance_scanner.domain.errors import ConfigurationError
from rust_compliance_scanner.domain.patterns import CustomPatternSpec, PatternLibrary

DEFAULTS: dict[str, object] = {
    "max_file_lines": 300,
    "max_function_lines": 50,
    "max_line_length": 100,
    "ban_underscore_bandaid": True,
    "require_documentation": True,
    "allow_unwrap": False,
    "allow_expect": False,
    "enabled_kinds": None,
    "allowed_editions": ["2021", "2024"],
    "required_dependencies": [],
    "exclude_dirs": ["target"],
    "max_workers": 8,
    "custom_rules": [],
}

INT_KEYS = ("max_file_lines", "max_function_lines", "max_line_length", "max_workers")
BOOL_KEYS = ("ban_underscore_bandaid", "require_documentation", "allow_unwrap", "allow_expect")
LIST_KEYS = ("allowed_editions", "required_dependencies", "exclude_dirs")


class ConfigurationLoader:
    """
    Immutable configuration for scanner settings.

    Created by Infrastructure from the ``rust-compliance`` table. Domain does not
    read the filesystem; Infrastructure calls ConfigFileLoader and constructs
    ConfigurationLoader(config_dict) at the composition root. Everything that
    can be invalid is checked here, before any file is scanned.
    """

    def __init__(self, config_dict: Optional[dict[str, object]] = None) -> None:
        self._config: dict[str, object] = dict(config_dict or {})
        if self._config:
            self.validate_config(self._config)
        self._enabled_kinds = ConfigurationLoader.parse_enabled_kinds(
            self._config.get("enabled_kinds")
        )
        self._custom_rules = ConfigurationLoader.parse_custom_rules(
            self._config.get("custom_rules", [])
        )
        # Compile eagerly so a bad custom regex fails here, not mid-scan.
        self._patterns = PatternLibrary(self._custom_rules, self._enabled_kinds)
        # Typed settings are resolved once; bad values warn here and fall back to defaults.
        self._ints = {key: self._positive_int(key) for key in INT_KEYS}
        self._bools = {key: self._bool(key) for key in BOOL_KEYS}
        self._lists = {key: self._str_list(key) for key in LIST_KEYS}

    def validate_config(self, config: dict[str, object]) -> None:
        """Warn about unknown keys; typed settings fall back to defaults on bad values."""
        for key in config:
            if key not in DEFAULTS:
                logging.warning("Configuration Warning: unknown key '%s' is ignored.", key)

    @property
    def config(self) -> dict[str, object]:
        """Return the loaded configuration."""
        return self._config

    @property
    def patterns(self) -> PatternLibrary:
        return self._patterns

    @property
    def max_file_lines(self) -> int:
        return self._ints["max_file_lines"]

    @property
    def max_function_lines(self) -> int:
        return self._ints["max_function_lines"]

    @property
    def max_line_length(self) -> int:
        return self._ints["max_line_length"]

    @property
    def max_workers(self) -> int:
        return self._ints["max_workers"]

    @property
    def ban_underscore_bandaid(self) -> bool:
        return self._bools["ban_underscore_bandaid"]

    @property
    def require_documentation(self) -> bool:
        return self._bools["require_documentation"]

    @property
    def allow_unwrap(self) -> bool:
        return self._bools["allow_unwrap"]

    @property
    def allow_expect(self) -> bool:
        return self._bools["allow_expect"]

    @property
    def allowed_editions(self) -> list[str]:
        return list(self._lists["allowed_editions"])

    @property
    def required_dependencies(self) -> list[str]:
        return list(self._lists["required_dependencies"])

    @property
    def exclude_dirs(self) -> list[str]:
        return list(self._lists["exclude_dirs"])

    @property
    def enabled_kinds(self) -> Optional[frozenset[ViolationKind]]:
        """None means every kind is active."""
        return self._enabled_kinds

    @property
    def custom_rules(self) -> tuple[CustomPatternSpec, ...]:
        return self._custom_rules

    def is_enabled(self, kind: ViolationKind) -> bool:
        return self._enabled_kinds is None or kind in self._enabled_kinds

    def with_overrides(self, **overrides: object) -> "ConfigurationLoader":
        """New loader with some keys replaced (CLI flags win over file settings)."""
        merged = dict(self._config)
        merged.update({key: value for key, value in overrides.items() if value is not None})
        return ConfigurationLoader(merged)

    @staticmethod
    def parse_enabled_kinds(raw: object) -> Optional[frozenset[ViolationKind]]:
        if raw is None:
            return None
        if not isinstance(raw, list):
            raise ConfigurationError("'enabled_kinds' must be a list of violation kinds")
        kinds: set[ViolationKind] = set()
        for item in raw:
            try:
                kinds.add(ViolationKind.from_tag(str(item)))
            except ValueError as exc:
                raise ConfigurationError(f"'enabled_kinds': {exc}") from exc
        return frozenset(kinds)

    @staticmethod
    def parse_severity(raw: object, rule_name: str) -> Severity:
        text = str(raw).strip().lower()
        for severity in Severity:
            if severity.value.lower() == text:
                return severity
        raise ConfigurationError(
            f"Custom pattern '{rule_name}' has unknown severity {raw!r} (use 'error' or 'warning')",
            pattern_name=rule_name,
        )

    @staticmethod
    def parse_custom_rules(raw: object) -> tuple[CustomPatternSpec, ...]:
        """Turn ``custom_rules`` tables into specs; structural problems are fatal."""
        if not isinstance(raw, list):
            raise ConfigurationError("'custom_rules' must be an array of tables")
        specs: list[CustomPatternSpec] = []
        for position, entry in enumerate(raw):
            if not isinstance(entry, dict):
                raise ConfigurationError(f"custom_rules[{position}] must be a table")
            name = entry.get("name")
            if not isinstance(name, str) or not name:
                raise ConfigurationError(f"custom_rules[{position}] is missing a 'name'")
            pattern = entry.get("pattern")
            if not isinstance(pattern, str) or not pattern:
                raise ConfigurationError(
                    f"Custom pattern '{name}' is missing a 'pattern'", pattern_name=name
                )
            message = entry.get("message", f"Custom rule '{name}' matched")
            specs.append(
                CustomPatternSpec(
                    name=name,
                    pattern=pattern,
                    message=str(message),
                    severity=ConfigurationLoader.parse_severity(
                        entry.get("severity", "warning"), name
                    ),
                    enabled=bool(entry.get("enabled", True)),
                )
            )
        return tuple(specs)

    def _positive_int(self, key: str) -> int:
        value = self._config.get(key, DEFAULTS[key])
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            logging.warning(
                "Configuration Warning: '%s' must be a positive integer; using %s.",
                key,
                DEFAULTS[key],
            )
            return int(DEFAULTS[key])  # type: ignore[call-overload]
        return value

    def _bool(self, key: str) -> bool:
        value = self._config.get(key, DEFAULTS[key])
        if not isinstance(value, bool):
            logging.warning(
                "Configuration Warning: '%s' must be true or false; using %s.", key, DEFAULTS[key]
            )
            return bool(DEFAULTS[key])
        return value

    def _str_list(self, key: str) -> list[str]:
        raw = self._config.get(key, DEFAULTS[key])
        if isinstance(raw, list):
            return [str(x) for x in raw if isinstance(x, (str, int))]
        logging.warning("Configuration Warning: '%s' must be a list; using defaults.", key)
        default = DEFAULTS[key]
        return list(default) if isinstance(default, list) else []
