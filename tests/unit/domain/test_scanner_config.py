"""Unit tests for ConfigurationLoader."""

import logging

import pytest

from rust_compliance_scanner.domain.config import ConfigurationLoader
from rust_compliance_scanner.domain.entities import Severity, SourceFile, ViolationKind
from rust_compliance_scanner.domain.errors import ConfigurationError
from rust_compliance_scanner.use_cases.scan_file import RustFileScanner


class TestDefaults:
    def test_defaults(self) -> None:
        loader = ConfigurationLoader()
        assert loader.max_file_lines == 300
        assert loader.max_function_lines == 50
        assert loader.max_line_length == 100
        assert loader.max_workers == 8
        assert loader.ban_underscore_bandaid is True
        assert loader.require_documentation is True
        assert loader.allow_unwrap is False
        assert loader.allowed_editions == ["2021", "2024"]
        assert loader.required_dependencies == []
        assert loader.exclude_dirs == ["target"]
        assert loader.enabled_kinds is None
        assert loader.is_enabled(ViolationKind.MISSING_DOCS)
        assert loader.custom_rules == ()


class TestValidation:
    def test_unknown_key_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            ConfigurationLoader({"max_fn_lines": 10})
        assert "max_fn_lines" in caplog.text

    def test_wrong_type_falls_back_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            loader = ConfigurationLoader(
                {"max_file_lines": "many", "max_line_length": 0, "allow_unwrap": "yes"}
            )
            assert loader.max_file_lines == 300
            assert loader.max_line_length == 100
            assert loader.allow_unwrap is False
        assert "max_file_lines" in caplog.text

    def test_bad_value_warns_once_however_often_it_is_read(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            loader = ConfigurationLoader({"max_line_length": 0})
            for _ in range(200):
                assert loader.max_line_length == 100
        warnings = [r for r in caplog.records if "max_line_length" in r.getMessage()]
        assert len(warnings) == 1

    def test_scanning_does_not_repeat_config_warnings(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            loader = ConfigurationLoader({"max_line_length": 0, "require_documentation": False})
            source = SourceFile.from_text("src/lib.rs", "let x = 1;\n" * 200)
            RustFileScanner(loader).scan(source)
        assert len(caplog.records) == 1

    def test_enabled_kinds_accepts_tags_and_names(self) -> None:
        loader = ConfigurationLoader({"enabled_kinds": ["UnwrapInProduction", "LINE_TOO_LONG"]})
        assert loader.enabled_kinds == frozenset(
            {ViolationKind.UNWRAP_IN_PRODUCTION, ViolationKind.LINE_TOO_LONG}
        )
        assert not loader.is_enabled(ViolationKind.MISSING_DOCS)
        assert loader.patterns.is_enabled(ViolationKind.LINE_TOO_LONG)

    def test_unknown_enabled_kind_is_fatal(self) -> None:
        with pytest.raises(ConfigurationError, match="NoSuchKind"):
            ConfigurationLoader({"enabled_kinds": ["NoSuchKind"]})

    def test_enabled_kinds_must_be_a_list(self) -> None:
        with pytest.raises(ConfigurationError):
            ConfigurationLoader({"enabled_kinds": "UnwrapInProduction"})


class TestCustomRules:
    def test_custom_rules_are_compiled(self) -> None:
        loader = ConfigurationLoader(
            {
                "custom_rules": [
                    {"name": "no_println", "pattern": r"println!\(", "message": "use tracing", "severity": "error"},
                    {"name": "no_dbg", "pattern": r"dbg!\(", "enabled": False},
                ]
            }
        )
        assert [spec.name for spec in loader.custom_rules] == ["no_println", "no_dbg"]
        assert [rule.name for rule in loader.patterns.custom_rules] == ["no_println"]
        assert loader.patterns.get("no_println").severity is Severity.ERROR

    def test_invalid_regex_is_fatal_and_named(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationLoader({"custom_rules": [{"name": "bad_one", "pattern": "[unclosed"}]})
        assert exc_info.value.pattern_name == "bad_one"

    @pytest.mark.parametrize(
        "rules",
        [
            "not a list",
            ["not a table"],
            [{"pattern": "x"}],
            [{"name": "no_pattern"}],
            [{"name": "sev", "pattern": "x", "severity": "fatal"}],
        ],
    )
    def test_malformed_rules(self, rules: object) -> None:
        with pytest.raises(ConfigurationError):
            ConfigurationLoader({"custom_rules": rules})


class TestOverrides:
    def test_with_overrides_ignores_none(self) -> None:
        loader = ConfigurationLoader({"max_workers": 2})
        assert loader.with_overrides(max_workers=None).max_workers == 2
        assert loader.with_overrides(max_workers=16).max_workers == 16
        assert loader.max_workers == 2
