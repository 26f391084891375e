"""Unit tests for RustFileScanner."""

from rust_compliance_scanner.domain.config import ConfigurationLoader
from rust_compliance_scanner.domain.entities import Severity, SourceFile, ViolationKind
from rust_compliance_scanner.use_cases.scan_file import RustFileScanner
from tests.scanner_test_utils import rust_function


def scan(lines: list[str], config: ConfigurationLoader, path: str = "src/lib.rs") -> list:
    return RustFileScanner(config).scan(SourceFile.from_text(path, "\n".join(lines)))


def kinds(violations: list) -> list[ViolationKind]:
    return [v.kind for v in violations]


class TestUnwrapInProduction:
    def test_unwrap_and_expect_reported(self, config_loader: ConfigurationLoader) -> None:
        violations = scan(
            ["fn main() {", "    let a = x.unwrap();", '    let b = y.expect("y");', "}"], config_loader
        )
        assert [(v.kind, v.line) for v in violations] == [
            (ViolationKind.UNWRAP_IN_PRODUCTION, 2),
            (ViolationKind.UNWRAP_IN_PRODUCTION, 3),
        ]
        assert all(v.severity is Severity.ERROR for v in violations)

    def test_literal_and_comment_matches_ignored(self, config_loader: ConfigurationLoader) -> None:
        violations = scan(
            ["fn main() {", '    log("x.unwrap()");', "    // y.unwrap()", "}"], config_loader
        )
        assert violations == []

    def test_test_function_and_module_are_exempt(self, config_loader: ConfigurationLoader) -> None:
        lines = [
            "fn prod() {",
            "}",
            "#[cfg(test)]",
            "mod tests {",
            "    fn helper() {",
            "        a.unwrap();",
            "    }",
            "}",
            "#[test]",
            "fn standalone() {",
            '    b.expect("x");',
            "}",
            "fn after() {",
            "    c.unwrap();",
            "}",
        ]
        violations = scan(lines, config_loader)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.UNWRAP_IN_PRODUCTION, 14)]

    def test_tokio_test_with_extra_attribute(self, config_loader: ConfigurationLoader) -> None:
        lines = ["#[tokio::test]", "#[ignore]", "async fn slow() {", "    a.unwrap();", "}"]
        assert scan(lines, config_loader) == []

    def test_cfg_test_on_non_module_does_not_leak(self, config_loader: ConfigurationLoader) -> None:
        lines = ["#[cfg(test)]", "use super::*;", "mod helpers {", "    fn f() { a.unwrap(); }", "}"]
        assert kinds(scan(lines, config_loader)) == [ViolationKind.UNWRAP_IN_PRODUCTION]

    def test_test_files_are_exempt(self, config_loader: ConfigurationLoader) -> None:
        lines = ["fn main() {", "    a.unwrap();", "}"]
        assert scan(lines, config_loader, path="crate/tests/integration.rs") == []
        assert scan(lines, config_loader, path="tests/it.rs") == []
        assert scan(lines, config_loader, path="src/parser_test.rs") == []

    def test_allow_attribute_suppresses(self, config_loader: ConfigurationLoader) -> None:
        lines = ["#![allow(clippy::unwrap_used)]", "fn main() {", "    a.unwrap();", '    b.expect("x");', "}"]
        violations = scan(lines, config_loader)
        assert [v.line for v in violations] == [4]

    def test_allow_from_configuration(self) -> None:
        config = ConfigurationLoader({"require_documentation": False, "allow_unwrap": True, "allow_expect": True})
        assert scan(["fn main() {", "    a.unwrap();", '    b.expect("x");', "}"], config) == []

    def test_check_allow_attributes(self) -> None:
        assert RustFileScanner.check_allow_attributes(["#![allow(clippy::expect_used)]"]) == (False, True)
        assert RustFileScanner.check_allow_attributes(["#![allow(unwrap_used, expect_used)]"]) == (True, True)
        assert RustFileScanner.check_allow_attributes(["fn main() {}"]) == (False, False)


class TestUnderscoreBandaid:
    def test_underscore_parameter(self, config_loader: ConfigurationLoader) -> None:
        violations = scan(["fn handle(_req: Request) {", "}"], config_loader)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.UNDERSCORE_BANDAID, 1)]
        assert "_req" in violations[0].message

    def test_underscore_parameter_on_continuation_line(self, config_loader: ConfigurationLoader) -> None:
        lines = ["fn handle(", "    req: Request,", "    _ctx: Context,", ") {", "}"]
        violations = scan(lines, config_loader)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.UNDERSCORE_BANDAID, 3)]

    def test_underscore_let(self, config_loader: ConfigurationLoader) -> None:
        violations = scan(["fn f() {", "    let _ = tx.send(1);", "}"], config_loader)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.UNDERSCORE_BANDAID, 2)]

    def test_can_be_disabled(self) -> None:
        config = ConfigurationLoader({"require_documentation": False, "ban_underscore_bandaid": False})
        assert scan(["fn handle(_req: Request) {", "    let _ = x;", "}"], config) == []


class TestSizeLimits:
    def test_function_too_large_reported_at_start(self) -> None:
        config = ConfigurationLoader({"require_documentation": False, "max_function_lines": 5})
        violations = scan(["// header"] + rust_function("big", 4), config)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.FUNCTION_TOO_LARGE, 2)]
        assert "6 lines" in violations[0].message
        assert "big" in violations[0].message

    def test_function_at_limit_is_fine(self) -> None:
        config = ConfigurationLoader({"require_documentation": False, "max_function_lines": 5})
        assert scan(rust_function("ok", 3), config) == []

    def test_file_too_large(self) -> None:
        config = ConfigurationLoader({"require_documentation": False, "max_file_lines": 3})
        violations = scan(["// a", "// b", "// c", "// d"], config)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.FILE_TOO_LARGE, 4)]

    def test_line_too_long_is_a_warning(self) -> None:
        config = ConfigurationLoader({"require_documentation": False, "max_line_length": 20})
        violations = scan(["// " + "x" * 30], config)
        assert [(v.kind, v.severity) for v in violations] == [(ViolationKind.LINE_TOO_LONG, Severity.WARNING)]


class TestTestScopesAndLintAttributes:
    def test_one_line_test_function_is_exempt(self, config_loader: ConfigurationLoader) -> None:
        lines = ["#[test] fn t() { a.unwrap(); }", "fn prod() {", "    b.unwrap();", "}"]
        violations = scan(lines, config_loader)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.UNWRAP_IN_PRODUCTION, 3)]

    def test_one_line_test_with_extra_attribute(self, config_loader: ConfigurationLoader) -> None:
        lines = ["#[test] #[ignore] fn t() {", "    a.unwrap();", "}", "fn prod() { b.unwrap(); }"]
        assert [v.line for v in scan(lines, config_loader)] == [4]

    def test_deny_attribute_keeps_check_on(self, config_loader: ConfigurationLoader) -> None:
        lines = ["#![deny(clippy::unwrap_used)]", "fn main() {", "    x.unwrap();", "}"]
        violations = scan(lines, config_loader)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.UNWRAP_IN_PRODUCTION, 3)]

    def test_only_allow_and_expect_attributes_suppress(self) -> None:
        assert RustFileScanner.check_allow_attributes(["#![deny(clippy::unwrap_used)]"]) == (False, False)
        assert RustFileScanner.check_allow_attributes(["#![warn(clippy::expect_used)]"]) == (False, False)
        assert RustFileScanner.check_allow_attributes(["#[expect(clippy::unwrap_used)]"]) == (True, False)
        assert RustFileScanner.check_allow_attributes(["// #![allow(clippy::unwrap_used)]"]) == (False, False)

    def test_test_path_overrides_display_path(self, config_loader: ConfigurationLoader) -> None:
        source = SourceFile.from_text("it.rs", "fn main() {\n    a.unwrap();\n}")
        scanner = RustFileScanner(config_loader)
        assert kinds(scanner.scan(source)) == [ViolationKind.UNWRAP_IN_PRODUCTION]
        assert scanner.scan(source, test_path="/work/proj/tests/it.rs") == []


class TestMissingDocs:
    def test_public_items_need_docs(self) -> None:
        config = ConfigurationLoader()
        lines = [
            "/// Documented.",
            "pub fn documented() {}",
            "",
            "pub struct Bare;",
            "",
            "/// Attributes in between are fine.",
            "#[derive(Debug)]",
            "pub enum Kind { A }",
            "",
            "fn private() {}",
            "/** Block docs. */",
            "pub trait Tr {}",
        ]
        violations = scan(lines, config)
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.MISSING_DOCS, 4)]
        assert violations[0].severity is Severity.WARNING
        assert "struct" in violations[0].message

    def test_multi_line_attribute_between_docs_and_item(self) -> None:
        lines = ["/// Documented.", "#[derive(", "    Debug,", "    Clone,", ")]", "pub struct Point;"]
        assert scan(lines, ConfigurationLoader()) == []

    def test_multi_line_attribute_without_docs(self) -> None:
        lines = ["#[derive(", "    Debug,", ")]", "pub struct Bare;"]
        violations = scan(lines, ConfigurationLoader())
        assert [(v.kind, v.line) for v in violations] == [(ViolationKind.MISSING_DOCS, 4)]

    def test_regular_comment_is_not_documentation(self) -> None:
        violations = scan(["// not docs", "pub const MAX: u32 = 3;"], ConfigurationLoader())
        assert kinds(violations) == [ViolationKind.MISSING_DOCS]


class TestFilteringAndOrder:
    def test_enabled_kinds_restrict_output(self) -> None:
        config = ConfigurationLoader({"enabled_kinds": ["LineTooLong"], "max_line_length": 10})
        violations = scan(["pub fn handle(_x: u8) { a.unwrap(); }"], config)
        assert kinds(violations) == [ViolationKind.LINE_TOO_LONG]

    def test_same_line_sorted_by_kind(self) -> None:
        config = ConfigurationLoader({"max_line_length": 10})
        violations = scan(["pub fn handle(_x: u8) { a.unwrap(); }"], config)
        assert kinds(violations) == [
            ViolationKind.UNDERSCORE_BANDAID,
            ViolationKind.LINE_TOO_LONG,
            ViolationKind.UNWRAP_IN_PRODUCTION,
            ViolationKind.MISSING_DOCS,
        ]

    def test_custom_rule(self) -> None:
        config = ConfigurationLoader(
            {
                "require_documentation": False,
                "custom_rules": [{"name": "no_println", "pattern": r"println!", "message": "use tracing"}],
            }
        )
        violations = scan(["fn f() {", '    println!("hi");', '    let s = "println!";', "}"], config)
        assert [(v.kind, v.line, v.severity) for v in violations] == [
            (ViolationKind.CUSTOM_PATTERN, 2, Severity.WARNING)
        ]
        assert violations[0].message == "use tracing [no_println]"

    def test_unbalanced_file_still_scans(self, config_loader: ConfigurationLoader) -> None:
        violations = scan(["fn broken() {", "    if x {", "        a.unwrap();"], config_loader)
        assert kinds(violations) == [ViolationKind.UNWRAP_IN_PRODUCTION]
