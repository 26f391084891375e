"""Use Case: scan one buffered file and return its violations."""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from rust_compliance_scanner.domain.boundaries import FunctionBoundaryScanner
from rust_compliance_scanner.domain.config import ConfigurationLoader
from rust_compliance_scanner.domain.entities import (
    FunctionSignature,
    Severity,
    SourceFile,
    Violation,
    ViolationKind,
)
from rust_compliance_scanner.domain.lexical import LexicalClassifier
from rust_compliance_scanner.domain.patterns import PatternRule

TEST_ATTRIBUTES: tuple[str, ...] = ("#[test]", "#[tokio::test]", "#[bench]")
PUB_ITEM_RE = re.compile(
    r"^\s*pub(\([^)]*\))?\s+((async|const|unsafe|extern\s+\"[^\"]*\")\s+)*"
    r"(fn|struct|enum|trait|type|const|static|union)\s"
)
MOD_RE = re.compile(r"^\s*(pub(\([^)]*\))?\s+)?mod\s+\w+")
LEADING_ATTRIBUTES_RE = re.compile(r"^\s*(#\[[^\]]*\]\s*)+")
LINT_ATTRIBUTE_RE = re.compile(r"#!?\[\s*(allow|expect)\s*\(([^)]*)\)")


@dataclass
class _TestScope:
    """Tracks whether the current line sits in a test function or a cfg(test) module."""

    function_end: int = -1
    module_end: int = -1
    next_function_is_test: bool = False
    next_module_is_test: bool = False

    def contains(self, index: int) -> bool:
        return index <= self.function_end or index <= self.module_end


class RustFileScanner:
    """
    Line-oriented scan of one Rust source file.

    Pure function of (path, content, configuration): no I/O, no shared state,
    safe to run from any worker thread.
    """

    def __init__(self, config: ConfigurationLoader) -> None:
        self._config = config
        self._patterns = config.patterns

    def scan(self, source: SourceFile, test_path: Optional[str] = None) -> list[Violation]:
        """
        Violations of one file, sorted by (line, kind).

        ``test_path`` overrides the path used to recognise test files when the
        display path has lost its directories.
        """
        path, lines = source.path, source.lines
        is_test_file = RustFileScanner.is_test_file(test_path or path)
        allow_unwrap, allow_expect = RustFileScanner.check_allow_attributes(lines)
        allow_unwrap = allow_unwrap or self._config.allow_unwrap
        allow_expect = allow_expect or self._config.allow_expect

        violations: list[Violation] = []
        violations.extend(self._check_file_size(path, lines))

        scope = _TestScope()
        for index, line in enumerate(lines):
            self._track_test_scope(scope, lines, index, line)
            in_test = is_test_file or scope.contains(index)

            if self._patterns.function_def.is_match(LEADING_ATTRIBUTES_RE.sub("", line)):
                violations.extend(self._check_function(path, lines, index))
            if self._enabled(ViolationKind.UNDERSCORE_BANDAID) and self._config.ban_underscore_bandaid:
                violations.extend(self._check_underscore_let(path, line, index))
            if not in_test:
                if not allow_unwrap:
                    violations.extend(self._check_banned_call(self._patterns.unwrap_call, path, line, index))
                if not allow_expect:
                    violations.extend(self._check_banned_call(self._patterns.expect_call, path, line, index))
                if self._config.require_documentation:
                    violations.extend(self._check_missing_docs(path, lines, index))
            if self._enabled(ViolationKind.LINE_TOO_LONG) and len(line) > self._config.max_line_length:
                violations.append(
                    Violation(
                        kind=ViolationKind.LINE_TOO_LONG,
                        file=path,
                        line=index + 1,
                        message=(
                            f"Line has {len(line)} characters, maximum allowed is "
                            f"{self._config.max_line_length}"
                        ),
                        severity=Severity.WARNING,
                    )
                )
            violations.extend(self._check_custom_rules(path, line, index))

        return sorted(violations, key=lambda v: (v.line, v.kind.ordinal))

    @staticmethod
    def is_test_file(path: str) -> bool:
        normalized = path.replace("\\", "/")
        return "/tests/" in normalized or normalized.startswith("tests/") or normalized.endswith("_test.rs")

    @staticmethod
    def check_allow_attributes(lines: Sequence[str]) -> tuple[bool, bool]:
        """
        Any ``allow(...)`` / ``expect(...)`` attribute naming ``unwrap_used`` or
        ``expect_used`` suppresses the matching check for the whole file.

        ``deny``, ``warn`` and ``forbid`` leave the check on.
        """
        allow_unwrap = False
        allow_expect = False
        for line in lines:
            for match in LINT_ATTRIBUTE_RE.finditer(LexicalClassifier.code_only(line)):
                lints = match.group(2)
                allow_unwrap = allow_unwrap or "unwrap_used" in lints
                allow_expect = allow_expect or "expect_used" in lints
        return allow_unwrap, allow_expect

    def _enabled(self, kind: ViolationKind) -> bool:
        return self._patterns.is_enabled(kind)

    def _track_test_scope(
        self, scope: _TestScope, lines: Sequence[str], index: int, line: str
    ) -> None:
        stripped = line.strip()
        if "#[cfg(test)]" in stripped:
            if "mod " in stripped:
                scope.module_end = max(scope.module_end, self._block_end(lines, index))
            else:
                scope.next_module_is_test = True
        elif scope.next_module_is_test and MOD_RE.match(line):
            scope.module_end = max(scope.module_end, self._block_end(lines, index))
            scope.next_module_is_test = False
        elif stripped and not stripped.startswith(("#", "///")):
            # cfg(test) applied to something other than a module
            scope.next_module_is_test = False

        if any(attr in stripped for attr in TEST_ATTRIBUTES):
            if self._patterns.function_def.is_match(LEADING_ATTRIBUTES_RE.sub("", line)):
                # #[test] fn t() { ... } on one line
                scope.function_end = max(scope.function_end, self._block_end(lines, index))
                scope.next_function_is_test = False
            else:
                scope.next_function_is_test = True
        elif scope.next_function_is_test and self._patterns.function_def.is_match(line):
            scope.function_end = max(scope.function_end, self._block_end(lines, index))
            scope.next_function_is_test = False
        elif stripped and not stripped.startswith(("#", "///")):
            scope.next_function_is_test = False

    @staticmethod
    def _block_end(lines: Sequence[str], index: int) -> int:
        _, brace_index = FunctionBoundaryScanner.collect_signature(lines, index)
        return FunctionBoundaryScanner.find_function_end(lines, brace_index)

    def _check_file_size(self, path: str, lines: Sequence[str]) -> list[Violation]:
        limit = self._config.max_file_lines
        if not self._enabled(ViolationKind.FILE_TOO_LARGE) or len(lines) <= limit:
            return []
        return [
            Violation(
                kind=ViolationKind.FILE_TOO_LARGE,
                file=path,
                line=len(lines),
                message=f"File has {len(lines)} lines, maximum allowed is {limit}",
                severity=Severity.ERROR,
            )
        ]

    def _check_function(self, path: str, lines: Sequence[str], index: int) -> list[Violation]:
        signature = FunctionBoundaryScanner.locate_function(lines, index)
        if signature is None:
            return []
        found: list[Violation] = []
        rule = self._patterns.function_def
        limit = self._config.max_function_lines
        if self._enabled(ViolationKind.FUNCTION_TOO_LARGE) and signature.length > limit:
            found.append(
                Violation(
                    kind=rule.kind,
                    file=path,
                    line=signature.line_start,
                    message=f"{signature.name}: "
                    + rule.message.format(length=signature.length, limit=limit),
                    severity=rule.severity,
                )
            )
        if self._enabled(ViolationKind.UNDERSCORE_BANDAID) and self._config.ban_underscore_bandaid:
            found.extend(self._check_underscore_params(path, lines, signature))
        return found

    def _check_underscore_params(
        self, path: str, lines: Sequence[str], signature: FunctionSignature
    ) -> list[Violation]:
        """Underscore-prefixed parameters anywhere in a (possibly multi-line) signature."""
        rule = self._patterns.underscore_param
        start = signature.line_start - 1
        text, brace_index = FunctionBoundaryScanner.collect_signature(lines, start)
        match = rule.search(text)
        if match is None:
            return []
        name = match.group(1)
        for index in range(start, brace_index + 1):
            line = lines[index]
            if re.search(rf"\b{re.escape(name)}\s*:", line) and not LexicalClassifier.is_in_string_or_comment(line, name):
                return [
                    Violation(
                        kind=rule.kind,
                        file=path,
                        line=index + 1,
                        message=rule.message.format(name=name),
                        severity=rule.severity,
                    )
                ]
        return []

    def _check_underscore_let(self, path: str, line: str, index: int) -> list[Violation]:
        rule = self._patterns.underscore_let
        if not rule.is_match(line):
            return []
        if LexicalClassifier.is_in_string_or_comment(line, rule.literal or "let"):
            return []
        return [self._violation(rule, path, index)]

    def _check_banned_call(
        self, rule: PatternRule, path: str, line: str, index: int
    ) -> list[Violation]:
        if not self._enabled(rule.kind) or not rule.is_match(line):
            return []
        if LexicalClassifier.is_in_string_or_comment(line, rule.literal or ""):
            return []
        return [self._violation(rule, path, index)]

    def _check_missing_docs(self, path: str, lines: Sequence[str], index: int) -> list[Violation]:
        if not self._enabled(ViolationKind.MISSING_DOCS):
            return []
        match = PUB_ITEM_RE.match(lines[index])
        if match is None or RustFileScanner._has_doc_comment(lines, index):
            return []
        item = match.group(4)
        return [
            Violation(
                kind=ViolationKind.MISSING_DOCS,
                file=path,
                line=index + 1,
                message=f"Public {item} is missing a /// doc comment",
                severity=Severity.WARNING,
            )
        ]

    @staticmethod
    def _has_doc_comment(lines: Sequence[str], index: int) -> bool:
        """
        Walk back over attributes and blank lines to the nearest doc comment.

        Multi-line attributes (``#[derive(`` ... ``)]``) are skipped by
        bracket balance, counted backwards from their closing line.
        """
        depth = 0
        for previous in range(index - 1, -1, -1):
            stripped = lines[previous].strip()
            code = LexicalClassifier.code_only(stripped)
            balance = code.count("]") + code.count(")") - code.count("[") - code.count("(")
            if stripped.startswith("#[doc"):
                return True
            if depth > 0:
                depth = max(depth + balance, 0)
                continue
            if not stripped or stripped.startswith("#["):
                continue
            if balance > 0 and code.rstrip().endswith("]"):
                depth = balance
                continue
            return stripped.startswith("///") or stripped.endswith("*/")
        return False

    def _check_custom_rules(self, path: str, line: str, index: int) -> list[Violation]:
        found: list[Violation] = []
        for rule in self._patterns.custom_rules:
            if not self._enabled(rule.kind):
                continue
            match = rule.search(line)
            if match is None:
                continue
            if LexicalClassifier.is_in_string_or_comment(line, match.group(0)):
                continue
            found.append(
                Violation(
                    kind=rule.kind,
                    file=path,
                    line=index + 1,
                    message=f"{rule.message} [{rule.name}]",
                    severity=rule.severity,
                )
            )
        return found

    @staticmethod
    def _violation(rule: PatternRule, path: str, index: int) -> Violation:
        return Violation(
            kind=rule.kind,
            file=path,
            line=index + 1,
            message=rule.message,
            severity=rule.severity,
        )


class CargoManifestScanner:
    """Line-oriented checks of a Cargo.toml: edition and required dependencies."""

    def __init__(self, config: ConfigurationLoader) -> None:
        self._config = config

    def scan(self, source: SourceFile) -> list[Violation]:
        violations: list[Violation] = []
        if self._config.is_enabled(ViolationKind.WRONG_EDITION):
            violations.extend(self._check_edition(source))
        if self._config.is_enabled(ViolationKind.MISSING_DEPENDENCIES):
            violations.extend(self._check_dependencies(source))
        return sorted(violations, key=lambda v: (v.line, v.kind.ordinal))

    @staticmethod
    def _whole_file_line(lines: Sequence[str]) -> int:
        return 1 if lines else 0

    def _check_edition(self, source: SourceFile) -> list[Violation]:
        allowed = self._config.allowed_editions
        for index, line in enumerate(source.lines):
            stripped = line.strip()
            if not stripped.startswith("edition"):
                continue
            if "workspace" in stripped or any(edition in stripped for edition in allowed):
                return []
            return [
                Violation(
                    kind=ViolationKind.WRONG_EDITION,
                    file=source.path,
                    line=index + 1,
                    message=f"Must use Edition {' or '.join(allowed)}",
                    severity=Severity.ERROR,
                )
            ]
        if not any(line.strip().startswith("[package]") for line in source.lines):
            # Virtual workspace manifests carry no edition of their own.
            return []
        return [
            Violation(
                kind=ViolationKind.WRONG_EDITION,
                file=source.path,
                line=CargoManifestScanner._whole_file_line(source.lines),
                message=f"Missing edition specification - must be {' or '.join(repr(e) for e in allowed)}",
                severity=Severity.ERROR,
            )
        ]

    def _check_dependencies(self, source: SourceFile) -> list[Violation]:
        required = self._config.required_dependencies
        if not required:
            return []
        declared = CargoManifestScanner.declared_dependencies(source.lines)
        return [
            Violation(
                kind=ViolationKind.MISSING_DEPENDENCIES,
                file=source.path,
                line=CargoManifestScanner._whole_file_line(source.lines),
                message=f"Missing required dependency '{name}'",
                severity=Severity.ERROR,
            )
            for name in required
            if name not in declared
        ]

    @staticmethod
    def declared_dependencies(lines: Sequence[str]) -> set[str]:
        """Crate names from every ``[*dependencies]`` table, inline or dotted-header form."""
        declared: set[str] = set()
        in_dependencies = False
        for line in lines:
            stripped = line.split("#", 1)[0].strip()
            if stripped.startswith("["):
                header = stripped.strip("[]").strip()
                in_dependencies = header.endswith("dependencies")
                if ".dependencies." in f".{header}" or header.startswith("dependencies."):
                    declared.add(header.rsplit(".", 1)[-1].strip('"'))
                continue
            if in_dependencies and "=" in stripped:
                declared.add(stripped.split("=", 1)[0].strip().strip('"').split(".", 1)[0])
        return declared
