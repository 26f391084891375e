"""Domain entities: violations, signatures, code context and scan summaries."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Severity(Enum):
    """Severity level of a violation."""
    ERROR = "Error"
    WARNING = "Warning"


class ViolationKind(Enum):
    """
    Stable violation tags.

    Reports and tests key on the values; new kinds are only ever appended so
    the declaration order (used for tie-breaking) never shifts.
    """
    UNDERSCORE_BANDAID = "UnderscoreBandaid"
    WRONG_EDITION = "WrongEdition"
    FILE_TOO_LARGE = "FileTooLarge"
    FUNCTION_TOO_LARGE = "FunctionTooLarge"
    LINE_TOO_LONG = "LineTooLong"
    UNWRAP_IN_PRODUCTION = "UnwrapInProduction"
    MISSING_DOCS = "MissingDocs"
    MISSING_DEPENDENCIES = "MissingDependencies"
    OLD_RUST_VERSION = "OldRustVersion"
    CUSTOM_PATTERN = "CustomPattern"

    @property
    def ordinal(self) -> int:
        """Position in declaration order."""
        return _KIND_ORDER[self]

    @classmethod
    def from_tag(cls, tag: str) -> "ViolationKind":
        """Resolve a stable tag ("UnwrapInProduction") or member name."""
        for kind in cls:
            if tag in (kind.value, kind.name):
                return kind
        raise ValueError(f"Unknown violation kind: {tag!r}")


_KIND_ORDER: dict[ViolationKind, int] = {kind: i for i, kind in enumerate(ViolationKind)}


class ErrorHandlingStyle(Enum):
    """Dominant error-handling idiom of a file."""
    ANYHOW_RESULT = "AnyhowResult"
    CUSTOM_RESULT = "CustomResult"
    STD_RESULT = "StdResult"
    OPTION_BASED = "OptionBased"
    PANIC = "Panic"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Violation:
    """A single standards violation tied to a file and a 1-based line."""

    kind: ViolationKind
    file: str
    line: int
    message: str
    severity: Severity

    def sort_key(self) -> tuple[str, int, int]:
        """Deterministic ordering: file, line, then kind declaration order."""
        return (self.file, self.line, self.kind.ordinal)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "file": self.file,
            "line": self.line,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class FunctionSignature:
    """Located function: name, 1-based start/end lines and return markers."""

    name: str
    line_start: int
    line_end: int
    returns_result: bool
    returns_option: bool

    @property
    def length(self) -> int:
        return self.line_end - self.line_start + 1


@dataclass(frozen=True)
class CodeContext:
    """Read-only description of the code surrounding one violation line."""

    function_name: Optional[str]
    function_signature: Optional[str]
    return_type: Optional[str]
    is_async: bool
    is_generic: bool
    trait_impl: Optional[str]
    surrounding_code: list[str]
    imports: list[str]
    error_handling_style: ErrorHandlingStyle
    returns_result: bool = False
    returns_option: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "function_name": self.function_name,
            "function_signature": self.function_signature,
            "return_type": self.return_type,
            "is_async": self.is_async,
            "is_generic": self.is_generic,
            "returns_result": self.returns_result,
            "returns_option": self.returns_option,
            "trait_impl": self.trait_impl,
            "surrounding_code": list(self.surrounding_code),
            "imports": list(self.imports),
            "error_handling_style": self.error_handling_style.value,
        }


@dataclass(frozen=True)
class SourceFile:
    """A file buffered once: path, full content and its line list."""

    path: str
    content: str
    lines: list[str] = field(default_factory=list)

    @classmethod
    def from_text(cls, path: str, content: str) -> "SourceFile":
        return cls(path=path, content=content, lines=content.splitlines())

    @property
    def is_manifest(self) -> bool:
        return self.path.replace("\\", "/").rsplit("/", 1)[-1] == "Cargo.toml"


@dataclass(frozen=True)
class ScanSummary:
    """Project-wide aggregate of one scan."""

    total_violations: int
    counts_by_kind: dict[str, int]
    files_scanned: int
    files_with_violations: int
    compliance_percentage: float

    @property
    def is_compliant(self) -> bool:
        return self.total_violations == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_violations": self.total_violations,
            "counts_by_kind": dict(self.counts_by_kind),
            "files_analyzed": self.files_scanned,
            "files_with_violations": self.files_with_violations,
            "compliance_percentage": self.compliance_percentage,
        }


@dataclass(frozen=True)
class ScanResult:
    """Result of a complete project scan."""

    root: str
    violations: list[Violation]
    summary: ScanSummary
    sources: dict[str, SourceFile] = field(default_factory=dict)

    def has_violations(self) -> bool:
        """Check if any violations were found."""
        return bool(self.violations)


@dataclass(frozen=True)
class ViolationAnalysis:
    """A violation with its lazily computed context and fix guidance."""

    violation: Violation
    context: Optional[CodeContext]
    suggested_fix: str
    auto_fixable: bool
    priority: int
    confidence: float = 0.0
    side_effects: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = self.violation.to_dict()
        data["suggested_fix"] = self.suggested_fix
        data["auto_fixable"] = self.auto_fixable
        data["priority"] = self.priority
        data["confidence"] = self.confidence
        data["side_effects"] = list(self.side_effects)
        if self.context is not None:
            data["context"] = self.context.to_dict()
        return data


@dataclass(frozen=True)
class AppliedFix:
    """One line rewritten (or removed) by the fixer."""

    file: str
    line: int
    kind: ViolationKind
    original: str
    replacement: Optional[str]
    description: str

    @property
    def removes_line(self) -> bool:
        return self.replacement is None


@dataclass(frozen=True)
class SkippedFix:
    """A fixable-kind violation the fixer declined, with the reason."""

    violation: Violation
    reason: str


@dataclass(frozen=True)
class FixReport:
    """Outcome of one fix run; nothing is written when ``dry_run`` is set."""

    applied: list[AppliedFix]
    skipped: list[SkippedFix]
    files_modified: list[str]
    dry_run: bool = False
