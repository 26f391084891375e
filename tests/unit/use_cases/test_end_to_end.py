"""End-to-end: real files on disk, real gateway, scan then analyze."""

from pathlib import Path
from unittest.mock import MagicMock

from rust_compliance_scanner.domain.config import ConfigurationLoader
from rust_compliance_scanner.domain.entities import Severity, ViolationKind
from rust_compliance_scanner.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from rust_compliance_scanner.infrastructure.services.guidance_service import GuidanceService
from rust_compliance_scanner.use_cases.analyze_violations import AnalyzeViolationsUseCase
from rust_compliance_scanner.use_cases.scan_project import ScanProjectUseCase

UNWRAP_LINE = 33


def write_process_file(root: Path) -> None:
    """A 60-line `process` function with one `.unwrap()` on UNWRAP_LINE."""
    lines = ["use std::fs;", "", "fn process() -> Result<String, std::io::Error> {"]
    while len(lines) < 60:
        number = len(lines) + 1
        if number == UNWRAP_LINE:
            lines.append('    let text = fs::read_to_string("input.txt").unwrap();')
        else:
            lines.append(f"    let step_{number} = {number};")
    lines.append("    Ok(String::new())")
    lines.append("}")
    (root / "src").mkdir()
    (root / "src" / "main.rs").write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_sixty_line_function_with_one_unwrap(tmp_path: Path) -> None:
    write_process_file(tmp_path)
    config = ConfigurationLoader({"require_documentation": False, "max_function_lines": 80})
    result = ScanProjectUseCase(config, FileSystemGateway(), MagicMock()).execute(str(tmp_path))

    assert len(result.violations) == 1
    violation = result.violations[0]
    assert violation.kind is ViolationKind.UNWRAP_IN_PRODUCTION
    assert violation.line == UNWRAP_LINE
    assert violation.severity is Severity.ERROR
    assert violation.file == "src/main.rs"

    analyses = AnalyzeViolationsUseCase(config.patterns, GuidanceService()).execute(
        result.violations, result.sources
    )
    context = analyses[0].context
    assert context is not None
    assert context.function_name == "process"
    assert context.is_async is False
    assert context.returns_result is True
    assert context.return_type == "Result<String, std::io::Error>"
    assert context.imports == ["use std::fs;"]
    assert analyses[0].priority == 1


def test_sixty_line_function_exceeds_default_limit(tmp_path: Path) -> None:
    write_process_file(tmp_path)
    config = ConfigurationLoader({"require_documentation": False})
    result = ScanProjectUseCase(config, FileSystemGateway(), MagicMock()).execute(str(tmp_path))
    assert [(v.kind, v.line) for v in result.violations] == [
        (ViolationKind.FUNCTION_TOO_LARGE, 3),
        (ViolationKind.UNWRAP_IN_PRODUCTION, UNWRAP_LINE),
    ]
    assert "60 lines" in result.violations[0].message
