"""Unit tests for AnalyzeViolationsUseCase."""

from unittest.mock import MagicMock, patch

import pytest

from rust_compliance_scanner.domain.entities import SourceFile, ViolationKind
from rust_compliance_scanner.domain.patterns import PatternLibrary
from rust_compliance_scanner.use_cases.analyze_violations import AnalyzeViolationsUseCase
from tests.scanner_test_utils import make_violation

SOURCE = SourceFile.from_text(
    "src/lib.rs", "fn load() -> Result<u8, E> {\n    let v = read().unwrap();\n    Ok(v)\n}\n"
)
PLAIN_SOURCE = SourceFile.from_text(
    "src/main.rs", "fn main() {\n    let v = read().unwrap();\n    println!(\"{}\", v);\n}\n"
)
MANIFEST = SourceFile.from_text("Cargo.toml", '[package]\nedition = "2018"\n')


@pytest.fixture
def guidance() -> MagicMock:
    guidance = MagicMock()
    guidance.suggested_fix.return_value = "use ?"
    guidance.is_auto_fixable.return_value = True
    guidance.priority.return_value = 1
    return guidance


class TestAnalyzeViolationsUseCase:
    def test_attaches_context_and_guidance(self, guidance: MagicMock) -> None:
        violation = make_violation(file="src/lib.rs", line=2)
        analyses = AnalyzeViolationsUseCase(PatternLibrary(), guidance).execute(
            [violation], {"src/lib.rs": SOURCE}
        )
        assert len(analyses) == 1
        analysis = analyses[0]
        assert analysis.violation is violation
        assert analysis.priority == 1
        assert analysis.context is not None
        assert analysis.context.function_name == "load"
        assert analysis.context.returns_result is True
        guidance.priority.assert_called_once_with(ViolationKind.UNWRAP_IN_PRODUCTION)

    def test_unwrap_in_result_function_is_auto_fixable(self, guidance: MagicMock) -> None:
        analysis = AnalyzeViolationsUseCase(PatternLibrary(), guidance).execute(
            [make_violation(file="src/lib.rs", line=2)], {"src/lib.rs": SOURCE}
        )[0]
        assert analysis.auto_fixable is True
        assert analysis.confidence == 0.95
        assert analysis.suggested_fix == "Use ? operator; `load` already returns Result"
        assert analysis.side_effects == ()

    def test_unwrap_without_result_needs_signature_change(self, guidance: MagicMock) -> None:
        analysis = AnalyzeViolationsUseCase(PatternLibrary(), guidance).execute(
            [make_violation(file="src/main.rs", line=2)], {"src/main.rs": PLAIN_SOURCE}
        )[0]
        assert analysis.auto_fixable is False
        assert analysis.confidence == 0.75
        assert analysis.suggested_fix == "Change the return type of `main` to Result and use ?"
        assert analysis.side_effects == (
            "Function signature change required",
            "All callers must be updated",
        )
        assert analysis.to_dict()["side_effects"] == list(analysis.side_effects)

    def test_guidance_can_veto_auto_fix(self, guidance: MagicMock) -> None:
        guidance.is_auto_fixable.return_value = False
        analysis = AnalyzeViolationsUseCase(PatternLibrary(), guidance).execute(
            [make_violation(file="src/lib.rs", line=2)], {"src/lib.rs": SOURCE}
        )[0]
        assert analysis.auto_fixable is False

    def test_kinds_without_a_specific_fix_use_guidance_text(self, guidance: MagicMock) -> None:
        violation = make_violation(file="src/lib.rs", line=1, kind=ViolationKind.FUNCTION_TOO_LARGE)
        analysis = AnalyzeViolationsUseCase(PatternLibrary(), guidance).execute(
            [violation], {"src/lib.rs": SOURCE}
        )[0]
        assert analysis.suggested_fix == "use ?"
        assert analysis.auto_fixable is False
        assert analysis.confidence == 0.3
        assert "May require creating new helper functions" in analysis.side_effects

    def test_manifest_and_unknown_files_get_no_context(self, guidance: MagicMock) -> None:
        violations = [
            make_violation(file="Cargo.toml", line=2, kind=ViolationKind.WRONG_EDITION),
            make_violation(file="src/gone.rs", line=1),
        ]
        analyses = AnalyzeViolationsUseCase(PatternLibrary(), guidance).execute(
            violations, {"Cargo.toml": MANIFEST}
        )
        assert [a.context for a in analyses] == [None, None]
        assert [a.auto_fixable for a in analyses] == [False, False]

    def test_context_is_not_computed_when_disabled(self, guidance: MagicMock) -> None:
        use_case = AnalyzeViolationsUseCase(PatternLibrary(), guidance)
        with patch.object(use_case.extractor, "extract_from_lines") as extract:
            analyses = use_case.execute(
                [make_violation(file="src/lib.rs", line=2)], {"src/lib.rs": SOURCE}, with_context=False
            )
        extract.assert_not_called()
        assert analyses[0].context is None
        assert "context" not in analyses[0].to_dict()
        # fixability still follows the enclosing function
        assert analyses[0].confidence == 0.95

    def test_context_at_any_line(self, guidance: MagicMock) -> None:
        context = AnalyzeViolationsUseCase(PatternLibrary(), guidance).context_at(SOURCE, 3)
        assert context.function_name == "load"
        assert context.return_type == "Result<u8, E>"
