"""Use Case: Analyze Violations - attach code context and fix guidance."""

from typing import Mapping, Optional

from rust_compliance_scanner.domain.analysis import FixAssessment, FixAssessor
from rust_compliance_scanner.domain.context import ContextExtractor
from rust_compliance_scanner.domain.entities import (
    CodeContext,
    SourceFile,
    Violation,
    ViolationAnalysis,
    ViolationKind,
)
from rust_compliance_scanner.domain.fixes import FixStrategies
from rust_compliance_scanner.domain.patterns import PatternLibrary
from rust_compliance_scanner.domain.protocols import GuidanceProtocol


class AnalyzeViolationsUseCase:
    """
    Turn violations into ViolationAnalysis records.

    Context is only computed for lines that already produced a violation,
    from content buffered during the scan. Manifest findings get no context.
    Fixability is always assessed against the enclosing function, whether or
    not the context is attached.
    """

    def __init__(self, patterns: PatternLibrary, guidance: GuidanceProtocol) -> None:
        self.extractor = ContextExtractor(patterns)
        self.fixes = FixStrategies(patterns)
        self.guidance = guidance

    def execute(
        self,
        violations: list[Violation],
        sources: Mapping[str, SourceFile],
        with_context: bool = True,
    ) -> list[ViolationAnalysis]:
        analyses: list[ViolationAnalysis] = []
        for violation in violations:
            source = sources.get(violation.file)
            context = self.context_for(violation, source) if with_context else None
            assessment = self.assess(violation, source)
            analyses.append(
                ViolationAnalysis(
                    violation=violation,
                    context=context,
                    suggested_fix=(
                        assessment.suggested_fix or self.guidance.suggested_fix(violation.kind)
                    ),
                    auto_fixable=(
                        assessment.auto_fixable and self.guidance.is_auto_fixable(violation.kind)
                    ),
                    priority=self.guidance.priority(violation.kind),
                    confidence=assessment.confidence,
                    side_effects=assessment.side_effects,
                )
            )
        return analyses

    def assess(self, violation: Violation, source: Optional[SourceFile]) -> FixAssessment:
        if source is None or source.is_manifest or not 1 <= violation.line <= len(source.lines):
            return FixAssessor.assess(violation.kind)
        index = violation.line - 1
        function = (
            self.fixes.enclosing_function(source.lines, index)
            if violation.kind is ViolationKind.UNWRAP_IN_PRODUCTION
            else None
        )
        return FixAssessor.assess(violation.kind, function, source.lines[index])

    def context_at(self, source: SourceFile, line_number: int) -> CodeContext:
        """Context for an arbitrary 1-based line, violation or not."""
        return self.extractor.extract_from_lines(line_number, source.lines, source.content)

    def context_for(
        self, violation: Violation, source: Optional[SourceFile]
    ) -> Optional[CodeContext]:
        if source is None or source.is_manifest or not source.lines:
            return None
        return self.extractor.extract_from_lines(violation.line, source.lines, source.content)
