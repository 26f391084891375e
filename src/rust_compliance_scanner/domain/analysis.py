"""Domain analysis: how confidently a violation can be fixed, and what the fix touches.

Pure domain logic, no I/O. The verdicts agree with FixStrategies: a kind is
only auto-fixable where the fixer would actually rewrite the line.
"""

from dataclasses import dataclass
from typing import Optional

from rust_compliance_scanner.domain.entities import FunctionSignature, ViolationKind
from rust_compliance_scanner.domain.fixes import FixStrategies

SIGNATURE_CHANGE_EFFECTS: tuple[str, ...] = (
    "Function signature change required",
    "All callers must be updated",
)
SPLIT_FUNCTION_EFFECTS: tuple[str, ...] = (
    "May require creating new helper functions",
    "Could affect function testing",
)


@dataclass(frozen=True)
class FixAssessment:
    """Fixability verdict; ``suggested_fix`` None defers to the guidance text."""

    auto_fixable: bool
    confidence: float
    suggested_fix: Optional[str] = None
    side_effects: tuple[str, ...] = ()


class FixAssessor:
    """Scores one violation from its kind, enclosing function and source line."""

    @staticmethod
    def assess(
        kind: ViolationKind,
        function: Optional[FunctionSignature] = None,
        line: Optional[str] = None,
    ) -> FixAssessment:
        if kind is ViolationKind.UNWRAP_IN_PRODUCTION:
            return FixAssessor.assess_unwrap(function, line)
        if kind is ViolationKind.UNDERSCORE_BANDAID:
            return FixAssessor.assess_underscore(line)
        if kind is ViolationKind.LINE_TOO_LONG:
            return FixAssessment(
                False, 1.0, "Break line at appropriate point (e.g., after comma, operator)"
            )
        if kind is ViolationKind.FUNCTION_TOO_LARGE:
            return FixAssessment(False, 0.3, side_effects=SPLIT_FUNCTION_EFFECTS)
        if kind is ViolationKind.FILE_TOO_LARGE:
            return FixAssessment(False, 0.2)
        return FixAssessment(False, 0.0)

    @staticmethod
    def assess_unwrap(
        function: Optional[FunctionSignature], line: Optional[str]
    ) -> FixAssessment:
        """
        ``?`` only works inside a function returning Result or Option.

        Anywhere else the fix starts with a signature change, so it is manual.
        """
        if function is None or not FixStrategies.can_propagate(function):
            where = f"`{function.name}`" if function is not None else "the enclosing function"
            return FixAssessment(
                auto_fixable=False,
                confidence=0.75,
                suggested_fix=f"Change the return type of {where} to Result and use ?",
                side_effects=SIGNATURE_CHANGE_EFFECTS,
            )
        rewritable = line is None or FixStrategies.propagate_errors(line).applicable
        if function.returns_result:
            return FixAssessment(
                auto_fixable=rewritable,
                confidence=0.95 if rewritable else 0.65,
                suggested_fix=f"Use ? operator; `{function.name}` already returns Result",
            )
        return FixAssessment(
            auto_fixable=rewritable,
            confidence=0.85 if rewritable else 0.6,
            suggested_fix=f"Use ? operator; `{function.name}` returns Option, so None propagates",
        )

    @staticmethod
    def assess_underscore(line: Optional[str]) -> FixAssessment:
        if line is not None and FixStrategies.remove_discard(line).applicable:
            return FixAssessment(True, 0.85, "Remove the discarded binding")
        if line is not None and line.lstrip().startswith("let"):
            return FixAssessment(
                False, 0.5, "Handle the value instead of discarding it with `let _ =`"
            )
        return FixAssessment(
            auto_fixable=False,
            confidence=0.6,
            suggested_fix="Either use the parameter or remove it from function signature",
            side_effects=SIGNATURE_CHANGE_EFFECTS,
        )
