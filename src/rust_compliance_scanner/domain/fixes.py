"""Fix strategies: mechanical rewrites for unwrap/expect calls and discarded bindings.

Pure domain logic, no I/O. Every rewrite is line-local; anything that would
need a signature change or spans several lines is reported as skipped.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from rust_compliance_scanner.domain.boundaries import FunctionBoundaryScanner
from rust_compliance_scanner.domain.entities import FunctionSignature, Violation, ViolationKind
from rust_compliance_scanner.domain.lexical import LexicalClassifier
from rust_compliance_scanner.domain.patterns import PatternLibrary

FIXABLE_KINDS: tuple[ViolationKind, ...] = (
    ViolationKind.UNWRAP_IN_PRODUCTION,
    ViolationKind.UNDERSCORE_BANDAID,
)
UNWRAP_CALL = ".unwrap()"
EXPECT_OPEN = ".expect("
DISCARD_LET_RE = re.compile(r"^\s*let\s+_\s*=")
SIMPLE_DISCARD_RE = re.compile(r"^\s*let\s+_\s*=\s*(?P<value>[^;]+);\s*$")

NO_PROPAGATION = "Cannot use ? operator - function doesn't return Result/Option"
COMPLEX_EXPECT = "Complex expect pattern - manual review needed"
NOTHING_TO_REWRITE = "No .unwrap() or .expect() call in code on this line"
SIDE_EFFECTS = "`let _ =` binding requires manual review - may have side effects"
MULTI_LINE_DISCARD = "Multi-line `let _ =` binding - manual review needed"
UNUSED_PARAMETER = "Unused parameter requires manual review - callers must change"
LINE_OUT_OF_RANGE = "Line is outside the file"


@dataclass(frozen=True)
class FixPlan:
    """
    What to do with one violation line.

    ``replacement`` None with no ``skip_reason`` removes the line.
    """

    replacement: Optional[str] = None
    description: str = ""
    skip_reason: Optional[str] = None

    @property
    def applicable(self) -> bool:
        return self.skip_reason is None

    @classmethod
    def skip(cls, reason: str) -> "FixPlan":
        return cls(skip_reason=reason)


class FixStrategies:
    """Plans line edits for the fixable kinds. No top-level functions."""

    def __init__(self, patterns: PatternLibrary) -> None:
        self._function_def = patterns.function_def

    def plan(self, lines: Sequence[str], violation: Violation) -> FixPlan:
        """Edit for ``violation`` in ``lines``, or a skip carrying the reason."""
        index = violation.line - 1
        if not 0 <= index < len(lines):
            return FixPlan.skip(LINE_OUT_OF_RANGE)
        line = lines[index]
        if violation.kind is ViolationKind.UNWRAP_IN_PRODUCTION:
            if not FixStrategies.can_propagate(self.enclosing_function(lines, index)):
                return FixPlan.skip(NO_PROPAGATION)
            return FixStrategies.propagate_errors(line)
        if violation.kind is ViolationKind.UNDERSCORE_BANDAID:
            return FixStrategies.remove_discard(line)
        return FixPlan.skip(f"No automatic fix for {violation.kind.value}")

    def enclosing_function(self, lines: Sequence[str], index: int) -> Optional[FunctionSignature]:
        """Innermost function whose body spans ``index``."""
        for start in range(min(index, len(lines) - 1), -1, -1):
            if not self._function_def.is_match(lines[start]):
                continue
            signature = FunctionBoundaryScanner.locate_function(lines, start)
            if signature is not None and signature.line_start <= index + 1 <= signature.line_end:
                return signature
        return None

    @staticmethod
    def can_propagate(function: Optional[FunctionSignature]) -> bool:
        return function is not None and (function.returns_result or function.returns_option)

    @staticmethod
    def propagate_errors(line: str) -> FixPlan:
        """
        Replace every code-level ``.unwrap()`` and ``.expect(..)`` with ``?``.

        The ``expect`` argument is matched by paren depth over the code-only
        text, so parens inside string literals do not count. An argument that
        does not close on the same line skips the whole line.
        """
        code = LexicalClassifier.code_only(line)
        spans = [
            (start, start + len(UNWRAP_CALL))
            for start in LexicalClassifier.occurrences(code, UNWRAP_CALL)
        ]
        for start in LexicalClassifier.occurrences(code, EXPECT_OPEN):
            close = FixStrategies.matching_paren(code, start + len(EXPECT_OPEN) - 1)
            if close is None:
                return FixPlan.skip(COMPLEX_EXPECT)
            spans.append((start, close + 1))
        if not spans:
            return FixPlan.skip(NOTHING_TO_REWRITE)

        kept: list[tuple[int, int]] = []
        for span in sorted(spans):
            # .expect(x.unwrap()) goes away with its argument
            if kept and span[0] < kept[-1][1]:
                continue
            kept.append(span)
        rewritten = line
        for start, end in reversed(kept):
            rewritten = rewritten[:start] + "?" + rewritten[end:]
        count = len(kept)
        return FixPlan(
            replacement=rewritten,
            description=f"Replaced {count} unwrap/expect call{'s' if count > 1 else ''} with ?",
        )

    @staticmethod
    def matching_paren(code: str, open_index: int) -> Optional[int]:
        """Offset of the ``)`` closing the ``(`` at ``open_index``; None if it stays open."""
        depth = 0
        for offset in range(open_index, len(code)):
            ch = code[offset]
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return offset
        return None

    @staticmethod
    def remove_discard(line: str) -> FixPlan:
        """
        Drop a ``let _ = value;`` line whose value is a plain name or literal.

        Anything with a call or field access may run code, so it is skipped.
        Underscore parameters need a signature change and are always skipped.
        """
        if not DISCARD_LET_RE.match(line):
            return FixPlan.skip(UNUSED_PARAMETER)
        match = SIMPLE_DISCARD_RE.match(LexicalClassifier.code_only(line))
        if match is None:
            return FixPlan.skip(MULTI_LINE_DISCARD)
        value = match.group("value")
        if "(" in value or "." in value or "!" in value:
            return FixPlan.skip(SIDE_EFFECTS)
        return FixPlan(replacement=None, description=f"Removed `{line.strip()}`")
