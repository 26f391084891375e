"""Function-boundary scanner: multi-line signature assembly and brace-depth end detection."""

from typing import Optional, Sequence

from rust_compliance_scanner.domain.entities import FunctionSignature
from rust_compliance_scanner.domain.lexical import LexicalClassifier

RESULT_MARKERS: tuple[str, ...] = (
    "-> Result",
    "-> anyhow::Result",
    "-> std::result::Result",
    "-> io::Result",
)
OPTION_MARKER = "-> Option"


class FunctionBoundaryScanner:
    """
    Locates a function starting at a definition line.

    Return-type detection is textual: an alias such as ``-> MyResult<T>`` is
    not recognised as a Result. Unbalanced input never raises; the last
    scanned line becomes the end.
    """

    @staticmethod
    def locate_function(lines: Sequence[str], start_index: int) -> Optional[FunctionSignature]:
        """Full signature plus the line holding the balancing closing brace."""
        if not 0 <= start_index < len(lines):
            return None
        signature, brace_index = FunctionBoundaryScanner.collect_signature(lines, start_index)
        name = FunctionBoundaryScanner.extract_function_name(signature)
        if name is None:
            return None
        returns_result, returns_option = FunctionBoundaryScanner.check_return_types(signature)
        end_index = FunctionBoundaryScanner.find_function_end(lines, brace_index)
        return FunctionSignature(
            name=name,
            line_start=start_index + 1,
            line_end=end_index + 1,
            returns_result=returns_result,
            returns_option=returns_option,
        )

    @staticmethod
    def collect_signature(lines: Sequence[str], start_index: int) -> tuple[str, int]:
        """
        Join lines from ``start_index`` through the first one holding ``{``.

        Returns the whitespace-joined signature and the index of the brace line.
        A bodiless declaration stops at its ``;`` line; running out of input
        stops at the last line.
        """
        parts: list[str] = []
        index = start_index
        while index < len(lines):
            code = LexicalClassifier.code_only(lines[index])
            parts.append(lines[index].strip())
            if "{" in code:
                break
            if code.rstrip().endswith(";"):
                break
            index += 1
        index = min(index, len(lines) - 1)
        return " ".join(part for part in parts if part), index

    @staticmethod
    def extract_function_name(signature: str) -> Optional[str]:
        """Text after the first ``fn `` up to ``(`` or ``<``; None only when there is no ``fn ``."""
        start = signature.find("fn ")
        if start == -1:
            return None
        rest = signature[start + 3:]
        cut = [pos for pos in (rest.find("("), rest.find("<")) if pos != -1]
        name = (rest[:min(cut)] if cut else rest).strip()
        return name or None

    @staticmethod
    def check_return_types(signature: str) -> tuple[bool, bool]:
        returns_result = any(marker in signature for marker in RESULT_MARKERS)
        returns_option = OPTION_MARKER in signature
        return returns_result, returns_option

    @staticmethod
    def extract_return_type(signature: str) -> Optional[str]:
        """Text after ``->`` up to the body brace, ``where`` clause or ``;``."""
        arrow = signature.find("->")
        if arrow == -1:
            return None
        tail = signature[arrow + 2:]
        for stop in ("{", " where ", ";"):
            pos = tail.find(stop)
            if pos != -1:
                tail = tail[:pos]
        return tail.strip() or None

    @staticmethod
    def find_function_end(lines: Sequence[str], brace_index: int) -> int:
        """Index of the line where the brace depth opened on ``brace_index`` returns to 0."""
        if not lines:
            return 0
        code = LexicalClassifier.code_only(lines[brace_index])
        open_at = code.find("{")
        if open_at == -1:
            return brace_index
        depth = 1
        depth = FunctionBoundaryScanner._apply_braces(code[open_at + 1:], depth)
        if depth <= 0:
            return brace_index
        index = brace_index + 1
        while index < len(lines):
            depth = FunctionBoundaryScanner._apply_braces(
                LexicalClassifier.code_only(lines[index]), depth
            )
            if depth <= 0:
                return index
            index += 1
        return len(lines) - 1

    @staticmethod
    def _apply_braces(code: str, depth: int) -> int:
        for ch in code:
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return 0
        return depth
