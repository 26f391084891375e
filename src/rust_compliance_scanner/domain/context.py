"""Context extractor: what code surrounds a violation line."""

from typing import Optional, Sequence

from rust_compliance_scanner.domain.boundaries import FunctionBoundaryScanner
from rust_compliance_scanner.domain.entities import CodeContext, ErrorHandlingStyle
from rust_compliance_scanner.domain.patterns import PatternLibrary

CONTEXT_RADIUS = 10


class ContextExtractor:
    """
    Builds a CodeContext for one (file, line) query.

    Only invoked for lines that already produced a violation; every lookup
    is a reverse walk over the flat line list.
    """

    def __init__(self, patterns: PatternLibrary) -> None:
        self._patterns = patterns

    def extract_code_context(self, line_number: int, content: str) -> CodeContext:
        """Context for 1-based ``line_number`` within ``content``."""
        lines = content.splitlines()
        return self.extract_from_lines(line_number, lines, content)

    def extract_from_lines(
        self, line_number: int, lines: Sequence[str], content: str
    ) -> CodeContext:
        target = min(max(line_number, 1), max(len(lines), 1)) - 1
        window_start = max(0, target - CONTEXT_RADIUS)
        window_end = min(len(lines), target + CONTEXT_RADIUS + 1)
        surrounding = list(lines[window_start:window_end])

        imports = ContextExtractor.extract_imports(lines)
        name, signature, return_type = self.extract_function_info(lines, target)
        returns_result, returns_option = (
            FunctionBoundaryScanner.check_return_types(signature) if signature else (False, False)
        )
        return CodeContext(
            function_name=name,
            function_signature=signature,
            return_type=return_type,
            is_async=bool(signature and "async" in signature),
            is_generic=bool(signature and "<" in signature),
            trait_impl=ContextExtractor.detect_trait_impl(lines, target),
            surrounding_code=surrounding,
            imports=imports,
            error_handling_style=ContextExtractor.detect_error_handling_style(imports, content),
            returns_result=returns_result,
            returns_option=returns_option,
        )

    @staticmethod
    def extract_imports(lines: Sequence[str]) -> list[str]:
        return [line.strip() for line in lines if line.strip().startswith("use ")]

    def extract_function_info(
        self, lines: Sequence[str], target_index: int
    ) -> tuple[Optional[str], Optional[str], Optional[str]]:
        """Name, joined signature and return type of the nearest preceding function."""
        function_def = self._patterns.function_def
        for index in range(min(target_index, len(lines) - 1), -1, -1):
            if function_def.is_match(lines[index]):
                signature, _ = FunctionBoundaryScanner.collect_signature(lines, index)
                return (
                    FunctionBoundaryScanner.extract_function_name(signature),
                    signature,
                    FunctionBoundaryScanner.extract_return_type(signature),
                )
        return None, None, None

    @staticmethod
    def detect_trait_impl(lines: Sequence[str], target_index: int) -> Optional[str]:
        """Nearest preceding line mentioning both ``impl`` and ``for``."""
        for index in range(min(target_index, len(lines) - 1), -1, -1):
            line = lines[index]
            if "impl" in line and "for" in line:
                return line.strip()
        return None

    @staticmethod
    def detect_error_handling_style(imports: Sequence[str], content: str) -> ErrorHandlingStyle:
        """First match wins; the order is what makes the label deterministic."""
        if any("anyhow" in item for item in imports) or "anyhow::Result" in content:
            return ErrorHandlingStyle.ANYHOW_RESULT
        if "Result<" in content and "std::result::Result" not in content:
            return ErrorHandlingStyle.CUSTOM_RESULT
        if "Result<" in content:
            return ErrorHandlingStyle.STD_RESULT
        if "Option<" in content:
            return ErrorHandlingStyle.OPTION_BASED
        if "panic!" in content or ".unwrap()" in content:
            return ErrorHandlingStyle.PANIC
        return ErrorHandlingStyle.UNKNOWN
