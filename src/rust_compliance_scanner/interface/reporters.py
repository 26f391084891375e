"""Interface for scan reporting."""

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from rust_compliance_scanner.domain.entities import FixReport, ScanResult, ViolationAnalysis


class ScanReporter(Protocol):
    """Protocol for reporting scan results to the operator."""

    def report_scan(self, scan_result: "ScanResult", view: str = "by_kind") -> None:
        """Report scan results to the user."""
        ...

    def report_fixes(self, report: "FixReport") -> None:
        """Report what the fix command changed (or would change)."""
        ...


class ReportRenderer(Protocol):
    """Protocol for rendering a scan result into a document (markdown, JSON)."""

    def render(
        self,
        scan_result: "ScanResult",
        analyses: Optional[list["ViolationAnalysis"]] = None,
    ) -> str:
        """Return the full report text."""
        ...
