"""Report renderers: rich terminal tables, markdown and JSON documents."""

import json
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional, TypedDict

from rich.console import Console
from rich.table import Table

from rust_compliance_scanner.domain.constants import FULL_COMPLIANCE_MESSAGE, TOOL_NAME, VERSION
from rust_compliance_scanner.domain.entities import (
    FixReport,
    ScanResult,
    Severity,
    ViolationAnalysis,
    ViolationKind,
)
from rust_compliance_scanner.infrastructure.services.guidance_service import GuidanceService


class ReportClock:
    """Report timestamps. No top-level functions."""

    @staticmethod
    def now_iso() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="seconds")


class FileResultRow(TypedDict):
    """Row for by-file view: file path, total count, kind breakdown."""

    file: str
    total: int
    breakdown: str


class KindResultRow(TypedDict):
    """Row for by-kind view: kind tag, count, priority and fix label."""

    kind: str
    count: int
    priority: int
    fix: str


class TerminalScanReporter:
    """Terminal reporter using rich tables."""

    def __init__(self, guidance_service: GuidanceService, console: Optional[Console] = None) -> None:
        self._guidance = guidance_service
        self.console = console or Console()

    def report_scan(self, scan_result: ScanResult, view: str = "by_kind") -> None:
        """Print the violation tables and the compliance banner. view: 'by_kind' or 'by_file'."""
        summary = scan_result.summary
        if scan_result.has_violations():
            if view == "by_file":
                self._print_by_file(scan_result)
            else:
                self._print_by_kind(scan_result)
            self._print_details(scan_result)

        self.console.print()
        if summary.is_compliant:
            self.console.print(f"[bold green]✅ {FULL_COMPLIANCE_MESSAGE}[/]")
        else:
            self.console.print(
                f"[bold red]❌ Found {summary.total_violations} violations "
                f"in {summary.files_with_violations} of {summary.files_scanned} files[/]"
            )
        self.console.print(f"Compliance: [bold]{summary.compliance_percentage:.1f}%[/]")

    def report_fixes(self, report: FixReport) -> None:
        """Print applied and skipped fixes, then the totals."""
        prefix = "Would fix" if report.dry_run else "Fixed"
        if report.applied:
            table = Table(title=f"[RUST] {prefix}", header_style="bold dark_orange")
            table.add_column("Location", style="cyan", no_wrap=True)
            table.add_column("Kind")
            table.add_column("Change")
            for fix in report.applied:
                table.add_row(f"{fix.file}:{fix.line}", fix.kind.value, fix.description)
            self.console.print(table)
        if report.skipped:
            table = Table(title="Skipped (manual review)", header_style="bold")
            table.add_column("Location", style="cyan", no_wrap=True)
            table.add_column("Kind")
            table.add_column("Reason", style="yellow")
            for skipped in report.skipped:
                violation = skipped.violation
                table.add_row(f"{violation.file}:{violation.line}", violation.kind.value, skipped.reason)
            self.console.print(table)

        self.console.print()
        verb = "would be" if report.dry_run else "were"
        self.console.print(
            f"[bold]{len(report.applied)}[/] violations {verb} fixed, "
            f"[bold]{len(report.skipped)}[/] skipped, "
            f"[bold]{len(report.files_modified)}[/] files {verb} modified"
        )

    def kind_rows(self, scan_result: ScanResult) -> list[KindResultRow]:
        rows: list[KindResultRow] = []
        for tag, count in scan_result.summary.counts_by_kind.items():
            kind = ViolationKind.from_tag(tag)
            rows.append(
                {
                    "kind": tag,
                    "count": count,
                    "priority": self._guidance.priority(kind),
                    "fix": "✅ Auto" if self._guidance.is_auto_fixable(kind) else "⚠️ Manual",
                }
            )
        return sorted(rows, key=lambda r: (r["priority"], -r["count"], r["kind"]))

    @staticmethod
    def file_rows(scan_result: ScanResult) -> list[FileResultRow]:
        by_file: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for violation in scan_result.violations:
            by_file[violation.file][violation.kind.value] += 1
        rows: list[FileResultRow] = []
        for file, counts in by_file.items():
            breakdown = ", ".join(
                f"{tag}({n})" for tag, n in sorted(counts.items(), key=lambda x: (-x[1], x[0]))
            )
            rows.append({"file": file, "total": sum(counts.values()), "breakdown": breakdown})
        return sorted(rows, key=lambda r: (-r["total"], r["file"]))

    def _print_by_kind(self, scan_result: ScanResult) -> None:
        table = Table(title="[RUST] Compliance Scan", header_style="bold dark_orange")
        table.add_column("Kind", style="cyan")
        table.add_column("Count", style="bold blue", justify="right")
        table.add_column("Priority", justify="right")
        table.add_column("Fix?")
        for row in self.kind_rows(scan_result):
            table.add_row(row["kind"], str(row["count"]), str(row["priority"]), row["fix"])
        self.console.print(table)

    def _print_by_file(self, scan_result: ScanResult) -> None:
        table = Table(title="[RUST] Compliance Scan (by file)", header_style="bold dark_orange")
        table.add_column("File", style="cyan")
        table.add_column("Total", style="bold blue", justify="right")
        table.add_column("Kinds")
        for row in TerminalScanReporter.file_rows(scan_result):
            table.add_row(row["file"], str(row["total"]), row["breakdown"])
        self.console.print(table)

    def _print_details(self, scan_result: ScanResult) -> None:
        table = Table(title="Violations", header_style="bold")
        table.add_column("Location", style="cyan", no_wrap=True)
        table.add_column("Kind")
        table.add_column("Severity")
        table.add_column("Message")
        for violation in scan_result.violations:
            color = "red" if violation.severity is Severity.ERROR else "yellow"
            table.add_row(
                f"{violation.file}:{violation.line}",
                violation.kind.value,
                f"[{color}]{violation.severity.value}[/]",
                violation.message,
            )
        self.console.print(table)


class MarkdownReportRenderer:
    """Markdown document: totals, priority order and a section per violation kind."""

    def __init__(self, guidance_service: GuidanceService) -> None:
        self._guidance = guidance_service

    def render(
        self,
        scan_result: ScanResult,
        analyses: Optional[list[ViolationAnalysis]] = None,
        generated_at: Optional[str] = None,
    ) -> str:
        summary = scan_result.summary
        lines = [
            "# Rust Compliance Report",
            "",
            f"**Generated**: {generated_at or ReportClock.now_iso()}",
            f"**Project**: {scan_result.root}",
            f"**Total Violations**: {summary.total_violations}",
            f"**Compliance**: {summary.compliance_percentage:.1f}%",
            "",
        ]
        if summary.is_compliant:
            lines.append(FULL_COMPLIANCE_MESSAGE)
            return "\n".join(lines) + "\n"

        present = set(summary.counts_by_kind)
        ordered = [tag for tag in self._guidance.priority_order() if tag in present]
        ordered += sorted(present - set(ordered))

        lines += ["## Fix Priority Order", ""]
        for position, tag in enumerate(ordered, start=1):
            entry = self._guidance.get_entry(ViolationKind.from_tag(tag))
            lines.append(f"{position}. **{tag}** - {entry.get('suggested_fix', '')}")
        lines.append("")

        lines += ["## Violation Summary", ""]
        for tag in ordered:
            entry = self._guidance.get_entry(ViolationKind.from_tag(tag))
            lines.append(f"### {tag} ({summary.counts_by_kind[tag]} violations)")
            lines.append("")
            if entry.get("fix_strategy"):
                lines += ["**Strategy**:", "", str(entry["fix_strategy"]), ""]
            if entry.get("example_fix"):
                lines += ["**Example**:", "```rust", str(entry["example_fix"]), "```", ""]
            for violation in scan_result.violations:
                if violation.kind.value == tag:
                    lines.append(f"- `{violation.file}:{violation.line}` {violation.message}")
            lines.append("")

        if analyses:
            contexts = [(a, a.context) for a in analyses if a.context is not None]
            if contexts:
                lines += ["## Context", ""]
                for analysis, context in contexts:
                    where = context.function_name or "<module>"
                    lines.append(
                        f"- `{analysis.violation.file}:{analysis.violation.line}` in `{where}` "
                        f"({context.error_handling_style.value}), "
                        f"fix confidence {analysis.confidence:.0%}"
                    )
                    lines += [f"  - side effect: {effect}" for effect in analysis.side_effects]
                lines.append("")
        return "\n".join(lines)


class JsonReportRenderer:
    """JSON document: metadata, summary and one record per violation."""

    def __init__(self, guidance_service: GuidanceService) -> None:
        self._guidance = guidance_service

    def build(
        self,
        scan_result: ScanResult,
        analyses: Optional[list[ViolationAnalysis]] = None,
        generated_at: Optional[str] = None,
    ) -> dict[str, object]:
        summary = scan_result.summary
        if analyses is None:
            records = []
            for violation in scan_result.violations:
                record = violation.to_dict()
                record["suggested_fix"] = self._guidance.suggested_fix(violation.kind)
                record["priority"] = self._guidance.priority(violation.kind)
                records.append(record)
        else:
            records = [analysis.to_dict() for analysis in analyses]
        return {
            "metadata": {
                "timestamp": generated_at or ReportClock.now_iso(),
                "project_path": scan_result.root,
                "tool": TOOL_NAME,
                "tool_version": VERSION,
                "total_files": summary.files_scanned,
                "total_violations": summary.total_violations,
            },
            "summary": summary.to_dict(),
            "violations": records,
        }

    def render(
        self,
        scan_result: ScanResult,
        analyses: Optional[list[ViolationAnalysis]] = None,
        generated_at: Optional[str] = None,
    ) -> str:
        return json.dumps(self.build(scan_result, analyses, generated_at), indent=2)
