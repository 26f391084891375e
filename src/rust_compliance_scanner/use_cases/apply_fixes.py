"""Use Case: Apply Fixes - rewrite fixable violations in the source files."""

from typing import Iterable, Optional

from rust_compliance_scanner.domain.config import ConfigurationLoader
from rust_compliance_scanner.domain.entities import (
    AppliedFix,
    FixReport,
    SkippedFix,
    SourceFile,
    Violation,
    ViolationKind,
)
from rust_compliance_scanner.domain.fixes import FIXABLE_KINDS, FixStrategies
from rust_compliance_scanner.domain.protocols import FileSystemProtocol, TelemetryPort
from rust_compliance_scanner.use_cases.scan_project import ScanProjectUseCase

SHARED_LINE = "Line already rewritten by another fix"


class ApplyFixesUseCase:
    """
    Scan the target, plan one edit per fixable line, and write each changed file once.

    The scan applies the same exemptions as ``check`` (tests, allow attributes,
    disabled kinds), so only violations ``check`` reports are ever touched.
    """

    def __init__(
        self,
        config_loader: ConfigurationLoader,
        filesystem: FileSystemProtocol,
        telemetry: TelemetryPort,
        dry_run: bool = False,
    ) -> None:
        self.config_loader = config_loader
        self.filesystem = filesystem
        self.telemetry = telemetry
        self.dry_run = dry_run
        self.scan_project = ScanProjectUseCase(config_loader, filesystem, telemetry)
        self.strategies = FixStrategies(config_loader.patterns)

    def execute(
        self,
        target_path: str,
        only: Optional[Iterable[ViolationKind]] = None,
        skip: Optional[Iterable[ViolationKind]] = None,
    ) -> FixReport:
        """
        Fix every selected violation under target_path.

        Args:
            target_path: Project root (or a single file)
            only: Restrict fixing to these kinds
            skip: Never fix these kinds

        Returns:
            FixReport with applied and skipped fixes and the files changed.
            With ``dry_run`` the report is identical but nothing is written.
        """
        kinds = self.select_kinds(only, skip)
        self.telemetry.step(f"🔧 Starting Fix Logic on {target_path}")
        scan_result = self.scan_project.execute(target_path)
        single_file = not self.filesystem.is_directory(scan_result.root)

        by_file: dict[str, list[Violation]] = {}
        for violation in scan_result.violations:
            if violation.kind in kinds:
                by_file.setdefault(violation.file, []).append(violation)

        applied: list[AppliedFix] = []
        skipped: list[SkippedFix] = []
        modified: list[str] = []
        for rel_path in sorted(by_file):
            source = scan_result.sources[rel_path]
            file_applied, file_skipped = self.plan_file(source, by_file[rel_path])
            skipped.extend(file_skipped)
            if not file_applied:
                continue
            if not self.dry_run:
                target = (
                    scan_result.root
                    if single_file
                    else self.filesystem.join_path(scan_result.root, rel_path)
                )
                try:
                    self.filesystem.write_text(target, ApplyFixesUseCase.apply_edits(source, file_applied))
                except OSError as exc:
                    self.telemetry.error(f"file={rel_path} status=failed error={exc}")
                    continue
            status = "dry-run" if self.dry_run else "success"
            self.telemetry.step(f"file={rel_path} status={status} fixes={len(file_applied)}")
            applied.extend(file_applied)
            modified.append(rel_path)

        label = "Files that would be repaired" if self.dry_run else "Files repaired"
        self.telemetry.step(f"🛠️ Fix Suite complete. {label}: {len(modified)}")
        return FixReport(
            applied=applied, skipped=skipped, files_modified=modified, dry_run=self.dry_run
        )

    def select_kinds(
        self,
        only: Optional[Iterable[ViolationKind]],
        skip: Optional[Iterable[ViolationKind]],
    ) -> frozenset[ViolationKind]:
        requested = set(only) if only else set(FIXABLE_KINDS)
        for kind in sorted(requested - set(FIXABLE_KINDS), key=lambda k: k.ordinal):
            self.telemetry.warning(f"{kind.value} has no automatic fix; ignoring it")
        return frozenset(requested & set(FIXABLE_KINDS)) - frozenset(skip or ())

    def plan_file(
        self, source: SourceFile, violations: list[Violation]
    ) -> tuple[list[AppliedFix], list[SkippedFix]]:
        """One edit per line; unwrap and expect on the same line share a rewrite."""
        applied: list[AppliedFix] = []
        skipped: list[SkippedFix] = []
        planned: set[tuple[int, ViolationKind]] = set()
        edited_lines: set[int] = set()
        for violation in violations:
            key = (violation.line, violation.kind)
            if key in planned:
                continue
            planned.add(key)
            if violation.line in edited_lines:
                skipped.append(SkippedFix(violation, SHARED_LINE))
                continue
            plan = self.strategies.plan(source.lines, violation)
            if plan.skip_reason is not None:
                skipped.append(SkippedFix(violation, plan.skip_reason))
                continue
            edited_lines.add(violation.line)
            applied.append(
                AppliedFix(
                    file=source.path,
                    line=violation.line,
                    kind=violation.kind,
                    original=source.lines[violation.line - 1],
                    replacement=plan.replacement,
                    description=plan.description,
                )
            )
            self.telemetry.debug(f"{source.path}:{violation.line} {plan.description}")
        return applied, skipped

    @staticmethod
    def apply_edits(source: SourceFile, fixes: list[AppliedFix]) -> str:
        """New file text; edits run bottom-up so earlier line numbers stay valid."""
        lines = list(source.lines)
        for fix in sorted(fixes, key=lambda f: f.line, reverse=True):
            if fix.replacement is None:
                del lines[fix.line - 1]
            else:
                lines[fix.line - 1] = fix.replacement
        newline = "\r\n" if "\r\n" in source.content else "\n"
        text = newline.join(lines)
        if lines and source.content.endswith("\n"):
            text += newline
        return text
