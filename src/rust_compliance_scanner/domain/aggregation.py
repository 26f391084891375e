"""Violation aggregator: ordered merge, per-kind counts and compliance ratio."""

from typing import Iterable

from rust_compliance_scanner.domain.entities import ScanSummary, Violation


class ViolationAggregator:
    """Pure reduction over per-file results. Same input, same output."""

    @staticmethod
    def merge(per_file: Iterable[Iterable[Violation]]) -> list[Violation]:
        """Flatten and sort by file, line, then kind order, independent of arrival order."""
        merged = [violation for violations in per_file for violation in violations]
        return sorted(merged, key=Violation.sort_key)

    @staticmethod
    def count_by_kind(violations: Iterable[Violation]) -> dict[str, int]:
        counts: dict[str, int] = {}
        for violation in violations:
            key = violation.kind.value
            counts[key] = counts.get(key, 0) + 1
        return counts

    @staticmethod
    def files_with_violations(violations: Iterable[Violation]) -> int:
        return len({violation.file for violation in violations})

    @staticmethod
    def compliance_percentage(total_files: int, files_with_violations: int) -> float:
        """
        Share of files with zero violations, 0-100.

        Zero files, or more violating files than files scanned, clamp to 0.0.
        """
        if total_files <= 0 or files_with_violations > total_files:
            return 0.0
        return (total_files - files_with_violations) / total_files * 100.0

    @staticmethod
    def summarize(violations: list[Violation], total_files: int) -> ScanSummary:
        with_violations = ViolationAggregator.files_with_violations(violations)
        return ScanSummary(
            total_violations=len(violations),
            counts_by_kind=ViolationAggregator.count_by_kind(violations),
            files_scanned=total_files,
            files_with_violations=with_violations,
            compliance_percentage=ViolationAggregator.compliance_percentage(
                total_files, with_violations
            ),
        )
