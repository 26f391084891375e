"""Use Case: Scan Project - discover, read and scan every file, then aggregate."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from rust_compliance_scanner.domain.aggregation import ViolationAggregator
from rust_compliance_scanner.domain.config import ConfigurationLoader
from rust_compliance_scanner.domain.entities import ScanResult, SourceFile, Violation
from rust_compliance_scanner.domain.protocols import FileSystemProtocol, TelemetryPort
from rust_compliance_scanner.use_cases.scan_file import CargoManifestScanner, RustFileScanner


class ScanProjectUseCase:
    """Orchestrate a full scan of a project tree and return its ScanResult."""

    def __init__(
        self,
        config_loader: ConfigurationLoader,
        filesystem: FileSystemProtocol,
        telemetry: TelemetryPort,
    ) -> None:
        self.config_loader = config_loader
        self.filesystem = filesystem
        self.telemetry = telemetry
        self.rust_scanner = RustFileScanner(config_loader)
        self.manifest_scanner = CargoManifestScanner(config_loader)

    def execute(self, target_path: str) -> ScanResult:
        """
        Scan every Rust source and Cargo manifest under target_path.

        Files are read and scanned on a bounded thread pool; results are
        collected as they complete and sorted once afterwards, so the final
        order never depends on completion order. A file that cannot be read
        is reported as a warning and left out of the totals.

        Args:
            target_path: Project root (or a single file)

        Returns:
            ScanResult with the merged violations, the summary and the
            buffered sources of every file that produced a violation.
        """
        root = self.filesystem.resolve_path(target_path)
        paths = self.filesystem.discover_sources(root, self.config_loader.exclude_dirs)
        self.telemetry.step(f"Scanning {len(paths)} files under {root}")

        per_file: list[list[Violation]] = []
        sources: dict[str, SourceFile] = {}
        scanned = 0
        workers = min(self.config_loader.max_workers, max(len(paths), 1))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            future_map = {pool.submit(self.scan_path, path, root): path for path in paths}
            for future in as_completed(future_map):
                outcome = future.result()
                if outcome is None:
                    continue
                source, violations = outcome
                scanned += 1
                if violations:
                    per_file.append(violations)
                    sources[source.path] = source

        violations = ViolationAggregator.merge(per_file)
        summary = ViolationAggregator.summarize(violations, scanned)
        self.telemetry.debug(
            f"Scanned {scanned} files, {summary.total_violations} violations"
        )
        return ScanResult(root=root, violations=violations, summary=summary, sources=sources)

    def scan_path(self, path: str, root: str) -> Optional[tuple[SourceFile, list[Violation]]]:
        """Read and scan one file; None when it cannot be read."""
        try:
            content = self.filesystem.read_text(path)
        except OSError as exc:
            self.telemetry.warning(f"Skipping {path}: {exc}")
            return None
        source = SourceFile.from_text(self.filesystem.relative_to(path, root), content)
        # A single-file target is reported by name but keeps its full path for test detection.
        test_path = path if path == root else None
        return source, self.scan_source(source, test_path)

    def scan_source(self, source: SourceFile, test_path: Optional[str] = None) -> list[Violation]:
        if source.is_manifest:
            return self.manifest_scanner.scan(source)
        return self.rust_scanner.scan(source, test_path)
