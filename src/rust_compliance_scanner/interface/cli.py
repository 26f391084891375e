"""CLI entry points for rust-compliance - Thin Controller using Typer."""

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer

from rust_compliance_scanner.domain.config import ConfigurationLoader
from rust_compliance_scanner.domain.constants import SCANNER_BANNER, TOOL_NAME
from rust_compliance_scanner.domain.entities import SourceFile, ViolationKind
from rust_compliance_scanner.domain.errors import ConfigurationError
from rust_compliance_scanner.domain.protocols import (
    ConfigSourceProtocol,
    FileSystemProtocol,
    GuidanceProtocol,
    TelemetryPort,
)
from rust_compliance_scanner.interface.reporters import ReportRenderer, ScanReporter
from rust_compliance_scanner.use_cases.analyze_violations import AnalyzeViolationsUseCase
from rust_compliance_scanner.use_cases.apply_fixes import ApplyFixesUseCase
from rust_compliance_scanner.use_cases.scan_project import ScanProjectUseCase

EXIT_COMPLIANT = 0
EXIT_VIOLATIONS = 1
EXIT_CONFIG_ERROR = 2

FORMATS = ("terminal", "json", "markdown")
VIEWS = ("by_kind", "by_file")


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    telemetry: TelemetryPort
    filesystem: FileSystemProtocol
    config_source: ConfigSourceProtocol
    guidance_service: GuidanceProtocol
    reporter: ScanReporter
    markdown_renderer: ReportRenderer
    json_renderer: ReportRenderer


class CLIAppFactory:
    """Creates the Typer app. No top-level functions."""

    @staticmethod
    def load_configuration(
        deps: CLIDependencies,
        target_path: str,
        config_file: Optional[Path] = None,
        workers: Optional[int] = None,
    ) -> ConfigurationLoader:
        """
        Settings from --config, else the nearest Cargo.toml metadata table.

        Raises ConfigurationError for unreadable files, bad custom regexes and
        malformed rule tables.
        """
        if config_file is not None:
            config_dict = deps.config_source.load_config_file(str(config_file))
        else:
            config_dict = deps.config_source.load_config_from_fs(target_path)
        loader = ConfigurationLoader(config_dict)
        if workers is not None:
            if workers <= 0:
                raise ConfigurationError("--workers must be a positive integer")
            loader = loader.with_overrides(max_workers=workers)
        return loader

    @staticmethod
    def emit(deps: CLIDependencies, text: str, output: Optional[Path]) -> None:
        """Write a rendered document to --output, or stdout."""
        if output is None:
            print(text)
            return
        deps.filesystem.write_text(str(output), text)
        deps.telemetry.step(f"Report written to {output}")

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies. No Service Locator."""
        app = typer.Typer(
            name=TOOL_NAME,
            help=f"{SCANNER_BANNER}\nRust Compliance: lexical coding-standard scanner for Rust projects",
            add_completion=False,
            rich_markup_mode="rich",
        )

        @app.command()
        def check(
            path: Path = typer.Argument(Path("."), help="Project root or file to scan"),  # noqa: B008
            output_format: str = typer.Option(
                "terminal", "--format", "-f", help="Output: terminal, json or markdown"
            ),
            view: str = typer.Option("by_kind", help="Terminal table view: by_kind or by_file"),
            config: Optional[Path] = typer.Option(  # noqa: B008
                None, "--config", "-c", help="Standalone TOML settings file"
            ),
            workers: Optional[int] = typer.Option(None, help="Concurrent file workers"),
            with_context: bool = typer.Option(
                False, "--with-context", help="Attach code context to every violation"
            ),
            output: Optional[Path] = typer.Option(  # noqa: B008
                None, "--output", "-o", help="Write the json/markdown report to a file"
            ),
        ) -> None:
            """Scan a Rust project. Exit 0 when compliant, 1 on violations, 2 on bad configuration."""
            if output_format not in FORMATS:
                deps.telemetry.error(f"Unknown format '{output_format}' (use {', '.join(FORMATS)})")
                sys.exit(EXIT_CONFIG_ERROR)
            if view not in VIEWS:
                deps.telemetry.error(f"Unknown view '{view}' (use {', '.join(VIEWS)})")
                sys.exit(EXIT_CONFIG_ERROR)
            target_path = str(path)
            if not deps.filesystem.exists(target_path):
                deps.telemetry.error(f"Path not found: {target_path}")
                sys.exit(EXIT_CONFIG_ERROR)

            if output_format == "terminal":
                deps.telemetry.handshake()
            try:
                config_loader = CLIAppFactory.load_configuration(deps, target_path, config, workers)
            except ConfigurationError as exc:
                deps.telemetry.error(f"Configuration error: {exc}")
                sys.exit(EXIT_CONFIG_ERROR)

            use_case = ScanProjectUseCase(
                config_loader=config_loader,
                filesystem=deps.filesystem,
                telemetry=deps.telemetry,
            )
            scan_result = use_case.execute(target_path)

            if output_format == "terminal":
                deps.reporter.report_scan(scan_result, view=view)
            else:
                analyses = AnalyzeViolationsUseCase(
                    config_loader.patterns, deps.guidance_service
                ).execute(scan_result.violations, scan_result.sources, with_context=with_context)
                renderer = (
                    deps.json_renderer if output_format == "json" else deps.markdown_renderer
                )
                CLIAppFactory.emit(deps, renderer.render(scan_result, analyses), output)

            sys.exit(EXIT_VIOLATIONS if scan_result.has_violations() else EXIT_COMPLIANT)

        @app.command()
        def fix(
            path: Path = typer.Argument(Path("."), help="Project root or file to fix"),  # noqa: B008
            dry_run: bool = typer.Option(
                False, "--dry-run", help="Report what would change without writing files"
            ),
            only: Optional[List[str]] = typer.Option(  # noqa: B008
                None, "--only", help="Fix only this kind (repeatable), e.g. UnwrapInProduction"
            ),
            skip: Optional[List[str]] = typer.Option(  # noqa: B008
                None, "--skip", help="Never fix this kind (repeatable)"
            ),
            config: Optional[Path] = typer.Option(  # noqa: B008
                None, "--config", "-c", help="Standalone TOML settings file"
            ),
        ) -> None:
            """Rewrite .unwrap()/.expect() to ? and drop side-effect-free `let _ =` lines."""
            target_path = str(path)
            if not deps.filesystem.exists(target_path):
                deps.telemetry.error(f"Path not found: {target_path}")
                sys.exit(EXIT_CONFIG_ERROR)
            deps.telemetry.handshake()
            try:
                config_loader = CLIAppFactory.load_configuration(deps, target_path, config)
                only_kinds = [ViolationKind.from_tag(tag) for tag in only or []]
                skip_kinds = [ViolationKind.from_tag(tag) for tag in skip or []]
            except ConfigurationError as exc:
                deps.telemetry.error(f"Configuration error: {exc}")
                sys.exit(EXIT_CONFIG_ERROR)
            except ValueError as exc:
                deps.telemetry.error(str(exc))
                sys.exit(EXIT_CONFIG_ERROR)

            use_case = ApplyFixesUseCase(
                config_loader=config_loader,
                filesystem=deps.filesystem,
                telemetry=deps.telemetry,
                dry_run=dry_run,
            )
            report = use_case.execute(target_path, only=only_kinds, skip=skip_kinds)
            deps.reporter.report_fixes(report)

        @app.command()
        def context(
            file: Path = typer.Argument(..., help="Rust source file"),  # noqa: B008
            line: int = typer.Argument(..., help="1-based line number"),
        ) -> None:
            """Print the code context (enclosing function, imports, error style) of one line as JSON."""
            target_path = str(file)
            if not deps.filesystem.exists(target_path) or deps.filesystem.is_directory(target_path):
                deps.telemetry.error(f"Not a file: {target_path}")
                sys.exit(EXIT_CONFIG_ERROR)
            try:
                config_loader = CLIAppFactory.load_configuration(deps, target_path)
            except ConfigurationError as exc:
                deps.telemetry.error(f"Configuration error: {exc}")
                sys.exit(EXIT_CONFIG_ERROR)
            source = SourceFile.from_text(target_path, deps.filesystem.read_text(target_path))
            if not 1 <= line <= max(len(source.lines), 1):
                deps.telemetry.error(f"Line {line} is outside {target_path} ({len(source.lines)} lines)")
                sys.exit(EXIT_CONFIG_ERROR)
            analyzer = AnalyzeViolationsUseCase(config_loader.patterns, deps.guidance_service)
            print(json.dumps(analyzer.context_at(source, line).to_dict(), indent=2))

        @app.command()
        def patterns(
            config: Optional[Path] = typer.Option(  # noqa: B008
                None, "--config", "-c", help="Standalone TOML settings file"
            ),
        ) -> None:
            """List the active pattern rules, built-in and custom."""
            try:
                config_loader = CLIAppFactory.load_configuration(deps, ".", config)
            except ConfigurationError as exc:
                deps.telemetry.error(f"Configuration error: {exc}")
                sys.exit(EXIT_CONFIG_ERROR)
            for rule in config_loader.patterns.rules():
                origin = "custom" if rule.custom else "built-in"
                print(
                    f"{rule.name:<20} {rule.kind.value:<20} {rule.severity.value:<8} "
                    f"{origin:<9} {rule.regex.pattern}"
                )

        return app
