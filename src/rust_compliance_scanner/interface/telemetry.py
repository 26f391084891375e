"""Telemetry: operator-facing console output plus a stdlib logger."""

import logging

from rich.console import Console

from rust_compliance_scanner.domain.constants import SCANNER_BANNER, VERSION


class ProjectTelemetry:
    """
    Console and log sink for one CLI run.

    Console output goes to stderr so machine-readable reports on stdout stay clean.
    """

    def __init__(self, name: str, color: str, welcome: str) -> None:
        self.name = name
        self.color = color
        self.welcome = welcome
        self.console = Console(stderr=True, highlight=False)
        self.logger = logging.getLogger(name.lower().replace(" ", "_"))
        # Records are already shown on the console.
        self.logger.addHandler(logging.NullHandler())

    def handshake(self) -> None:
        self.console.print(SCANNER_BANNER)
        self.console.print(f"[bold {self.color}]{self.name}[/] v{VERSION}: {self.welcome}")
        self.logger.info("%s v%s started", self.name, VERSION)

    def step(self, message: str) -> None:
        self.console.print(f"[{self.color}]>>[/] {message}")
        self.logger.info(message)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]ERROR[/] {message}")
        self.logger.error(message)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]WARNING[/] {message}")
        self.logger.warning(message)

    def debug(self, message: str) -> None:
        self.logger.debug(message)
