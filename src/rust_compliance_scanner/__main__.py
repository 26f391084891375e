"""Package entry point - composition root. Wire dependencies and run the CLI app."""

from rust_compliance_scanner.infrastructure.di.container import ScannerContainer
from rust_compliance_scanner.interface.cli import CLIAppFactory, CLIDependencies


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    container = ScannerContainer.get_instance()
    deps = CLIDependencies(
        telemetry=container.get_telemetry_port(),
        filesystem=container.get_filesystem_gateway(),
        config_source=container.get_config_source(),
        guidance_service=container.get_guidance_service(),
        reporter=container.get_reporter(),
        markdown_renderer=container.get_markdown_renderer(),
        json_renderer=container.get_json_renderer(),
    )
    app = CLIAppFactory.create_app(deps)
    app()


if __name__ == "__main__":
    main()
