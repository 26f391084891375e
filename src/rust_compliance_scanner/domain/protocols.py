"""Domain protocols: the ports use cases depend on, implemented by Infrastructure."""

from typing import Optional, Protocol

from rust_compliance_scanner.domain.entities import ViolationKind


class TelemetryPort(Protocol):
    """Protocol for telemetry/UI updates."""

    def step(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def debug(self, message: str) -> None: ...
    def handshake(self) -> None: ...


class FileSystemProtocol(Protocol):
    """Protocol for filesystem operations - abstracts Path usage."""

    def resolve_path(self, path: str) -> str:
        """Resolve and normalize a path string."""
        ...

    def is_directory(self, path: str) -> bool:
        """Check if path is a directory."""
        ...

    def exists(self, path: str) -> bool:
        """Return True if path exists (file or directory)."""
        ...

    def discover_sources(self, path: str, exclude_dirs: list[str]) -> list[str]:
        """Rust sources and Cargo manifests under path, sorted."""
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text content from a file."""
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file."""
        ...

    def relative_to(self, path: str, root: str) -> str:
        """Path relative to root, with forward slashes."""
        ...

    def join_path(self, *paths: str) -> str:
        """Join path components into a single path string."""
        ...


class GuidanceProtocol(Protocol):
    """Per-kind fix guidance lookups."""

    def suggested_fix(self, kind: ViolationKind) -> str: ...
    def is_auto_fixable(self, kind: ViolationKind) -> bool: ...
    def priority(self, kind: ViolationKind) -> int: ...


class ConfigSourceProtocol(Protocol):
    """Where raw scanner settings come from (Cargo.toml metadata or a standalone file)."""

    def load_config_from_fs(self, start: Optional[str] = None) -> dict[str, object]: ...
    def load_config_file(self, path: str) -> dict[str, object]: ...
