"""Filesystem Gateway - Infrastructure implementation of FileSystemProtocol."""

import os
from pathlib import Path

from rust_compliance_scanner.domain.protocols import FileSystemProtocol

MANIFEST_NAME = "Cargo.toml"


class FileSystemGateway(FileSystemProtocol):
    """Infrastructure implementation of FileSystemProtocol using pathlib."""

    def resolve_path(self, path: str) -> str:
        """Resolve and normalize a path string."""
        return str(Path(path).resolve())

    def is_directory(self, path: str) -> bool:
        """Check if path is a directory."""
        return Path(path).is_dir()

    def exists(self, path: str) -> bool:
        """Return True if path exists (file or directory)."""
        return Path(path).exists()

    def discover_sources(self, path: str, exclude_dirs: list[str]) -> list[str]:
        """All *.rs files and Cargo.toml manifests (recursive if directory), sorted."""
        path_obj = Path(path).resolve()
        if not path_obj.is_dir():
            is_source = path_obj.suffix == ".rs" or path_obj.name == MANIFEST_NAME
            return [str(path_obj)] if path_obj.is_file() and is_source else []
        excluded = set(exclude_dirs)
        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(path_obj):
            # Prune in place so excluded trees (target/, .git/) are never walked.
            dirnames[:] = sorted(
                d for d in dirnames if d not in excluded and not d.startswith(".")
            )
            for name in filenames:
                if name.endswith(".rs") or name == MANIFEST_NAME:
                    found.append(str(Path(dirpath) / name))
        return sorted(found)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text content from a file; undecodable bytes are replaced."""
        return Path(path).read_text(encoding=encoding, errors="replace")

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        Path(path).write_text(content, encoding=encoding)

    def join_path(self, *paths: str) -> str:
        """Join path components into a single path string."""
        return str(Path(*paths))

    def relative_to(self, path: str, root: str) -> str:
        """Path relative to root, with forward slashes; root itself when it is the file."""
        path_obj = Path(path)
        root_obj = Path(root)
        if path_obj == root_obj:
            return path_obj.name
        try:
            return path_obj.relative_to(root_obj).as_posix()
        except ValueError:
            return path_obj.as_posix()
