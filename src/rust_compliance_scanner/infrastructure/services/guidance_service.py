"""GuidanceService: loads the fix guidance registry and answers per-kind lookups."""

from pathlib import Path
from typing import Optional, cast

import yaml

from rust_compliance_scanner.domain.entities import ViolationKind
from rust_compliance_scanner.domain.registry_types import GuidanceEntry

DEFAULT_KEY = "_default"


class GuidanceService:
    """Loads fix_guidance.yaml and provides suggestion, priority and strategy per kind."""

    def __init__(self, registry_path: Optional[str] = None) -> None:
        if registry_path is not None:
            self._path = Path(registry_path)
        else:
            # Default: packaged resource next to this package
            _base = Path(__file__).resolve().parent.parent.parent
            self._path = _base / "resources" / "fix_guidance.yaml"
        self._registry: dict[str, GuidanceEntry] = {}
        self._load()

    def _load(self) -> None:
        if self._path.exists():
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
                self._registry = (
                    cast(dict[str, GuidanceEntry], data) if isinstance(data, dict) else {}
                )
        else:
            self._registry = {}

    def get_registry(self) -> dict[str, GuidanceEntry]:
        """Return a shallow copy of the loaded registry."""
        return dict(self._registry)

    def get_entry(self, kind: ViolationKind) -> GuidanceEntry:
        """Entry for a kind, falling back to the default entry, then to an empty one."""
        entry = self._registry.get(kind.value) or self._registry.get(DEFAULT_KEY) or {}
        return cast(GuidanceEntry, dict(entry))

    def suggested_fix(self, kind: ViolationKind) -> str:
        return str(self.get_entry(kind).get("suggested_fix", "Review and fix manually"))

    def is_auto_fixable(self, kind: ViolationKind) -> bool:
        return bool(self.get_entry(kind).get("auto_fixable", False))

    def priority(self, kind: ViolationKind) -> int:
        return int(self.get_entry(kind).get("priority", 4))

    def priority_order(self) -> list[str]:
        """Kind tags sorted by priority, then name. The default entry is excluded."""
        ranked = [
            (int(entry.get("priority", 4)), tag)
            for tag, entry in self._registry.items()
            if tag != DEFAULT_KEY
        ]
        return [tag for _, tag in sorted(ranked)]
