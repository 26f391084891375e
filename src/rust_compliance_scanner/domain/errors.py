"""Domain errors."""

from typing import Optional


class ConfigurationError(ValueError):
    """Invalid scanner configuration. Fatal: raised before any file is scanned."""

    def __init__(self, message: str, pattern_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.pattern_name = pattern_name
