from typing import TypedDict


class GuidanceEntry(TypedDict, total=False):
    display_name: str
    suggested_fix: str
    auto_fixable: bool
    priority: int
    fix_strategy: str
    example_fix: str
    effort_level: str
