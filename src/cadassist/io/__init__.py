"""
Cadassist IO - settings persistence.

Example:
    >>> from cadassist.io import load_settings
    >>> settings = load_settings("tolerances.json")
    >>> settings.offset.large_distance
    50.0
"""

from .settings import (
    OperationSettings,
    SectionSettings,
    RuleSettings,
    ExtrudeSettings,
    TrimSettings,
    OffsetSettings,
    ProjectionSettings,
    MeasureSettings,
    DEFAULT_SETTINGS,
    load_settings,
    save_settings,
)

__all__ = [
    "OperationSettings",
    "SectionSettings",
    "RuleSettings",
    "ExtrudeSettings",
    "TrimSettings",
    "OffsetSettings",
    "ProjectionSettings",
    "MeasureSettings",
    "DEFAULT_SETTINGS",
    "load_settings",
    "save_settings",
]
