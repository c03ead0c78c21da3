"""
Operation settings: tolerances, extrusion limits and offset magnitudes.

The defaults reproduce the values the helper scripts have always used.
Settings can be overridden from a JSON file; unknown keys are ignored.

Uses Pydantic for validation.
"""

import json
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..host.protocol import SectionTolerances


class SectionSettings(BaseModel):
    """Tolerances for sections built from selection rules."""
    chaining_tolerance: float = Field(0.0001, gt=0)
    distance_tolerance: float = Field(0.001, gt=0)
    angle_tolerance: float = Field(0.5, gt=0)

    model_config = ConfigDict(extra="ignore")

    def as_tolerances(self) -> SectionTolerances:
        return SectionTolerances(
            chaining=self.chaining_tolerance,
            distance=self.distance_tolerance,
            angle=self.angle_tolerance,
        )


class RuleSettings(BaseModel):
    """Tolerances for tangent and chain selection rules."""
    angle_tolerance: float = Field(0.5, gt=0)  # degrees
    gap_tolerance: float = Field(0.01, gt=0)
    chain_gap_tolerance: float = Field(0.01, gt=0)

    model_config = ConfigDict(extra="ignore")


class ExtrudeSettings(BaseModel):
    """Start limits of the extrusion helpers (end limit is the requested distance)."""
    curves_start: float = -500.0
    tangent_start: float = 0.0
    connected_start: float = -250.0
    sketch_start: float = 0.0

    model_config = ConfigDict(extra="ignore")


class TrimSettings(BaseModel):
    """Volume-based trim parameters."""
    tolerance: float = Field(0.01, gt=0)
    distance_tolerance: float = Field(0.01, gt=0)
    chaining_tolerance: float = Field(0.0095, gt=0)
    threshold_percent: float = Field(50.0, gt=0, lt=100)

    model_config = ConfigDict(extra="ignore")


class OffsetSettings(BaseModel):
    """Offset-curve parameters."""
    fit_tolerance: float = Field(0.01, gt=0)
    angle_tolerance: float = Field(0.5, gt=0)
    large_distance: float = Field(50.0, gt=0)
    small_distance: float = Field(10.0, gt=0)
    rough: bool = True

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def check_magnitudes(self):
        if self.small_distance >= self.large_distance:
            raise ValueError(
                f"small_distance ({self.small_distance}) must be less than "
                f"large_distance ({self.large_distance})"
            )
        return self


class ProjectionSettings(BaseModel):
    """Curve projection parameters."""
    fit_tolerance: float = Field(0.01, gt=0)
    angle_tolerance: float = Field(0.5, gt=0)
    distance_tolerance: float = Field(0.01, gt=0)
    chaining_tolerance: float = Field(0.0095, gt=0)

    model_config = ConfigDict(extra="ignore")

    def as_tolerances(self) -> SectionTolerances:
        return SectionTolerances(
            chaining=self.chaining_tolerance,
            distance=self.distance_tolerance,
            angle=self.angle_tolerance,
        )


class MeasureSettings(BaseModel):
    """Measurement parameters."""
    mass_accuracy: float = Field(0.01, gt=0)
    lowest_point_samples: int = Field(150, ge=1)

    model_config = ConfigDict(extra="ignore")


class OperationSettings(BaseModel):
    """All configurable parameters of the cadassist operations."""
    section: SectionSettings = Field(default_factory=SectionSettings)
    rules: RuleSettings = Field(default_factory=RuleSettings)
    extrude: ExtrudeSettings = Field(default_factory=ExtrudeSettings)
    trim: TrimSettings = Field(default_factory=TrimSettings)
    offset: OffsetSettings = Field(default_factory=OffsetSettings)
    projection: ProjectionSettings = Field(default_factory=ProjectionSettings)
    measure: MeasureSettings = Field(default_factory=MeasureSettings)

    model_config = ConfigDict(extra="ignore")


DEFAULT_SETTINGS = OperationSettings()


def load_settings(filepath: Union[str, Path]) -> OperationSettings:
    """
    Load operation settings from a JSON file.

    Missing sections and keys fall back to their defaults.

    Args:
        filepath: Path to JSON file

    Returns:
        Validated OperationSettings

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If a value is out of range
    """
    filepath = Path(filepath)
    with open(filepath, "r") as f:
        data = json.load(f)
    return OperationSettings.model_validate(data)


def save_settings(settings: OperationSettings, filepath: Union[str, Path]) -> None:
    """Write settings to a JSON file."""
    filepath = Path(filepath)
    with open(filepath, "w") as f:
        json.dump(settings.model_dump(), f, indent=2)
