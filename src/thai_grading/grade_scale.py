#!/usr/bin/env python3
"""
GRADE SCALE - Thai 8-level grading table and per-school grading configuration
Percentage → grade point → grade label, following the Ministry of Education scale

GRADE MAPPING:
≥80 = 4.0 (ดีเยี่ยม)    ≥75 = 3.5 (ดีมาก)
≥70 = 3.0 (ดี)          ≥65 = 2.5 (ค่อนข้างดี)
≥60 = 2.0 (ปานกลาง)     ≥55 = 1.5 (พอใช้)
≥50 = 1.0 (ผ่านเกณฑ์ขั้นต่ำ) <50 = 0 (ไม่ผ่าน)

OUT-OF-RANGE POLICY:
- Lenient (default): classify anything, unmapped grade points label as "0"
- Strict: percentages outside 0-100 and unmapped grade points raise InvalidScoreError

Dependencies: pydantic for configuration validation
"""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import InvalidScoreError


class GradeBand(BaseModel):
    """One row of the grade scale table"""

    model_config = ConfigDict(frozen=True)

    min_percent: float = Field(..., ge=0.0, le=100.0, description="Inclusive lower bound")
    point: float = Field(..., ge=0.0, le=4.0, description="Grade point awarded")
    label: str = Field(..., description="Label printed on ปพ. documents")
    letter: str = Field(..., description="Letter equivalent (A, B+, ...)")
    description: str = Field("", description="Thai description of the level")


THAI_GRADE_BANDS: List[GradeBand] = [
    GradeBand(min_percent=80, point=4.0, label="4", letter="A", description="ดีเยี่ยม"),
    GradeBand(min_percent=75, point=3.5, label="3.5", letter="B+", description="ดีมาก"),
    GradeBand(min_percent=70, point=3.0, label="3", letter="B", description="ดี"),
    GradeBand(min_percent=65, point=2.5, label="2.5", letter="C+", description="ค่อนข้างดี"),
    GradeBand(min_percent=60, point=2.0, label="2", letter="C", description="ปานกลาง"),
    GradeBand(min_percent=55, point=1.5, label="1.5", letter="D+", description="พอใช้"),
    GradeBand(min_percent=50, point=1.0, label="1", letter="D", description="ผ่านเกณฑ์ขั้นต่ำ"),
    GradeBand(min_percent=0, point=0.0, label="0", letter="F", description="ไม่ผ่าน"),
]

FALLBACK_LABEL = "0"


class ComponentMaximums(BaseModel):
    """
    Maximum raw score for each score component

    A component whose maximum is None is not part of the academic total.
    Defaults: classwork 30, midterm 20, final 50, behaviour reported separately.
    """

    model_config = ConfigDict(frozen=True)

    classwork: Optional[float] = Field(30.0, gt=0.0)
    midterm: Optional[float] = Field(20.0, gt=0.0)
    final: Optional[float] = Field(50.0, gt=0.0)
    behavior: Optional[float] = Field(None, gt=0.0)


class GradingScale(BaseModel):
    """Per-school grading configuration"""

    model_config = ConfigDict(frozen=True)

    bands: List[GradeBand] = Field(default_factory=lambda: list(THAI_GRADE_BANDS))
    strict: bool = Field(False, description="Raise InvalidScoreError instead of falling back")
    component_maximums: ComponentMaximums = Field(default_factory=ComponentMaximums)
    decimal_places: int = Field(2, ge=0, le=4, description="Rounding for GPA/GPAX")

    @field_validator("bands")
    @classmethod
    def sort_bands(cls, v):
        """Keep bands in descending threshold order"""
        if not v:
            raise ValueError("Grading scale needs at least one band")
        return sorted(v, key=lambda band: band.min_percent, reverse=True)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "GradingScale":
        """Build from a school's stored grading configuration (None → defaults)"""
        if not config:
            return cls()
        return cls.model_validate(config)

    def band_for_percentage(self, percentage: float) -> GradeBand:
        """Return the band a percentage falls into"""
        if self.strict:
            _check_percentage(percentage)

        for band in self.bands:
            if percentage >= band.min_percent:
                return band
        # Below every threshold (or NaN): lowest band
        return self.bands[-1]

    def grade_point_for_percentage(self, percentage: float) -> float:
        return self.band_for_percentage(percentage).point

    def describe_point(self, point: float) -> Optional[GradeBand]:
        """Return the band for a grade point, or None when it is not on the scale"""
        for band in self.bands:
            if band.point == point:
                return band
        return None

    def grade_label_for_point(self, point: float) -> str:
        band = self.describe_point(point)
        if band is not None:
            return band.label
        if self.strict:
            raise InvalidScoreError(f"Grade point {point} is not on the grading scale")
        return FALLBACK_LABEL


def _check_percentage(percentage: float) -> None:
    if percentage is None or math.isnan(percentage) or percentage < 0 or percentage > 100:
        raise InvalidScoreError(f"Percentage must be within 0-100, got: {percentage}")


DEFAULT_SCALE = GradingScale()
STRICT_SCALE = GradingScale(strict=True)


def grade_point_for_percentage(percentage: float, strict: bool = False) -> float:
    """
    Convert a percentage score to a Thai grade point

    Args:
        percentage: Score as a percentage (0-100)
        strict: Raise InvalidScoreError for values outside 0-100

    Returns:
        One of 4.0, 3.5, 3.0, 2.5, 2.0, 1.5, 1.0, 0
    """
    scale = STRICT_SCALE if strict else DEFAULT_SCALE
    return scale.grade_point_for_percentage(percentage)


def grade_label_for_point(point: float, strict: bool = False) -> str:
    """Map a grade point to its printed label; unmapped points give "0" unless strict"""
    scale = STRICT_SCALE if strict else DEFAULT_SCALE
    return scale.grade_label_for_point(point)


def describe_point(point: float) -> Optional[GradeBand]:
    return DEFAULT_SCALE.describe_point(point)


__all__ = [
    "GradeBand",
    "THAI_GRADE_BANDS",
    "ComponentMaximums",
    "GradingScale",
    "DEFAULT_SCALE",
    "grade_point_for_percentage",
    "grade_label_for_point",
    "describe_point",
]
