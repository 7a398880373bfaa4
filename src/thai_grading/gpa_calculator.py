#!/usr/bin/env python3
"""
GPA CALCULATOR - Credit-weighted semester GPA and cumulative GPAX
Thai K-12 grade point averages following the ปพ.5/ปพ.6 conventions

CALCULATION TYPES:
✅ Semester GPA: Σ(grade point × credits) / Σ credits for one semester
✅ GPAX: Cumulative over every semester to date
✅ Semester history: Chronological per-semester GPA list for the transcript

ROUNDING:
Half-up to 2 decimal places (configurable via GradingScale.decimal_places).
Only displayed values are rounded; GPAX is accumulated from full-precision
semester totals.

EDGE CASES HANDLED:
- Ungraded subjects (no scores entered): excluded from credits, never counted as 0
- No graded subjects: GPA 0, credits 0
- Semester with zero graded credits: kept in history, no weight in GPAX
- Semester order: by start date, then academic year and semester number

Priority: CRITICAL - Core academic calculations
Dependencies: data_models.py for type definitions
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .data_models import Grade, GPAResult, GPAXResult, Semester, SemesterGPA
from .grade_scale import GradingScale

logger = logging.getLogger(__name__)


def round_half_up(value: float, places: int = 2) -> float:
    """Half-up rounding (2.345 → 2.35, not banker's rounding)"""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class GPACalculator:
    """
    Calculate semester GPA and cumulative GPAX from grade records

    calculation_log is instance state, reset by every calculate_* call. Use one
    calculator per caller when the log matters (GradeService builds one per query).
    """

    def __init__(
        self,
        semesters_index: Optional[Mapping[str, Semester]] = None,
        grading_scale: Optional[GradingScale] = None,
    ):
        """
        Initialize calculator with semester index

        Args:
            semesters_index: Dictionary mapping semester IDs to Semester metadata
            grading_scale: Grading configuration (rounding places)
        """
        self.semesters_index: Dict[str, Semester] = dict(semesters_index or {})
        self.grading_scale = grading_scale or GradingScale()
        self.calculation_log: List[str] = []

    def calculate_gpa(self, grades: Iterable[Grade]) -> GPAResult:
        """
        Calculate GPA for one student in one semester

        Args:
            grades: Grade records for the semester, at most one per subject instance

        Returns:
            GPAResult with gpa, total credits and the graded records used
        """
        self.calculation_log = []
        grades = list(grades)

        points, credits, graded = self._weighted_totals(grades)
        skipped = len(grades) - len(graded)
        self.calculation_log.append(
            f"📊 Semester GPA: {len(graded)} graded subjects, {skipped} ungraded skipped"
        )

        if credits == 0:
            self.calculation_log.append("   No graded credits - GPA 0.00")
            return GPAResult(gpa=0.0, total_credits=0.0, grades=[])

        gpa = self._round(points / credits)
        self.calculation_log.append(f"   {points:.2f} points / {credits:g} credits = {gpa:.2f}")
        return GPAResult(gpa=gpa, total_credits=self._round(credits), grades=graded)

    def calculate_gpax(self, semester_grades: Mapping[str, Iterable[Grade]]) -> GPAXResult:
        """
        Calculate cumulative GPAX across all semesters

        Args:
            semester_grades: Dictionary mapping semester IDs to that semester's grades

        Returns:
            GPAXResult with gpax, total credits and chronological semester history
        """
        self.calculation_log = []
        self.calculation_log.append(f"📊 Calculating GPAX over {len(semester_grades)} semesters")

        semesters: List[SemesterGPA] = []
        total_points = 0.0
        total_credits = 0.0

        for semester_id in self._chronological(semester_grades.keys()):
            grades = list(semester_grades[semester_id])
            for grade in grades:
                if grade.semester_id != semester_id:
                    self.calculation_log.append(
                        f"⚠️ Warning: grade {grade.id} belongs to {grade.semester_id}, listed under {semester_id}"
                    )

            points, credits, _ = self._weighted_totals(grades)
            semester_gpa = self._round(points / credits) if credits > 0 else 0.0

            semesters.append(
                SemesterGPA(
                    semester_id=semester_id,
                    gpa=semester_gpa,
                    total_credits=self._round(credits),
                    semester=self.semesters_index.get(semester_id),
                )
            )
            self.calculation_log.append(f"   {semester_id}: GPA {semester_gpa:.2f} ({credits:g} credits)")

            total_points += points
            total_credits += credits

        gpax = self._round(total_points / total_credits) if total_credits > 0 else 0.0
        self.calculation_log.append(f"✅ GPAX {gpax:.2f} over {total_credits:g} credits")

        return GPAXResult(gpax=gpax, total_credits=self._round(total_credits), semesters=semesters)

    def _weighted_totals(self, grades: List[Grade]) -> Tuple[float, float, List[Grade]]:
        """Return (Σ point × credits, Σ credits, graded records), skipping ungraded"""
        points = 0.0
        credits = 0.0
        graded = []

        for grade in grades:
            if not grade.is_graded:
                continue
            points += grade.grade_point * grade.credits
            credits += grade.credits
            graded.append(grade)

        return points, credits, graded

    def _chronological(self, semester_ids: Iterable[str]) -> List[str]:
        """Order semester IDs by start date, falling back to (academic year, number)"""
        semester_ids = list(semester_ids)
        known = [(sid, self.semesters_index[sid]) for sid in semester_ids if sid in self.semesters_index]
        unknown = sorted(sid for sid in semester_ids if sid not in self.semesters_index)

        for sid in unknown:
            logger.warning("Semester %s missing from index - ordered after known semesters", sid)
            self.calculation_log.append(f"⚠️ Warning: no metadata for semester {sid}")

        if all(semester.start_date is not None for _, semester in known):
            known.sort(key=lambda item: (item[1].start_date, item[1].academic_year, item[1].number))
        else:
            known.sort(key=lambda item: (item[1].academic_year, item[1].number))

        return [sid for sid, _ in known] + unknown

    def _round(self, value: float) -> float:
        return round_half_up(value, self.grading_scale.decimal_places)

    def get_calculation_log(self) -> List[str]:
        """Get detailed calculation log for debugging"""
        return self.calculation_log


__all__ = ["round_half_up", "GPACalculator"]
