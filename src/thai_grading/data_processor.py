#!/usr/bin/env python3
"""
DATA PROCESSOR - Gradebook CSV loading, validation, and in-memory grade storage
Load teacher gradebook exports into validated Grade records

DATA SOURCES:
✅ Gradebook CSV - one row per student per subject instance (per grading period)
✅ Semesters CSV - semester metadata for chronological ordering

VALIDATION STRATEGY:
1. Schema Validation: Required columns must exist
2. Row Validation: Pydantic models reject negative scores and non-positive credits
3. Blank Cells: Treated as "not yet entered", never as zero
4. Duplicates: Same student/subject instance/grading period - last row wins, warning recorded

Priority: HIGH - Ingestion boundary for grade data
Dependencies: pandas for CSV loading, pydantic for type-safe validation
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd
from pydantic import ValidationError

from .data_models import (
    THAI_LEARNING_AREAS,
    Grade,
    ScoreComponents,
    Semester,
    SubjectArea,
    SubjectInstanceRef,
)
from .grade_scale import GradingScale
from .score_aggregator import ScoreAggregator

logger = logging.getLogger(__name__)

GRADEBOOK_REQUIRED_COLUMNS = [
    "Student ID",
    "Subject Instance ID",
    "Subject ID",
    "Subject Code",
    "Subject Name",
    "Credits",
    "Semester ID",
]

SCORE_COLUMNS = {
    "Classwork": "classwork_score",
    "Midterm": "midterm_score",
    "Final": "final_score",
    "Behavior": "behavior_score",
}

SEMESTER_REQUIRED_COLUMNS = ["Semester ID", "Academic Year", "Semester"]

GradeKey = Tuple[str, str, Optional[str]]


class InMemoryGradeRepository:
    """Grade repository backed by a dict; satisfies the GradeRepository protocol"""

    def __init__(self, grades: Optional[Sequence[Grade]] = None):
        self._grades: Dict[str, Grade] = {}
        for grade in grades or []:
            self.save_grade(grade)

    def __len__(self) -> int:
        return len(self._grades)

    def fetch_grades_for_student(self, student_id: str, semester_id: Optional[str] = None) -> List[Grade]:
        return [
            grade
            for grade in self._grades.values()
            if grade.student_id == student_id and (semester_id is None or grade.semester_id == semester_id)
        ]

    def fetch_grades_for_subject_instance(self, subject_instance_id: str) -> List[Grade]:
        return [g for g in self._grades.values() if g.subject_instance.id == subject_instance_id]

    def find_grade(
        self, student_id: str, subject_instance_id: str, grading_period_id: Optional[str]
    ) -> Optional[Grade]:
        for grade in self._grades.values():
            if _grade_key(grade) == (student_id, subject_instance_id, grading_period_id):
                return grade
        return None

    def get_grade(self, grade_id: str) -> Optional[Grade]:
        return self._grades.get(grade_id)

    def save_grade(self, grade: Grade) -> Grade:
        self._grades[grade.id] = grade
        return grade

    def all_grades(self) -> List[Grade]:
        return list(self._grades.values())


def _grade_key(grade: Grade) -> GradeKey:
    return grade.student_id, grade.subject_instance.id, grade.grading_period_id


def _cell(row: Dict[str, Any], column: str) -> Optional[str]:
    """Return a stripped cell value, or None for missing/blank cells"""
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _number(row: Dict[str, Any], column: str) -> Optional[float]:
    text = _cell(row, column)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"{column} must be numeric, got: {text}")


class GradebookProcessor:
    """Load and validate gradebook CSV exports"""

    def __init__(
        self,
        grading_scale: Optional[GradingScale] = None,
        subject_areas: Optional[Sequence[SubjectArea]] = None,
    ):
        self.aggregator = ScoreAggregator(grading_scale)
        self.subject_areas: Dict[str, SubjectArea] = {
            area.code: area for area in (subject_areas or THAI_LEARNING_AREAS)
        }

        # Data storage
        self.gradebook: Optional[pd.DataFrame] = None
        self.grades: Dict[GradeKey, Grade] = {}
        self.semesters: Dict[str, Semester] = {}

        # Validation results
        self.validation_errors: List[str] = []
        self.validation_warnings: List[str] = []

    def load_gradebook(self, file_path: Union[str, Path]) -> bool:
        """Load a gradebook CSV; rejected rows are recorded in validation_errors"""
        file_path = Path(file_path)
        logger.info(f"📊 Loading gradebook from: {file_path}")

        try:
            self.gradebook = pd.read_csv(file_path, encoding="utf-8-sig", dtype=str)
        except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            self.validation_errors.append(f"Failed to load gradebook: {e}")
            logger.error(f"  ❌ Failed to load gradebook: {e}")
            return False

        missing_columns = [col for col in GRADEBOOK_REQUIRED_COLUMNS if col not in self.gradebook.columns]
        if missing_columns:
            self.validation_errors.append(f"Gradebook missing columns: {missing_columns}")
            return False

        loaded = 0
        for index, row in enumerate(self.gradebook.to_dict(orient="records")):
            # Header is line 1
            line = index + 2
            try:
                grade = self._row_to_grade(row)
            except ValueError as e:
                # pydantic.ValidationError is a ValueError
                self.validation_errors.append(f"Row {line}: {_describe_error(e)}")
                continue

            key = _grade_key(grade)
            if key in self.grades:
                self.validation_warnings.append(
                    f"Row {line}: duplicate grade for student {key[0]} in {key[1]} - later row kept"
                )
            self.grades[key] = grade
            loaded += 1

        logger.info(f"  ✅ Loaded {loaded} grade records ({len(self.validation_errors)} rejected)")
        return True

    def load_semesters(self, file_path: Union[str, Path]) -> bool:
        """Load semester metadata (Semester ID, Academic Year, Semester, optional Start Date/Name)"""
        file_path = Path(file_path)
        logger.info(f"📊 Loading semesters from: {file_path}")

        try:
            frame = pd.read_csv(file_path, encoding="utf-8-sig", dtype=str)
        except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            self.validation_errors.append(f"Failed to load semesters: {e}")
            logger.error(f"  ❌ Failed to load semesters: {e}")
            return False

        missing_columns = [col for col in SEMESTER_REQUIRED_COLUMNS if col not in frame.columns]
        if missing_columns:
            self.validation_errors.append(f"Semesters missing columns: {missing_columns}")
            return False

        for index, row in enumerate(frame.to_dict(orient="records")):
            try:
                semester = Semester(
                    id=_cell(row, "Semester ID"),
                    academic_year=_cell(row, "Academic Year"),
                    number=_cell(row, "Semester"),
                    name=_cell(row, "Name"),
                    start_date=_cell(row, "Start Date"),
                )
            except ValidationError as e:
                self.validation_errors.append(f"Semester row {index + 2}: {_describe_error(e)}")
                continue
            self.semesters[semester.id] = semester

        logger.info(f"  ✅ Loaded {len(self.semesters)} semesters")
        return True

    def _row_to_grade(self, row: Dict[str, Any]) -> Grade:
        subject_instance = SubjectInstanceRef(
            id=_cell(row, "Subject Instance ID"),
            subject_id=_cell(row, "Subject ID"),
            subject_code=_cell(row, "Subject Code"),
            subject_name_th=_cell(row, "Subject Name"),
            subject_name_en=_cell(row, "Subject Name (EN)"),
            credits=_number(row, "Credits"),
            semester_id=_cell(row, "Semester ID"),
            subject_area=self._subject_area(_cell(row, "Subject Area")),
        )
        components = ScoreComponents(
            **{field: _number(row, column) for column, field in SCORE_COLUMNS.items()}
        )
        return self.aggregator.build_grade(
            student_id=_cell(row, "Student ID"),
            subject_instance=subject_instance,
            components=components,
            grading_period_id=_cell(row, "Grading Period ID"),
            remarks=_cell(row, "Remarks"),
        )

    def _subject_area(self, code: Optional[str]) -> Optional[SubjectArea]:
        if code is None:
            return None
        area = self.subject_areas.get(code)
        if area is None:
            self.validation_warnings.append(f"Unknown learning area code: {code}")
            area = SubjectArea(code=code, name_th=code)
            self.subject_areas[code] = area
        return area

    def repository(self) -> InMemoryGradeRepository:
        """Repository holding every grade loaded so far"""
        return InMemoryGradeRepository(list(self.grades.values()))

    def grades_frame(self) -> pd.DataFrame:
        """Flat table of loaded grades with derived fields, for export and inspection"""
        records = [
            {
                "student_id": grade.student_id,
                "subject_code": grade.subject_instance.subject_code,
                "semester_id": grade.semester_id,
                "credits": grade.credits,
                "total_score": grade.total_score,
                "percentage": grade.percentage,
                "grade_point": grade.grade_point,
                "grade_label": grade.grade_label,
            }
            for grade in self.grades.values()
        ]
        return pd.DataFrame(
            records,
            columns=[
                "student_id",
                "subject_code",
                "semester_id",
                "credits",
                "total_score",
                "percentage",
                "grade_point",
                "grade_label",
            ],
        )

    def generate_validation_report(self) -> str:
        """Generate validation report"""

        report = ["🔍 GRADEBOOK VALIDATION REPORT", "=" * 50, ""]

        if not self.validation_errors and not self.validation_warnings:
            report.append("✅ All validation checks passed!")
        else:
            if self.validation_errors:
                report.append("❌ ERRORS (Must be fixed):")
                for error in self.validation_errors:
                    report.append(f"  • {error}")
                report.append("")

            if self.validation_warnings:
                report.append("⚠️ WARNINGS (Review recommended):")
                for warning in self.validation_warnings:
                    report.append(f"  • {warning}")
                report.append("")

        report.append("📊 DATA SUMMARY:")
        report.append(f"  Grade Records: {len(self.grades)}")
        report.append(f"  Graded: {sum(1 for g in self.grades.values() if g.is_graded)}")
        report.append(f"  Semesters: {len(self.semesters)}")

        return "\n".join(report)


def _describe_error(error: ValueError) -> str:
    if isinstance(error, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()
        )
    return str(error)


__all__ = ["InMemoryGradeRepository", "GradebookProcessor"]
