#!/usr/bin/env python3
"""
REPORT BUILDER - Shape computed grades into report card and transcript view-models

OUTPUTS:
✅ ReportCardData: one semester, subjects grouped by learning area (ปพ.5 layout)
✅ TranscriptData: every semester with GPA, plus cumulative GPAX (ปพ.6 layout)

Grouping follows learning-area declaration order (ภาษาไทย, คณิตศาสตร์, ...),
not alphabetical order. Within an area subjects are listed by subject code.
No grade arithmetic happens here - GPA and GPAX come from GPACalculator.

Dependencies: data_models.py, thai_calendar.py
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .data_models import (
    THAI_LEARNING_AREAS,
    AttendanceSummary,
    BehaviorSummary,
    ClassroomInfo,
    GPAResult,
    GPAXResult,
    Grade,
    ReportCardData,
    Semester,
    StudentProfile,
    SubjectArea,
    SubjectAreaGrades,
    SubjectGradeLine,
    TranscriptData,
    TranscriptSemester,
)
from .thai_calendar import format_thai_date

logger = logging.getLogger(__name__)

UNCLASSIFIED_AREA = SubjectArea(code="OTHER", name_th="อื่น ๆ", name_en="Other")


def grade_line(grade: Grade) -> SubjectGradeLine:
    instance = grade.subject_instance
    return SubjectGradeLine(
        code=instance.subject_code,
        name_th=instance.subject_name_th,
        credits=instance.credits,
        grade_label=grade.grade_label,
        grade_point=grade.grade_point,
        percentage=grade.percentage,
    )


class ReportBuilder:
    """Assemble report card and transcript view-models"""

    def __init__(self, subject_areas: Optional[Sequence[SubjectArea]] = None):
        self.subject_areas: List[SubjectArea] = list(subject_areas or THAI_LEARNING_AREAS)

    def group_by_subject_area(self, grades: Iterable[Grade]) -> List[SubjectAreaGrades]:
        """Group grades by learning area code in declaration order"""
        order: Dict[str, int] = {area.code: i for i, area in enumerate(self.subject_areas)}
        areas: Dict[str, SubjectArea] = {area.code: area for area in self.subject_areas}
        buckets: Dict[str, List[Grade]] = {}
        first_seen: List[str] = []

        for grade in grades:
            area = grade.subject_instance.subject_area or UNCLASSIFIED_AREA
            if area.code not in buckets:
                buckets[area.code] = []
                first_seen.append(area.code)
            areas.setdefault(area.code, area)
            buckets[area.code].append(grade)

        declared = sorted((code for code in first_seen if code in order), key=order.__getitem__)
        undeclared = [code for code in first_seen if code not in order]
        if undeclared:
            logger.debug("Learning areas outside declaration order: %s", undeclared)

        return [
            SubjectAreaGrades(
                subject_area=areas[code],
                subjects=[grade_line(g) for g in sorted(buckets[code], key=_subject_code)],
            )
            for code in declared + undeclared
        ]

    def build_report_card(
        self,
        student: StudentProfile,
        semester: Semester,
        grades: Iterable[Grade],
        gpa_result: GPAResult,
        attendance: Optional[AttendanceSummary] = None,
        behavior: Optional[BehaviorSummary] = None,
    ) -> ReportCardData:
        """
        Build a semester report card

        Args:
            student: Student identity block
            semester: Semester being reported
            grades: All of the student's grades for the semester, ungraded included
            gpa_result: GPA computed from the same grades
            attendance: Attendance counts from the attendance module
            behavior: Behaviour score from the behaviour module

        Returns:
            ReportCardData ready for JSON serialisation
        """
        return ReportCardData(
            student=student,
            semester=semester,
            semester_name=semester.display_name,
            grades=self.group_by_subject_area(grades),
            gpa=gpa_result.gpa,
            total_credits=gpa_result.total_credits,
            attendance=attendance or AttendanceSummary(),
            behavior=behavior or BehaviorSummary(),
        )

    def build_transcript(
        self,
        student: StudentProfile,
        semester_grades: Mapping[str, Iterable[Grade]],
        gpax_result: GPAXResult,
        classrooms: Optional[Mapping[str, ClassroomInfo]] = None,
        issued_on: Optional[date] = None,
    ) -> TranscriptData:
        """
        Build the full academic record

        Semesters appear in the chronological order of gpax_result.semesters.
        """
        classrooms = classrooms or {}
        issued_on = issued_on or date.today()

        semesters = []
        for entry in gpax_result.semesters:
            grades = sorted(semester_grades.get(entry.semester_id, []), key=_subject_code)
            semesters.append(
                TranscriptSemester(
                    semester_id=entry.semester_id,
                    semester=entry.semester,
                    semester_name=entry.semester.display_name if entry.semester else entry.semester_id,
                    classroom=classrooms.get(entry.semester_id),
                    grades=[grade_line(g) for g in grades],
                    gpa=entry.gpa,
                    credits=entry.total_credits,
                )
            )

        return TranscriptData(
            student=student,
            semesters=semesters,
            gpax=gpax_result.gpax,
            total_credits=gpax_result.total_credits,
            issued_on=issued_on,
            issued_on_th=format_thai_date(issued_on),
        )


def _subject_code(grade: Grade) -> str:
    return grade.subject_instance.subject_code


__all__ = ["UNCLASSIFIED_AREA", "grade_line", "ReportBuilder"]
