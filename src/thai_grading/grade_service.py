"""
Grade service - grade lifecycle and GPA/report queries over an injected repository

The repository is the data-access collaborator. It is passed in by the
composition root; the service keeps no global client and no cached results,
so every GPA, GPAX, report card and transcript is recomputed from the grades
the repository returns.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from .data_models import (
    AttendanceSummary,
    BehaviorSummary,
    ClassroomInfo,
    ClassroomStudentGrades,
    GPAResult,
    GPAXResult,
    Grade,
    GradeEntry,
    GradeUpdate,
    ReportCardData,
    Semester,
    StudentProfile,
    SubjectArea,
    SubjectInstanceRef,
    TranscriptData,
)
from .exceptions import GradeNotFoundError, SemesterNotFoundError
from .gpa_calculator import GPACalculator
from .grade_scale import GradingScale
from .report_builder import ReportBuilder
from .score_aggregator import ScoreAggregator

logger = logging.getLogger(__name__)


class GradeRepository(Protocol):
    """Data access the service needs; implementations own storage and transactions"""

    def fetch_grades_for_student(self, student_id: str, semester_id: Optional[str] = None) -> List[Grade]:
        ...

    def fetch_grades_for_subject_instance(self, subject_instance_id: str) -> List[Grade]:
        ...

    def find_grade(
        self, student_id: str, subject_instance_id: str, grading_period_id: Optional[str]
    ) -> Optional[Grade]:
        ...

    def get_grade(self, grade_id: str) -> Optional[Grade]:
        ...

    def save_grade(self, grade: Grade) -> Grade:
        ...


def select_subject_grades(grades: Iterable[Grade]) -> List[Grade]:
    """
    Keep one grade per subject instance

    The overall grade (no grading period) wins; otherwise the most recently
    updated grading-period grade is used.
    """
    chosen: Dict[str, Grade] = {}
    for grade in grades:
        key = grade.subject_instance.id
        current = chosen.get(key)
        if current is None or _prefer(grade, current):
            chosen[key] = grade
    return list(chosen.values())


def _prefer(candidate: Grade, current: Grade) -> bool:
    if (candidate.grading_period_id is None) != (current.grading_period_id is None):
        return candidate.grading_period_id is None
    return candidate.updated_at > current.updated_at


def group_by_semester(grades: Iterable[Grade]) -> Dict[str, List[Grade]]:
    grouped: Dict[str, List[Grade]] = {}
    for grade in grades:
        grouped.setdefault(grade.semester_id, []).append(grade)
    return grouped


class GradeService:
    """Record grades and answer GPA, GPAX, report card and transcript queries"""

    def __init__(
        self,
        repository: GradeRepository,
        semesters_index: Optional[Mapping[str, Semester]] = None,
        grading_scale: Optional[GradingScale] = None,
        subject_areas: Optional[Sequence[SubjectArea]] = None,
    ):
        self.repository = repository
        self.semesters_index: Dict[str, Semester] = dict(semesters_index or {})
        self.grading_scale = grading_scale or GradingScale()
        self.aggregator = ScoreAggregator(self.grading_scale)
        self.report_builder = ReportBuilder(subject_areas)

    # =====================
    # Grade entry
    # =====================

    def record_grade(self, subject_instance: SubjectInstanceRef, entry: GradeEntry) -> Grade:
        grade = self.aggregator.build_grade(
            student_id=entry.student_id,
            subject_instance=subject_instance,
            components=entry.components,
            grading_period_id=entry.grading_period_id,
            remarks=entry.remarks,
        )
        logger.info(
            "Recorded grade for student %s in %s: %s",
            entry.student_id,
            subject_instance.subject_code,
            grade.grade_label or "ungraded",
        )
        return self.repository.save_grade(grade)

    def update_grade(self, grade_id: str, update: GradeUpdate) -> Grade:
        grade = self.repository.get_grade(grade_id)
        if grade is None:
            raise GradeNotFoundError(grade_id)
        return self.repository.save_grade(self.aggregator.apply_update(grade, update))

    def bulk_record(
        self,
        subject_instance: SubjectInstanceRef,
        entries: Iterable[GradeEntry],
        grading_period_id: Optional[str] = None,
    ) -> List[Grade]:
        """Create or update one grade per entry, keyed by (student, subject instance, grading period)"""
        results = []
        created = 0

        for entry in entries:
            period = grading_period_id or entry.grading_period_id
            existing = self.repository.find_grade(entry.student_id, subject_instance.id, period)

            if existing is not None:
                update = GradeUpdate(**entry.model_dump(exclude={"student_id", "grading_period_id"}))
                grade = self.aggregator.apply_update(existing, update)
            else:
                grade = self.aggregator.build_grade(
                    student_id=entry.student_id,
                    subject_instance=subject_instance,
                    components=entry.components,
                    grading_period_id=period,
                    remarks=entry.remarks,
                )
                created += 1

            results.append(self.repository.save_grade(grade))

        logger.info(
            "Bulk grade entry for %s: %d created, %d updated",
            subject_instance.subject_code,
            created,
            len(results) - created,
        )
        return results

    # =====================
    # GPA calculations
    # =====================

    def calculator(self) -> GPACalculator:
        """New calculator per query, so its calculation_log is never shared between callers"""
        return GPACalculator(self.semesters_index, self.grading_scale)

    def semester_gpa(self, student_id: str, semester_id: str) -> GPAResult:
        grades = self.repository.fetch_grades_for_student(student_id, semester_id)
        return self.calculator().calculate_gpa(select_subject_grades(grades))

    def cumulative_gpax(self, student_id: str) -> GPAXResult:
        grades = self.repository.fetch_grades_for_student(student_id)
        return self.calculator().calculate_gpax(group_by_semester(select_subject_grades(grades)))

    def classroom_summary(self, student_ids: Iterable[str], semester_id: str) -> List[ClassroomStudentGrades]:
        """Grade sheet rows for a classroom, in the order the student IDs are given"""
        rows = []
        for student_id in student_ids:
            grades = self.repository.fetch_grades_for_student(student_id, semester_id)
            result = self.calculator().calculate_gpa(select_subject_grades(grades))
            rows.append(
                ClassroomStudentGrades(
                    student_id=student_id,
                    grades=grades,
                    gpa=result.gpa,
                    total_credits=result.total_credits,
                )
            )
        return rows

    # =====================
    # Reports
    # =====================

    def report_card(
        self,
        student: StudentProfile,
        semester_id: str,
        attendance: Optional[AttendanceSummary] = None,
        behavior: Optional[BehaviorSummary] = None,
    ) -> ReportCardData:
        semester = self.semesters_index.get(semester_id)
        if semester is None:
            raise SemesterNotFoundError(semester_id)

        grades = select_subject_grades(self.repository.fetch_grades_for_student(student.id, semester_id))
        gpa_result = self.calculator().calculate_gpa(grades)
        return self.report_builder.build_report_card(
            student, semester, grades, gpa_result, attendance=attendance, behavior=behavior
        )

    def transcript(
        self,
        student: StudentProfile,
        classrooms: Optional[Mapping[str, ClassroomInfo]] = None,
        issued_on: Optional[date] = None,
    ) -> TranscriptData:
        grouped = group_by_semester(select_subject_grades(self.repository.fetch_grades_for_student(student.id)))
        gpax_result = self.calculator().calculate_gpax(grouped)
        return self.report_builder.build_transcript(
            student, grouped, gpax_result, classrooms=classrooms, issued_on=issued_on
        )


__all__ = ["GradeRepository", "select_subject_grades", "group_by_semester", "GradeService"]
