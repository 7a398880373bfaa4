"""
Thai K-12 grading engine

Grade scale lookup, score aggregation, semester GPA, cumulative GPAX and
report card / transcript (ปพ.6) assembly.
"""

from .data_models import (
    THAI_LEARNING_AREAS,
    AttendanceSummary,
    BehaviorSummary,
    ClassroomInfo,
    GPAResult,
    GPAXResult,
    Grade,
    GradeEntry,
    GradeUpdate,
    ReportCardData,
    ScoreComponents,
    Semester,
    SemesterGPA,
    StudentProfile,
    SubjectArea,
    SubjectInstanceRef,
    TranscriptData,
)
from .data_processor import GradebookProcessor, InMemoryGradeRepository
from .exceptions import GradeNotFoundError, GradingError, InvalidScoreError, SemesterNotFoundError
from .gpa_calculator import GPACalculator, round_half_up
from .grade_scale import (
    THAI_GRADE_BANDS,
    ComponentMaximums,
    GradeBand,
    GradingScale,
    grade_label_for_point,
    grade_point_for_percentage,
)
from .grade_service import GradeRepository, GradeService
from .report_builder import ReportBuilder
from .score_aggregator import ScoreAggregator

__version__ = "1.0.0"

__all__ = [
    "THAI_LEARNING_AREAS",
    "AttendanceSummary",
    "BehaviorSummary",
    "ClassroomInfo",
    "GPAResult",
    "GPAXResult",
    "Grade",
    "GradeEntry",
    "GradeUpdate",
    "ReportCardData",
    "ScoreComponents",
    "Semester",
    "SemesterGPA",
    "StudentProfile",
    "SubjectArea",
    "SubjectInstanceRef",
    "TranscriptData",
    "GradebookProcessor",
    "InMemoryGradeRepository",
    "GradingError",
    "InvalidScoreError",
    "GradeNotFoundError",
    "SemesterNotFoundError",
    "GPACalculator",
    "round_half_up",
    "THAI_GRADE_BANDS",
    "ComponentMaximums",
    "GradeBand",
    "GradingScale",
    "grade_label_for_point",
    "grade_point_for_percentage",
    "GradeRepository",
    "GradeService",
    "ReportBuilder",
    "ScoreAggregator",
]
