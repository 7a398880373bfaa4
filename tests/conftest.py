"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- Semester index
- Subject instances across learning areas
- Grade factories
- Student profile
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from thai_grading.data_models import (  # noqa: E402
    THAI_LEARNING_AREAS,
    Grade,
    ScoreComponents,
    Semester,
    StudentProfile,
    SubjectInstanceRef,
)
from thai_grading.grade_scale import describe_point, grade_label_for_point  # noqa: E402

AREAS = {area.code: area for area in THAI_LEARNING_AREAS}

# Valid 13-digit national ID (check digit 0)
VALID_NATIONAL_ID = "1101700203450"


@pytest.fixture
def sample_semesters():
    """Three semesters across two academic years"""
    return {
        "2566-1": Semester(id="2566-1", academic_year=2566, number=1, start_date=date(2023, 5, 15)),
        "2566-2": Semester(id="2566-2", academic_year=2566, number=2, start_date=date(2023, 11, 1)),
        "2567-1": Semester(id="2567-1", academic_year=2567, number=1, start_date=date(2024, 5, 16)),
    }


def make_instance(instance_id, code, name, credits, semester_id, area_code=None):
    return SubjectInstanceRef(
        id=instance_id,
        subject_id=code,
        subject_code=code,
        subject_name_th=name,
        credits=credits,
        semester_id=semester_id,
        subject_area=AREAS.get(area_code) if area_code else None,
    )


@pytest.fixture
def instance_factory():
    return make_instance


@pytest.fixture
def subject_instances():
    """Lower-secondary subjects offered in semester 2566-1"""
    return {
        "THA": make_instance("si-tha", "ท21101", "ภาษาไทย", 1.5, "2566-1", "THA"),
        "MAT": make_instance("si-mat", "ค21101", "คณิตศาสตร์", 1.5, "2566-1", "MAT"),
        "SCI": make_instance("si-sci", "ว21101", "วิทยาศาสตร์", 1.5, "2566-1", "SCI"),
        "ENG": make_instance("si-eng", "อ21101", "ภาษาอังกฤษ", 1.0, "2566-1", "ENG"),
        "HPE": make_instance("si-hpe", "พ21101", "สุขศึกษา", 0.5, "2566-1", "HPE"),
    }


@pytest.fixture
def graded():
    """Factory for a graded record with a fixed grade point

    The final exam score (out of 50) sits on the lower bound of the point's band,
    so percentage, grade point and label agree.
    """

    def _graded(subject_instance, point, student_id="S001", grading_period_id=None):
        percentage = describe_point(point).min_percent
        final_score = percentage / 2
        return Grade(
            student_id=student_id,
            subject_instance=subject_instance,
            grading_period_id=grading_period_id,
            components=ScoreComponents(final_score=final_score),
            total_score=final_score,
            percentage=percentage,
            grade_point=point,
            grade_label=grade_label_for_point(point),
        )

    return _graded


@pytest.fixture
def ungraded():
    """Factory for a record with no scores entered yet"""

    def _ungraded(subject_instance, student_id="S001"):
        return Grade(student_id=student_id, subject_instance=subject_instance)

    return _ungraded


@pytest.fixture
def sample_student():
    return StudentProfile(
        id="S001",
        student_code="66010001",
        title_th="เด็กหญิง",
        first_name_th="สมศรี",
        last_name_th="ใจดี",
        title_en="Miss",
        first_name_en="Somsri",
        last_name_en="Jaidee",
        national_id=VALID_NATIONAL_ID,
        birth_date=date(2011, 3, 2),
        enrollment_date=date(2023, 5, 15),
    )
