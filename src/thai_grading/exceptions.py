"""
Grading engine exceptions

Malformed records are rejected by the pydantic models (pydantic.ValidationError).
The classes here cover the failures the calculators and the grade service raise
themselves.
"""


class GradingError(Exception):
    """Base class for grading engine errors"""


class InvalidScoreError(GradingError, ValueError):
    """Score, percentage or grade point outside the grading scale (strict mode)"""


class GradeNotFoundError(GradingError, LookupError):
    """No grade record with the requested id"""

    def __init__(self, grade_id: str):
        super().__init__(f"Grade {grade_id} not found")
        self.grade_id = grade_id


class SemesterNotFoundError(GradingError, LookupError):
    """Semester id missing from the semester index"""

    def __init__(self, semester_id: str):
        super().__init__(f"Semester {semester_id} not found")
        self.semester_id = semester_id


__all__ = ["GradingError", "InvalidScoreError", "GradeNotFoundError", "SemesterNotFoundError"]
