#!/usr/bin/env python3
"""
DATA MODELS - Pydantic schemas for Thai K-12 grade data
Type-safe data structures for score entry, grades, GPA/GPAX results and report view-models

COMPREHENSIVE DATA VALIDATION:
✅ Score Components: classwork, midterm, final, behaviour (absent ≠ zero)
✅ Subject Instances: subject offered in one semester, with credits
✅ Grades: component scores plus derived percentage/grade point/label
✅ Results: SemesterGPA, GPAResult, GPAXResult
✅ View-models: ReportCardData (ปพ.5), TranscriptData (ปพ.6)

VALIDATION RULES:
- Scores must be finite and non-negative; a missing score means "not yet entered"
- Credits must be finite and positive
- Derived grade fields are all set or all unset
- National IDs must pass the 13-digit check

Priority: CRITICAL - Foundation for all grade calculations
Dependencies: Pydantic for validation
"""

from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .thai_calendar import validate_thai_national_id

SCORE_FIELDS = ("classwork_score", "midterm_score", "final_score", "behavior_score")


class SubjectArea(BaseModel):
    """Learning area (กลุ่มสาระการเรียนรู้)"""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Learning area code (THA, MAT, ...)")
    name_th: str = Field(..., description="Thai name")
    name_en: Optional[str] = Field(None, description="English name")
    color: Optional[str] = Field(None, description="Display colour")


THAI_LEARNING_AREAS: List[SubjectArea] = [
    SubjectArea(code="THA", name_th="ภาษาไทย", name_en="Thai Language"),
    SubjectArea(code="MAT", name_th="คณิตศาสตร์", name_en="Mathematics"),
    SubjectArea(code="SCI", name_th="วิทยาศาสตร์และเทคโนโลยี", name_en="Science and Technology"),
    SubjectArea(code="SOC", name_th="สังคมศึกษา ศาสนาและวัฒนธรรม", name_en="Social Studies, Religion and Culture"),
    SubjectArea(code="HPE", name_th="สุขศึกษาและพลศึกษา", name_en="Health and Physical Education"),
    SubjectArea(code="ART", name_th="ศิลปะ", name_en="Arts"),
    SubjectArea(code="VOC", name_th="การงานอาชีพ", name_en="Occupations and Technology"),
    SubjectArea(code="ENG", name_th="ภาษาต่างประเทศ", name_en="Foreign Languages"),
]


class Semester(BaseModel):
    """Semester metadata used for chronological ordering and display"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Semester identifier")
    academic_year: int = Field(..., ge=2400, le=2700, description="Academic year in Buddhist Era (e.g. 2567)")
    number: int = Field(..., ge=1, le=3, description="Semester number within the year")
    name: Optional[str] = Field(None, description="Display name")
    start_date: Optional[date] = Field(None, description="First day of the semester")

    @property
    def display_name(self) -> str:
        """Name as printed on report cards, e.g. ภาคเรียนที่ 1/2567"""
        if self.name:
            return self.name
        return f"ภาคเรียนที่ {self.number}/{self.academic_year}"


class SubjectInstanceRef(BaseModel):
    """A subject offered in one semester - the unit GPA credits attach to"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = Field(..., description="Subject instance identifier")
    subject_id: str = Field(..., description="Subject identifier")
    subject_code: str = Field(..., description="Subject code (e.g. ค21101)")
    subject_name_th: str = Field(..., description="Thai subject name")
    subject_name_en: Optional[str] = Field(None, description="English subject name")
    credits: float = Field(..., gt=0.0, description="Credit weight (หน่วยกิต)")
    semester_id: str = Field(..., description="Semester this instance belongs to")
    subject_area: Optional[SubjectArea] = Field(None, description="Learning area")


class ScoreComponents(BaseModel):
    """Raw component scores; None means not yet entered, never zero"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    classwork_score: Optional[float] = Field(None, ge=0.0, description="Classwork (คะแนนเก็บ)")
    midterm_score: Optional[float] = Field(None, ge=0.0, description="Midterm exam")
    final_score: Optional[float] = Field(None, ge=0.0, description="Final exam")
    behavior_score: Optional[float] = Field(None, ge=0.0, description="Behaviour (คุณลักษณะ)")

    def present(self) -> Dict[str, float]:
        """Component name → score for the components that have been entered"""
        return {
            name[: -len("_score")]: getattr(self, name)
            for name in SCORE_FIELDS
            if getattr(self, name) is not None
        }

    @property
    def is_empty(self) -> bool:
        return not self.present()

    def merged_with(self, other: "ScoreComponents") -> "ScoreComponents":
        """Overlay the scores entered in `other`; unset fields keep the current value"""
        values = {}
        for name in SCORE_FIELDS:
            new_value = getattr(other, name)
            values[name] = new_value if new_value is not None else getattr(self, name)
        return ScoreComponents(**values)


class GradeEntry(BaseModel):
    """Scores entered by a teacher for one student"""

    model_config = ConfigDict(allow_inf_nan=False)

    student_id: str = Field(..., min_length=1, description="Student ID")
    grading_period_id: Optional[str] = Field(None, description="Grading period, if any")

    classwork_score: Optional[float] = Field(None, ge=0.0)
    midterm_score: Optional[float] = Field(None, ge=0.0)
    final_score: Optional[float] = Field(None, ge=0.0)
    behavior_score: Optional[float] = Field(None, ge=0.0)

    remarks: Optional[str] = Field(None, description="Teacher remarks")

    @property
    def components(self) -> ScoreComponents:
        return ScoreComponents(**{name: getattr(self, name) for name in SCORE_FIELDS})


class GradeUpdate(BaseModel):
    """Partial update; fields left as None keep their stored value"""

    model_config = ConfigDict(allow_inf_nan=False)

    classwork_score: Optional[float] = Field(None, ge=0.0)
    midterm_score: Optional[float] = Field(None, ge=0.0)
    final_score: Optional[float] = Field(None, ge=0.0)
    behavior_score: Optional[float] = Field(None, ge=0.0)

    remarks: Optional[str] = None

    @property
    def components(self) -> ScoreComponents:
        return ScoreComponents(**{name: getattr(self, name) for name in SCORE_FIELDS})


class Grade(BaseModel):
    """
    Grade record for one student in one subject instance

    total_score, percentage, grade_point and grade_label are derived from the
    components by ScoreAggregator and are recomputed on every score change.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = Field(default_factory=lambda: uuid4().hex, description="Grade record ID")
    student_id: str = Field(..., min_length=1, description="Student ID")
    subject_instance: SubjectInstanceRef = Field(..., description="Subject instance graded")
    grading_period_id: Optional[str] = Field(None, description="Grading period, if any")

    components: ScoreComponents = Field(default_factory=ScoreComponents)

    total_score: Optional[float] = Field(None, ge=0.0)
    percentage: Optional[float] = Field(None, ge=0.0)
    grade_point: Optional[float] = Field(None, ge=0.0, le=4.0)
    grade_label: Optional[str] = None

    remarks: Optional[str] = None
    updated_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def check_derived_fields(self):
        """Derived fields are either all present (graded) or all absent (ungraded)"""
        derived = (self.total_score, self.percentage, self.grade_point, self.grade_label)
        present = [value is not None for value in derived]
        if any(present) and not all(present):
            raise ValueError("total_score, percentage, grade_point and grade_label must be set together")
        if all(present) and self.components.is_empty:
            raise ValueError("A graded record needs at least one component score")
        return self

    @property
    def is_graded(self) -> bool:
        return self.grade_point is not None

    @property
    def credits(self) -> float:
        return self.subject_instance.credits

    @property
    def semester_id(self) -> str:
        return self.subject_instance.semester_id


class SemesterGPA(BaseModel):
    """GPA for one semester (computed, never stored)"""

    semester_id: str
    gpa: float = Field(..., ge=0.0)
    total_credits: float = Field(..., ge=0.0)
    semester: Optional[Semester] = None


class GPAResult(BaseModel):
    """Semester GPA plus the graded records it was computed from"""

    gpa: float = Field(..., ge=0.0)
    total_credits: float = Field(..., ge=0.0)
    grades: List[Grade] = Field(default_factory=list)


class GPAXResult(BaseModel):
    """Cumulative GPA with chronological per-semester history"""

    gpax: float = Field(..., ge=0.0)
    total_credits: float = Field(..., ge=0.0)
    semesters: List[SemesterGPA] = Field(default_factory=list)


class StudentProfile(BaseModel):
    """Student identity block printed on report cards and transcripts"""

    id: str = Field(..., description="Student ID")
    student_code: str = Field(..., description="School student code")
    title_th: str = Field("", description="Thai title (เด็กชาย, นางสาว, ...)")
    first_name_th: str = Field(..., description="Thai first name")
    last_name_th: str = Field(..., description="Thai last name")

    title_en: Optional[str] = None
    first_name_en: Optional[str] = None
    last_name_en: Optional[str] = None

    national_id: Optional[str] = Field(None, description="13-digit national ID")
    birth_date: Optional[date] = None
    enrollment_date: Optional[date] = None

    @field_validator("national_id")
    @classmethod
    def validate_national_id(cls, v):
        """Validate Thai national ID check digit"""
        if v and not validate_thai_national_id(v):
            raise ValueError(f"Invalid Thai national ID: {v}")
        return v

    @property
    def full_name_th(self) -> str:
        return f"{self.title_th}{self.first_name_th} {self.last_name_th}"

    @property
    def full_name_en(self) -> Optional[str]:
        if not self.first_name_en:
            return None
        parts = [self.title_en, self.first_name_en, self.last_name_en]
        return " ".join(part for part in parts if part)


class ClassroomInfo(BaseModel):
    name: str = Field(..., description="Classroom name (e.g. ม.1/2)")
    grade_level_name_th: Optional[str] = Field(None, description="Grade level (e.g. ม.1)")


class AttendanceSummary(BaseModel):
    """Attendance counts for a semester, supplied by the attendance module"""

    present: int = Field(0, ge=0)
    absent: int = Field(0, ge=0)
    late: int = Field(0, ge=0)
    sick_leave: int = Field(0, ge=0)
    personal_leave: int = Field(0, ge=0)

    @property
    def total_days(self) -> int:
        return self.present + self.absent + self.late + self.sick_leave + self.personal_leave

    @property
    def attendance_rate(self) -> float:
        """Share of school days attended (present or late), 0.0 when no days recorded"""
        if self.total_days == 0:
            return 0.0
        return (self.present + self.late) / self.total_days


class BehaviorSummary(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    score: Optional[float] = Field(None, ge=0.0)
    max_score: float = Field(100.0, gt=0.0)
    remarks: Optional[str] = None


class SubjectGradeLine(BaseModel):
    """One subject row on a report card or transcript"""

    code: str
    name_th: str
    credits: float
    grade_label: Optional[str] = None
    grade_point: Optional[float] = None
    percentage: Optional[float] = None


class SubjectAreaGrades(BaseModel):
    subject_area: SubjectArea
    subjects: List[SubjectGradeLine] = Field(default_factory=list)


class ReportCardData(BaseModel):
    """Semester report card (ปพ.5-style)"""

    student: StudentProfile
    semester: Semester
    semester_name: str
    grades: List[SubjectAreaGrades] = Field(default_factory=list)
    gpa: float = Field(..., ge=0.0)
    total_credits: float = Field(..., ge=0.0)
    attendance: AttendanceSummary = Field(default_factory=AttendanceSummary)
    behavior: BehaviorSummary = Field(default_factory=BehaviorSummary)


class TranscriptSemester(BaseModel):
    semester_id: str
    semester: Optional[Semester] = None
    semester_name: str
    classroom: Optional[ClassroomInfo] = None
    grades: List[SubjectGradeLine] = Field(default_factory=list)
    gpa: float = Field(..., ge=0.0)
    credits: float = Field(..., ge=0.0)


class TranscriptData(BaseModel):
    """Complete academic record (ปพ.6)"""

    student: StudentProfile
    semesters: List[TranscriptSemester] = Field(default_factory=list)
    gpax: float = Field(..., ge=0.0)
    total_credits: float = Field(..., ge=0.0)
    issued_on: date = Field(default_factory=date.today)
    issued_on_th: str = ""


class ClassroomStudentGrades(BaseModel):
    """One row of a classroom grade sheet"""

    student_id: str
    grades: List[Grade] = Field(default_factory=list)
    gpa: float = Field(..., ge=0.0)
    total_credits: float = Field(..., ge=0.0)


# Export all models
__all__ = [
    "SCORE_FIELDS",
    "SubjectArea",
    "THAI_LEARNING_AREAS",
    "Semester",
    "SubjectInstanceRef",
    "ScoreComponents",
    "GradeEntry",
    "GradeUpdate",
    "Grade",
    "SemesterGPA",
    "GPAResult",
    "GPAXResult",
    "StudentProfile",
    "ClassroomInfo",
    "AttendanceSummary",
    "BehaviorSummary",
    "SubjectGradeLine",
    "SubjectAreaGrades",
    "ReportCardData",
    "TranscriptSemester",
    "TranscriptData",
    "ClassroomStudentGrades",
]
