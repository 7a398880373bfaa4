"""
Integration Tests for GradebookProcessor

Loads gradebook and semester CSV exports from disk and feeds the result
into GradeService.
"""

import pytest

from thai_grading.data_processor import GRADEBOOK_REQUIRED_COLUMNS, GradebookProcessor
from thai_grading.grade_service import GradeService

GRADEBOOK_CSV = """\
Student ID,Subject Instance ID,Subject ID,Subject Code,Subject Name,Credits,Semester ID,Subject Area,Classwork,Midterm,Final,Behavior,Remarks
S001,si-tha,tha,ท21101,ภาษาไทย,1.5,2566-1,THA,24,16,40,,ตั้งใจเรียน
S001,si-mat,mat,ค21101,คณิตศาสตร์,1.5,2566-1,MAT,21,14,35,,
S002,si-tha,tha,ท21101,ภาษาไทย,1.5,2566-1,THA,,,,,
S002,si-mat,mat,ค21101,คณิตศาสตร์,1.5,2566-1,MAT,-5,10,20,,
S003,si-sci,sci,ว21101,วิทยาศาสตร์,0,2566-1,SCI,10,10,10,,
S003,si-art,art,ศ21101,ศิลปะ,abc,2566-1,ART,10,10,10,,
S003,si-club,club,ก21901,ชุมนุม,0.5,2566-1,ACT,30,,,,
S001,si-mat,mat,ค21101,คณิตศาสตร์,1.5,2566-1,MAT,24,16,40,,
"""

SEMESTERS_CSV = """\
Semester ID,Academic Year,Semester,Name,Start Date
2566-2,2566,2,,2023-11-01
2566-1,2566,1,,2023-05-15
bad,2024,1,,
"""


@pytest.fixture
def gradebook_file(tmp_path):
    path = tmp_path / "gradebook.csv"
    path.write_text(GRADEBOOK_CSV, encoding="utf-8")
    return path


@pytest.fixture
def semesters_file(tmp_path):
    path = tmp_path / "semesters.csv"
    path.write_text(SEMESTERS_CSV, encoding="utf-8")
    return path


@pytest.fixture
def processor(gradebook_file, semesters_file):
    processor = GradebookProcessor()
    assert processor.load_gradebook(gradebook_file)
    assert processor.load_semesters(semesters_file)
    return processor


class TestLoadGradebook:
    def test_valid_rows_loaded(self, processor):
        grades = {(g.student_id, g.subject_instance.id): g for g in processor.grades.values()}

        assert set(grades) == {("S001", "si-tha"), ("S001", "si-mat"), ("S002", "si-tha"), ("S003", "si-club")}

        thai = grades[("S001", "si-tha")]
        assert thai.grade_point == 4.0
        assert thai.remarks == "ตั้งใจเรียน"
        assert thai.subject_instance.subject_area.name_th == "ภาษาไทย"
        assert thai.credits == 1.5

    def test_blank_scores_are_ungraded(self, processor):
        grade = processor.grades[("S002", "si-tha", None)]
        assert not grade.is_graded
        assert grade.components.is_empty

    def test_rejected_rows(self, processor):
        errors = processor.validation_errors
        assert len(errors) == 3
        assert errors[0].startswith("Row 5:") and "classwork_score" in errors[0]
        assert errors[1].startswith("Row 6:") and "credits" in errors[1]
        assert errors[2] == "Row 7: Credits must be numeric, got: abc"

    def test_unknown_area_warning(self, processor):
        assert "Unknown learning area code: ACT" in processor.validation_warnings
        club = processor.grades[("S003", "si-club", None)]
        assert club.subject_instance.subject_area.code == "ACT"
        # 30 / 30
        assert club.grade_point == 4.0

    def test_duplicate_later_row_kept(self, processor):
        assert any("duplicate grade for student S001 in si-mat" in w for w in processor.validation_warnings)
        assert processor.grades[("S001", "si-mat", None)].grade_point == 4.0

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "partial.csv"
        path.write_text("Student ID,Credits\nS001,1.5\n", encoding="utf-8")
        processor = GradebookProcessor()

        assert not processor.load_gradebook(path)
        assert "missing columns" in processor.validation_errors[0]
        assert "Subject Code" in processor.validation_errors[0]

    def test_missing_file(self, tmp_path):
        processor = GradebookProcessor()
        assert not processor.load_gradebook(tmp_path / "nope.csv")
        assert processor.validation_errors[0].startswith("Failed to load gradebook")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        assert not GradebookProcessor().load_gradebook(path)

    def test_header_only(self, tmp_path):
        path = tmp_path / "header.csv"
        path.write_text(",".join(GRADEBOOK_REQUIRED_COLUMNS) + "\n", encoding="utf-8")
        processor = GradebookProcessor()

        assert processor.load_gradebook(path)
        assert processor.grades == {}


class TestLoadSemesters:
    def test_semesters(self, processor):
        assert set(processor.semesters) == {"2566-1", "2566-2"}
        assert processor.semesters["2566-1"].start_date.isoformat() == "2023-05-15"
        assert processor.semesters["2566-2"].display_name == "ภาคเรียนที่ 2/2566"

    def test_invalid_semester_row(self, processor):
        assert any(e.startswith("Semester row 4:") for e in processor.validation_errors)


class TestOutputs:
    def test_grades_frame(self, processor):
        frame = processor.grades_frame()

        assert len(frame) == 4
        assert list(frame.columns[:3]) == ["student_id", "subject_code", "semester_id"]
        assert frame["grade_point"].isna().sum() == 1

    def test_empty_grades_frame(self):
        frame = GradebookProcessor().grades_frame()
        assert frame.empty
        assert "grade_label" in frame.columns

    def test_validation_report(self, processor):
        report = processor.generate_validation_report()

        assert "GRADEBOOK VALIDATION REPORT" in report
        assert "❌ ERRORS" in report
        assert "Unknown learning area code: ACT" in report
        assert "Grade Records: 4" in report
        assert "Graded: 3" in report
        assert "Semesters: 2" in report

    def test_clean_report(self, tmp_path):
        path = tmp_path / "clean.csv"
        path.write_text(
            ",".join(GRADEBOOK_REQUIRED_COLUMNS) + "\nS001,si-tha,tha,ท21101,ภาษาไทย,1.5,2566-1\n",
            encoding="utf-8",
        )
        processor = GradebookProcessor()
        processor.load_gradebook(path)

        assert "✅ All validation checks passed!" in processor.generate_validation_report()

    def test_feeds_grade_service(self, processor, sample_student):
        service = GradeService(processor.repository(), semesters_index=processor.semesters)

        assert service.semester_gpa("S001", "2566-1").gpa == 4.0
        report = service.report_card(sample_student, "2566-1")
        assert [group.subject_area.code for group in report.grades] == ["THA", "MAT"]


class TestMalformedInput:
    HEADER = (
        "Student ID,Subject Instance ID,Subject ID,Subject Code,Subject Name,Credits,Semester ID,Classwork\n"
    )

    def test_non_finite_numbers_rejected(self, tmp_path):
        """inf credits or scores are row errors, so GPA never sees them"""
        path = tmp_path / "inf.csv"
        path.write_text(
            self.HEADER
            + "S001,si-tha,tha,ท21101,ภาษาไทย,inf,2566-1,20\n"
            + "S001,si-mat,mat,ค21101,คณิตศาสตร์,1.5,2566-1,inf\n"
            + "S001,si-sci,sci,ว21101,วิทยาศาสตร์,1.5,2566-1,nan\n"
            + "S001,si-eng,eng,อ21101,ภาษาอังกฤษ,1.0,2566-1,24\n",
            encoding="utf-8",
        )
        processor = GradebookProcessor()

        assert processor.load_gradebook(path)

        errors = processor.validation_errors
        assert len(errors) == 2
        assert errors[0].startswith("Row 2:") and "credits" in errors[0]
        assert errors[1].startswith("Row 3:") and "classwork_score" in errors[1]

        # a literal "nan" cell is read as blank, i.e. not yet entered
        assert not processor.grades[("S001", "si-sci", None)].is_graded

        result = GradeService(processor.repository()).semester_gpa("S001", "2566-1")
        # 24 / 30
        assert result.gpa == 4.0
        assert result.total_credits == 1.0

    def test_thai_legacy_encoding(self, tmp_path):
        """TIS-620 exports from older Excel versions are reported, not raised"""
        path = tmp_path / "tis620.csv"
        path.write_bytes(
            (self.HEADER + "S001,si-tha,tha,ท21101,ภาษาไทย,1.5,2566-1,20\n").encode("tis_620")
        )
        processor = GradebookProcessor()

        assert not processor.load_gradebook(path)
        assert processor.validation_errors[0].startswith("Failed to load gradebook")
        assert processor.grades == {}

    def test_semesters_legacy_encoding(self, tmp_path):
        path = tmp_path / "semesters_tis620.csv"
        path.write_bytes("Semester ID,Academic Year,Semester,Name\n2566-1,2566,1,ภาคเรียนที่ 1\n".encode("tis_620"))
        processor = GradebookProcessor()

        assert not processor.load_semesters(path)
        assert processor.validation_errors[0].startswith("Failed to load semesters")
