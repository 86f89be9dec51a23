from datetime import datetime, timezone

import pytest

from app.core.exceptions import NotFound
from app.models.marks import AssessmentElement, CurriculumType, ExamEntry, ResultEntry, Student
from app.services.calculation import CalculationService
from app.services.marks_lookup import SqlMarksLookup

FIXED_NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(db):
    return CalculationService(SqlMarksLookup(db), clock=lambda: FIXED_NOW)


def test_grading_scales_come_back_descending(db, school):
    scales = SqlMarksLookup(db).get_grading_scales(school["school_id"])
    assert [s.grade_letter for s in scales] == ["A", "B", "C"]


def test_subject_ids_only_include_subjects_with_elements(db, school):
    subject_ids = SqlMarksLookup(db).get_subject_ids(school["exam_set_id"])
    assert subject_ids == [school["maths_id"], school["english_id"]]


def test_result_entries_carry_element_weight(db, school):
    entries = SqlMarksLookup(db).get_result_entries(
        school["student_id"], school["exam_set_id"], school["maths_id"]
    )
    assert [(e.score_obtained, e.max_score_at_entry) for e in entries] == [(8, 10), (18, 20)]
    assert [e.contributing_weight_percent for e in entries] == [20, 80]


def test_aggregate_from_database(service, school):
    result = service.aggregate_subject_marks(
        school["student_id"], school["exam_set_id"], school["maths_id"]
    )
    assert result.total_marks_obtained == 26
    assert result.total_max_marks == 30
    assert result.percentage == 86.67


def test_aggregate_ignores_other_students_marks(db, service, school):
    other = Student(school_id=1, first_name="Brian", last_name="Okello", class_name="P7", reg_number="REG002")
    db.add(other)
    db.flush()
    entry = ExamEntry(
        student_id=other.student_id, subject_id=school["english_id"], exam_set_id=school["exam_set_id"]
    )
    db.add(entry)
    db.flush()
    db.add(ResultEntry(exam_entry_id=entry.exam_entry_id, element_id=school["paper1_id"],
                       score_obtained=45, max_score_at_entry=50))
    db.commit()

    result = service.aggregate_subject_marks(
        school["student_id"], school["exam_set_id"], school["english_id"]
    )
    assert result.percentage == 0
    assert result.elements_data == []


def test_aggregate_subject_not_in_exam_set_is_none(service, school):
    assert service.aggregate_subject_marks(
        school["student_id"], school["exam_set_id"], school["science_id"]
    ) is None


def test_report_from_database(service, school):
    report = service.assemble_report(school["student_id"], school["exam_set_id"], school["school_id"])

    assert [s.subject_id for s in report.subjects] == [school["maths_id"], school["english_id"]]
    assert school["science_id"] not in [s.subject_id for s in report.subjects]
    assert report.curriculum_type == CurriculumType.primary_local
    assert (report.weights.formative, report.weights.summative) == (40, 60)
    assert [s.min_score_percent for s in report.grading_scales] == [80, 60, 40]
    assert report.subjects[1].percentage == 0


def test_report_twice_is_identical(service, school):
    args = (school["student_id"], school["exam_set_id"], school["school_id"])
    assert service.assemble_report(*args).model_dump() == service.assemble_report(*args).model_dump()


def test_report_keeps_entered_snapshot_after_element_changes(db, service, school):
    midterm = db.query(AssessmentElement).filter(
        AssessmentElement.element_id == school["midterm_id"]
    ).one()
    midterm.max_score = 40
    db.commit()

    result = service.aggregate_subject_marks(
        school["student_id"], school["exam_set_id"], school["maths_id"]
    )
    assert result.total_max_marks == 30


def test_report_for_unknown_exam_set(service, school):
    with pytest.raises(NotFound):
        service.assemble_report(school["student_id"], 9999, school["school_id"])


def test_recalculate_covers_entered_exam_sets(service, school):
    reports = service.recalculate_student_reports(school["student_id"], school["school_id"])
    assert [r.exam_set_id for r in reports] == [school["exam_set_id"]]
