import pytest

from app.core.exceptions import NotFound
from app.models.marks import AssessmentElement, ExamEntry, ResultEntry
from app.schemas.marks import BulkMarkEntry, MarkInput
from app.services.marks_entry import MarksEntryService


def upload(db, school, entries, user_id=5):
    return MarksEntryService(db).bulk_upload_marks(
        school["exam_set_id"], school["school_id"], entries, entered_by_user_id=user_id
    )


def test_bulk_upload_records_marks_with_snapshot(db, school):
    result = upload(db, school, [
        BulkMarkEntry(student_identifier="REG001", marks=[MarkInput(element_id=school["paper1_id"], score_obtained=40)]),
    ])

    assert result.success == 1
    assert result.errors == []
    mark = db.query(ResultEntry).filter(ResultEntry.element_id == school["paper1_id"]).one()
    assert mark.score_obtained == 40
    assert mark.max_score_at_entry == 50
    assert mark.entered_by_user_id == 5


def test_bulk_upload_overwrites_existing_mark(db, school):
    upload(db, school, [
        BulkMarkEntry(student_identifier="REG001", marks=[MarkInput(element_id=school["ca1_id"], score_obtained=3)]),
    ])

    marks = db.query(ResultEntry).filter(ResultEntry.element_id == school["ca1_id"]).all()
    assert len(marks) == 1
    assert marks[0].score_obtained == 3


def test_bulk_upload_resolves_lin_number(db, school):
    result = upload(db, school, [
        BulkMarkEntry(
            student_identifier="LIN001",
            identifier_type="lin_number",
            marks=[MarkInput(element_id=school["paper1_id"], score_obtained=10)],
        ),
    ])
    assert result.success == 1


def test_bulk_upload_reports_unknown_student(db, school):
    result = upload(db, school, [
        BulkMarkEntry(student_identifier="NOPE", marks=[MarkInput(element_id=school["paper1_id"], score_obtained=10)]),
    ])
    assert result.success == 0
    assert result.errors[0].identifier == "NOPE"
    assert result.errors[0].error == "Student not found"


def test_bulk_upload_rejects_score_above_max(db, school):
    result = upload(db, school, [
        BulkMarkEntry(student_identifier="REG001", marks=[
            MarkInput(element_id=school["paper1_id"], score_obtained=51),
            MarkInput(element_id=school["ca1_id"], score_obtained=9),
        ]),
    ])

    assert result.success == 1
    assert len(result.errors) == 1
    assert result.errors[0].element_id == school["paper1_id"]
    assert "exceeds maximum" in result.errors[0].error
    assert db.query(ResultEntry).filter(ResultEntry.element_id == school["paper1_id"]).count() == 0


def test_bulk_upload_rejects_element_from_another_exam_set(db, school):
    result = MarksEntryService(db).bulk_upload_marks(
        9999, school["school_id"],
        [BulkMarkEntry(student_identifier="REG001", marks=[MarkInput(element_id=school["ca1_id"], score_obtained=5)])],
    )
    assert result.errors[0].error == "Element not found or does not belong to this exam set"


def test_bulk_upload_registers_missing_exam_entry_and_completes(db, school):
    db.query(ExamEntry).filter(ExamEntry.subject_id == school["english_id"]).delete()
    db.commit()

    upload(db, school, [
        BulkMarkEntry(student_identifier="REG001", marks=[MarkInput(element_id=school["paper1_id"], score_obtained=20)]),
    ])

    entries = db.query(ExamEntry).filter(ExamEntry.student_id == school["student_id"]).all()
    assert len(entries) == 2
    assert {e.status for e in entries} == {"Completed"}


def test_marks_by_student_lists_pending_subjects(db, school):
    rows = MarksEntryService(db).get_marks_by_student(school["student_id"], school["exam_set_id"])

    english = [r for r in rows if r.subject_name == "English"]
    assert len(english) == 1
    assert english[0].entry_id is None
    assert english[0].status == "Pending Entry"
    assert [r.element_name for r in rows if r.subject_name == "Mathematics"] == ["CA1", "Midterm"]


def test_marks_by_exam_entry_shows_current_max(db, school):
    element = db.query(AssessmentElement).filter(AssessmentElement.element_id == school["ca1_id"]).one()
    element.max_score = 15
    db.commit()

    marks = MarksEntryService(db).get_marks_by_exam_entry(school["maths_entry_id"])
    ca1 = next(m for m in marks if m.element_name == "CA1")
    assert ca1.max_score_at_entry == 10
    assert ca1.current_max_score == 15


def test_delete_marks_entry(db, school):
    entry_id = db.query(ResultEntry).first().entry_id
    MarksEntryService(db).delete_marks_entry(entry_id)
    assert db.query(ResultEntry).count() == 1

    with pytest.raises(NotFound):
        MarksEntryService(db).delete_marks_entry(entry_id)
