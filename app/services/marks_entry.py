import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound
from app.models.marks import (
    AssessmentElement,
    ExamEntry,
    ExamEntryStatus,
    ResultEntry,
    Student,
    Subject,
)
from app.schemas import marks as schemas

logger = logging.getLogger(__name__)


class MarksEntryService:
    def __init__(self, db: Session):
        self.db = db

    def bulk_upload_marks(
        self,
        exam_set_id: int,
        school_id: int,
        entries: List[schemas.BulkMarkEntry],
        entered_by_user_id: Optional[int] = None,
    ) -> schemas.BulkUploadResult:
        """
        Record marks for many students in one transaction.

        Rows that cannot be applied (unknown student, element outside the exam
        set, score above the element's max) are reported back in ``errors``
        and skipped; everything else is written. Each mark stores the
        element's current max score as its ``max_score_at_entry`` snapshot.
        """
        logger.info(
            "[BulkUpload] Starting upload for exam set %s, school %s, entries: %d",
            exam_set_id, school_id, len(entries),
        )
        errors: List[schemas.BulkUploadError] = []
        success_count = 0

        try:
            for entry in entries:
                student = self._find_student(school_id, entry)
                if not student:
                    logger.warning("[BulkUpload] Student not found: %s", entry.student_identifier)
                    errors.append(
                        schemas.BulkUploadError(
                            identifier=entry.student_identifier, error="Student not found"
                        )
                    )
                    continue

                for mark in entry.marks:
                    element = self.db.query(AssessmentElement).filter(
                        AssessmentElement.element_id == mark.element_id,
                        AssessmentElement.exam_set_id == exam_set_id,
                    ).first()
                    if not element:
                        logger.warning(
                            "[BulkUpload] Element %s not in exam set %s", mark.element_id, exam_set_id
                        )
                        errors.append(
                            schemas.BulkUploadError(
                                identifier=entry.student_identifier,
                                element_id=mark.element_id,
                                error="Element not found or does not belong to this exam set",
                            )
                        )
                        continue

                    exam_entry = self._ensure_exam_entry(
                        student.student_id, element.subject_id, exam_set_id
                    )

                    if mark.score_obtained > element.max_score:
                        errors.append(
                            schemas.BulkUploadError(
                                identifier=entry.student_identifier,
                                element_id=mark.element_id,
                                error=f"Score {mark.score_obtained} exceeds maximum {element.max_score}",
                            )
                        )
                        continue

                    self._upsert_result(exam_entry, element, mark.score_obtained, entered_by_user_id)

                self.db.query(ExamEntry).filter(
                    ExamEntry.student_id == student.student_id,
                    ExamEntry.exam_set_id == exam_set_id,
                ).update({"status": ExamEntryStatus.completed.value}, synchronize_session="fetch")
                success_count += 1

            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("[BulkUpload] Transaction failed")
            raise

        logger.info("[BulkUpload] Completed. Success: %d, Errors: %d", success_count, len(errors))
        return schemas.BulkUploadResult(success=success_count, errors=errors)

    def _find_student(self, school_id: int, entry: schemas.BulkMarkEntry) -> Optional[Student]:
        column = Student.lin_number if entry.identifier_type == "lin_number" else Student.reg_number
        return self.db.query(Student).filter(
            column == entry.student_identifier, Student.school_id == school_id
        ).first()

    def _ensure_exam_entry(self, student_id: int, subject_id: int, exam_set_id: int) -> ExamEntry:
        exam_entry = self.db.query(ExamEntry).filter(
            ExamEntry.student_id == student_id,
            ExamEntry.subject_id == subject_id,
            ExamEntry.exam_set_id == exam_set_id,
        ).first()
        if not exam_entry:
            exam_entry = ExamEntry(
                student_id=student_id,
                subject_id=subject_id,
                exam_set_id=exam_set_id,
                status=ExamEntryStatus.pending.value,
            )
            self.db.add(exam_entry)
            self.db.flush()
        return exam_entry

    def _upsert_result(
        self,
        exam_entry: ExamEntry,
        element: AssessmentElement,
        score: float,
        entered_by_user_id: Optional[int],
    ) -> ResultEntry:
        result = self.db.query(ResultEntry).filter(
            ResultEntry.exam_entry_id == exam_entry.exam_entry_id,
            ResultEntry.element_id == element.element_id,
        ).first()
        if result:
            result.score_obtained = score
            result.max_score_at_entry = element.max_score
            result.entered_by_user_id = entered_by_user_id
            result.created_at = datetime.now(timezone.utc)
        else:
            result = ResultEntry(
                exam_entry_id=exam_entry.exam_entry_id,
                element_id=element.element_id,
                score_obtained=score,
                max_score_at_entry=element.max_score,
                entered_by_user_id=entered_by_user_id,
            )
            self.db.add(result)
        self.db.flush()
        return result

    def get_marks_by_exam_entry(self, exam_entry_id: int) -> List[schemas.ExamEntryMark]:
        rows = (
            self.db.query(ResultEntry, AssessmentElement)
            .join(AssessmentElement, ResultEntry.element_id == AssessmentElement.element_id)
            .filter(ResultEntry.exam_entry_id == exam_entry_id)
            .order_by(AssessmentElement.element_name)
            .all()
        )
        return [
            schemas.ExamEntryMark(
                entry_id=result.entry_id,
                exam_entry_id=result.exam_entry_id,
                element_id=result.element_id,
                element_name=element.element_name,
                score_obtained=result.score_obtained,
                max_score_at_entry=result.max_score_at_entry,
                current_max_score=element.max_score,
                entered_by_user_id=result.entered_by_user_id,
                created_at=result.created_at,
            )
            for result, element in rows
        ]

    def get_marks_by_student(self, student_id: int, exam_set_id: int) -> List[schemas.StudentMarkRow]:
        rows = (
            self.db.query(ExamEntry, Subject, ResultEntry, AssessmentElement)
            .join(Subject, ExamEntry.subject_id == Subject.subject_id)
            .outerjoin(ResultEntry, ResultEntry.exam_entry_id == ExamEntry.exam_entry_id)
            .outerjoin(AssessmentElement, ResultEntry.element_id == AssessmentElement.element_id)
            .filter(ExamEntry.student_id == student_id, ExamEntry.exam_set_id == exam_set_id)
            .order_by(Subject.subject_name, AssessmentElement.element_name)
            .all()
        )
        return [
            schemas.StudentMarkRow(
                exam_entry_id=exam_entry.exam_entry_id,
                subject_id=subject.subject_id,
                subject_name=subject.subject_name,
                status=exam_entry.status,
                entry_id=result.entry_id if result else None,
                element_name=element.element_name if element else None,
                score_obtained=result.score_obtained if result else None,
                max_score_at_entry=result.max_score_at_entry if result else None,
            )
            for exam_entry, subject, result, element in rows
        ]

    def delete_marks_entry(self, entry_id: int) -> None:
        result = self.db.query(ResultEntry).filter(ResultEntry.entry_id == entry_id).first()
        if not result:
            raise NotFound("Marks entry", entry_id)
        self.db.delete(result)
        self.db.commit()
