from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.models.marks import AssessmentElement, ExamEntry, Subject
from app.models.reports import ResultsHeader
from app.schemas import marks as schemas

UPDATABLE_FIELDS = ("subject_name", "subject_type", "ncdc_reference_name", "max_selections_allowed")
SUBJECT_IN_USE = "Subject is still in use and cannot be deleted"


class SubjectService:
    def __init__(self, db: Session):
        self.db = db

    def list_subjects(self, school_id: int, school_level: str) -> List[Subject]:
        return (
            self.db.query(Subject)
            .filter(Subject.school_id == school_id, Subject.school_level == school_level)
            .order_by(Subject.subject_type, Subject.subject_name)
            .all()
        )

    def create_subject(self, subject: schemas.SubjectCreate) -> Subject:
        db_subject = Subject(**subject.model_dump())
        self.db.add(db_subject)
        self.db.commit()
        self.db.refresh(db_subject)
        return db_subject

    def get_subject(self, subject_id: int) -> Subject:
        db_subject = self.db.query(Subject).filter(Subject.subject_id == subject_id).first()
        if not db_subject:
            raise NotFound("Subject", subject_id)
        return db_subject

    def update_subject(self, subject_id: int, updates: schemas.SubjectUpdate) -> Subject:
        update_data = {
            key: value
            for key, value in updates.model_dump(exclude_unset=True).items()
            if key in UPDATABLE_FIELDS and value is not None
        }
        if not update_data:
            raise ValidationError("No valid fields to update")

        db_subject = self.get_subject(subject_id)
        for key, value in update_data.items():
            setattr(db_subject, key, value)

        self.db.commit()
        self.db.refresh(db_subject)
        return db_subject

    def delete_subject(self, subject_id: int) -> None:
        db_subject = self.get_subject(subject_id)
        in_use = (
            self.db.query(AssessmentElement.element_id)
            .filter(AssessmentElement.subject_id == subject_id)
            .first()
            or self.db.query(ExamEntry.exam_entry_id)
            .filter(ExamEntry.subject_id == subject_id)
            .first()
            or self.db.query(ResultsHeader.header_id)
            .filter(ResultsHeader.subject_id == subject_id)
            .first()
        )
        if in_use:
            raise ValidationError(SUBJECT_IN_USE)

        self.db.delete(db_subject)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ValidationError(SUBJECT_IN_USE) from exc
