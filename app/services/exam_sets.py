import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound
from app.models.marks import (
    AssessmentElement,
    ExamEntry,
    ExamEntryStatus,
    ExamSet,
    Student,
    Subject,
)
from app.schemas import marks as schemas

logger = logging.getLogger(__name__)


class ExamSetService:
    def __init__(self, db: Session):
        self.db = db

    def create_exam_set(self, request: schemas.ExamSetCreate) -> ExamSet:
        """
        Create an exam set together with its assessment elements and register
        a pending exam entry for every student of the class, per subject.
        Everything is written in a single transaction.
        """
        try:
            exam_set = ExamSet(**request.model_dump(exclude={"subjects"}))
            self.db.add(exam_set)
            self.db.flush()

            for subject in request.subjects:
                for element in subject.elements:
                    self.db.add(
                        AssessmentElement(
                            school_id=request.school_id,
                            subject_id=subject.subject_id,
                            exam_set_id=exam_set.exam_set_id,
                            **element.model_dump(),
                        )
                    )

            students = self.db.query(Student).filter(
                Student.school_id == request.school_id,
                Student.class_name == request.class_level,
            ).all()

            registered = 0
            for student in students:
                for subject in request.subjects:
                    exists = self.db.query(ExamEntry).filter(
                        ExamEntry.student_id == student.student_id,
                        ExamEntry.subject_id == subject.subject_id,
                        ExamEntry.exam_set_id == exam_set.exam_set_id,
                    ).first()
                    if exists:
                        continue
                    self.db.add(
                        ExamEntry(
                            student_id=student.student_id,
                            subject_id=subject.subject_id,
                            exam_set_id=exam_set.exam_set_id,
                            status=ExamEntryStatus.pending.value,
                        )
                    )
                    self.db.flush()
                    registered += 1

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(exam_set)
        logger.info(
            "[ExamSet] Created '%s' (%s) with %d exam entries",
            exam_set.set_name, exam_set.exam_set_id, registered,
        )
        return exam_set

    def list_exam_sets(
        self,
        school_id: int,
        term: Optional[int] = None,
        year: Optional[int] = None,
        class_level: Optional[str] = None,
    ) -> List[ExamSet]:
        query = self.db.query(ExamSet).filter(ExamSet.school_id == school_id)
        if term is not None:
            query = query.filter(ExamSet.term == term)
        if year is not None:
            query = query.filter(ExamSet.year == year)
        if class_level:
            query = query.filter(ExamSet.class_level == class_level)
        return query.order_by(ExamSet.year.desc(), ExamSet.term.desc(), ExamSet.set_name).all()

    def get_exam_set(self, exam_set_id: int) -> ExamSet:
        exam_set = self.db.query(ExamSet).filter(ExamSet.exam_set_id == exam_set_id).first()
        if not exam_set:
            raise NotFound("Exam set", exam_set_id)
        return exam_set

    def delete_exam_set(self, exam_set_id: int) -> None:
        self.db.delete(self.get_exam_set(exam_set_id))
        self.db.commit()

    def list_elements(self, exam_set_id: int) -> List[AssessmentElement]:
        elements = (
            self.db.query(AssessmentElement)
            .outerjoin(Subject, AssessmentElement.subject_id == Subject.subject_id)
            .filter(AssessmentElement.exam_set_id == exam_set_id)
            .order_by(Subject.subject_name, AssessmentElement.element_name)
            .all()
        )
        logger.debug("[ExamSet] %d elements for exam set %s", len(elements), exam_set_id)
        return elements

    def create_element(self, element: schemas.AssessmentElementCreate) -> AssessmentElement:
        self.get_exam_set(element.exam_set_id)
        db_element = AssessmentElement(**element.model_dump())
        self.db.add(db_element)
        self.db.commit()
        self.db.refresh(db_element)
        return db_element

    def get_element(self, element_id: int) -> AssessmentElement:
        element = self.db.query(AssessmentElement).filter(
            AssessmentElement.element_id == element_id
        ).first()
        if not element:
            raise NotFound("Assessment element", element_id)
        return element

    def update_element(
        self, element_id: int, update: schemas.AssessmentElementUpdate
    ) -> AssessmentElement:
        # Entered marks keep their max_score_at_entry snapshot
        element = self.get_element(element_id)
        for key, value in update.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(element, key, value)
        self.db.commit()
        self.db.refresh(element)
        return element

    def delete_element(self, element_id: int) -> None:
        self.db.delete(self.get_element(element_id))
        self.db.commit()
