"""Read-only lookups feeding the grading & report pipeline.

The calculation service only talks to a ``MarksLookup``; every row it gets
back is converted to a typed record from ``app.schemas.marks`` first.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import marks as models
from app.schemas import marks as schemas


class MarksLookup(ABC):
    @abstractmethod
    def get_exam_set(self, exam_set_id: int) -> Optional[schemas.ExamSet]:
        ...

    @abstractmethod
    def get_school_setting(self, school_id: int) -> Optional[schemas.SchoolSetting]:
        ...

    @abstractmethod
    def get_grading_scales(self, school_id: int) -> List[schemas.GradingScale]:
        """Scales for one school, highest ``min_score_percent`` first."""

    @abstractmethod
    def get_assessment_elements(
        self, exam_set_id: int, subject_id: int
    ) -> List[schemas.AssessmentElement]:
        ...

    @abstractmethod
    def get_subject_ids(self, exam_set_id: int) -> List[int]:
        """Distinct subjects with at least one element in the exam set."""

    @abstractmethod
    def get_result_entries(
        self, student_id: int, exam_set_id: int, subject_id: int
    ) -> List[schemas.ResultEntry]:
        ...

    @abstractmethod
    def get_student_exam_set_ids(self, student_id: int) -> List[int]:
        ...


class SqlMarksLookup(MarksLookup):
    def __init__(self, db: Session):
        self.db = db

    def get_exam_set(self, exam_set_id: int) -> Optional[schemas.ExamSet]:
        exam_set = self.db.query(models.ExamSet).filter(
            models.ExamSet.exam_set_id == exam_set_id
        ).first()
        return schemas.ExamSet.model_validate(exam_set) if exam_set else None

    def get_school_setting(self, school_id: int) -> Optional[schemas.SchoolSetting]:
        setting = self.db.query(models.SchoolSetting).filter(
            models.SchoolSetting.school_id == school_id
        ).first()
        return schemas.SchoolSetting.model_validate(setting) if setting else None

    def get_grading_scales(self, school_id: int) -> List[schemas.GradingScale]:
        scales = (
            self.db.query(models.GradingScale)
            .filter(models.GradingScale.school_id == school_id)
            .order_by(models.GradingScale.min_score_percent.desc())
            .all()
        )
        return [schemas.GradingScale.model_validate(s) for s in scales]

    def get_assessment_elements(
        self, exam_set_id: int, subject_id: int
    ) -> List[schemas.AssessmentElement]:
        elements = (
            self.db.query(models.AssessmentElement)
            .filter(
                models.AssessmentElement.exam_set_id == exam_set_id,
                models.AssessmentElement.subject_id == subject_id,
            )
            .order_by(models.AssessmentElement.element_id)
            .all()
        )
        return [schemas.AssessmentElement.model_validate(e) for e in elements]

    def get_subject_ids(self, exam_set_id: int) -> List[int]:
        rows = (
            self.db.query(models.AssessmentElement.subject_id)
            .filter(models.AssessmentElement.exam_set_id == exam_set_id)
            .distinct()
            .order_by(models.AssessmentElement.subject_id)
            .all()
        )
        return [subject_id for (subject_id,) in rows]

    def get_result_entries(
        self, student_id: int, exam_set_id: int, subject_id: int
    ) -> List[schemas.ResultEntry]:
        rows = (
            self.db.query(models.ResultEntry, models.AssessmentElement.contributing_weight_percent)
            .join(
                models.AssessmentElement,
                models.ResultEntry.element_id == models.AssessmentElement.element_id,
            )
            .join(
                models.ExamEntry,
                models.ResultEntry.exam_entry_id == models.ExamEntry.exam_entry_id,
            )
            .filter(
                models.ExamEntry.student_id == student_id,
                models.ExamEntry.exam_set_id == exam_set_id,
                models.AssessmentElement.subject_id == subject_id,
            )
            .order_by(models.ResultEntry.element_id)
            .all()
        )
        return [
            schemas.ResultEntry(
                entry_id=entry.entry_id,
                exam_entry_id=entry.exam_entry_id,
                element_id=entry.element_id,
                score_obtained=entry.score_obtained,
                max_score_at_entry=entry.max_score_at_entry,
                contributing_weight_percent=weight,
            )
            for entry, weight in rows
        ]

    def get_student_exam_set_ids(self, student_id: int) -> List[int]:
        rows = (
            self.db.query(models.ExamEntry.exam_set_id)
            .filter(models.ExamEntry.student_id == student_id)
            .distinct()
            .order_by(models.ExamEntry.exam_set_id)
            .all()
        )
        return [exam_set_id for (exam_set_id,) in rows]
