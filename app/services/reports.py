import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.models.marks import (
    AssessmentElement,
    AssessmentType,
    ExamEntry,
    ExamSet,
    GradingScale,
    ResultEntry,
    Subject,
)
from app.models.reports import HolisticFeedback, HolisticMetric, ReportSummary, ResultsHeader
from app.schemas import reports as schemas
from app.services.calculation import resolve_grade

logger = logging.getLogger(__name__)

NO_GRADE = "N/A"
SUMMARY_FIELDS = {
    "total_percentage_score",
    "final_grade_ref",
    "weighted_formative_score",
    "weighted_summative_score",
    "class_teacher_comment",
    "head_teacher_comment",
}


class ReportService:
    """Term report cards, saved report summaries and holistic feedback."""

    def __init__(self, db: Session):
        self.db = db

    def generate_report(self, request: schemas.ReportCardRequest) -> schemas.ReportCard:
        """
        Build a student's report card across every exam set of a term.

        Each mark counts as ``percentage * contributing_weight_percent / 100``.
        The sum is the subject's total score; marks from Formative and
        Summative exam sets are also summed separately (Mixed sets only count
        towards the total). The grade comes from the school's grading scales,
        or ``N/A`` when the total is below every threshold.
        """
        scales = (
            self.db.query(GradingScale)
            .filter(GradingScale.school_id == request.school_id)
            .order_by(GradingScale.min_score_percent.desc())
            .all()
        )

        subjects = []
        for subject in self._term_subjects(request):
            marks = self._term_marks(request, subject.subject_id)

            total = formative = summative = 0.0
            for mark in marks:
                percentage = (
                    mark.score_obtained / mark.max_score_at_entry * 100
                    if mark.max_score_at_entry else 0.0
                )
                weighted = percentage * mark.contributing_weight_percent / 100
                total += weighted
                if mark.assessment_type == AssessmentType.formative:
                    formative += weighted
                elif mark.assessment_type == AssessmentType.summative:
                    summative += weighted

            scale = resolve_grade(total, scales)
            subjects.append(
                schemas.ReportCardSubject(
                    subject_id=subject.subject_id,
                    subject_name=subject.subject_name,
                    subject_type=subject.subject_type,
                    marks=[schemas.ReportCardMark.model_validate(m, from_attributes=True) for m in marks],
                    total_score=round(total, 2),
                    formative_score=round(formative, 2),
                    summative_score=round(summative, 2),
                    grade=scale.grade_letter if scale else NO_GRADE,
                    grade_descriptor=(scale.descriptor or "") if scale else "",
                )
            )

        feedback = (
            self.db.query(HolisticMetric.metric_name, HolisticMetric.metric_type, HolisticFeedback.rating)
            .join(HolisticMetric, HolisticFeedback.metric_id == HolisticMetric.metric_id)
            .filter(
                HolisticFeedback.student_id == request.student_id,
                HolisticFeedback.school_id == request.school_id,
                HolisticFeedback.term == request.term,
                HolisticFeedback.year == request.year,
            )
            .order_by(HolisticMetric.metric_type, HolisticMetric.metric_name)
            .all()
        )

        logger.info(
            "[REPORT CARD] student=%s term=%s/%s subjects=%d",
            request.student_id, request.term, request.year, len(subjects),
        )
        return schemas.ReportCard(
            student_id=request.student_id,
            school_id=request.school_id,
            term=request.term,
            year=request.year,
            subjects=subjects,
            holistic_feedback=[
                schemas.HolisticRating(metric_name=name, metric_type=metric_type, rating=rating)
                for name, metric_type, rating in feedback
            ],
        )

    def _term_subjects(self, request: schemas.ReportCardRequest) -> List[Subject]:
        return (
            self.db.query(Subject)
            .join(ExamEntry, ExamEntry.subject_id == Subject.subject_id)
            .join(ExamSet, ExamEntry.exam_set_id == ExamSet.exam_set_id)
            .filter(
                ExamEntry.student_id == request.student_id,
                ExamSet.school_id == request.school_id,
                ExamSet.term == request.term,
                ExamSet.year == request.year,
            )
            .distinct()
            .order_by(Subject.subject_name)
            .all()
        )

    def _term_marks(self, request: schemas.ReportCardRequest, subject_id: int):
        return (
            self.db.query(
                AssessmentElement.element_name,
                AssessmentElement.contributing_weight_percent,
                ResultEntry.score_obtained,
                ResultEntry.max_score_at_entry,
                ExamSet.assessment_type,
            )
            .select_from(ResultEntry)
            .join(ExamEntry, ResultEntry.exam_entry_id == ExamEntry.exam_entry_id)
            .join(AssessmentElement, ResultEntry.element_id == AssessmentElement.element_id)
            .join(ExamSet, ExamEntry.exam_set_id == ExamSet.exam_set_id)
            .filter(
                ExamEntry.student_id == request.student_id,
                ExamEntry.subject_id == subject_id,
                ExamSet.school_id == request.school_id,
                ExamSet.term == request.term,
                ExamSet.year == request.year,
            )
            .order_by(ExamSet.exam_set_id, AssessmentElement.element_id)
            .all()
        )

    def save_report_summary(self, summary: schemas.ReportSummaryUpsert) -> ReportSummary:
        header = self.db.query(ResultsHeader).filter(
            ResultsHeader.student_id == summary.student_id,
            ResultsHeader.subject_id == summary.subject_id,
            ResultsHeader.term == summary.term,
            ResultsHeader.year == summary.year,
        ).first()
        if not header:
            header = ResultsHeader(
                student_id=summary.student_id,
                school_id=summary.school_id,
                subject_id=summary.subject_id,
                term=summary.term,
                year=summary.year,
            )
            self.db.add(header)

        values = summary.model_dump(include=SUMMARY_FIELDS)
        if header.summary:
            for key, value in values.items():
                setattr(header.summary, key, value)
        else:
            header.summary = ReportSummary(**values)

        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ValidationError("Report summary refers to an unknown student, subject or grade") from exc
        self.db.refresh(header.summary)
        return header.summary

    def get_report_summary(self, student_id: int, term: int, year: int) -> List[schemas.ReportSummaryRow]:
        rows = (
            self.db.query(
                ReportSummary,
                ResultsHeader.subject_id,
                Subject.subject_name,
                GradingScale.grade_letter,
                GradingScale.descriptor,
            )
            .join(ResultsHeader, ReportSummary.header_id == ResultsHeader.header_id)
            .join(Subject, ResultsHeader.subject_id == Subject.subject_id)
            .outerjoin(GradingScale, ReportSummary.final_grade_ref == GradingScale.scale_id)
            .filter(
                ResultsHeader.student_id == student_id,
                ResultsHeader.term == term,
                ResultsHeader.year == year,
            )
            .order_by(Subject.subject_name)
            .all()
        )
        return [
            schemas.ReportSummaryRow(
                **schemas.ReportSummary.model_validate(summary).model_dump(),
                subject_id=subject_id,
                subject_name=subject_name,
                grade_letter=grade_letter,
                descriptor=descriptor,
            )
            for summary, subject_id, subject_name, grade_letter, descriptor in rows
        ]

    def save_holistic_feedback(self, feedback: schemas.HolisticFeedbackUpsert) -> HolisticFeedback:
        metric = self.db.query(HolisticMetric).filter(HolisticMetric.metric_id == feedback.metric_id).first()
        if not metric:
            raise NotFound("Holistic metric", feedback.metric_id)

        db_feedback = self.db.query(HolisticFeedback).filter(
            HolisticFeedback.student_id == feedback.student_id,
            HolisticFeedback.metric_id == feedback.metric_id,
            HolisticFeedback.term == feedback.term,
            HolisticFeedback.year == feedback.year,
        ).first()

        if db_feedback:
            db_feedback.rating = feedback.rating
        else:
            db_feedback = HolisticFeedback(**feedback.model_dump())
            self.db.add(db_feedback)

        self.db.commit()
        self.db.refresh(db_feedback)
        return db_feedback
