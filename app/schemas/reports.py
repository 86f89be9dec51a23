from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from app.models.marks import AssessmentType, SubjectType


# --- Holistic metrics & feedback ---

class HolisticMetricBase(BaseModel):
    school_id: int
    metric_type: str
    metric_name: str


class HolisticMetricCreate(HolisticMetricBase):
    pass


class HolisticMetric(HolisticMetricBase):
    metric_id: int
    model_config = ConfigDict(from_attributes=True)


class HolisticFeedbackBase(BaseModel):
    student_id: int
    school_id: int
    term: int
    year: int
    metric_id: int
    rating: Optional[str] = None


class HolisticFeedbackUpsert(HolisticFeedbackBase):
    pass


class HolisticFeedback(HolisticFeedbackBase):
    feedback_id: int
    model_config = ConfigDict(from_attributes=True)


class HolisticRating(BaseModel):
    metric_name: str
    metric_type: str
    rating: Optional[str] = None


# --- Report summaries ---

class ReportSummaryFields(BaseModel):
    total_percentage_score: float
    final_grade_ref: Optional[int] = None
    weighted_formative_score: Optional[float] = None
    weighted_summative_score: Optional[float] = None
    class_teacher_comment: Optional[str] = None
    head_teacher_comment: Optional[str] = None


class ReportSummaryUpsert(ReportSummaryFields):
    """A summary is keyed by student, subject, term and year."""

    student_id: int
    school_id: int
    subject_id: int
    term: int
    year: int


class ReportSummary(ReportSummaryFields):
    summary_id: int
    header_id: int
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ReportSummaryRow(ReportSummary):
    subject_id: int
    subject_name: str
    grade_letter: Optional[str] = None
    descriptor: Optional[str] = None


# --- Term report card ---

class ReportCardRequest(BaseModel):
    student_id: int
    school_id: int
    term: int
    year: int


class ReportCardMark(BaseModel):
    element_name: str
    contributing_weight_percent: float
    score_obtained: float
    max_score_at_entry: float
    assessment_type: AssessmentType


class ReportCardSubject(BaseModel):
    subject_id: int
    subject_name: str
    subject_type: SubjectType
    marks: List[ReportCardMark] = []
    total_score: float
    formative_score: float
    summative_score: float
    grade: str
    grade_descriptor: str = ""


class ReportCard(BaseModel):
    student_id: int
    school_id: int
    term: int
    year: int
    subjects: List[ReportCardSubject] = []
    holistic_feedback: List[HolisticRating] = []
