from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal
from datetime import datetime

from app.models.marks import (
    AssessmentType,
    CurriculumType,
    SubjectType,
)


# --- Subjects ---

class SubjectBase(BaseModel):
    school_id: int
    subject_name: str
    school_level: str
    subject_type: SubjectType = SubjectType.compulsory
    ncdc_reference_name: Optional[str] = None
    max_selections_allowed: int = 1


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    subject_name: Optional[str] = None
    subject_type: Optional[SubjectType] = None
    ncdc_reference_name: Optional[str] = None
    max_selections_allowed: Optional[int] = None


class Subject(SubjectBase):
    subject_id: int
    model_config = ConfigDict(from_attributes=True)


# --- Grading configuration ---

class GradingScaleBase(BaseModel):
    grade_letter: str
    descriptor: Optional[str] = None
    min_score_percent: float


class GradingScaleCreate(GradingScaleBase):
    school_id: int


class GradingScaleBulkCreate(BaseModel):
    school_id: int
    scales: List[GradingScaleBase]


class GradingScale(GradingScaleBase):
    scale_id: int
    school_id: int
    model_config = ConfigDict(from_attributes=True)


class SchoolSettingBase(BaseModel):
    school_id: int
    curriculum_type: CurriculumType
    grading_scale_ref: Optional[int] = None


class SchoolSettingUpsert(SchoolSettingBase):
    pass


class SchoolSetting(SchoolSettingBase):
    setting_id: int
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# --- Exam sets & assessment elements ---

class ElementSpec(BaseModel):
    element_name: str
    max_score: float = Field(gt=0)
    contributing_weight_percent: float = Field(default=0, ge=0, le=100)


class ExamSetSubjectCreate(BaseModel):
    subject_id: int
    elements: List[ElementSpec] = []


class ExamSetBase(BaseModel):
    school_id: int
    set_name: str
    class_level: str
    term: int
    year: int
    assessment_type: AssessmentType


class ExamSetCreate(ExamSetBase):
    subjects: List[ExamSetSubjectCreate] = []


class ExamSet(ExamSetBase):
    exam_set_id: int
    model_config = ConfigDict(from_attributes=True)


class AssessmentElementBase(BaseModel):
    school_id: int
    subject_id: int
    exam_set_id: int
    element_name: str
    max_score: float
    contributing_weight_percent: float = 0


class AssessmentElementCreate(AssessmentElementBase):
    max_score: float = Field(gt=0)


class AssessmentElementUpdate(BaseModel):
    element_name: Optional[str] = None
    max_score: Optional[float] = Field(default=None, gt=0)
    contributing_weight_percent: Optional[float] = None


class AssessmentElement(AssessmentElementBase):
    element_id: int
    subject_name: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


# --- Marks ---

class ResultEntry(BaseModel):
    """One scored element for one student, as read by the report pipeline."""

    entry_id: int
    exam_entry_id: int
    element_id: int
    score_obtained: float
    max_score_at_entry: float
    contributing_weight_percent: Optional[float] = None
    model_config = ConfigDict(from_attributes=True)


class MarkInput(BaseModel):
    element_id: int
    score_obtained: float = Field(ge=0)


class BulkMarkEntry(BaseModel):
    student_identifier: str
    identifier_type: Literal["reg_number", "lin_number"] = "reg_number"
    marks: List[MarkInput]


class BulkUploadRequest(BaseModel):
    exam_set_id: int
    school_id: int
    entered_by_user_id: Optional[int] = None
    entries: List[BulkMarkEntry]


class BulkUploadError(BaseModel):
    identifier: str
    element_id: Optional[int] = None
    error: str


class BulkUploadResult(BaseModel):
    success: int
    errors: List[BulkUploadError] = []


class ExamEntryMark(BaseModel):
    entry_id: int
    exam_entry_id: int
    element_id: int
    element_name: str
    score_obtained: float
    max_score_at_entry: float
    current_max_score: float
    entered_by_user_id: Optional[int] = None
    created_at: Optional[datetime] = None


class StudentMarkRow(BaseModel):
    exam_entry_id: int
    subject_id: int
    subject_name: str
    status: str
    entry_id: Optional[int] = None
    element_name: Optional[str] = None
    score_obtained: Optional[float] = None
    max_score_at_entry: Optional[float] = None


# --- Calculation & reports ---

class AssessmentWeights(BaseModel):
    formative: float
    summative: float


class WeightedScoreRequest(BaseModel):
    formative_score: float
    summative_score: float
    weights: AssessmentWeights


class WeightedScoreResult(BaseModel):
    formative_component: float
    summative_component: float
    weighted_total: float


class ElementMarks(BaseModel):
    element_id: int
    score_obtained: float
    max_score: float
    percentage: float
    weight_percent: Optional[float] = None


class SubjectMarksResult(BaseModel):
    student_id: int
    exam_set_id: int
    subject_id: int
    total_marks_obtained: float
    total_max_marks: float
    percentage: float
    elements_data: List[ElementMarks] = []


class StudentReport(BaseModel):
    student_id: int
    exam_set_id: int
    school_id: int
    curriculum_type: Optional[CurriculumType] = None
    term: int
    year: int
    class_level: str
    weights: AssessmentWeights
    subjects: List[SubjectMarksResult] = []
    grading_scales: List[GradingScale] = []
    generated_at: datetime
