from app.schemas.marks import (
    GradingScale,
    SchoolSetting,
    ExamSet,
    AssessmentElement,
    ResultEntry,
    AssessmentWeights,
    WeightedScoreResult,
    ElementMarks,
    SubjectMarksResult,
    StudentReport,
)
from app.schemas.reports import (
    HolisticMetric,
    HolisticFeedback,
    ReportSummary,
    ReportCard,
)
