from app.core.database import Base
from app.models.marks import (
    Student,
    Subject,
    GradingScale,
    SchoolSetting,
    ExamSet,
    AssessmentElement,
    ExamEntry,
    ResultEntry,
)
from app.models.reports import (
    HolisticMetric,
    HolisticFeedback,
    ResultsHeader,
    ReportSummary,
)
