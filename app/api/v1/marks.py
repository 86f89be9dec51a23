from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.database import get_db
from app.schemas import marks as schemas
from app.schemas import reports as report_schemas
from app.services.calculation import CalculationService, weighted_score
from app.services.exam_sets import ExamSetService
from app.services.grading_config import GradingConfigService
from app.services.marks_entry import MarksEntryService
from app.services.marks_lookup import SqlMarksLookup
from app.services.reports import ReportService
from app.services.subjects import SubjectService

router = APIRouter()


def get_calculation_service(db: Session = Depends(get_db)) -> CalculationService:
    return CalculationService(SqlMarksLookup(db))


# --- Subjects ---

@router.post("/subjects", response_model=schemas.Subject, status_code=status.HTTP_201_CREATED)
def create_subject(subject: schemas.SubjectCreate, db: Session = Depends(get_db)):
    return SubjectService(db).create_subject(subject)


@router.get("/subjects", response_model=List[schemas.Subject])
def list_subjects(school_id: int, school_level: str, db: Session = Depends(get_db)):
    return SubjectService(db).list_subjects(school_id, school_level)


@router.get("/subjects/{subject_id}", response_model=schemas.Subject)
def get_subject(subject_id: int, db: Session = Depends(get_db)):
    return SubjectService(db).get_subject(subject_id)


@router.put("/subjects/{subject_id}", response_model=schemas.Subject)
def update_subject(subject_id: int, updates: schemas.SubjectUpdate, db: Session = Depends(get_db)):
    return SubjectService(db).update_subject(subject_id, updates)


@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(subject_id: int, db: Session = Depends(get_db)):
    SubjectService(db).delete_subject(subject_id)


# --- Exam sets & elements ---

@router.post("/exam-sets", response_model=schemas.ExamSet, status_code=status.HTTP_201_CREATED)
def create_exam_set(request: schemas.ExamSetCreate, db: Session = Depends(get_db)):
    return ExamSetService(db).create_exam_set(request)


@router.get("/exam-sets", response_model=List[schemas.ExamSet])
def list_exam_sets(
    school_id: int,
    term: Optional[int] = None,
    year: Optional[int] = None,
    class_level: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return ExamSetService(db).list_exam_sets(school_id, term=term, year=year, class_level=class_level)


@router.get("/exam-sets/{exam_set_id}", response_model=schemas.ExamSet)
def get_exam_set(exam_set_id: int, db: Session = Depends(get_db)):
    return ExamSetService(db).get_exam_set(exam_set_id)


@router.get("/exam-sets/{exam_set_id}/elements", response_model=List[schemas.AssessmentElement])
def list_exam_set_elements(exam_set_id: int, db: Session = Depends(get_db)):
    return ExamSetService(db).list_elements(exam_set_id)


@router.delete("/exam-sets/{exam_set_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exam_set(exam_set_id: int, db: Session = Depends(get_db)):
    ExamSetService(db).delete_exam_set(exam_set_id)


@router.post("/elements", response_model=schemas.AssessmentElement, status_code=status.HTTP_201_CREATED)
def create_element(element: schemas.AssessmentElementCreate, db: Session = Depends(get_db)):
    return ExamSetService(db).create_element(element)


@router.put("/elements/{element_id}", response_model=schemas.AssessmentElement)
def update_element(
    element_id: int, update: schemas.AssessmentElementUpdate, db: Session = Depends(get_db)
):
    return ExamSetService(db).update_element(element_id, update)


@router.delete("/elements/{element_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_element(element_id: int, db: Session = Depends(get_db)):
    ExamSetService(db).delete_element(element_id)


# --- Marks entry ---

@router.post("/marks/bulk-upload", response_model=schemas.BulkUploadResult)
def bulk_upload_marks(request: schemas.BulkUploadRequest, db: Session = Depends(get_db)):
    if not request.entries:
        raise HTTPException(status_code=400, detail="No entries to upload")
    return MarksEntryService(db).bulk_upload_marks(
        request.exam_set_id, request.school_id, request.entries, request.entered_by_user_id
    )


@router.get("/marks/exam-entry/{exam_entry_id}", response_model=List[schemas.ExamEntryMark])
def get_marks_by_exam_entry(exam_entry_id: int, db: Session = Depends(get_db)):
    return MarksEntryService(db).get_marks_by_exam_entry(exam_entry_id)


@router.get(
    "/marks/student/{student_id}/exam-set/{exam_set_id}",
    response_model=List[schemas.StudentMarkRow],
)
def get_marks_by_student(student_id: int, exam_set_id: int, db: Session = Depends(get_db)):
    return MarksEntryService(db).get_marks_by_student(student_id, exam_set_id)


@router.delete("/marks/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_marks_entry(entry_id: int, db: Session = Depends(get_db)):
    MarksEntryService(db).delete_marks_entry(entry_id)


# --- Reports & grading ---

@router.get(
    "/reports/student/{student_id}/exam-set/{exam_set_id}",
    response_model=schemas.StudentReport,
)
def get_student_report(
    student_id: int,
    exam_set_id: int,
    school_id: int,
    service: CalculationService = Depends(get_calculation_service),
):
    return service.assemble_report(student_id, exam_set_id, school_id)


@router.get(
    "/reports/student/{student_id}/exam-set/{exam_set_id}/subject/{subject_id}",
    response_model=schemas.SubjectMarksResult,
)
def get_subject_marks(
    student_id: int,
    exam_set_id: int,
    subject_id: int,
    service: CalculationService = Depends(get_calculation_service),
):
    marks = service.aggregate_subject_marks(student_id, exam_set_id, subject_id)
    if marks is None:
        raise HTTPException(status_code=404, detail="Subject is not assessed in this exam set")
    return marks


@router.post(
    "/reports/student/{student_id}/recalculate",
    response_model=List[schemas.StudentReport],
)
def recalculate_student_reports(
    student_id: int,
    school_id: int,
    service: CalculationService = Depends(get_calculation_service),
):
    return service.recalculate_student_reports(student_id, school_id)


@router.post("/reports/generate", response_model=report_schemas.ReportCard)
def generate_report_card(request: report_schemas.ReportCardRequest, db: Session = Depends(get_db)):
    return ReportService(db).generate_report(request)


@router.post(
    "/reports/summary",
    response_model=report_schemas.ReportSummary,
    status_code=status.HTTP_201_CREATED,
)
def save_report_summary(summary: report_schemas.ReportSummaryUpsert, db: Session = Depends(get_db)):
    return ReportService(db).save_report_summary(summary)


@router.get("/reports/summary/{student_id}", response_model=List[report_schemas.ReportSummaryRow])
def get_report_summary(student_id: int, term: int, year: int, db: Session = Depends(get_db)):
    return ReportService(db).get_report_summary(student_id, term, year)


@router.post(
    "/reports/holistic-feedback",
    response_model=report_schemas.HolisticFeedback,
    status_code=status.HTTP_201_CREATED,
)
def save_holistic_feedback(feedback: report_schemas.HolisticFeedbackUpsert, db: Session = Depends(get_db)):
    return ReportService(db).save_holistic_feedback(feedback)


@router.get("/grades/resolve", response_model=Optional[schemas.GradingScale])
def resolve_grade_for_score(
    school_id: int,
    score: float = Query(...),
    service: CalculationService = Depends(get_calculation_service),
):
    return service.get_grade_for_score(score, school_id)


@router.post("/grades/weighted-score", response_model=schemas.WeightedScoreResult)
def calculate_weighted_score(request: schemas.WeightedScoreRequest):
    return weighted_score(request.formative_score, request.summative_score, request.weights)


# --- Grading configuration ---

@router.post(
    "/config/grading-scales",
    response_model=schemas.GradingScale,
    status_code=status.HTTP_201_CREATED,
)
def create_grading_scale(scale: schemas.GradingScaleCreate, db: Session = Depends(get_db)):
    return GradingConfigService(db).create_grading_scale(scale)


@router.post(
    "/config/grading-scales/bulk",
    response_model=List[schemas.GradingScale],
    status_code=status.HTTP_201_CREATED,
)
def bulk_create_grading_scales(request: schemas.GradingScaleBulkCreate, db: Session = Depends(get_db)):
    if not request.scales:
        raise HTTPException(status_code=400, detail="Scales array is required")
    return GradingConfigService(db).bulk_create_grading_scales(request.school_id, request.scales)


@router.get("/config/grading-scales/{school_id}", response_model=List[schemas.GradingScale])
def get_grading_scales(school_id: int, db: Session = Depends(get_db)):
    return GradingConfigService(db).get_grading_scales(school_id)


@router.delete("/config/grading-scales/{scale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_grading_scale(scale_id: int, db: Session = Depends(get_db)):
    GradingConfigService(db).delete_grading_scale(scale_id)


@router.post("/config/school-settings", response_model=schemas.SchoolSetting)
def upsert_school_setting(setting: schemas.SchoolSettingUpsert, db: Session = Depends(get_db)):
    return GradingConfigService(db).upsert_school_setting(setting)


@router.get("/config/school-settings/{school_id}", response_model=schemas.SchoolSetting)
def get_school_setting(school_id: int, db: Session = Depends(get_db)):
    setting = GradingConfigService(db).get_school_setting(school_id)
    if not setting:
        raise HTTPException(status_code=404, detail="School setting not found")
    return setting


@router.post(
    "/config/holistic-metrics",
    response_model=report_schemas.HolisticMetric,
    status_code=status.HTTP_201_CREATED,
)
def create_holistic_metric(metric: report_schemas.HolisticMetricCreate, db: Session = Depends(get_db)):
    return GradingConfigService(db).create_holistic_metric(metric)


@router.get("/config/holistic-metrics/{school_id}", response_model=List[report_schemas.HolisticMetric])
def get_holistic_metrics(school_id: int, db: Session = Depends(get_db)):
    return GradingConfigService(db).get_holistic_metrics(school_id)


@router.delete("/config/holistic-metrics/{metric_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holistic_metric(metric_id: int, db: Session = Depends(get_db)):
    GradingConfigService(db).delete_holistic_metric(metric_id)
