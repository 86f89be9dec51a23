import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from app.core.exceptions import InvalidWeights, NotFound
from app.schemas.marks import (
    AssessmentWeights,
    ElementMarks,
    GradingScale,
    StudentReport,
    SubjectMarksResult,
    WeightedScoreResult,
)
from app.services.marks_lookup import MarksLookup

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 0.01

# curriculum type -> (formative %, summative %)
CURRICULUM_WEIGHTS = {
    "Secondary-LSC": (20, 80),
    "Primary-Local": (40, 60),
}
DEFAULT_WEIGHTS = (20, 80)


def resolve_grade(score: float, scales: Iterable[GradingScale]) -> Optional[GradingScale]:
    """
    Return the scale with the highest ``min_score_percent`` that ``score``
    meets or exceeds, or None if there is no such scale.
    """
    for scale in sorted(scales, key=lambda s: s.min_score_percent, reverse=True):
        if score >= scale.min_score_percent:
            return scale
    return None


def weighted_score(
    formative: float, summative: float, weights: AssessmentWeights
) -> WeightedScoreResult:
    """Blend formative and summative percentages by the given split."""
    # NaN weights must fail this check
    if not abs(weights.formative + weights.summative - 100) <= WEIGHT_TOLERANCE:
        raise InvalidWeights(weights.formative, weights.summative)

    formative_component = formative * weights.formative / 100
    summative_component = summative * weights.summative / 100
    return WeightedScoreResult(
        formative_component=formative_component,
        summative_component=summative_component,
        weighted_total=formative_component + summative_component,
    )


def weights_for_curriculum(curriculum_type) -> AssessmentWeights:
    # str enums hash by member name, look up by value
    key = getattr(curriculum_type, "value", curriculum_type)
    formative, summative = CURRICULUM_WEIGHTS.get(key, DEFAULT_WEIGHTS)
    return AssessmentWeights(formative=formative, summative=summative)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CalculationService:
    def __init__(self, lookup: MarksLookup, clock: Callable[[], datetime] = _utcnow):
        self.lookup = lookup
        self.clock = clock

    def get_grade_for_score(self, score: float, school_id: int) -> Optional[GradingScale]:
        return resolve_grade(score, self.lookup.get_grading_scales(school_id))

    def aggregate_subject_marks(
        self, student_id: int, exam_set_id: int, subject_id: int
    ) -> Optional[SubjectMarksResult]:
        """
        Sum a student's element marks for one subject of an exam set.

        Returns None when the subject has no assessment elements in the exam
        set. A subject whose marks have not been entered yet comes back with
        zero totals.
        """
        elements = self.lookup.get_assessment_elements(exam_set_id, subject_id)
        if not elements:
            return None

        entries = self.lookup.get_result_entries(student_id, exam_set_id, subject_id)

        total_marks = 0.0
        total_max_marks = 0.0
        elements_data: List[ElementMarks] = []
        for entry in entries:
            max_score = entry.max_score_at_entry
            element_percentage = entry.score_obtained / max_score * 100 if max_score else 0.0
            total_marks += entry.score_obtained
            total_max_marks += max_score
            elements_data.append(
                ElementMarks(
                    element_id=entry.element_id,
                    score_obtained=entry.score_obtained,
                    max_score=max_score,
                    percentage=element_percentage,
                    weight_percent=entry.contributing_weight_percent,
                )
            )

        percentage = total_marks / total_max_marks * 100 if total_max_marks > 0 else 0.0

        return SubjectMarksResult(
            student_id=student_id,
            exam_set_id=exam_set_id,
            subject_id=subject_id,
            total_marks_obtained=total_marks,
            total_max_marks=total_max_marks,
            percentage=round(percentage, 2),
            elements_data=elements_data,
        )

    def assemble_report(self, student_id: int, exam_set_id: int, school_id: int) -> StudentReport:
        exam_set = self.lookup.get_exam_set(exam_set_id)
        if exam_set is None:
            raise NotFound("Exam set", exam_set_id)

        subjects = []
        for subject_id in self.lookup.get_subject_ids(exam_set_id):
            marks = self.aggregate_subject_marks(student_id, exam_set_id, subject_id)
            if marks is None:
                logger.debug("[REPORT] Subject %s has no elements in exam set %s, skipped", subject_id, exam_set_id)
                continue
            subjects.append(marks)

        setting = self.lookup.get_school_setting(school_id)
        curriculum_type = setting.curriculum_type if setting else None

        logger.debug(
            "[REPORT] student=%s exam_set=%s school=%s subjects=%d",
            student_id, exam_set_id, school_id, len(subjects),
        )
        return StudentReport(
            student_id=student_id,
            exam_set_id=exam_set_id,
            school_id=school_id,
            curriculum_type=curriculum_type,
            term=exam_set.term,
            year=exam_set.year,
            class_level=exam_set.class_level,
            weights=weights_for_curriculum(curriculum_type),
            subjects=subjects,
            grading_scales=self.lookup.get_grading_scales(school_id),
            generated_at=self.clock(),
        )

    def recalculate_student_reports(self, student_id: int, school_id: int) -> List[StudentReport]:
        """Assemble a fresh report for every exam set the student is entered in."""
        return [
            self.assemble_report(student_id, exam_set_id, school_id)
            for exam_set_id in self.lookup.get_student_exam_set_ids(student_id)
        ]
