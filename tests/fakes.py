from typing import Dict, List, Optional, Tuple

from app.schemas.marks import (
    AssessmentElement,
    ExamSet,
    GradingScale,
    ResultEntry,
    SchoolSetting,
)
from app.services.marks_lookup import MarksLookup


class InMemoryMarksLookup(MarksLookup):
    """Dictionary-backed lookup for exercising the report pipeline without a database."""

    def __init__(self):
        self.exam_sets: Dict[int, ExamSet] = {}
        self.settings: Dict[int, SchoolSetting] = {}
        self.scales: Dict[int, List[GradingScale]] = {}
        self.elements: List[AssessmentElement] = []
        # (student_id, exam_set_id, subject_id) -> entries
        self.entries: Dict[Tuple[int, int, int], List[ResultEntry]] = {}

    def add_element(self, element_id, exam_set_id, subject_id, max_score, weight=0.0, school_id=1):
        self.elements.append(
            AssessmentElement(
                element_id=element_id,
                school_id=school_id,
                subject_id=subject_id,
                exam_set_id=exam_set_id,
                element_name=f"Element {element_id}",
                max_score=max_score,
                contributing_weight_percent=weight,
            )
        )

    def add_entry(self, student_id, exam_set_id, subject_id, element_id, score, max_score):
        key = (student_id, exam_set_id, subject_id)
        entries = self.entries.setdefault(key, [])
        entries.append(
            ResultEntry(
                entry_id=len(entries) + 1,
                exam_entry_id=1,
                element_id=element_id,
                score_obtained=score,
                max_score_at_entry=max_score,
            )
        )

    def get_exam_set(self, exam_set_id: int) -> Optional[ExamSet]:
        return self.exam_sets.get(exam_set_id)

    def get_school_setting(self, school_id: int) -> Optional[SchoolSetting]:
        return self.settings.get(school_id)

    def get_grading_scales(self, school_id: int) -> List[GradingScale]:
        return sorted(self.scales.get(school_id, []), key=lambda s: s.min_score_percent, reverse=True)

    def get_assessment_elements(self, exam_set_id: int, subject_id: int) -> List[AssessmentElement]:
        return [
            e for e in self.elements
            if e.exam_set_id == exam_set_id and e.subject_id == subject_id
        ]

    def get_subject_ids(self, exam_set_id: int) -> List[int]:
        return sorted({e.subject_id for e in self.elements if e.exam_set_id == exam_set_id})

    def get_result_entries(self, student_id: int, exam_set_id: int, subject_id: int) -> List[ResultEntry]:
        return list(self.entries.get((student_id, exam_set_id, subject_id), []))

    def get_student_exam_set_ids(self, student_id: int) -> List[int]:
        return sorted({key[1] for key in self.entries if key[0] == student_id})
