from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Integer,
    Float,
    Enum,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base


def _enum_values(enum_cls):
    # Store the human readable values ("Primary-Local"), not the member names
    return [member.value for member in enum_cls]


class CurriculumType(str, enum.Enum):
    nursery = "Nursery"
    primary_local = "Primary-Local"
    secondary_lsc = "Secondary-LSC"
    international = "International"


class SubjectType(str, enum.Enum):
    compulsory = "Compulsory"
    elective = "Elective"
    international_custom = "International-Custom"


class AssessmentType(str, enum.Enum):
    formative = "Formative"
    summative = "Summative"
    mixed = "Mixed"


class ExamEntryStatus(str, enum.Enum):
    pending = "Pending Entry"
    completed = "Completed"


class Student(Base):
    __tablename__ = "students"

    student_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, nullable=False, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    class_name = Column(String, nullable=False)  # e.g. "S1", "P7"
    reg_number = Column(String)
    lin_number = Column(String)  # learner identification number


class Subject(Base):
    __tablename__ = "config_subjects"

    subject_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, nullable=False, index=True)
    subject_name = Column(String, nullable=False)
    school_level = Column(String, nullable=False)  # e.g. "O-Level", "Primary"
    subject_type = Column(
        Enum(SubjectType, values_callable=_enum_values),
        nullable=False,
        default=SubjectType.compulsory,
    )
    ncdc_reference_name = Column(String)
    max_selections_allowed = Column(Integer, default=1)


class GradingScale(Base):
    __tablename__ = "config_grading_scales"
    __table_args__ = (
        UniqueConstraint("school_id", "min_score_percent", name="uq_grading_scale_threshold"),
    )

    scale_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, nullable=False, index=True)
    grade_letter = Column(String, nullable=False)
    descriptor = Column(String)
    min_score_percent = Column(Float, nullable=False)


class SchoolSetting(Base):
    __tablename__ = "config_school_settings"

    setting_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, unique=True, nullable=False)
    curriculum_type = Column(
        Enum(CurriculumType, values_callable=_enum_values), nullable=False
    )
    grading_scale_ref = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ExamSet(Base):
    __tablename__ = "config_exam_sets"

    exam_set_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, nullable=False, index=True)
    set_name = Column(String, nullable=False)  # e.g. "Term 1 Midterms"
    class_level = Column(String, nullable=False)
    term = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    assessment_type = Column(
        Enum(AssessmentType, values_callable=_enum_values), nullable=False
    )

    elements = relationship(
        "AssessmentElement", back_populates="exam_set", cascade="all, delete-orphan"
    )
    exam_entries = relationship(
        "ExamEntry", back_populates="exam_set", cascade="all, delete-orphan"
    )


class AssessmentElement(Base):
    __tablename__ = "config_assessment_elements"

    element_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, nullable=False)
    subject_id = Column(
        Integer, ForeignKey("config_subjects.subject_id"), nullable=False
    )
    exam_set_id = Column(
        Integer, ForeignKey("config_exam_sets.exam_set_id"), nullable=False
    )
    element_name = Column(String, nullable=False)  # e.g. "CA1", "Midterm"
    max_score = Column(Float, nullable=False)
    contributing_weight_percent = Column(Float, nullable=False, default=0)

    exam_set = relationship("ExamSet", back_populates="elements")
    subject = relationship("Subject")
    results = relationship(
        "ResultEntry", back_populates="element", cascade="all, delete-orphan"
    )

    @property
    def subject_name(self):
        return self.subject.subject_name if self.subject else None


class ExamEntry(Base):
    __tablename__ = "results_exam_entries"
    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", "exam_set_id", name="uq_exam_entry"),
    )

    exam_entry_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.student_id"), nullable=False)
    subject_id = Column(
        Integer, ForeignKey("config_subjects.subject_id"), nullable=False
    )
    exam_set_id = Column(
        Integer, ForeignKey("config_exam_sets.exam_set_id"), nullable=False
    )
    status = Column(String, nullable=False, default=ExamEntryStatus.pending.value)

    exam_set = relationship("ExamSet", back_populates="exam_entries")
    student = relationship("Student")
    subject = relationship("Subject")
    results = relationship(
        "ResultEntry", back_populates="exam_entry", cascade="all, delete-orphan"
    )


class ResultEntry(Base):
    __tablename__ = "results_entry"
    __table_args__ = (
        UniqueConstraint("exam_entry_id", "element_id", name="uq_result_entry"),
    )

    entry_id = Column(Integer, primary_key=True, autoincrement=True)
    exam_entry_id = Column(
        Integer, ForeignKey("results_exam_entries.exam_entry_id"), nullable=False
    )
    element_id = Column(
        Integer, ForeignKey("config_assessment_elements.element_id"), nullable=False
    )
    score_obtained = Column(Float, nullable=False)
    # Snapshot of the element's max score when the mark was entered
    max_score_at_entry = Column(Float, nullable=False)
    entered_by_user_id = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    exam_entry = relationship("ExamEntry", back_populates="results")
    element = relationship("AssessmentElement", back_populates="results")
