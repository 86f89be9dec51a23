from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    ForeignKey,
    Integer,
    Float,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base


class HolisticMetric(Base):
    __tablename__ = "config_holistic_metrics"

    metric_id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, nullable=False, index=True)
    metric_type = Column(String, nullable=False)  # e.g. "Behaviour", "Skill"
    metric_name = Column(String, nullable=False)  # e.g. "Punctuality"

    feedback = relationship(
        "HolisticFeedback", back_populates="metric", cascade="all, delete-orphan"
    )


class HolisticFeedback(Base):
    __tablename__ = "reports_holistic_feedback"
    __table_args__ = (
        UniqueConstraint("student_id", "metric_id", "term", "year", name="uq_holistic_feedback"),
    )

    feedback_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.student_id"), nullable=False)
    school_id = Column(Integer, nullable=False)
    term = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    metric_id = Column(
        Integer, ForeignKey("config_holistic_metrics.metric_id"), nullable=False
    )
    rating = Column(String)  # e.g. "Excellent", "Needs improvement"

    metric = relationship("HolisticMetric", back_populates="feedback")


class ResultsHeader(Base):
    """One student's subject for a term, the anchor for its report summary."""

    __tablename__ = "results_header"
    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", "term", "year", name="uq_results_header"),
    )

    header_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.student_id"), nullable=False)
    school_id = Column(Integer, nullable=False)
    subject_id = Column(
        Integer, ForeignKey("config_subjects.subject_id"), nullable=False
    )
    term = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    subject = relationship("Subject")
    summary = relationship(
        "ReportSummary", back_populates="header", uselist=False, cascade="all, delete-orphan"
    )


class ReportSummary(Base):
    __tablename__ = "reports_summary"

    summary_id = Column(Integer, primary_key=True, autoincrement=True)
    header_id = Column(
        Integer, ForeignKey("results_header.header_id"), unique=True, nullable=False
    )
    total_percentage_score = Column(Float, nullable=False)
    final_grade_ref = Column(
        Integer, ForeignKey("config_grading_scales.scale_id", ondelete="SET NULL")
    )
    weighted_formative_score = Column(Float)
    weighted_summative_score = Column(Float)
    class_teacher_comment = Column(Text)
    head_teacher_comment = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    header = relationship("ResultsHeader", back_populates="summary")
