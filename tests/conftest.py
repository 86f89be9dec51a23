import os

# Must be set before app.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.main import app
from app.models.marks import (
    AssessmentElement,
    AssessmentType,
    CurriculumType,
    ExamEntry,
    ExamSet,
    GradingScale,
    ResultEntry,
    SchoolSetting,
    Student,
    Subject,
)

SCHOOL_ID = 1


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def school(db):
    """
    One P7 class at school 1 with a Mixed exam set:

    - Mathematics: CA1 (8/10) and Midterm (18/20) entered
    - English: Paper 1 defined, no marks entered yet
    - Science: no elements in the exam set
    """
    db.add_all([
        GradingScale(school_id=SCHOOL_ID, grade_letter="A", descriptor="Excellent", min_score_percent=80),
        GradingScale(school_id=SCHOOL_ID, grade_letter="B", descriptor="Good", min_score_percent=60),
        GradingScale(school_id=SCHOOL_ID, grade_letter="C", descriptor="Fair", min_score_percent=40),
        SchoolSetting(school_id=SCHOOL_ID, curriculum_type=CurriculumType.primary_local),
    ])

    maths = Subject(school_id=SCHOOL_ID, subject_name="Mathematics", school_level="Primary")
    english = Subject(school_id=SCHOOL_ID, subject_name="English", school_level="Primary")
    science = Subject(school_id=SCHOOL_ID, subject_name="Science", school_level="Primary")
    student = Student(
        school_id=SCHOOL_ID,
        first_name="Amina",
        last_name="Nakato",
        class_name="P7",
        reg_number="REG001",
        lin_number="LIN001",
    )
    exam_set = ExamSet(
        school_id=SCHOOL_ID,
        set_name="Term 1 Midterms",
        class_level="P7",
        term=1,
        year=2026,
        assessment_type=AssessmentType.mixed,
    )
    db.add_all([maths, english, science, student, exam_set])
    db.flush()

    ca1 = AssessmentElement(
        school_id=SCHOOL_ID, subject_id=maths.subject_id, exam_set_id=exam_set.exam_set_id,
        element_name="CA1", max_score=10, contributing_weight_percent=20,
    )
    midterm = AssessmentElement(
        school_id=SCHOOL_ID, subject_id=maths.subject_id, exam_set_id=exam_set.exam_set_id,
        element_name="Midterm", max_score=20, contributing_weight_percent=80,
    )
    paper1 = AssessmentElement(
        school_id=SCHOOL_ID, subject_id=english.subject_id, exam_set_id=exam_set.exam_set_id,
        element_name="Paper 1", max_score=50, contributing_weight_percent=100,
    )
    maths_entry = ExamEntry(
        student_id=student.student_id, subject_id=maths.subject_id,
        exam_set_id=exam_set.exam_set_id, status="Completed",
    )
    english_entry = ExamEntry(
        student_id=student.student_id, subject_id=english.subject_id,
        exam_set_id=exam_set.exam_set_id, status="Pending Entry",
    )
    db.add_all([ca1, midterm, paper1, maths_entry, english_entry])
    db.flush()

    db.add_all([
        ResultEntry(exam_entry_id=maths_entry.exam_entry_id, element_id=ca1.element_id,
                    score_obtained=8, max_score_at_entry=10),
        ResultEntry(exam_entry_id=maths_entry.exam_entry_id, element_id=midterm.element_id,
                    score_obtained=18, max_score_at_entry=20),
    ])
    db.commit()

    return {
        "school_id": SCHOOL_ID,
        "student_id": student.student_id,
        "exam_set_id": exam_set.exam_set_id,
        "maths_id": maths.subject_id,
        "english_id": english.subject_id,
        "science_id": science.subject_id,
        "ca1_id": ca1.element_id,
        "midterm_id": midterm.element_id,
        "paper1_id": paper1.element_id,
        "maths_entry_id": maths_entry.exam_entry_id,
    }
