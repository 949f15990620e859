from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from app.models.base import Base

study_plan_subjects = Table(
    "study_plan_subjects",
    Base.metadata,
    Column("study_plan_id", Integer, ForeignKey("study_plans.id"), primary_key=True),
    Column("subject_id", Integer, ForeignKey("subjects.id"), primary_key=True),
)


class StudyPlan(Base):
    __tablename__ = "study_plans"

    id = Column(Integer, primary_key=True, index=True)
    career_id = Column(Integer, ForeignKey("careers.id"), nullable=False, index=True)
    version = Column(String(20), nullable=False)  # e.g. "2023-1"
    is_active = Column(Boolean, default=True)
    # Required credits per category
    fund_required_credits = Column(Integer, nullable=False, default=0)
    fund_elective_credits = Column(Integer, nullable=False, default=0)
    disc_required_credits = Column(Integer, nullable=False, default=0)
    disc_elective_credits = Column(Integer, nullable=False, default=0)
    free_elective_credits = Column(Integer, nullable=False, default=0)
    total_credits = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    career = relationship("Career", back_populates="study_plans")
    subjects = relationship("Subject", secondary=study_plan_subjects, order_by="Subject.code")
