from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base


class Equivalence(Base):
    __tablename__ = "equivalences"

    id = Column(Integer, primary_key=True, index=True)
    source_subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    target_subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    kind = Column(String(20), nullable=False, default="total")  # total/partial
    notes = Column(Text, nullable=True)
    # Null means the equivalence applies to every study plan
    study_plan_id = Column(Integer, ForeignKey("study_plans.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    source_subject = relationship("Subject", foreign_keys=[source_subject_id])
    target_subject = relationship("Subject", foreign_keys=[target_subject_id])
