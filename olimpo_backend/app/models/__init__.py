from app.models.career import Career
from app.models.equivalence import Equivalence
from app.models.study_plan import StudyPlan, study_plan_subjects
from app.models.subject import Subject

__all__ = ["Career", "Equivalence", "StudyPlan", "Subject", "study_plan_subjects"]
