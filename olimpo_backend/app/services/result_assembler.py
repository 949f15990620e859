from app.schemas.comparison import ComparisonResponse, ReconciliationResult
from app.schemas.study_plan import Curriculum


def assemble_result(curriculum: Curriculum, result: ReconciliationResult) -> ComparisonResponse:
    return ComparisonResponse(
        study_plan_id=curriculum.id,
        career_code=curriculum.career_code,
        version=curriculum.version,
        satisfied=result.satisfied,
        pending=result.pending,
        satisfied_count=len(result.satisfied),
        pending_count=len(result.pending),
        credits_summary=result.credits,
        completion_percentage=completion_percentage(result),
    )


def completion_percentage(result: ReconciliationResult) -> float:
    total = result.credits.total
    if total.required == 0:
        return 0.0
    return round(100 * total.completed / total.required, 2)
