from fastapi import APIRouter, Depends

from surveykit.api.deps import get_caller_id, get_store
from surveykit.schemas.analytics import StatsOut
from surveykit.services.analytics import AnalyticsService
from surveykit.store.base import SurveyStore

router = APIRouter(prefix="/api/stats", tags=["stats"])

@router.get("", response_model=StatsOut)
def owner_stats(caller_id: str = Depends(get_caller_id), store: SurveyStore = Depends(get_store)):
    return StatsOut.model_validate(AnalyticsService(store).owner_summary(caller_id))
