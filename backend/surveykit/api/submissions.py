from fastapi import APIRouter, Depends

from surveykit.api.deps import get_access, get_store
from surveykit.schemas.submission import SubmissionIn, SubmissionOut
from surveykit.schemas.survey import PublicSurveyOut, QuestionOut
from surveykit.services.access import SurveyAccess
from surveykit.services.submission import SubmissionPipeline
from surveykit.store.base import SurveyStore

router = APIRouter(prefix="/api/public/surveys", tags=["public"])

@router.get("/{share_token}", response_model=PublicSurveyOut)
def get_public_survey(share_token: str, access: SurveyAccess = Depends(get_access)):
    survey, questions = access.public_survey(share_token)
    return PublicSurveyOut(
        id=survey.id,
        title=survey.title,
        description=survey.description,
        status=survey.status,
        anonymous=survey.anonymous,
        share_token=survey.share_token,
        questions=[QuestionOut.model_validate(q) for q in questions],
    )

@router.post("/{share_token}/responses", response_model=SubmissionOut)
def submit_response(share_token: str, payload: SubmissionIn, store: SurveyStore = Depends(get_store)):
    response = SubmissionPipeline(store).submit(share_token, payload.to_new(), payload.respondent_id)
    return SubmissionOut(message="Response submitted successfully", response_id=response.id)
