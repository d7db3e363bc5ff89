from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from surveykit.api.deps import get_access, get_caller_id, get_store
from surveykit.core.config import settings
from surveykit.records import Question, Survey
from surveykit.schemas.analytics import QuestionAnalyticsOut, SurveyAnalyticsOut
from surveykit.schemas.submission import AnswerOut, ResponseOut, ResponsesOut
from surveykit.schemas.survey import (
    QuestionCreate,
    QuestionOrder,
    QuestionOut,
    QuestionUpdate,
    SurveyCreate,
    SurveyDetailOut,
    SurveyOut,
    SurveySummaryOut,
    SurveyUpdate,
)
from surveykit.services.access import SurveyAccess
from surveykit.services.analytics import AnalyticsService
from surveykit.services.export_csv import build_export_csv, export_filename
from surveykit.store.base import SurveyStore

router = APIRouter(prefix="/api/surveys", tags=["surveys"])

def share_url(survey: Survey) -> str:
    return f"{settings.public_base_url.rstrip('/')}/survey/{survey.share_token}"

def detail(survey: Survey, questions: list[Question]) -> SurveyDetailOut:
    return SurveyDetailOut(
        **SurveyOut.model_validate(survey).model_dump(),
        share_url=share_url(survey),
        questions=[QuestionOut.model_validate(q) for q in questions],
    )

@router.get("", response_model=list[SurveySummaryOut])
def list_surveys(
    caller_id: str = Depends(get_caller_id),
    access: SurveyAccess = Depends(get_access),
):
    return [
        SurveySummaryOut(
            **SurveyOut.model_validate(s).model_dump(),
            response_count=access.store.count_responses(s.id),
        )
        for s in access.list_surveys(caller_id)
    ]

@router.post("", response_model=SurveyDetailOut)
def create_survey(
    payload: SurveyCreate,
    caller_id: str = Depends(get_caller_id),
    access: SurveyAccess = Depends(get_access),
):
    s = access.create_survey(
        caller_id,
        payload.title,
        questions=[q.to_new() for q in payload.questions],
        description=payload.description,
        anonymous=payload.anonymous,
        multiple_responses=payload.multiple_responses,
    )
    return detail(*access.survey_with_questions(caller_id, s.id))

@router.get("/{survey_id}", response_model=SurveyDetailOut)
def get_survey(survey_id: str, caller_id: str = Depends(get_caller_id), access: SurveyAccess = Depends(get_access)):
    return detail(*access.survey_with_questions(caller_id, survey_id))

@router.put("/{survey_id}", response_model=SurveyOut)
def update_survey(
    survey_id: str,
    payload: SurveyUpdate,
    caller_id: str = Depends(get_caller_id),
    access: SurveyAccess = Depends(get_access),
):
    s = access.update_survey(caller_id, survey_id, payload.model_dump(exclude_unset=True))
    return SurveyOut.model_validate(s)

@router.delete("/{survey_id}", status_code=204)
def delete_survey(survey_id: str, caller_id: str = Depends(get_caller_id), access: SurveyAccess = Depends(get_access)):
    access.delete_survey(caller_id, survey_id)
    return Response(status_code=204)

@router.post("/{survey_id}/questions", response_model=QuestionOut)
def add_question(
    survey_id: str,
    payload: QuestionCreate,
    caller_id: str = Depends(get_caller_id),
    access: SurveyAccess = Depends(get_access),
):
    q = access.add_question(caller_id, survey_id, payload.to_new(), payload.position)
    return QuestionOut.model_validate(q)

@router.put("/{survey_id}/questions/order", response_model=list[QuestionOut])
def reorder_questions(
    survey_id: str,
    payload: QuestionOrder,
    caller_id: str = Depends(get_caller_id),
    access: SurveyAccess = Depends(get_access),
):
    questions = access.reorder_questions(caller_id, survey_id, payload.question_ids)
    return [QuestionOut.model_validate(q) for q in questions]

@router.patch("/{survey_id}/questions/{question_id}", response_model=QuestionOut)
def update_question(
    survey_id: str,
    question_id: str,
    payload: QuestionUpdate,
    caller_id: str = Depends(get_caller_id),
    access: SurveyAccess = Depends(get_access),
):
    q = access.update_question(caller_id, survey_id, question_id, payload.model_dump(exclude_unset=True))
    return QuestionOut.model_validate(q)

@router.delete("/{survey_id}/questions/{question_id}", status_code=204)
def delete_question(
    survey_id: str,
    question_id: str,
    caller_id: str = Depends(get_caller_id),
    access: SurveyAccess = Depends(get_access),
):
    access.delete_question(caller_id, survey_id, question_id)
    return Response(status_code=204)

@router.get("/{survey_id}/responses", response_model=ResponsesOut)
def list_responses(survey_id: str, caller_id: str = Depends(get_caller_id), access: SurveyAccess = Depends(get_access)):
    responses, answers = access.survey_responses(caller_id, survey_id)
    return ResponsesOut(
        responses=[ResponseOut.model_validate(r) for r in responses],
        answers=[AnswerOut.model_validate(a) for a in answers],
    )

@router.get("/{survey_id}/analytics", response_model=SurveyAnalyticsOut)
def survey_analytics(
    survey_id: str,
    caller_id: str = Depends(get_caller_id),
    access: SurveyAccess = Depends(get_access),
    store: SurveyStore = Depends(get_store),
):
    s = access.owned_survey(caller_id, survey_id)
    result = AnalyticsService(store).survey_analytics(s.id)
    return SurveyAnalyticsOut(
        survey_id=result.survey_id,
        response_count=result.response_count,
        questions=[QuestionAnalyticsOut.model_validate(q) for q in result.questions],
    )

@router.get("/{survey_id}/export")
def export_responses(survey_id: str, caller_id: str = Depends(get_caller_id), access: SurveyAccess = Depends(get_access)):
    survey, questions = access.survey_with_questions(caller_id, survey_id)
    responses, answers = access.survey_responses(caller_id, survey_id)
    return PlainTextResponse(
        build_export_csv(questions, responses, answers),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(survey.title)}"'},
    )
