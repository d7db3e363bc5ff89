"""Public response submission: fetch, validate, persist, acknowledge."""
import logging
from typing import Iterable

from surveykit.core.errors import ConflictError, ValidationError
from surveykit.records import NewAnswer, Question, Response
from surveykit.services.access import SurveyAccess
from surveykit.store.base import SurveyStore

logger = logging.getLogger(__name__)


def missing_required(questions: Iterable[Question], answers: Iterable[NewAnswer]) -> list[str]:
    """Ids of required questions without a non-blank answer."""
    answered = {a.question_id for a in answers if a.value and a.value.strip()}
    return [q.id for q in questions if q.required and q.id not in answered]


def clean_answers(questions: Iterable[Question], answers: Iterable[NewAnswer]) -> list[NewAnswer]:
    """Check answers against the survey's questions and drop blank optional ones."""
    known = {q.id for q in questions}
    seen: set[str] = set()
    unknown, duplicated, kept = [], [], []
    for a in answers:
        if a.question_id not in known:
            unknown.append(a.question_id)
        elif a.question_id in seen:
            duplicated.append(a.question_id)
        elif a.value and a.value.strip():
            kept.append(a)
        seen.add(a.question_id)

    if unknown:
        raise ValidationError("Answers reference questions outside this survey", fields=unknown)
    if duplicated:
        raise ValidationError("Questions answered more than once", fields=duplicated)
    return kept


class SubmissionPipeline:
    def __init__(self, store: SurveyStore):
        self.store = store
        self.access = SurveyAccess(store)

    def validate(self, questions: list[Question], answers: list[NewAnswer]) -> list[NewAnswer]:
        missing = missing_required(questions, answers)
        if missing:
            raise ValidationError("Please answer all required questions", fields=missing)
        return clean_answers(questions, answers)

    def submit(self, share_token: str, answers: Iterable[NewAnswer], respondent_id: str | None = None) -> Response:
        survey, questions = self.access.public_survey(share_token)
        answers = list(answers)
        try:
            kept = self.validate(questions, answers)
            # The store enforces one response per respondent atomically with the insert
            response = self.store.create_response(
                survey.id, respondent_id, kept, single_response=not survey.multiple_responses
            )
        except (ValidationError, ConflictError) as e:
            logger.warning(f"Rejected submission for survey {survey.id}: {e.message} {e.fields}")
            raise

        logger.info(f"Response {response.id} stored for survey {survey.id} with {len(kept)} answers")
        return response
