"""Ownership and public-visibility checks in front of the survey store."""
import logging
from typing import Any, Sequence

from surveykit.core.errors import NotFoundError
from surveykit.records import Answer, NewQuestion, Question, Response, Survey
from surveykit.store.base import SurveyStore

logger = logging.getLogger(__name__)


class SurveyAccess:
    """Owner-mode and public-mode access to surveys.

    Owner mode resolves a survey for a caller and fails with NotFoundError
    when the survey is missing *or* belongs to someone else, so the existence
    of other users' surveys never leaks. Public mode only ever resolves
    active surveys by share token.
    """

    def __init__(self, store: SurveyStore):
        self.store = store

    # Owner mode

    def owned_survey(self, caller_id: str, survey_id: str) -> Survey:
        survey = self.store.get_survey(survey_id)
        if survey is None or survey.owner_id != caller_id:
            raise NotFoundError("Survey not found")
        return survey

    def owned_question(self, caller_id: str, survey_id: str, question_id: str) -> Question:
        self.owned_survey(caller_id, survey_id)
        question = self.store.get_question(question_id)
        if question is None or question.survey_id != survey_id:
            raise NotFoundError("Question not found")
        return question

    def list_surveys(self, caller_id: str) -> list[Survey]:
        return self.store.list_surveys(caller_id)

    def create_survey(self, caller_id: str, title: str, questions: Sequence[NewQuestion] = (), **fields: Any) -> Survey:
        survey = self.store.create_survey(caller_id, title, questions=questions, **fields)
        logger.info(f"Survey {survey.id} created by {caller_id} with {len(questions)} questions")
        return survey

    def survey_with_questions(self, caller_id: str, survey_id: str) -> tuple[Survey, list[Question]]:
        survey = self.owned_survey(caller_id, survey_id)
        return survey, self.store.list_questions(survey.id)

    def update_survey(self, caller_id: str, survey_id: str, updates: dict[str, Any]) -> Survey:
        before = self.owned_survey(caller_id, survey_id)
        survey = self.store.update_survey(survey_id, updates)
        if survey.status != before.status:
            logger.info(f"Survey {survey_id} moved from {before.status.value} to {survey.status.value}")
        return survey

    def delete_survey(self, caller_id: str, survey_id: str) -> None:
        self.owned_survey(caller_id, survey_id)
        self.store.delete_survey(survey_id)
        logger.info(f"Survey {survey_id} deleted by {caller_id}")

    def add_question(self, caller_id: str, survey_id: str, question: NewQuestion, position: int | None = None) -> Question:
        self.owned_survey(caller_id, survey_id)
        return self.store.add_question(survey_id, question, position)

    def update_question(self, caller_id: str, survey_id: str, question_id: str, updates: dict[str, Any]) -> Question:
        self.owned_question(caller_id, survey_id, question_id)
        return self.store.update_question(question_id, updates)

    def delete_question(self, caller_id: str, survey_id: str, question_id: str) -> None:
        self.owned_question(caller_id, survey_id, question_id)
        self.store.delete_question(question_id)

    def reorder_questions(self, caller_id: str, survey_id: str, question_ids: Sequence[str]) -> list[Question]:
        self.owned_survey(caller_id, survey_id)
        return self.store.reorder_questions(survey_id, question_ids)

    def survey_responses(self, caller_id: str, survey_id: str) -> tuple[list[Response], list[Answer]]:
        survey = self.owned_survey(caller_id, survey_id)
        return self.store.list_responses(survey.id), self.store.list_survey_answers(survey.id)

    # Public mode

    def public_survey(self, share_token: str) -> tuple[Survey, list[Question]]:
        survey = self.store.get_survey_by_share_token(share_token)
        if survey is None or not survey.is_public:
            raise NotFoundError("Survey not found or inactive")
        return survey, self.store.list_questions(survey.id)
