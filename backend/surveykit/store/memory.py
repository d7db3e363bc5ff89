"""Process-local survey store, used for development and in tests."""
import threading
from dataclasses import replace
from typing import Any, Sequence

from surveykit.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from surveykit.records import (
    Answer,
    NewAnswer,
    NewQuestion,
    OwnerCounts,
    Question,
    Response,
    Survey,
    SurveyStatus,
    User,
    utcnow,
)
from surveykit.store.base import (
    QUESTION_NULLABLE,
    QUESTION_UPDATABLE,
    SURVEY_NULLABLE,
    SURVEY_UPDATABLE,
    USER_PROFILE_FIELDS,
    SurveyStore,
    check_answers_belong,
    check_permutation,
    check_question_shape,
    check_status,
    clean_profile,
    duplicate_respondent,
    generate_share_token,
    new_id,
    pick_updates,
)


class InMemorySurveyStore(SurveyStore):
    """Dict-backed store. Dicts keep insertion order, which stands in for creation order."""

    def __init__(self, share_token_bytes: int = 18):
        super().__init__(share_token_bytes)
        self._lock = threading.RLock()
        self._users: dict[str, User] = {}
        self._surveys: dict[str, Survey] = {}
        self._questions: dict[str, Question] = {}
        self._responses: dict[str, Response] = {}
        self._answers: dict[str, Answer] = {}
        self._used_tokens: set[str] = set()

    def _survey(self, survey_id: str) -> Survey:
        survey = self._surveys.get(survey_id)
        if survey is None:
            raise NotFoundError("Survey not found")
        return survey

    def _ordered_questions(self, survey_id: str) -> list[Question]:
        return sorted((q for q in self._questions.values() if q.survey_id == survey_id), key=lambda q: q.order)

    def _renumber(self, questions: Sequence[Question]) -> None:
        for i, q in enumerate(questions):
            self._questions[q.id] = replace(q, order=i)

    def _touch(self, survey_id: str) -> None:
        self._surveys[survey_id] = replace(self._surveys[survey_id], updated_at=utcnow())

    def _new_token(self) -> str:
        token = generate_share_token(self.share_token_bytes)
        if token in self._used_tokens:
            raise InternalError("Share token collision")
        self._used_tokens.add(token)
        return token

    # Users

    def get_user(self, user_id: str) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def upsert_user(self, user_id: str, **profile: Any) -> User:
        profile = clean_profile(pick_updates(profile, USER_PROFILE_FIELDS, USER_PROFILE_FIELDS))
        with self._lock:
            email = profile.get("email")
            if email and any(u.email == email and u.id != user_id for u in self._users.values()):
                raise ConflictError("Email already belongs to another user", fields=["email"])
            now = utcnow()
            existing = self._users.get(user_id)
            if existing is None:
                user = User(id=user_id, created_at=now, updated_at=now, **profile)
            else:
                user = replace(existing, updated_at=now, **profile)
            self._users[user_id] = user
            return user

    # Surveys

    def create_survey(
        self,
        owner_id: str,
        title: str,
        description: str | None = None,
        anonymous: bool = True,
        multiple_responses: bool = False,
        questions: Sequence[NewQuestion] = (),
    ) -> Survey:
        if not (title or "").strip():
            raise ValidationError("Survey title is required", fields=["title"])
        shaped = [check_question_shape(q.text, q.type, q.options) for q in questions]
        with self._lock:
            if owner_id not in self._users:
                raise NotFoundError("User not found")
            now = utcnow()
            survey = Survey(
                id=new_id(),
                title=title.strip(),
                description=description,
                owner_id=owner_id,
                share_token=self._new_token(),
                status=SurveyStatus.DRAFT,
                anonymous=anonymous,
                multiple_responses=multiple_responses,
                created_at=now,
                updated_at=now,
            )
            self._surveys[survey.id] = survey
            for order, (q, (text, qtype, options)) in enumerate(zip(questions, shaped)):
                question = Question(
                    id=new_id(),
                    survey_id=survey.id,
                    text=text,
                    type=qtype,
                    required=q.required,
                    options=options,
                    order=order,
                    created_at=now,
                )
                self._questions[question.id] = question
            return survey

    def get_survey(self, survey_id: str) -> Survey | None:
        with self._lock:
            return self._surveys.get(survey_id)

    def get_survey_by_share_token(self, share_token: str) -> Survey | None:
        with self._lock:
            return next((s for s in self._surveys.values() if s.share_token == share_token), None)

    def list_surveys(self, owner_id: str) -> list[Survey]:
        with self._lock:
            owned = [s for s in self._surveys.values() if s.owner_id == owner_id]
        return list(reversed(owned))

    def update_survey(self, survey_id: str, updates: dict[str, Any]) -> Survey:
        updates = pick_updates(updates, SURVEY_UPDATABLE, SURVEY_NULLABLE)
        if "title" in updates and not (updates["title"] or "").strip():
            raise ValidationError("Survey title is required", fields=["title"])
        if "status" in updates:
            check_status(updates["status"])
            updates["status"] = SurveyStatus(updates["status"])
        with self._lock:
            survey = replace(self._survey(survey_id), updated_at=utcnow(), **updates)
            self._surveys[survey_id] = survey
            return survey

    def delete_survey(self, survey_id: str) -> None:
        with self._lock:
            self._survey(survey_id)
            del self._surveys[survey_id]
            question_ids = {qid for qid, q in self._questions.items() if q.survey_id == survey_id}
            response_ids = {rid for rid, r in self._responses.items() if r.survey_id == survey_id}
            for qid in question_ids:
                del self._questions[qid]
            for rid in response_ids:
                del self._responses[rid]
            self._answers = {
                aid: a for aid, a in self._answers.items()
                if a.response_id not in response_ids and a.question_id not in question_ids
            }

    # Questions

    def add_question(self, survey_id: str, question: NewQuestion, position: int | None = None) -> Question:
        text, qtype, options = check_question_shape(question.text, question.type, question.options)
        with self._lock:
            self._survey(survey_id)
            questions = self._ordered_questions(survey_id)
            if position is None:
                position = len(questions)
            position = max(0, min(position, len(questions)))
            created = Question(
                id=new_id(),
                survey_id=survey_id,
                text=text,
                type=qtype,
                required=question.required,
                options=options,
                order=position,
                created_at=utcnow(),
            )
            questions.insert(position, created)
            self._renumber(questions)
            self._touch(survey_id)
            return self._questions[created.id]

    def get_question(self, question_id: str) -> Question | None:
        with self._lock:
            return self._questions.get(question_id)

    def list_questions(self, survey_id: str) -> list[Question]:
        with self._lock:
            return self._ordered_questions(survey_id)

    def update_question(self, question_id: str, updates: dict[str, Any]) -> Question:
        updates = pick_updates(updates, QUESTION_UPDATABLE, QUESTION_NULLABLE)
        with self._lock:
            current = self._questions.get(question_id)
            if current is None:
                raise NotFoundError("Question not found")
            text, qtype, options = check_question_shape(
                updates.get("text", current.text),
                updates.get("type", current.type),
                updates.get("options", current.options),
            )
            required = bool(updates.get("required", current.required))
            updated = replace(current, text=text, type=qtype, options=options, required=required)
            self._questions[question_id] = updated
            self._touch(current.survey_id)
            return updated

    def delete_question(self, question_id: str) -> None:
        with self._lock:
            question = self._questions.pop(question_id, None)
            if question is None:
                raise NotFoundError("Question not found")
            self._answers = {aid: a for aid, a in self._answers.items() if a.question_id != question_id}
            self._renumber(self._ordered_questions(question.survey_id))
            self._touch(question.survey_id)

    def reorder_questions(self, survey_id: str, question_ids: Sequence[str]) -> list[Question]:
        with self._lock:
            self._survey(survey_id)
            current = {q.id: q for q in self._ordered_questions(survey_id)}
            check_permutation(current, question_ids)
            self._renumber([current[qid] for qid in question_ids])
            self._touch(survey_id)
            return self._ordered_questions(survey_id)

    # Responses and answers

    def create_response(
        self,
        survey_id: str,
        respondent_id: str | None,
        answers: Sequence[NewAnswer],
        single_response: bool = False,
    ) -> Response:
        with self._lock:
            self._survey(survey_id)
            check_answers_belong(self._ordered_questions(survey_id), answers)
            if single_response and respondent_id and self._has_response_from(survey_id, respondent_id):
                raise duplicate_respondent()
            now = utcnow()
            response = Response(id=new_id(), survey_id=survey_id, respondent_id=respondent_id, created_at=now)
            # Build everything first so a failure leaves no partial rows behind.
            created = [
                Answer(id=new_id(), response_id=response.id, question_id=a.question_id, value=a.value, created_at=now)
                for a in answers
            ]
            self._responses[response.id] = response
            self._answers.update((a.id, a) for a in created)
            return response

    def list_responses(self, survey_id: str) -> list[Response]:
        with self._lock:
            return list(reversed([r for r in self._responses.values() if r.survey_id == survey_id]))

    def count_responses(self, survey_id: str) -> int:
        with self._lock:
            return sum(1 for r in self._responses.values() if r.survey_id == survey_id)

    def _has_response_from(self, survey_id: str, respondent_id: str) -> bool:
        return any(
            r.survey_id == survey_id and r.respondent_id == respondent_id for r in self._responses.values()
        )

    def has_response_from(self, survey_id: str, respondent_id: str) -> bool:
        with self._lock:
            return self._has_response_from(survey_id, respondent_id)

    def _question_order(self, answer: Answer) -> int:
        return self._questions[answer.question_id].order

    def list_answers(self, response_id: str) -> list[Answer]:
        with self._lock:
            answers = [a for a in self._answers.values() if a.response_id == response_id]
            return sorted(answers, key=self._question_order)

    def list_survey_answers(self, survey_id: str) -> list[Answer]:
        result: list[Answer] = []
        with self._lock:
            for response in self._responses.values():
                if response.survey_id == survey_id:
                    result.extend(self.list_answers(response.id))
        return result

    def owner_counts(self, owner_id: str) -> OwnerCounts:
        with self._lock:
            owned = {s.id: s for s in self._surveys.values() if s.owner_id == owner_id}
            return OwnerCounts(
                total_surveys=len(owned),
                active_surveys=sum(1 for s in owned.values() if s.status == SurveyStatus.ACTIVE),
                total_responses=sum(1 for r in self._responses.values() if r.survey_id in owned),
            )
