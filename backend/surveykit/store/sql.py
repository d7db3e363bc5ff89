"""SQLAlchemy-backed survey store."""
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from surveykit import models
from surveykit.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from surveykit.records import (
    Answer,
    NewAnswer,
    NewQuestion,
    OwnerCounts,
    Question,
    QuestionType,
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

logger = logging.getLogger(__name__)


def _user(row: models.User) -> User:
    return User(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        profile_image_url=row.profile_image_url,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _survey(row: models.Survey) -> Survey:
    return Survey(
        id=row.id,
        title=row.title,
        description=row.description,
        owner_id=row.owner_id,
        status=SurveyStatus(row.status),
        anonymous=row.anonymous,
        multiple_responses=row.multiple_responses,
        share_token=row.share_token,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _question(row: models.SurveyQuestion) -> Question:
    return Question(
        id=row.id,
        survey_id=row.survey_id,
        text=row.text,
        type=QuestionType(row.type),
        required=row.required,
        options=list(row.options or []),
        order=row.order,
        created_at=row.created_at,
    )


def _response(row: models.SurveyResponse) -> Response:
    return Response(id=row.id, survey_id=row.survey_id, respondent_id=row.respondent_id, created_at=row.created_at)


def _answer(row: models.SurveyAnswer) -> Answer:
    return Answer(
        id=row.id,
        response_id=row.response_id,
        question_id=row.question_id,
        value=row.value,
        created_at=row.created_at,
    )


class SqlSurveyStore(SurveyStore):
    """Store working on one SQLAlchemy session; every write commits its own unit of work."""

    def __init__(self, db: Session, share_token_bytes: int = 18):
        super().__init__(share_token_bytes)
        self.db = db

    @contextmanager
    def _unit_of_work(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Database write failed, rolled back")
            raise InternalError() from exc
        except Exception:
            self.db.rollback()
            raise

    def _survey_row(self, survey_id: str) -> models.Survey:
        row = self.db.get(models.Survey, survey_id)
        if not row:
            raise NotFoundError("Survey not found")
        return row

    def _question_rows(self, survey_id: str) -> list[models.SurveyQuestion]:
        stmt = (
            select(models.SurveyQuestion)
            .where(models.SurveyQuestion.survey_id == survey_id)
            .order_by(models.SurveyQuestion.order)
        )
        return list(self.db.scalars(stmt))

    @staticmethod
    def _renumber(rows: Sequence[models.SurveyQuestion]) -> None:
        for i, row in enumerate(rows):
            row.order = i

    # Users

    def get_user(self, user_id: str) -> User | None:
        row = self.db.get(models.User, user_id)
        return _user(row) if row else None

    def upsert_user(self, user_id: str, **profile: Any) -> User:
        profile = clean_profile(pick_updates(profile, USER_PROFILE_FIELDS, USER_PROFILE_FIELDS))
        email = profile.get("email")
        with self._unit_of_work():
            if email:
                owner = self.db.scalar(select(models.User).where(models.User.email == email))
                if owner and owner.id != user_id:
                    raise ConflictError("Email already belongs to another user", fields=["email"])
            row = self.db.get(models.User, user_id)
            if row is None:
                row = models.User(id=user_id, **profile)
                self.db.add(row)
            else:
                for key, value in profile.items():
                    setattr(row, key, value)
                row.updated_at = utcnow()
        return _user(row)

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

        with self._unit_of_work():
            if self.db.get(models.User, owner_id) is None:
                raise NotFoundError("User not found")
            now = utcnow()
            row = models.Survey(
                id=new_id(),
                title=title.strip(),
                description=description,
                owner_id=owner_id,
                status=SurveyStatus.DRAFT.value,
                anonymous=anonymous,
                multiple_responses=multiple_responses,
                share_token=generate_share_token(self.share_token_bytes),
                created_at=now,
                updated_at=now,
            )
            self.db.add(row)
            for order, (q, (text, qtype, options)) in enumerate(zip(questions, shaped)):
                self.db.add(models.SurveyQuestion(
                    id=new_id(),
                    survey_id=row.id,
                    text=text,
                    type=qtype.value,
                    required=q.required,
                    options=options,
                    order=order,
                ))
        return _survey(row)

    def get_survey(self, survey_id: str) -> Survey | None:
        row = self.db.get(models.Survey, survey_id)
        return _survey(row) if row else None

    def get_survey_by_share_token(self, share_token: str) -> Survey | None:
        row = self.db.scalar(select(models.Survey).where(models.Survey.share_token == share_token))
        return _survey(row) if row else None

    def list_surveys(self, owner_id: str) -> list[Survey]:
        stmt = (
            select(models.Survey)
            .where(models.Survey.owner_id == owner_id)
            .order_by(models.Survey.created_at.desc(), models.Survey.id)
        )
        return [_survey(r) for r in self.db.scalars(stmt)]

    def update_survey(self, survey_id: str, updates: dict[str, Any]) -> Survey:
        updates = pick_updates(updates, SURVEY_UPDATABLE, SURVEY_NULLABLE)
        if "title" in updates and not (updates["title"] or "").strip():
            raise ValidationError("Survey title is required", fields=["title"])
        if "status" in updates:
            check_status(updates["status"])
            updates["status"] = SurveyStatus(updates["status"]).value

        with self._unit_of_work():
            row = self._survey_row(survey_id)
            for key, value in updates.items():
                setattr(row, key, value)
            row.updated_at = utcnow()
        return _survey(row)

    def delete_survey(self, survey_id: str) -> None:
        with self._unit_of_work():
            row = self._survey_row(survey_id)
            self.db.delete(row)

    # Questions

    def add_question(self, survey_id: str, question: NewQuestion, position: int | None = None) -> Question:
        text, qtype, options = check_question_shape(question.text, question.type, question.options)
        with self._unit_of_work():
            survey = self._survey_row(survey_id)
            rows = self._question_rows(survey_id)
            if position is None:
                position = len(rows)
            position = max(0, min(position, len(rows)))
            row = models.SurveyQuestion(
                id=new_id(),
                survey_id=survey_id,
                text=text,
                type=qtype.value,
                required=question.required,
                options=options,
                order=position,
            )
            rows.insert(position, row)
            self._renumber(rows)
            self.db.add(row)
            survey.updated_at = utcnow()
        return _question(row)

    def get_question(self, question_id: str) -> Question | None:
        row = self.db.get(models.SurveyQuestion, question_id)
        return _question(row) if row else None

    def list_questions(self, survey_id: str) -> list[Question]:
        return [_question(r) for r in self._question_rows(survey_id)]

    def update_question(self, question_id: str, updates: dict[str, Any]) -> Question:
        updates = pick_updates(updates, QUESTION_UPDATABLE, QUESTION_NULLABLE)
        with self._unit_of_work():
            row = self.db.get(models.SurveyQuestion, question_id)
            if not row:
                raise NotFoundError("Question not found")
            text, qtype, options = check_question_shape(
                updates.get("text", row.text),
                updates.get("type", row.type),
                updates.get("options", row.options),
            )
            row.text = text
            row.type = qtype.value
            row.options = options
            if "required" in updates:
                row.required = bool(updates["required"])
            row.survey.updated_at = utcnow()
        return _question(row)

    def delete_question(self, question_id: str) -> None:
        with self._unit_of_work():
            row = self.db.get(models.SurveyQuestion, question_id)
            if not row:
                raise NotFoundError("Question not found")
            survey_id = row.survey_id
            self.db.delete(row)
            self.db.flush()
            self._renumber(self._question_rows(survey_id))
            self._survey_row(survey_id).updated_at = utcnow()

    def reorder_questions(self, survey_id: str, question_ids: Sequence[str]) -> list[Question]:
        with self._unit_of_work():
            survey = self._survey_row(survey_id)
            rows = {r.id: r for r in self._question_rows(survey_id)}
            check_permutation(rows, question_ids)
            self._renumber([rows[qid] for qid in question_ids])
            survey.updated_at = utcnow()
        return self.list_questions(survey_id)

    # Responses and answers

    def create_response(
        self,
        survey_id: str,
        respondent_id: str | None,
        answers: Sequence[NewAnswer],
        single_response: bool = False,
    ) -> Response:
        key = respondent_id if single_response and respondent_id else None
        with self._unit_of_work():
            self._survey_row(survey_id)
            check_answers_belong(self.list_questions(survey_id), answers)
            if key and self.has_response_from(survey_id, key):
                raise duplicate_respondent()
            row = models.SurveyResponse(
                id=new_id(),
                survey_id=survey_id,
                respondent_id=respondent_id,
                respondent_key=key,
                created_at=utcnow(),
            )
            self.db.add(row)
            try:
                self.db.flush()
            except IntegrityError:
                # uq_response_survey_respondent: a concurrent submission got there first
                if key is None:
                    raise
                raise duplicate_respondent() from None
            for a in answers:
                self.db.add(models.SurveyAnswer(
                    id=new_id(),
                    response_id=row.id,
                    question_id=a.question_id,
                    value=a.value,
                ))
        return _response(row)

    def list_responses(self, survey_id: str) -> list[Response]:
        stmt = (
            select(models.SurveyResponse)
            .where(models.SurveyResponse.survey_id == survey_id)
            .order_by(models.SurveyResponse.created_at.desc(), models.SurveyResponse.id)
        )
        return [_response(r) for r in self.db.scalars(stmt)]

    def count_responses(self, survey_id: str) -> int:
        stmt = select(func.count(models.SurveyResponse.id)).where(models.SurveyResponse.survey_id == survey_id)
        return self.db.scalar(stmt) or 0

    def has_response_from(self, survey_id: str, respondent_id: str) -> bool:
        stmt = (
            select(models.SurveyResponse.id)
            .where(models.SurveyResponse.survey_id == survey_id)
            .where(models.SurveyResponse.respondent_id == respondent_id)
            .limit(1)
        )
        return self.db.scalar(stmt) is not None

    def list_answers(self, response_id: str) -> list[Answer]:
        stmt = (
            select(models.SurveyAnswer)
            .join(models.SurveyQuestion, models.SurveyAnswer.question_id == models.SurveyQuestion.id)
            .where(models.SurveyAnswer.response_id == response_id)
            .order_by(models.SurveyQuestion.order)
        )
        return [_answer(r) for r in self.db.scalars(stmt)]

    def list_survey_answers(self, survey_id: str) -> list[Answer]:
        stmt = (
            select(models.SurveyAnswer)
            .join(models.SurveyResponse, models.SurveyAnswer.response_id == models.SurveyResponse.id)
            .join(models.SurveyQuestion, models.SurveyAnswer.question_id == models.SurveyQuestion.id)
            .where(models.SurveyResponse.survey_id == survey_id)
            .order_by(models.SurveyResponse.created_at, models.SurveyResponse.id, models.SurveyQuestion.order)
        )
        return [_answer(r) for r in self.db.scalars(stmt)]

    def owner_counts(self, owner_id: str) -> OwnerCounts:
        owned = models.Survey.owner_id == owner_id
        total = self.db.scalar(select(func.count(models.Survey.id)).where(owned)) or 0
        active = self.db.scalar(
            select(func.count(models.Survey.id)).where(owned, models.Survey.status == SurveyStatus.ACTIVE.value)
        ) or 0
        responses = self.db.scalar(
            select(func.count(models.SurveyResponse.id))
            .join(models.Survey, models.SurveyResponse.survey_id == models.Survey.id)
            .where(owned)
        ) or 0
        return OwnerCounts(total_surveys=total, active_surveys=active, total_responses=responses)
