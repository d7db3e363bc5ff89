"""Repository interface for surveys and their responses.

The store trusts its caller: it never checks who is asking. Ownership and
public visibility are decided one layer up in ``surveykit.services.access``.
What the store does guarantee are the relational invariants:

* every question, response and answer points at an existing parent;
* deleting a survey removes its questions, responses and answers;
* share tokens are unique and generated here, never supplied by callers;
* question orders within a survey are always exactly ``0..N-1``;
* an answer's question belongs to the same survey as its response;
* a response created with ``single_response`` never repeats a respondent id.
"""
import secrets
import uuid
from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence

from surveykit.core.errors import ConflictError, ValidationError
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
)

SURVEY_UPDATABLE = frozenset({"title", "description", "status", "anonymous", "multiple_responses"})
QUESTION_UPDATABLE = frozenset({"text", "type", "required", "options"})
USER_PROFILE_FIELDS = frozenset({"email", "first_name", "last_name", "profile_image_url"})
SURVEY_NULLABLE = frozenset({"description"})
QUESTION_NULLABLE = frozenset({"options"})


def new_id() -> str:
    return str(uuid.uuid4())


def generate_share_token(nbytes: int = 18) -> str:
    """Opaque, URL-safe token used in public survey links."""
    return secrets.token_urlsafe(nbytes)


def pick_updates(updates: dict[str, Any], allowed: frozenset[str], nullable: frozenset[str] = frozenset()) -> dict[str, Any]:
    unknown = sorted(set(updates) - allowed)
    if unknown:
        raise ValidationError("Fields cannot be updated", fields=unknown)
    nulled = sorted(k for k, v in updates.items() if v is None and k not in nullable)
    if nulled:
        raise ValidationError("Fields cannot be null", fields=nulled)
    return dict(updates)


def clean_profile(profile: dict[str, Any]) -> dict[str, Any]:
    """Store a blank email as no email, so it never takes part in the uniqueness check."""
    if "email" in profile:
        email = (profile["email"] or "").strip()
        profile["email"] = email or None
    return profile


def duplicate_respondent() -> ConflictError:
    return ConflictError("This survey accepts one response per respondent", fields=["respondentId"])


def check_question_shape(text: str, qtype: QuestionType | str, options: Iterable[str] | None) -> tuple[str, QuestionType, list[str]]:
    """Validate a question and return its normalized (text, type, options)."""
    errors = []
    try:
        qtype = QuestionType(qtype)
    except ValueError:
        raise ValidationError(f"Unknown question type: {qtype}", fields=["type"]) from None

    text = (text or "").strip()
    if not text:
        errors.append("text")

    cleaned: list[str] = []
    if qtype == QuestionType.MULTIPLE_CHOICE:
        cleaned = [o.strip() for o in (options or []) if o and o.strip()]
        if not cleaned or len(set(cleaned)) != len(cleaned):
            errors.append("options")

    if errors:
        raise ValidationError("Invalid question", fields=errors)
    return text, qtype, cleaned


def check_answers_belong(questions: Sequence[Question], answers: Sequence[NewAnswer]) -> None:
    known = {q.id for q in questions}
    seen: set[str] = set()
    offending = []
    for a in answers:
        if a.question_id not in known or a.question_id in seen:
            offending.append(a.question_id)
        seen.add(a.question_id)
    if offending:
        raise ValidationError("Answers do not match the survey's questions", fields=offending)


def check_permutation(current_ids: Iterable[str], requested_ids: Sequence[str]) -> None:
    current = set(current_ids)
    if len(requested_ids) != len(current) or set(requested_ids) != current:
        raise ValidationError("Question ids must list every question of the survey exactly once", fields=["questionIds"])


def check_status(status: Any) -> None:
    try:
        SurveyStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown survey status: {status}", fields=["status"]) from None


class SurveyStore(ABC):
    """CRUD over users, surveys, questions, responses and answers."""

    def __init__(self, share_token_bytes: int = 18):
        self.share_token_bytes = share_token_bytes

    # Users

    @abstractmethod
    def get_user(self, user_id: str) -> User | None: ...

    @abstractmethod
    def upsert_user(self, user_id: str, **profile: Any) -> User: ...

    def ensure_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if user is None:
            user = self.upsert_user(user_id)
        return user

    # Surveys

    @abstractmethod
    def create_survey(
        self,
        owner_id: str,
        title: str,
        description: str | None = None,
        anonymous: bool = True,
        multiple_responses: bool = False,
        questions: Sequence[NewQuestion] = (),
    ) -> Survey: ...

    @abstractmethod
    def get_survey(self, survey_id: str) -> Survey | None: ...

    @abstractmethod
    def get_survey_by_share_token(self, share_token: str) -> Survey | None: ...

    @abstractmethod
    def list_surveys(self, owner_id: str) -> list[Survey]: ...

    @abstractmethod
    def update_survey(self, survey_id: str, updates: dict[str, Any]) -> Survey: ...

    @abstractmethod
    def delete_survey(self, survey_id: str) -> None: ...

    # Questions

    @abstractmethod
    def add_question(self, survey_id: str, question: NewQuestion, position: int | None = None) -> Question: ...

    @abstractmethod
    def get_question(self, question_id: str) -> Question | None: ...

    @abstractmethod
    def list_questions(self, survey_id: str) -> list[Question]: ...

    @abstractmethod
    def update_question(self, question_id: str, updates: dict[str, Any]) -> Question: ...

    @abstractmethod
    def delete_question(self, question_id: str) -> None: ...

    @abstractmethod
    def reorder_questions(self, survey_id: str, question_ids: Sequence[str]) -> list[Question]: ...

    # Responses and answers

    @abstractmethod
    def create_response(
        self,
        survey_id: str,
        respondent_id: str | None,
        answers: Sequence[NewAnswer],
        single_response: bool = False,
    ) -> Response:
        """Persist one response and all of its answers, or nothing.

        With ``single_response`` set, a second response from the same
        ``respondent_id`` raises ``ConflictError``. The check and the insert
        are one atomic step.
        """

    @abstractmethod
    def list_responses(self, survey_id: str) -> list[Response]: ...

    @abstractmethod
    def count_responses(self, survey_id: str) -> int: ...

    @abstractmethod
    def has_response_from(self, survey_id: str, respondent_id: str) -> bool: ...

    @abstractmethod
    def list_answers(self, response_id: str) -> list[Answer]: ...

    @abstractmethod
    def list_survey_answers(self, survey_id: str) -> list[Answer]:
        """Answers of every response, ordered by response creation then question order."""

    @abstractmethod
    def owner_counts(self, owner_id: str) -> OwnerCounts: ...
