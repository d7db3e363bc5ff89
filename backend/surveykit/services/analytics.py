"""Per-question distributions and per-owner summary statistics."""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from surveykit.records import Answer, Question, QuestionType
from surveykit.store.base import SurveyStore


RATING_BUCKETS = [str(i) for i in range(1, 11)]


@dataclass
class QuestionAnalytics:
    question_id: str
    text: str
    type: QuestionType
    total: int = 0
    counts: dict[str, int] | None = None  # multiple-choice and rating
    values: list[str] | None = None  # text and textarea


@dataclass
class OwnerSummary:
    total_surveys: int
    active_surveys: int
    total_responses: int
    avg_completion_rate: float


@dataclass
class SurveyAnalytics:
    survey_id: str
    response_count: int
    questions: list[QuestionAnalytics] = field(default_factory=list)


def tally(buckets: Iterable[str], values: Iterable[str]) -> dict[str, int]:
    """Count values into a fixed set of buckets; values outside the buckets are ignored."""
    counts = {b: 0 for b in buckets}
    for v in values:
        if v in counts:
            counts[v] += 1
    return counts


def aggregate_question(question: Question, answers: Iterable[Answer]) -> QuestionAnalytics:
    values = [a.value for a in answers if a.question_id == question.id]
    result = QuestionAnalytics(question_id=question.id, text=question.text, type=question.type, total=len(values))

    if question.type == QuestionType.MULTIPLE_CHOICE:
        # Answers given before an option was renamed or removed fall out here.
        result.counts = tally(question.options, values)
    elif question.type == QuestionType.RATING:
        result.counts = tally(RATING_BUCKETS, (v.strip() for v in values))
    else:
        result.values = values
    return result


def aggregate_survey(questions: Iterable[Question], answers: Iterable[Answer]) -> list[QuestionAnalytics]:
    by_question: dict[str, list[Answer]] = defaultdict(list)
    for a in answers:
        by_question[a.question_id].append(a)
    return [aggregate_question(q, by_question.get(q.id, [])) for q in questions]


def completion_ratios(question_count: int, answers: Iterable[Answer]) -> dict[str, float]:
    """Share of the survey's questions answered, per response id."""
    answered: dict[str, int] = defaultdict(int)
    for a in answers:
        answered[a.response_id] += 1
    return {rid: min(n / question_count, 1.0) for rid, n in answered.items()}


class AnalyticsService:
    def __init__(self, store: SurveyStore):
        self.store = store

    def survey_analytics(self, survey_id: str) -> SurveyAnalytics:
        questions = self.store.list_questions(survey_id)
        answers = self.store.list_survey_answers(survey_id)
        return SurveyAnalytics(
            survey_id=survey_id,
            response_count=self.store.count_responses(survey_id),
            questions=aggregate_survey(questions, answers),
        )

    def completion_rate(self, owner_id: str) -> float:
        """Average percentage of questions answered per response, across the owner's surveys."""
        ratios: list[float] = []
        for survey in self.store.list_surveys(owner_id):
            question_count = len(self.store.list_questions(survey.id))
            if not question_count:
                continue
            per_response = completion_ratios(question_count, self.store.list_survey_answers(survey.id))
            for response in self.store.list_responses(survey.id):
                ratios.append(per_response.get(response.id, 0.0))
        if not ratios:
            return 0.0
        return round(100 * sum(ratios) / len(ratios), 1)

    def owner_summary(self, owner_id: str) -> OwnerSummary:
        counts = self.store.owner_counts(owner_id)
        return OwnerSummary(
            total_surveys=counts.total_surveys,
            active_surveys=counts.active_surveys,
            total_responses=counts.total_responses,
            avg_completion_rate=self.completion_rate(owner_id),
        )
