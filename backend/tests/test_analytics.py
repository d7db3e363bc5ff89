"""Aggregation engine and owner summary statistics."""
from surveykit.records import Answer, NewAnswer, NewQuestion, Question, QuestionType
from surveykit.services.analytics import (
    RATING_BUCKETS,
    AnalyticsService,
    aggregate_question,
    aggregate_survey,
    completion_ratios,
)


def make_question(qtype, options=None, qid="q1"):
    return Question(id=qid, survey_id="s1", text="Question", type=qtype, order=0, options=options or [])


def make_answers(values, qid="q1"):
    return [Answer(id=f"a{i}", response_id=f"r{i}", question_id=qid, value=v) for i, v in enumerate(values)]


def test_multiple_choice_drops_unknown_options():
    question = make_question(QuestionType.MULTIPLE_CHOICE, ["A", "B"])

    result = aggregate_question(question, make_answers(["A", "A", "B", "C"]))

    assert result.counts == {"A": 2, "B": 1}
    assert list(result.counts) == ["A", "B"]
    assert result.total == 4
    assert result.values is None


def test_multiple_choice_keeps_declaration_order_and_empty_options():
    question = make_question(QuestionType.MULTIPLE_CHOICE, ["Zebra", "Apple", "Mango"])

    result = aggregate_question(question, make_answers(["Apple"]))

    assert list(result.counts.items()) == [("Zebra", 0), ("Apple", 1), ("Mango", 0)]


def test_rating_without_answers_has_all_buckets():
    result = aggregate_question(make_question(QuestionType.RATING), [])

    assert list(result.counts) == RATING_BUCKETS
    assert set(result.counts.values()) == {0}
    assert len(result.counts) == 10


def test_rating_counts_and_ignores_out_of_range():
    result = aggregate_question(make_question(QuestionType.RATING), make_answers(["10", "7", "7", "0", "11", "x"]))

    assert result.counts["7"] == 2
    assert result.counts["10"] == 1
    assert sum(result.counts.values()) == 3


def test_text_answers_are_listed_in_order():
    for qtype in (QuestionType.TEXT, QuestionType.TEXTAREA):
        result = aggregate_question(make_question(qtype), make_answers(["first", "second", "third"]))
        assert result.values == ["first", "second", "third"]
        assert result.counts is None


def test_aggregate_survey_routes_answers_to_their_question():
    questions = [
        make_question(QuestionType.MULTIPLE_CHOICE, ["Yes", "No"], qid="q1"),
        make_question(QuestionType.TEXT, qid="q2"),
    ]
    answers = make_answers(["Yes", "No"], qid="q1") + make_answers(["hello"], qid="q2")

    results = aggregate_survey(questions, answers)

    assert [r.question_id for r in results] == ["q1", "q2"]
    assert results[0].counts == {"Yes": 1, "No": 1}
    assert results[1].values == ["hello"]


def test_completion_ratios_cap_at_one():
    answers = [
        Answer(id="a1", response_id="r1", question_id="q1", value="x"),
        Answer(id="a2", response_id="r1", question_id="q2", value="y"),
        Answer(id="a3", response_id="r2", question_id="q1", value="z"),
    ]
    assert completion_ratios(2, answers) == {"r1": 1.0, "r2": 0.5}
    assert completion_ratios(1, answers)["r1"] == 1.0


def test_survey_analytics_from_store(store, survey_factory):
    survey = survey_factory()
    q = store.list_questions(survey.id)
    store.create_response(survey.id, None, [NewAnswer(q[0].id, "Red"), NewAnswer(q[1].id, "9")])
    store.create_response(survey.id, None, [NewAnswer(q[0].id, "Green"), NewAnswer(q[2].id, "Nice")])

    analytics = AnalyticsService(store).survey_analytics(survey.id)

    assert analytics.response_count == 2
    choice, rating, text = analytics.questions
    assert choice.counts == {"Red": 1, "Blue": 0}
    assert choice.total == 2
    assert rating.counts["9"] == 1
    assert text.values == ["Nice"]


def test_owner_summary(store, survey_factory, owner_id):
    active = survey_factory(title="Active")
    draft = survey_factory(title="Draft")
    store.update_survey(active.id, {"status": "active"})
    for survey, n in ((active, 4), (draft, 1)):
        q = store.list_questions(survey.id)
        for _ in range(n):
            store.create_response(survey.id, None, [NewAnswer(q[0].id, "Red")])

    summary = AnalyticsService(store).owner_summary(owner_id)

    assert summary.total_surveys == 2
    assert summary.active_surveys == 1
    assert summary.total_responses == 5
    # one of three questions answered in every response
    assert summary.avg_completion_rate == 33.3


def test_completion_rate_without_responses_is_zero(store, survey_factory, owner_id):
    survey_factory()
    assert AnalyticsService(store).owner_summary(owner_id).avg_completion_rate == 0.0


def test_completion_rate_skips_surveys_without_questions(store, survey_factory, owner_id):
    empty = survey_factory(title="Empty", questions=[])
    store.create_response(empty.id, None, [])
    full = survey_factory(title="Full", questions=[NewQuestion("Only", QuestionType.TEXT)])
    question = store.list_questions(full.id)[0]
    store.create_response(full.id, None, [NewAnswer(question.id, "done")])

    assert AnalyticsService(store).owner_summary(owner_id).avg_completion_rate == 100.0
