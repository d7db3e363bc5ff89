"""Owner-mode and public-mode access rules."""
import pytest

from surveykit.core.errors import NotFoundError
from surveykit.records import NewQuestion, QuestionType
from surveykit.services.access import SurveyAccess


@pytest.fixture
def access(store):
    return SurveyAccess(store)


def test_owner_can_resolve_own_survey(access, survey_factory, owner_id):
    survey = survey_factory()
    assert access.owned_survey(owner_id, survey.id).id == survey.id


def test_other_users_survey_looks_missing(access, store, survey_factory):
    survey = survey_factory()
    store.ensure_user("intruder")

    with pytest.raises(NotFoundError) as exc:
        access.owned_survey("intruder", survey.id)
    with pytest.raises(NotFoundError) as missing:
        access.owned_survey("intruder", "does-not-exist")
    assert exc.value.message == missing.value.message


def test_non_owner_cannot_mutate(access, store, survey_factory):
    survey = survey_factory()
    question = store.list_questions(survey.id)[0]

    with pytest.raises(NotFoundError):
        access.update_survey("intruder", survey.id, {"title": "Mine now"})
    with pytest.raises(NotFoundError):
        access.delete_survey("intruder", survey.id)
    with pytest.raises(NotFoundError):
        access.add_question("intruder", survey.id, NewQuestion("Sneaky", QuestionType.TEXT))
    with pytest.raises(NotFoundError):
        access.delete_question("intruder", survey.id, question.id)
    with pytest.raises(NotFoundError):
        access.survey_responses("intruder", survey.id)

    assert store.get_survey(survey.id).title == survey.title
    assert len(store.list_questions(survey.id)) == 3


def test_question_must_belong_to_the_addressed_survey(access, survey_factory, owner_id, store):
    first = survey_factory(title="First")
    second = survey_factory(title="Second")
    foreign_question = store.list_questions(second.id)[0]

    with pytest.raises(NotFoundError):
        access.update_question(owner_id, first.id, foreign_question.id, {"text": "moved"})


def test_create_survey_forces_caller_as_owner(access, store):
    store.ensure_user("alice")
    survey = access.create_survey("alice", "Team pulse")
    assert survey.owner_id == "alice"
    assert [s.id for s in access.list_surveys("alice")] == [survey.id]


@pytest.mark.parametrize("status", ["draft", "closed"])
def test_public_mode_hides_non_active_surveys(access, store, survey_factory, status):
    survey = survey_factory()
    store.update_survey(survey.id, {"status": status})

    with pytest.raises(NotFoundError):
        access.public_survey(survey.share_token)


def test_public_mode_returns_ordered_questions(access, store, survey_factory):
    survey = survey_factory()
    store.update_survey(survey.id, {"status": "active"})

    found, questions = access.public_survey(survey.share_token)

    assert found.id == survey.id
    assert [q.order for q in questions] == [0, 1, 2]


def test_public_mode_unknown_token(access):
    with pytest.raises(NotFoundError):
        access.public_survey("no-such-token")
