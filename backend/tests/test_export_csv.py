import csv
import io
from datetime import datetime, timezone

from surveykit.records import Answer, Question, QuestionType, Response
from surveykit.services.export_csv import build_export_csv, export_filename


def parse(text):
    return list(csv.reader(io.StringIO(text)))


def test_one_row_per_response_one_column_per_question():
    questions = [
        Question(id="q1", survey_id="s", text="Colour, please", type=QuestionType.TEXT, order=0),
        Question(id="q2", survey_id="s", text="Score", type=QuestionType.RATING, order=1),
    ]
    when = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    responses = [
        Response(id="r1", survey_id="s", respondent_id="anon-1", created_at=when),
        Response(id="r2", survey_id="s", created_at=when),
    ]
    answers = [
        Answer(id="a1", response_id="r1", question_id="q1", value='Red, "dark"'),
        Answer(id="a2", response_id="r1", question_id="q2", value="7"),
        Answer(id="a3", response_id="r2", question_id="q2", value="3"),
    ]

    rows = parse(build_export_csv(questions, responses, answers))

    assert rows[0] == ["responseId", "respondentId", "submittedAt", "Colour, please", "Score"]
    assert rows[1] == ["r1", "anon-1", when.isoformat(), 'Red, "dark"', "7"]
    assert rows[2] == ["r2", "", when.isoformat(), "", "3"]


def test_export_without_responses_has_header_only():
    questions = [Question(id="q1", survey_id="s", text="Q", type=QuestionType.TEXT, order=0)]
    assert parse(build_export_csv(questions, [], [])) == [["responseId", "respondentId", "submittedAt", "Q"]]


def test_export_filename():
    assert export_filename("Team pulse / Q3") == "Team-pulse-Q3-responses.csv"
    assert export_filename("???") == "survey-responses.csv"
