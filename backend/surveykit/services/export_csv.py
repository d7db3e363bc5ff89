import csv
import io
import re
from typing import Iterable

from surveykit.records import Answer, Question, Response

FIXED_COLUMNS = ["responseId", "respondentId", "submittedAt"]


def export_filename(title: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9._-]+", "-", title).strip("-") or "survey"
    return f"{slug}-responses.csv"


def build_rows(questions: list[Question], responses: Iterable[Response], answers: Iterable[Answer]) -> list[list[str]]:
    """
    One row per response and one column per question, headers first.
    Cells for unanswered questions stay empty.
    """
    # response_id -> question_id -> value
    cells: dict[str, dict[str, str]] = {}
    for a in answers:
        cells.setdefault(a.response_id, {})[a.question_id] = a.value

    rows = [FIXED_COLUMNS + [q.text for q in questions]]
    for r in responses:
        values = cells.get(r.id, {})
        rows.append([
            r.id,
            r.respondent_id or "",
            r.created_at.isoformat() if r.created_at else "",
            *(values.get(q.id, "") for q in questions),
        ])
    return rows


def build_export_csv(questions: list[Question], responses: Iterable[Response], answers: Iterable[Answer]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(build_rows(questions, responses, answers))
    return buf.getvalue()
