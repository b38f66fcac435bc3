# Shared fixtures for the exam engine test suites
from django.contrib.auth import get_user_model

from exams.models import Exam, Section, Question, Option
from exams.snapshots import publish_exam

User = get_user_model()

SINGLE = Question.QuestionType.SINGLE_CORRECT
MULTIPLE = Question.QuestionType.MULTIPLE_CORRECT

# Two single-correct questions in one section, first option correct
DEFAULT_LAYOUT = [[(SINGLE, 4, [0]), (SINGLE, 4, [0])]]


def make_user(email="candidate@example.com", **extra):
    return User.objects.create_user(
        username=email.split("@")[0],
        email=email,
        password="Str0ngPassw0rd!",
        **extra
    )


def make_exam(layout=None, publish=True, **fields):
    """
    Build an exam from ``layout``: one list per section of
    ``(question_type, option_count, correct_indexes)`` tuples.
    Returns ``(exam, snapshot)``; snapshot is None when not published.
    """
    fields.setdefault("title", "Physics Mock Test")
    fields.setdefault("duration_minutes", 60)
    exam = Exam.objects.create(**fields)

    for s_index, questions in enumerate(layout or DEFAULT_LAYOUT):
        section = Section.objects.create(exam=exam, title=f"Section {s_index + 1}", order=s_index)
        for q_index, (question_type, option_count, correct) in enumerate(questions):
            question = Question.objects.create(
                section=section,
                order=q_index,
                text=f"Question {s_index + 1}.{q_index + 1}",
                question_type=question_type,
            )
            for o_index in range(option_count):
                Option.objects.create(
                    question=question,
                    text=f"Option {o_index + 1}",
                    order=o_index,
                    is_correct=o_index in correct,
                )

    snapshot = publish_exam(exam) if publish else None
    exam.refresh_from_db()
    return exam, snapshot


def frozen_questions(snapshot):
    """Snapshot questions in authored order."""
    payload = snapshot.payload
    return [
        payload["questions"][qid]
        for section in payload["sections"]
        for qid in section["questions"]
    ]


def wrong_option(question):
    return next(opt["id"] for opt in question["options"] if opt["id"] not in question["correct"])
