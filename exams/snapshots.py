# exams/snapshots.py
"""
Publishing and reading immutable exam snapshots.

A snapshot payload is a plain JSON document holding everything needed to run
and grade an attempt, so live edits to ``Exam``/``Section``/``Question`` rows
never reach attempts that already started.
"""
import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from cores.models import AuditLog, PlatformSetting
from .models import Exam, ExamSnapshot, Question

logger = logging.getLogger(__name__)


def _marks(value):
    return None if value is None else str(value)


def build_payload(exam, version):
    """Serialize the exam as it stands now into a snapshot payload."""
    settings = PlatformSetting.load()
    sections = []
    questions = {}

    for section in exam.sections.prefetch_related('questions__options'):
        question_ids = []
        for question in section.questions.all():
            options = list(question.options.all())
            qid = str(question.id)
            question_ids.append(qid)
            questions[qid] = {
                "id": qid,
                "section_id": str(section.id),
                "type": question.question_type,
                "text": question.text,
                "options": [{"id": str(opt.id), "text": opt.text} for opt in options],
                "correct": [str(opt.id) for opt in options if opt.is_correct],
                "explanation": question.explanation,
                "positive_marks": _marks(question.positive_marks),
                "negative_marks": _marks(question.negative_marks),
            }
        sections.append({
            "id": str(section.id),
            "title": section.title,
            "instructions": section.instructions,
            "questions": question_ids,
        })

    return {
        "exam_id": exam.id,
        "version": version,
        "title": exam.title,
        "description": exam.description,
        "duration_minutes": exam.duration_minutes,
        "positive_marks": str(exam.positive_marks),
        "negative_marks": str(exam.negative_marks),
        "passing_percentage": str(exam.passing_percentage),
        "multiple_correct_algorithm": exam.multiple_correct_algorithm,
        "partial_negative_carry": exam.partial_negative_carry,
        "shuffle_questions": exam.shuffle_questions,
        "shuffle_options": exam.shuffle_options,
        "allow_section_navigation": exam.allow_section_navigation,
        "show_section_wise_result": exam.show_section_wise_result,
        "grade_bands": settings.sorted_grade_bands(),
        "sections": sections,
        "questions": questions,
    }


def validate_exam(exam):
    errors = []
    sections = list(exam.sections.prefetch_related('questions__options'))
    if not any(section.questions.all() for section in sections):
        errors.append("An exam needs at least one section with a question.")

    for section in sections:
        for question in section.questions.all():
            options = list(question.options.all())
            correct = [opt for opt in options if opt.is_correct]
            label = f"Question {question.id}"
            if len(options) < 2:
                errors.append(f"{label} needs at least two options.")
            if question.question_type == Question.QuestionType.SINGLE_CORRECT and len(correct) != 1:
                errors.append(f"{label} must have exactly one correct option.")
            if question.question_type == Question.QuestionType.MULTIPLE_CORRECT and not correct:
                errors.append(f"{label} must have at least one correct option.")
    if errors:
        raise ValidationError(errors)


def publish_exam(exam, actor=None):
    """Freeze the current definition into a new snapshot version."""
    validate_exam(exam)
    with transaction.atomic():
        exam = Exam.objects.select_for_update().get(pk=exam.pk)
        version = exam.version + 1
        snapshot = ExamSnapshot.objects.create(
            exam=exam,
            version=version,
            payload=build_payload(exam, version),
        )
        exam.version = version
        exam.is_published = True
        exam.save(update_fields=['version', 'is_published', 'updated_at'])
        AuditLog.record('PUBLISH', exam, details=f"Published snapshot v{version}", actor=actor)

    logger.info(f"Published exam {exam.id} snapshot v{version}")
    return snapshot


class FrozenExam:
    """Read-only accessors over a snapshot payload."""

    def __init__(self, payload):
        self.payload = payload
        self._section_index = {s["id"]: i for i, s in enumerate(payload["sections"])}

    @property
    def version(self):
        return self.payload["version"]

    @property
    def duration_minutes(self):
        return self.payload["duration_minutes"]

    @property
    def allow_section_navigation(self):
        return self.payload["allow_section_navigation"]

    @property
    def sections(self):
        return self.payload["sections"]

    @property
    def questions(self):
        return self.payload["questions"]

    def first_section_id(self):
        return self.sections[0]["id"] if self.sections else None

    def section_position(self, section_id):
        return self._section_index.get(str(section_id))

    def question(self, question_id):
        return self.questions.get(str(question_id))

    def ordered_question_ids(self):
        return [qid for section in self.sections for qid in section["questions"]]

    def question_marks(self, question):
        positive = question.get("positive_marks") or self.payload["positive_marks"]
        negative = question.get("negative_marks") or self.payload["negative_marks"]
        return Decimal(positive), Decimal(negative)
