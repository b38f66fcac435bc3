# assessments/sessions.py
"""
Session manager: starting, resuming, navigating and submitting attempts.

Every mutation takes the attempt's row lock first (``Attempt.objects.locked``),
so answer writes, navigation and submission on one attempt never interleave.
"""
import logging
import random
import secrets
from datetime import timedelta

from django.db import IntegrityError, transaction

from cores.models import AuditLog
from exams.snapshots import FrozenExam
from results.projector import current_result
from .exceptions import (
    AlreadyInProgress,
    AttemptNotActive,
    ExamNotPublished,
    NavigationNotAllowed,
    UnknownQuestion,
    UnknownSection,
)
from .models import Attempt, AnswerRecord
from .timer import (
    close_section_clock,
    expiry_status,
    finalize_attempt,
    past_deadline,
    past_grace,
    server_now,
)

logger = logging.getLogger(__name__)


def start_attempt(exam, user, now=None):
    """Create a new attempt on the exam's latest snapshot."""
    now = now or server_now()
    snapshot = exam.latest_snapshot() if exam.is_published else None
    if snapshot is None:
        raise ExamNotPublished()

    existing = Attempt.objects.active().filter(user=user, exam=exam).first()
    if existing:
        if not past_grace(existing, now):
            raise AlreadyInProgress(existing.pk)
        # Left running past its deadline; close it before starting over
        finalize_attempt(existing.pk, expiry_status(existing), now=now)

    frozen = FrozenExam(snapshot.payload)
    first_section = frozen.first_section_id()
    try:
        with transaction.atomic():
            attempt = Attempt.objects.create(
                user=user,
                exam=exam,
                snapshot=snapshot,
                started_at=now,
                deadline_at=now + timedelta(minutes=frozen.duration_minutes),
                last_active_at=now,
                shuffle_seed=secrets.randbits(62),
                current_section_id=first_section or '',
                section_entered_at=now,
                section_time_spent={},
            )
            AnswerRecord.objects.bulk_create([
                AnswerRecord(attempt=attempt, question_id=qid, section_id=section["id"])
                for section in frozen.sections
                for qid in section["questions"]
            ])
            AuditLog.record('START', attempt, details=f"Snapshot v{snapshot.version}", actor=user)
    except IntegrityError:
        # Lost a race with a concurrent start for the same user and exam
        raced = Attempt.objects.active().filter(user=user, exam=exam).first()
        if raced is None:
            raise
        raise AlreadyInProgress(raced.pk)

    logger.info(f"User {user.pk} started attempt {attempt.pk} on exam {exam.pk} v{snapshot.version}")
    return attempt


def _shuffled(items, seed, salt):
    ordered = list(items)
    random.Random(f"{seed}:{salt}").shuffle(ordered)
    return ordered


def attempt_paper(attempt):
    """
    The candidate's view of the frozen exam, answer key withheld.

    Orders come from the attempt's seed, so a resumed session sees exactly the
    same question and option order.
    """
    frozen = attempt.frozen_exam
    payload = frozen.payload
    sections = []
    for section in frozen.sections:
        question_ids = section["questions"]
        if payload.get("shuffle_questions"):
            question_ids = _shuffled(question_ids, attempt.shuffle_seed, section["id"])

        questions = []
        for qid in question_ids:
            question = frozen.question(qid)
            options = question["options"]
            if payload.get("shuffle_options"):
                options = _shuffled(options, attempt.shuffle_seed, qid)
            positive, negative = frozen.question_marks(question)
            questions.append({
                "id": qid,
                "type": question["type"],
                "text": question["text"],
                "options": [{"id": opt["id"], "text": opt["text"]} for opt in options],
                "positive_marks": str(positive),
                "negative_marks": str(negative),
            })
        sections.append({
            "id": section["id"],
            "title": section["title"],
            "instructions": section["instructions"],
            "questions": questions,
        })
    return sections


def resume_attempt(attempt, now=None):
    """
    ``("state", attempt)`` while the attempt is live, otherwise
    ``("result", result)`` after expiring it if needed.

    Inside the grace window the attempt is still handed back as state with no
    time left, so autosaves already in flight can land.
    """
    now = now or server_now()
    if attempt.is_active and not past_grace(attempt, now):
        Attempt.objects.filter(pk=attempt.pk).update(last_active_at=now)
        attempt.last_active_at = now
        return "state", attempt

    if attempt.is_active:
        attempt, result, _ = finalize_attempt(attempt.pk, Attempt.Status.EXPIRED, now=now)
        return "result", result

    return "result", current_result(attempt)


def navigate(attempt, section_id, seq=None, question_id=None, now=None):
    """
    Move to ``section_id`` and, optionally, to ``question_id`` inside it.

    Entering another section without a question clears the current question.
    """
    now = now or server_now()
    section_id = str(section_id)
    with transaction.atomic():
        attempt = Attempt.objects.locked(attempt.pk)
        if not attempt.is_active or past_deadline(attempt, now):
            raise AttemptNotActive()

        frozen = attempt.frozen_exam
        target = frozen.section_position(section_id)
        if target is None:
            raise UnknownSection()
        if question_id is not None:
            question = frozen.question(question_id)
            if question is None or question["section_id"] != section_id:
                raise UnknownQuestion()

        if seq is not None and attempt.nav_seq is not None and seq <= attempt.nav_seq:
            logger.info(f"Ignoring duplicate navigation seq={seq} on attempt {attempt.pk}")
            return attempt

        current = frozen.section_position(attempt.current_section_id)
        if current is None:
            current = -1
        if not frozen.allow_section_navigation and target not in (current, current + 1):
            raise NavigationNotAllowed()

        if section_id != attempt.current_section_id:
            close_section_clock(attempt, now)
            attempt.current_section_id = section_id
            attempt.section_entered_at = now
            attempt.current_question_id = ''
        if question_id is not None:
            attempt.current_question_id = str(question_id)
        if seq is not None:
            attempt.nav_seq = seq
        attempt.last_active_at = now
        attempt.save(update_fields=[
            'current_section_id', 'current_question_id', 'section_entered_at', 'section_time_spent',
            'nav_seq', 'last_active_at',
        ])
    return attempt


def submit_attempt(attempt, now=None):
    """
    Finalize on the candidate's request and return the current Result.

    Retries after a successful submit get the same Result back.
    """
    now = now or server_now()
    if past_grace(attempt, now):
        target = Attempt.Status.EXPIRED
    else:
        target = Attempt.Status.SUBMITTED
    attempt, result, claimed = finalize_attempt(attempt.pk, target, now=now, actor=attempt.user)
    if not claimed:
        logger.info(f"Submit on already finalized attempt {attempt.pk} ({attempt.status})")
    return result
