# assessments/journal.py
"""
Answer journal.

Each question has one ``AnswerRecord`` per attempt which every write fully
overwrites. Clients autosave at least once, so writes are deduplicated:

* a ``seq`` at or below the last applied one is a retry and is ignored;
* a write whose ``last_modified_at`` is older than the stored one lost the
  race and is ignored (last write wins).

Ignored writes return the stored record with ``applied=False``. Validation
runs before anything is written, so a rejected request changes nothing.
"""
import logging

from django.db import transaction

from .exceptions import AttemptNotActive, InvalidOption, UnknownQuestion
from .models import Attempt, AnswerRecord
from .timer import accepts_writes, server_now

logger = logging.getLogger(__name__)


def _ensure_writable(attempt, now, client_modified_at=None):
    if not accepts_writes(attempt, now, client_modified_at):
        logger.warning(f"Rejected write on attempt {attempt.pk} ({attempt.status}) at {now.isoformat()}")
        raise AttemptNotActive()


def _question(attempt, question_id):
    question = attempt.frozen_exam.question(question_id)
    if question is None:
        raise UnknownQuestion()
    return question


def clean_selection(attempt, question_id, selected_option_ids):
    question = _question(attempt, question_id)
    # Dedupe but keep the client's order
    selected = list(dict.fromkeys(str(opt) for opt in selected_option_ids or []))
    allowed = {opt["id"] for opt in question["options"]}
    unknown = [opt for opt in selected if opt not in allowed]
    if unknown:
        raise InvalidOption(f"Unknown option(s) for question {question['id']}: {', '.join(unknown)}")
    if question["type"] == "single_correct" and len(selected) > 1:
        raise InvalidOption("Only one option can be selected for this question.")
    return question, selected


def _record(attempt, question):
    record, _ = AnswerRecord.objects.get_or_create(
        attempt=attempt,
        question_id=question["id"],
        defaults={"section_id": question.get("section_id", "")},
    )
    return record


def _apply(record, selected, modified_at, seq=None, time_spent_seconds=None):
    if seq is not None and record.client_seq is not None and seq <= record.client_seq:
        return False
    if record.last_modified_at is not None and modified_at < record.last_modified_at:
        return False

    record.selected_option_ids = selected
    if selected:
        record.status = AnswerRecord.Status.ANSWERED
    elif record.status == AnswerRecord.Status.ANSWERED:
        # Cleared a previous answer
        record.status = AnswerRecord.Status.SKIPPED
    record.visited = True
    record.last_modified_at = modified_at
    if seq is not None:
        record.client_seq = seq
    if time_spent_seconds is not None:
        record.time_spent_seconds = time_spent_seconds
    record.save()
    return True


def _modified_at(client_modified_at, now):
    # The client clock is only trusted to order its own writes, never past the server clock
    if client_modified_at is None:
        return now
    return min(client_modified_at, now)


def upsert_answer(attempt, question_id, selected_option_ids, seq=None,
                  client_modified_at=None, time_spent_seconds=None, now=None):
    """Overwrite one question's answer. Returns ``(record, applied)``."""
    now = now or server_now()
    with transaction.atomic():
        attempt = Attempt.objects.locked(attempt.pk)
        _ensure_writable(attempt, now, client_modified_at)
        question, selected = clean_selection(attempt, question_id, selected_option_ids)
        record = _record(attempt, question)
        applied = _apply(
            record, selected, _modified_at(client_modified_at, now),
            seq=seq, time_spent_seconds=time_spent_seconds,
        )
        if applied:
            Attempt.objects.filter(pk=attempt.pk).update(last_active_at=now)

    if not applied:
        logger.info(f"Ignored stale or duplicate answer for {attempt.pk}:{question_id} seq={seq}")
    return record, applied


def upsert_answers_batch(attempt, entries, now=None):
    """
    Apply a client autosave batch under one lock.

    Every entry is validated before any is written. Returns a list of
    ``(record, applied)`` in entry order.
    """
    now = now or server_now()
    with transaction.atomic():
        attempt = Attempt.objects.locked(attempt.pk)
        cleaned = []
        for entry in entries:
            _ensure_writable(attempt, now, entry.get("client_modified_at"))
            question, selected = clean_selection(attempt, entry["question_id"], entry.get("selected_option_ids"))
            cleaned.append((entry, question, selected))

        outcomes = []
        for entry, question, selected in cleaned:
            record = _record(attempt, question)
            applied = _apply(
                record, selected, _modified_at(entry.get("client_modified_at"), now),
                seq=entry.get("seq"), time_spent_seconds=entry.get("time_spent_seconds"),
            )
            outcomes.append((record, applied))
        if any(applied for _, applied in outcomes):
            Attempt.objects.filter(pk=attempt.pk).update(last_active_at=now)
    return outcomes


def mark_for_review(attempt, question_id, marked, now=None):
    """Toggle review metadata; the selected options are left alone."""
    now = now or server_now()
    with transaction.atomic():
        attempt = Attempt.objects.locked(attempt.pk)
        _ensure_writable(attempt, now)
        record = _record(attempt, _question(attempt, question_id))
        record.marked_for_review = bool(marked)
        record.visited = True
        record.save(update_fields=['marked_for_review', 'visited'])
    return record


def mark_visited(attempt, question_id, now=None):
    """Flag the question as seen and make it the attempt's current question."""
    now = now or server_now()
    with transaction.atomic():
        attempt = Attempt.objects.locked(attempt.pk)
        _ensure_writable(attempt, now)
        record = _record(attempt, _question(attempt, question_id))
        if not record.visited:
            record.visited = True
            record.save(update_fields=['visited'])
        Attempt.objects.filter(pk=attempt.pk).update(current_question_id=record.question_id, last_active_at=now)
    return record
