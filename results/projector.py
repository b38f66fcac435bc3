# results/projector.py
"""
Turns scoring output into stored ``Result`` versions.

Projection is idempotent per answer-key version: asking again for the key the
current result already used returns that result instead of a new version.
"""
import copy
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from assessments.models import Attempt
from assessments.scoring import score_attempt
from cores.models import AuditLog
from .models import Result

logger = logging.getLogger(__name__)


def rekey_payload(frozen, corrected):
    """The attempt's frozen paper with the answer key and marks of a corrected snapshot."""
    payload = copy.deepcopy(frozen)
    for qid, question in payload["questions"].items():
        fixed = corrected["questions"].get(qid)
        if fixed is None:
            continue
        question["correct"] = list(fixed["correct"])
        question["positive_marks"] = fixed.get("positive_marks")
        question["negative_marks"] = fixed.get("negative_marks")
        question["explanation"] = fixed.get("explanation", question.get("explanation", ""))
    payload["version"] = corrected["version"]
    return payload


def answer_review(payload, sheet, attempt):
    """Per-question breakdown with the paper text, explanation and time the candidate spent."""
    time_spent = dict(attempt.answers.values_list('question_id', 'time_spent_seconds'))
    rows = sheet.question_breakdown()
    for row in rows:
        question = payload["questions"][row["question_id"]]
        row["type"] = question["type"]
        row["text"] = question["text"]
        row["options"] = [{"id": opt["id"], "text": opt["text"]} for opt in question["options"]]
        row["explanation"] = question.get("explanation", "")
        row["time_spent_seconds"] = time_spent.get(row["question_id"], 0)
    return rows


def time_taken_seconds(attempt):
    end = attempt.completed_at or timezone.now()
    end = min(end, attempt.deadline_at)
    return max(0, int((end - attempt.started_at).total_seconds()))


def _speed(attempted, seconds):
    if seconds <= 0:
        return None
    return (Decimal(attempted) * 60 / Decimal(seconds)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _accuracy(correct, wrong):
    if correct + wrong == 0:
        return None
    return (Decimal(correct) / Decimal(correct + wrong)).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


def project_result(attempt, finalized_by, snapshot=None, now=None):
    """Score ``attempt`` against ``snapshot`` (default: its own) and store a Result version."""
    now = now or timezone.now()
    snapshot = snapshot or attempt.snapshot

    current = attempt.results.filter(is_current=True).first()
    if current and current.key_version == snapshot.version:
        return current

    if snapshot.pk == attempt.snapshot_id:
        payload = snapshot.payload
    else:
        payload = rekey_payload(attempt.snapshot.payload, snapshot.payload)

    sheet = score_attempt(payload, attempt.answers_map())
    seconds = time_taken_seconds(attempt)

    with transaction.atomic():
        latest = attempt.results.aggregate(latest=Max('version'))['latest'] or 0
        attempt.results.filter(is_current=True).update(is_current=False)
        result = Result.objects.create(
            attempt=attempt,
            version=latest + 1,
            is_current=True,
            snapshot=snapshot,
            key_version=snapshot.version,
            score=sheet.score,
            max_score=sheet.max_score,
            percentage=sheet.percentage,
            grade=sheet.grade,
            passed=sheet.passed,
            total_questions=sheet.total_questions,
            attempted=sheet.attempted,
            correct=sheet.correct,
            wrong=sheet.wrong,
            partially_correct=sheet.partially_correct,
            skipped=sheet.skipped,
            section_breakdown=sheet.section_breakdown(),
            question_breakdown=answer_review(payload, sheet, attempt),
            speed=_speed(sheet.attempted, seconds),
            accuracy=_accuracy(sheet.correct, sheet.wrong),
            time_taken_seconds=seconds,
            finalized_by=finalized_by,
            answers_locked_at=attempt.completed_at or now,
            completed_at=attempt.completed_at or now,
        )

    logger.info(
        f"Attempt {attempt.pk} result v{result.version} ({finalized_by}): "
        f"{result.score}/{result.max_score}"
    )
    return result


def current_result(attempt):
    return attempt.results.filter(is_current=True).first()


def regrade_exam(exam, actor=None):
    """Re-score every finalized attempt of ``exam`` with its latest answer key."""
    snapshot = exam.latest_snapshot()
    if snapshot is None:
        return []

    regraded = []
    attempts = Attempt.objects.filter(exam=exam, status__in=Attempt.TERMINAL_STATUSES)
    for attempt in attempts.select_related('snapshot'):
        before = current_result(attempt)
        result = project_result(attempt, Result.FinalizedBy.REGRADE, snapshot=snapshot)
        if before is None or result.pk != before.pk:
            regraded.append(result)

    AuditLog.record(
        'REGRADE',
        exam,
        details=f"Re-graded {len(regraded)} attempts against key v{snapshot.version}",
        actor=actor,
    )
    logger.info(f"Re-graded {len(regraded)} attempts of exam {exam.pk} against v{snapshot.version}")
    return regraded
