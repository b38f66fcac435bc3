# assessments/timer.py
"""
Server-authoritative timing for attempts.

The deadline is fixed once at start. Clients get ``server_now`` with every
response and only render a countdown; they never decide when time is up.
Finalization (submit or expiry) always goes through ``finalize_attempt``,
which claims the attempt with a compare-and-swap on ``status`` so each
attempt is scored exactly once.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from cores.models import AuditLog
from results.models import Result
from results.projector import project_result
from .models import Attempt, AnswerRecord

logger = logging.getLogger(__name__)

AUDIT_ACTIONS = {
    Attempt.Status.SUBMITTED: 'SUBMIT',
    Attempt.Status.EXPIRED: 'EXPIRE',
    Attempt.Status.ABANDONED: 'ABANDON',
}


def server_now():
    return timezone.now()


def grace_period():
    return timedelta(seconds=settings.EXAM_ENGINE.get("AUTOSAVE_GRACE_SECONDS", 5))


def remaining_seconds(attempt, now=None):
    now = now or server_now()
    if not attempt.is_active:
        return 0
    return max(0, int((attempt.deadline_at - now).total_seconds()))


def timing_payload(attempt, now=None):
    now = now or server_now()
    return {
        "server_now": now,
        "deadline_at": attempt.deadline_at,
        "remaining_seconds": remaining_seconds(attempt, now),
    }


def past_deadline(attempt, now=None):
    return (now or server_now()) >= attempt.deadline_at


def past_grace(attempt, now=None):
    return (now or server_now()) >= attempt.deadline_at + grace_period()


def accepts_writes(attempt, now=None, client_modified_at=None):
    """
    Whether the attempt takes an answer write at ``now``.

    Inside the grace window only writes the client made before the deadline
    are let through.
    """
    now = now or server_now()
    if not attempt.is_active:
        return False
    if now < attempt.deadline_at:
        return True
    if past_grace(attempt, now):
        return False
    return client_modified_at is not None and client_modified_at < attempt.deadline_at


def close_section_clock(attempt, now):
    """Add the time spent in the current section, capped at the deadline."""
    if not attempt.current_section_id or not attempt.section_entered_at:
        return
    end = min(now, attempt.deadline_at)
    elapsed = max(0, int((end - attempt.section_entered_at).total_seconds()))
    spent = dict(attempt.section_time_spent or {})
    spent[attempt.current_section_id] = spent.get(attempt.current_section_id, 0) + elapsed
    attempt.section_time_spent = spent
    attempt.section_entered_at = end


def claim_attempt(attempt_id, target_status, now=None):
    """Compare-and-swap ``in_progress -> target_status``. True only for the winning caller."""
    now = now or server_now()
    claimed = Attempt.objects.filter(
        pk=attempt_id, status=Attempt.Status.IN_PROGRESS
    ).update(status=target_status, completed_at=now)
    return claimed == 1


def finalize_attempt(attempt_id, target_status, now=None, actor=None):
    """
    Claim and score an attempt. Returns ``(attempt, result, claimed)``.

    Waits on the attempt row lock, so an autosave already holding it lands
    before the answers are read for scoring.
    """
    now = now or server_now()
    finalized_by = (
        Result.FinalizedBy.SUBMIT
        if target_status == Attempt.Status.SUBMITTED
        else Result.FinalizedBy.EXPIRY
    )

    with transaction.atomic():
        attempt = Attempt.objects.locked(attempt_id)
        if not claim_attempt(attempt.pk, target_status, now):
            return attempt, attempt.results.filter(is_current=True).first(), False

        attempt.status = target_status
        attempt.completed_at = now
        close_section_clock(attempt, now)
        attempt.save(update_fields=['section_time_spent', 'section_entered_at'])

        result = project_result(attempt, finalized_by, now=now)
        AuditLog.record(
            AUDIT_ACTIONS[target_status],
            attempt,
            details=f"Score {result.score}/{result.max_score}",
            actor=actor,
        )

    logger.info(f"Attempt {attempt.pk} finalized as {target_status}")
    return attempt, result, True


def expiry_status(attempt):
    """Expired, or abandoned when the candidate never touched a question."""
    touched = attempt.answers.filter(
        Q(visited=True) | Q(status=AnswerRecord.Status.ANSWERED) | Q(marked_for_review=True)
    ).exists()
    return Attempt.Status.EXPIRED if touched else Attempt.Status.ABANDONED


def sweep_expired(now=None, batch_size=None):
    """
    Finalize in-progress attempts whose deadline (plus grace) has passed.

    Safe to run from several workers at once: each attempt is claimed by
    exactly one of them.
    """
    now = now or server_now()
    batch_size = batch_size or settings.EXAM_ENGINE.get("SWEEP_BATCH_SIZE", 200)
    cutoff = now - grace_period()

    candidates = list(
        Attempt.objects.active()
        .filter(deadline_at__lt=cutoff)
        .order_by('deadline_at')[:batch_size]
    )

    finalized = []
    for attempt in candidates:
        try:
            attempt, result, claimed = finalize_attempt(attempt.pk, expiry_status(attempt), now=now)
        except Exception as e:
            logger.error(f"Expiry sweep failed for attempt {attempt.pk}: {e}", exc_info=True)
            continue
        if claimed:
            finalized.append(attempt)

    if finalized:
        logger.info(f"Expiry sweep finalized {len(finalized)} of {len(candidates)} attempts")
    return finalized


def heartbeat(attempt, now=None):
    """Timer reconciliation for the client; finalizes once the grace window is over."""
    now = now or server_now()
    result = None
    if attempt.is_active and past_grace(attempt, now):
        attempt, result, _ = finalize_attempt(attempt.pk, Attempt.Status.EXPIRED, now=now)
    elif attempt.is_active:
        Attempt.objects.filter(pk=attempt.pk).update(last_active_at=now)
        attempt.last_active_at = now

    payload = timing_payload(attempt, now)
    payload["status"] = attempt.status
    payload["should_submit"] = not attempt.is_active or past_deadline(attempt, now)
    return payload, result
