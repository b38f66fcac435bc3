from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from assessments.journal import upsert_answer
from assessments.sessions import start_attempt, submit_attempt
from cores.models import AuditLog
from exams.models import Option, Question
from exams.snapshots import publish_exam
from exams.tests.helpers import frozen_questions, make_exam, make_user
from results.models import Result
from results.projector import current_result, project_result, regrade_exam


class ProjectResultTests(TestCase):
    def setUp(self):
        self.t0 = timezone.now()
        self.exam, self.snapshot = make_exam()
        self.attempt = start_attempt(self.exam, make_user(), now=self.t0)

    def test_same_key_projects_once(self):
        result = submit_attempt(self.attempt, now=self.t0 + timedelta(minutes=1))
        self.attempt.refresh_from_db()

        again = project_result(self.attempt, Result.FinalizedBy.REGRADE)

        self.assertEqual(again.pk, result.pk)
        self.assertEqual(Result.objects.filter(attempt=self.attempt).count(), 1)

    def test_nothing_attempted_has_no_accuracy(self):
        result = submit_attempt(self.attempt, now=self.t0 + timedelta(minutes=1))

        self.assertIsNone(result.accuracy)
        self.assertEqual(result.speed, Decimal("0.00"))
        self.assertEqual(result.key_version, 1)
        self.assertIsNone(result.rank)
        self.assertIsNone(result.percentile)

    def test_answer_review_carries_paper_and_time(self):
        exam, _ = make_exam(publish=False, title="Mechanics Review")
        Question.objects.filter(section__exam=exam).update(explanation="Apply Newton's second law.")
        snapshot = publish_exam(exam)
        exam.refresh_from_db()
        q1, q2 = frozen_questions(snapshot)
        attempt = start_attempt(exam, make_user("reviewer@example.com"), now=self.t0)
        upsert_answer(attempt, q1["id"], q1["correct"], time_spent_seconds=42, now=self.t0 + timedelta(minutes=1))

        result = submit_attempt(attempt, now=self.t0 + timedelta(minutes=2))

        rows = {row["question_id"]: row for row in result.question_breakdown}
        self.assertEqual(rows[q1["id"]]["text"], q1["text"])
        self.assertEqual(rows[q1["id"]]["explanation"], "Apply Newton's second law.")
        self.assertEqual(rows[q1["id"]]["correct_options"], q1["correct"])
        self.assertEqual(rows[q1["id"]]["time_spent_seconds"], 42)
        self.assertEqual(rows[q2["id"]]["time_spent_seconds"], 0)
        self.assertEqual(
            [opt["id"] for opt in rows[q2["id"]]["options"]],
            [opt["id"] for opt in q2["options"]],
        )


class RegradeTests(TestCase):
    def setUp(self):
        self.t0 = timezone.now()
        self.exam, self.snapshot = make_exam()
        self.user = make_user()
        self.attempt = start_attempt(self.exam, self.user, now=self.t0)
        self.q1, self.q2 = frozen_questions(self.snapshot)
        # The candidate picks option 2 on Q1, which the first key marks wrong
        self.picked = self.q1["options"][1]["id"]
        upsert_answer(self.attempt, self.q1["id"], [self.picked], now=self.t0 + timedelta(minutes=1))
        self.original = submit_attempt(self.attempt, now=self.t0 + timedelta(minutes=2))

    def _fix_key(self):
        question = Question.objects.get(pk=int(self.q1["id"]))
        question.options.update(is_correct=False)
        Option.objects.filter(pk=int(self.picked)).update(is_correct=True)
        return publish_exam(self.exam)

    def test_corrected_key_appends_new_version(self):
        self.assertEqual(self.original.score, Decimal("-1.00"))
        corrected = self._fix_key()

        regraded = regrade_exam(self.exam)

        self.assertEqual(len(regraded), 1)
        result = current_result(self.attempt)
        self.assertEqual(result.version, 2)
        self.assertEqual(result.key_version, corrected.version)
        self.assertEqual(result.score, Decimal("4.00"))
        self.assertEqual(result.finalized_by, Result.FinalizedBy.REGRADE)

        self.original.refresh_from_db()
        self.assertFalse(self.original.is_current)
        self.assertEqual(self.original.score, Decimal("-1.00"))
        self.assertEqual(Result.objects.filter(attempt=self.attempt, is_current=True).count(), 1)

    def test_regrade_keeps_original_completion_time(self):
        self._fix_key()
        regrade_exam(self.exam)

        result = current_result(self.attempt)
        self.assertEqual(result.completed_at, self.original.completed_at)
        self.assertEqual(result.time_taken_seconds, self.original.time_taken_seconds)

    def test_regrade_is_idempotent(self):
        self._fix_key()
        regrade_exam(self.exam)

        self.assertEqual(regrade_exam(self.exam), [])
        self.assertEqual(Result.objects.filter(attempt=self.attempt).count(), 2)

    def test_running_attempts_are_left_alone(self):
        running = start_attempt(self.exam, make_user("second@example.com"), now=self.t0 + timedelta(minutes=3))
        self._fix_key()
        regrade_exam(self.exam)

        self.assertFalse(Result.objects.filter(attempt=running).exists())

    def test_regrade_is_audited(self):
        self._fix_key()
        regrade_exam(self.exam, actor=self.user)

        log = AuditLog.objects.get(action='REGRADE')
        self.assertEqual(log.target_object_id, str(self.exam.pk))
        self.assertEqual(log.actor, self.user)
