from datetime import timedelta

from django.test import TestCase, override_settings
from django.utils import timezone

from assessments.exceptions import AttemptNotActive, InvalidOption, UnknownQuestion
from assessments.journal import mark_for_review, mark_visited, upsert_answer, upsert_answers_batch
from assessments.models import AnswerRecord
from assessments.sessions import start_attempt, submit_attempt
from exams.tests.helpers import MULTIPLE, SINGLE, frozen_questions, make_exam, make_user, wrong_option


@override_settings(EXAM_ENGINE={"AUTOSAVE_GRACE_SECONDS": 5, "SWEEP_BATCH_SIZE": 200})
class AnswerJournalTests(TestCase):
    def setUp(self):
        self.t0 = timezone.now()
        self.user = make_user()
        self.exam, self.snapshot = make_exam([[(SINGLE, 4, [0]), (MULTIPLE, 4, [0, 1])]])
        self.attempt = start_attempt(self.exam, self.user, now=self.t0)
        self.single, self.multiple = frozen_questions(self.snapshot)

    def _record(self, question):
        return AnswerRecord.objects.get(attempt=self.attempt, question_id=question["id"])

    def test_write_overwrites_previous_answer(self):
        first, second = [opt["id"] for opt in self.single["options"][:2]]
        upsert_answer(self.attempt, self.single["id"], [first], now=self.t0 + timedelta(seconds=10))
        record, applied = upsert_answer(self.attempt, self.single["id"], [second], now=self.t0 + timedelta(seconds=20))

        self.assertTrue(applied)
        self.assertEqual(record.selected_option_ids, [second])
        self.assertEqual(self._record(self.single).status, AnswerRecord.Status.ANSWERED)
        self.assertTrue(self._record(self.single).visited)

    def test_repeated_seq_is_a_noop(self):
        first, second = [opt["id"] for opt in self.single["options"][:2]]
        upsert_answer(self.attempt, self.single["id"], [first], seq=3, now=self.t0 + timedelta(seconds=10))
        record, applied = upsert_answer(self.attempt, self.single["id"], [second], seq=3, now=self.t0 + timedelta(seconds=20))

        self.assertFalse(applied)
        self.assertEqual(self._record(self.single).selected_option_ids, [first])
        self.assertEqual(self._record(self.single).client_seq, 3)

    def test_lower_seq_is_ignored(self):
        first, second = [opt["id"] for opt in self.single["options"][:2]]
        upsert_answer(self.attempt, self.single["id"], [first], seq=5, now=self.t0 + timedelta(seconds=10))
        _, applied = upsert_answer(self.attempt, self.single["id"], [second], seq=4, now=self.t0 + timedelta(seconds=20))

        self.assertFalse(applied)
        self.assertEqual(self._record(self.single).selected_option_ids, [first])

    def test_older_client_write_loses(self):
        first, second = [opt["id"] for opt in self.single["options"][:2]]
        now = self.t0 + timedelta(minutes=5)
        upsert_answer(self.attempt, self.single["id"], [second], client_modified_at=self.t0 + timedelta(minutes=2), now=now)
        _, applied = upsert_answer(self.attempt, self.single["id"], [first], client_modified_at=self.t0 + timedelta(minutes=1), now=now)

        self.assertFalse(applied)
        self.assertEqual(self._record(self.single).selected_option_ids, [second])

    def test_clearing_an_answer_marks_it_skipped(self):
        option = self.single["options"][0]["id"]
        upsert_answer(self.attempt, self.single["id"], [option], now=self.t0 + timedelta(seconds=10))
        record, _ = upsert_answer(self.attempt, self.single["id"], [], now=self.t0 + timedelta(seconds=20))

        self.assertEqual(record.selected_option_ids, [])
        self.assertEqual(record.status, AnswerRecord.Status.SKIPPED)

    def test_duplicate_options_are_collapsed(self):
        a, b = [opt["id"] for opt in self.multiple["options"][:2]]
        record, _ = upsert_answer(self.attempt, self.multiple["id"], [a, b, a], now=self.t0 + timedelta(seconds=10))

        self.assertEqual(record.selected_option_ids, [a, b])

    def test_unknown_option_changes_nothing(self):
        option = self.single["options"][0]["id"]
        upsert_answer(self.attempt, self.single["id"], [option], now=self.t0 + timedelta(seconds=10))

        with self.assertRaises(InvalidOption):
            upsert_answer(self.attempt, self.single["id"], ["999999"], now=self.t0 + timedelta(seconds=20))
        self.assertEqual(self._record(self.single).selected_option_ids, [option])

    def test_single_correct_takes_one_option(self):
        a, b = [opt["id"] for opt in self.single["options"][:2]]
        with self.assertRaises(InvalidOption):
            upsert_answer(self.attempt, self.single["id"], [a, b], now=self.t0 + timedelta(seconds=10))

    def test_unknown_question(self):
        with self.assertRaises(UnknownQuestion):
            upsert_answer(self.attempt, "999999", [], now=self.t0 + timedelta(seconds=10))

    def test_write_after_grace_is_rejected(self):
        late = self.attempt.deadline_at + timedelta(seconds=6)
        with self.assertRaises(AttemptNotActive):
            upsert_answer(
                self.attempt, self.single["id"], [wrong_option(self.single)],
                client_modified_at=self.attempt.deadline_at - timedelta(seconds=1), now=late,
            )
        self.assertEqual(self._record(self.single).selected_option_ids, [])

    def test_grace_window_accepts_writes_made_before_deadline(self):
        option = self.single["options"][0]["id"]
        inside_grace = self.attempt.deadline_at + timedelta(seconds=2)
        record, applied = upsert_answer(
            self.attempt, self.single["id"], [option],
            client_modified_at=self.attempt.deadline_at - timedelta(seconds=1),
            now=inside_grace,
        )

        self.assertTrue(applied)
        self.assertEqual(record.selected_option_ids, [option])

    def test_grace_window_rejects_writes_made_after_deadline(self):
        inside_grace = self.attempt.deadline_at + timedelta(seconds=2)
        with self.assertRaises(AttemptNotActive):
            upsert_answer(self.attempt, self.single["id"], [self.single["options"][0]["id"]], now=inside_grace)

    def test_write_after_submit_is_rejected(self):
        submit_attempt(self.attempt, now=self.t0 + timedelta(minutes=1))
        with self.assertRaises(AttemptNotActive):
            upsert_answer(self.attempt, self.single["id"], [self.single["options"][0]["id"]], now=self.t0 + timedelta(minutes=2))

    def test_batch_is_validated_before_writing(self):
        entries = [
            {"question_id": self.single["id"], "selected_option_ids": [self.single["options"][0]["id"]]},
            {"question_id": self.multiple["id"], "selected_option_ids": ["999999"]},
        ]
        with self.assertRaises(InvalidOption):
            upsert_answers_batch(self.attempt, entries, now=self.t0 + timedelta(seconds=10))
        self.assertEqual(self._record(self.single).selected_option_ids, [])

    def test_batch_applies_in_order(self):
        a, b = [opt["id"] for opt in self.multiple["options"][:2]]
        entries = [
            {"question_id": self.single["id"], "selected_option_ids": [self.single["options"][0]["id"]], "seq": 1},
            {"question_id": self.multiple["id"], "selected_option_ids": [a, b], "seq": 2},
            {"question_id": self.single["id"], "selected_option_ids": [self.single["options"][1]["id"]], "seq": 1},
        ]
        outcomes = upsert_answers_batch(self.attempt, entries, now=self.t0 + timedelta(seconds=10))

        self.assertEqual([applied for _, applied in outcomes], [True, True, False])
        self.assertEqual(self._record(self.single).selected_option_ids, [self.single["options"][0]["id"]])
        self.assertEqual(self._record(self.multiple).selected_option_ids, [a, b])

    def test_review_flag_keeps_selection(self):
        option = self.single["options"][0]["id"]
        upsert_answer(self.attempt, self.single["id"], [option], now=self.t0 + timedelta(seconds=10))
        record = mark_for_review(self.attempt, self.single["id"], True, now=self.t0 + timedelta(seconds=20))

        self.assertTrue(record.marked_for_review)
        self.assertEqual(self._record(self.single).selected_option_ids, [option])
        self.assertEqual(self._record(self.single).status, AnswerRecord.Status.ANSWERED)

    def test_visit_only_sets_visited(self):
        record = mark_visited(self.attempt, self.multiple["id"], now=self.t0 + timedelta(seconds=10))

        self.assertTrue(record.visited)
        self.assertEqual(record.status, AnswerRecord.Status.UNANSWERED)

    def test_visit_moves_current_question(self):
        mark_visited(self.attempt, self.multiple["id"], now=self.t0 + timedelta(seconds=10))

        self.attempt.refresh_from_db()
        self.assertEqual(self.attempt.current_question_id, self.multiple["id"])
