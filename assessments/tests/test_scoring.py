from decimal import Decimal

from django.test import SimpleTestCase

from assessments.exceptions import ScoringError
from assessments.scoring import grade_for, score_attempt

BANDS = [[90, "S"], [75, "A"], [60, "B"], [40, "C"], [0, "F"]]


def _question(qid, qtype, correct, options=("a", "b", "c", "d"), section="s1", pos=None, neg=None):
    return {
        "id": qid,
        "section_id": section,
        "type": qtype,
        "text": f"Question {qid}",
        "options": [{"id": f"{qid}{opt}", "text": opt} for opt in options],
        "correct": [f"{qid}{opt}" for opt in correct],
        "positive_marks": pos,
        "negative_marks": neg,
    }


def _payload(sections, algorithm="all_or_none", carry=False, passing="40"):
    questions = {}
    layout = []
    for section_id, section_questions in sections:
        layout.append({
            "id": section_id,
            "title": f"Section {section_id}",
            "instructions": "",
            "questions": [q["id"] for q in section_questions],
        })
        questions.update({q["id"]: q for q in section_questions})
    return {
        "version": 1,
        "duration_minutes": 60,
        "positive_marks": "4",
        "negative_marks": "1",
        "passing_percentage": passing,
        "multiple_correct_algorithm": algorithm,
        "partial_negative_carry": carry,
        "allow_section_navigation": True,
        "grade_bands": BANDS,
        "sections": layout,
        "questions": questions,
    }


class SingleCorrectScoringTests(SimpleTestCase):
    def setUp(self):
        self.payload = _payload([("s1", [
            _question("1", "single_correct", ["a"]),
            _question("2", "single_correct", ["a"]),
        ])])

    def test_one_right_one_wrong(self):
        sheet = score_attempt(self.payload, {"1": ["1a"], "2": ["2b"]})

        self.assertEqual(sheet.score, Decimal("3.00"))
        self.assertEqual(sheet.max_score, Decimal("8.00"))
        self.assertEqual(sheet.percentage, Decimal("37.50"))
        self.assertEqual(sheet.correct, 1)
        self.assertEqual(sheet.wrong, 1)
        self.assertEqual(sheet.grade, "F")
        self.assertFalse(sheet.passed)

    def test_all_correct_scores_full_marks(self):
        sheet = score_attempt(self.payload, {"1": ["1a"], "2": ["2a"]})

        self.assertEqual(sheet.score, sheet.max_score)
        self.assertEqual(sheet.percentage, Decimal("100.00"))
        self.assertEqual(sheet.grade, "S")
        self.assertTrue(sheet.passed)

    def test_nothing_answered(self):
        sheet = score_attempt(self.payload, {})

        self.assertEqual(sheet.skipped, sheet.total_questions)
        self.assertEqual(sheet.attempted, 0)
        self.assertEqual(sheet.score, Decimal("0.00"))

    def test_empty_selection_counts_as_skipped(self):
        sheet = score_attempt(self.payload, {"1": [], "2": ["2a"]})

        self.assertEqual(sheet.skipped, 1)
        self.assertEqual(sheet.score, Decimal("4.00"))

    def test_all_wrong_goes_negative(self):
        sheet = score_attempt(self.payload, {"1": ["1c"], "2": ["2d"]})

        self.assertEqual(sheet.score, Decimal("-2.00"))
        self.assertEqual(sheet.percentage, Decimal("-25.00"))
        self.assertEqual(sheet.grade, "F")

    def test_same_input_same_output(self):
        answers = {"1": ["1a"], "2": ["2b"]}
        first = score_attempt(self.payload, answers)
        second = score_attempt(self.payload, dict(reversed(list(answers.items()))))

        self.assertEqual(first.score, second.score)
        self.assertEqual(first.section_breakdown(), second.section_breakdown())
        self.assertEqual(first.question_breakdown(), second.question_breakdown())

    def test_question_level_marks_override_exam_defaults(self):
        payload = _payload([("s1", [
            _question("1", "single_correct", ["a"], pos="2", neg="0.5"),
            _question("2", "single_correct", ["a"]),
        ])])
        sheet = score_attempt(payload, {"1": ["1b"], "2": ["2a"]})

        self.assertEqual(sheet.score, Decimal("3.50"))
        self.assertEqual(sheet.max_score, Decimal("6.00"))


class MultipleCorrectScoringTests(SimpleTestCase):
    def _score(self, algorithm, selected, carry=False):
        payload = _payload(
            [("s1", [_question("1", "multiple_correct", ["a", "b"])])],
            algorithm=algorithm,
            carry=carry,
        )
        sheet = score_attempt(payload, {"1": [f"1{opt}" for opt in selected]})
        outcome = sheet.questions[0]
        return outcome.outcome, outcome.marks

    def test_all_or_none(self):
        self.assertEqual(self._score("all_or_none", "ab"), ("correct", Decimal("4.00")))
        self.assertEqual(self._score("all_or_none", "ba"), ("correct", Decimal("4.00")))
        self.assertEqual(self._score("all_or_none", "a"), ("wrong", Decimal("-1.00")))
        self.assertEqual(self._score("all_or_none", "abc"), ("wrong", Decimal("-1.00")))

    def test_partial(self):
        self.assertEqual(self._score("partial", "ab"), ("correct", Decimal("4.00")))
        self.assertEqual(self._score("partial", "a"), ("partially_correct", Decimal("2.00")))
        self.assertEqual(self._score("partial", "ac"), ("partially_correct", Decimal("1.50")))
        self.assertEqual(self._score("partial", "cd"), ("wrong", Decimal("0.00")))

    def test_partial_with_negative_carry(self):
        self.assertEqual(self._score("partial", "c", carry=True), ("wrong", Decimal("-0.50")))
        self.assertEqual(self._score("partial", "cd", carry=True), ("wrong", Decimal("-1.00")))

    def test_proportional(self):
        self.assertEqual(self._score("proportional", "ab"), ("correct", Decimal("4.00")))
        self.assertEqual(self._score("proportional", "a"), ("partially_correct", Decimal("2.00")))
        self.assertEqual(self._score("proportional", "ac"), ("wrong", Decimal("0.00")))
        self.assertEqual(self._score("proportional", "cd"), ("wrong", Decimal("-1.00")))

    def test_unknown_algorithm_is_rejected(self):
        with self.assertRaises(ScoringError):
            self._score("best_effort", "a")

    def test_partial_counts_in_totals(self):
        payload = _payload(
            [("s1", [
                _question("1", "multiple_correct", ["a", "b"]),
                _question("2", "single_correct", ["a"]),
            ])],
            algorithm="partial",
        )
        sheet = score_attempt(payload, {"1": ["1a"], "2": ["2a"]})

        self.assertEqual(sheet.partially_correct, 1)
        self.assertEqual(sheet.correct, 1)
        self.assertEqual(sheet.score, Decimal("6.00"))
        self.assertEqual(sheet.percentage, Decimal("75.00"))
        self.assertEqual(sheet.grade, "A")


class SectionBreakdownTests(SimpleTestCase):
    def test_sections_add_up_to_total(self):
        payload = _payload([
            ("s1", [_question("1", "single_correct", ["a"], section="s1")]),
            ("s2", [
                _question("2", "single_correct", ["a"], section="s2"),
                _question("3", "single_correct", ["b"], section="s2"),
            ]),
        ])
        sheet = score_attempt(payload, {"1": ["1a"], "2": ["2c"]})
        breakdown = sheet.section_breakdown()

        self.assertEqual([row["section_id"] for row in breakdown], ["s1", "s2"])
        self.assertEqual(sum(Decimal(row["marks"]) for row in breakdown), sheet.score)
        self.assertEqual(sum(Decimal(row["max_marks"]) for row in breakdown), sheet.max_score)
        self.assertEqual(breakdown[1]["skipped"], 1)
        self.assertEqual(breakdown[1]["attempted"], 1)
        self.assertEqual(breakdown[0]["percentage"], "100.00")


class GradeBandTests(SimpleTestCase):
    def test_threshold_is_inclusive(self):
        self.assertEqual(grade_for(Decimal("90"), BANDS), "S")
        self.assertEqual(grade_for(Decimal("89.99"), BANDS), "A")
        self.assertEqual(grade_for(Decimal("40.00"), BANDS), "C")

    def test_band_order_does_not_matter(self):
        self.assertEqual(grade_for(Decimal("65"), list(reversed(BANDS))), "B")

    def test_negative_percentage_falls_into_lowest_band(self):
        self.assertEqual(grade_for(Decimal("-12.5"), BANDS), "F")
