# assessments/scoring.py
"""
Scoring engine.

``score_attempt(payload, answers)`` is a pure function of a snapshot payload
and the final selections (question id -> option ids). It touches neither the
database nor the clock, so it can be re-run at any time for re-grades.

Marking rules for a question with positive marks ``pos``, negative marks
``neg``, selection ``S`` and key ``C`` (``n = |C|``):

* empty selection: 0, skipped
* single_correct: ``+pos`` if S is exactly the key option, else ``-neg``
* multiple_correct / all_or_none: ``+pos`` if S == C, else ``-neg``
* multiple_correct / partial: ``pos*|S∩C|/n - neg*|S\\C|/n``, floored at 0
  (or at ``-neg`` when the exam enables negative carry)
* multiple_correct / proportional: ``pos*(|S∩C| - |S\\C|)/n``, clamped to
  ``[-neg, pos]``
"""
from dataclasses import dataclass, field, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from exams.snapshots import FrozenExam
from .exceptions import ScoringError

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

CORRECT = "correct"
WRONG = "wrong"
PARTIAL = "partially_correct"
SKIPPED = "skipped"


def _q(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class MarkingRule:
    positive: Decimal
    negative: Decimal
    algorithm: str
    negative_carry: bool


@dataclass
class QuestionOutcome:
    question_id: str
    section_id: str
    selected: List[str]
    correct_options: List[str]
    outcome: str
    marks: Decimal
    max_marks: Decimal


@dataclass
class SectionScore:
    section_id: str
    title: str
    marks: Decimal = ZERO
    max_marks: Decimal = ZERO
    total_questions: int = 0
    correct: int = 0
    wrong: int = 0
    partially_correct: int = 0
    skipped: int = 0

    @property
    def attempted(self) -> int:
        return self.total_questions - self.skipped

    @property
    def percentage(self) -> Decimal:
        return _percentage(self.marks, self.max_marks)

    def add(self, outcome: QuestionOutcome) -> None:
        self.total_questions += 1
        self.marks += outcome.marks
        self.max_marks += outcome.max_marks
        setattr(self, outcome.outcome, getattr(self, outcome.outcome) + 1)


@dataclass
class ScoreSheet:
    score: Decimal
    max_score: Decimal
    percentage: Decimal
    grade: str
    passed: bool
    total_questions: int
    correct: int
    wrong: int
    partially_correct: int
    skipped: int
    sections: List[SectionScore] = field(default_factory=list)
    questions: List[QuestionOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.total_questions - self.skipped

    def section_breakdown(self) -> List[Dict]:
        return [
            {
                "section_id": s.section_id,
                "title": s.title,
                "marks": str(s.marks),
                "max_marks": str(s.max_marks),
                "percentage": str(s.percentage),
                "total_questions": s.total_questions,
                "attempted": s.attempted,
                "correct": s.correct,
                "wrong": s.wrong,
                "partially_correct": s.partially_correct,
                "skipped": s.skipped,
            }
            for s in self.sections
        ]

    def question_breakdown(self) -> List[Dict]:
        rows = []
        for outcome in self.questions:
            row = asdict(outcome)
            row["marks"] = str(outcome.marks)
            row["max_marks"] = str(outcome.max_marks)
            rows.append(row)
        return rows


def _percentage(score: Decimal, max_score: Decimal) -> Decimal:
    if max_score <= 0:
        return _q(ZERO)
    return _q(score * HUNDRED / max_score)


def grade_for(percentage: Decimal, bands) -> str:
    """First band (highest threshold first) whose threshold the percentage reaches."""
    ordered = sorted(bands, key=lambda band: Decimal(str(band[0])), reverse=True)
    for threshold, grade in ordered:
        if percentage >= Decimal(str(threshold)):
            return grade
    # Negative percentages fall into the lowest band
    return ordered[-1][1] if ordered else ""


# --- single_correct ---

def _score_single(selected, correct, rule):
    if len(selected) == 1 and set(selected) == set(correct):
        return CORRECT, rule.positive
    return WRONG, -rule.negative


# --- multiple_correct algorithms ---

def _all_or_none(hits, misses, n, rule):
    if misses == 0 and hits == n:
        return rule.positive
    return -rule.negative


def _partial(hits, misses, n, rule):
    marks = (rule.positive * hits - rule.negative * misses) / n
    floor = -rule.negative if rule.negative_carry else ZERO
    return max(marks, floor)


def _proportional(hits, misses, n, rule):
    marks = rule.positive * (hits - misses) / n
    return min(max(marks, -rule.negative), rule.positive)


MULTIPLE_CORRECT_ALGORITHMS = {
    "all_or_none": _all_or_none,
    "partial": _partial,
    "proportional": _proportional,
}


def _score_multiple(selected, correct, rule):
    try:
        algorithm = MULTIPLE_CORRECT_ALGORITHMS[rule.algorithm]
    except KeyError:
        raise ScoringError(f"Unknown multiple-correct algorithm: {rule.algorithm}")
    if not correct:
        raise ScoringError("Multiple-correct question without an answer key.")

    chosen, key = set(selected), set(correct)
    hits, misses = len(chosen & key), len(chosen - key)
    marks = _q(algorithm(hits, misses, len(key), rule))

    if chosen == key:
        return CORRECT, marks
    if marks > 0:
        return PARTIAL, marks
    return WRONG, marks


QUESTION_TYPE_SCORERS = {
    "single_correct": _score_single,
    "multiple_correct": _score_multiple,
}


def score_question(question, selected, rule: MarkingRule):
    """Return (outcome, marks) for one question."""
    try:
        scorer = QUESTION_TYPE_SCORERS[question["type"]]
    except KeyError:
        raise ScoringError(f"Unknown question type: {question['type']}")
    if not selected:
        return SKIPPED, _q(ZERO)
    outcome, marks = scorer(list(selected), list(question["correct"]), rule)
    return outcome, _q(marks)


def score_attempt(payload, answers: Optional[Dict[str, List[str]]] = None) -> ScoreSheet:
    exam = FrozenExam(payload)
    answers = {str(k): v for k, v in (answers or {}).items()}

    sections = []
    outcomes = []
    for section in exam.sections:
        section_score = SectionScore(section_id=section["id"], title=section["title"])
        for qid in section["questions"]:
            question = exam.question(qid)
            positive, negative = exam.question_marks(question)
            rule = MarkingRule(
                positive=positive,
                negative=negative,
                algorithm=payload["multiple_correct_algorithm"],
                negative_carry=bool(payload.get("partial_negative_carry")),
            )
            # Deduplicated and in a canonical order so results are reproducible
            selected = sorted(set(answers.get(qid) or []))
            outcome, marks = score_question(question, selected, rule)
            result = QuestionOutcome(
                question_id=qid,
                section_id=section["id"],
                selected=selected,
                correct_options=sorted(question["correct"]),
                outcome=outcome,
                marks=marks,
                max_marks=_q(positive),
            )
            section_score.add(result)
            outcomes.append(result)
        sections.append(section_score)

    score = sum((s.marks for s in sections), ZERO)
    max_score = sum((s.max_marks for s in sections), ZERO)
    percentage = _percentage(score, max_score)
    counts = {
        key: sum(getattr(s, key) for s in sections)
        for key in (CORRECT, WRONG, PARTIAL, SKIPPED)
    }

    return ScoreSheet(
        score=_q(score),
        max_score=_q(max_score),
        percentage=percentage,
        grade=grade_for(percentage, payload.get("grade_bands") or []),
        passed=percentage >= Decimal(payload["passing_percentage"]),
        total_questions=len(outcomes),
        correct=counts[CORRECT],
        wrong=counts[WRONG],
        partially_correct=counts[PARTIAL],
        skipped=counts[SKIPPED],
        sections=sections,
        questions=outcomes,
    )
