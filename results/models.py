# results/models.py
from django.db import models

from assessments.models import Attempt
from exams.models import ExamSnapshot


class Result(models.Model):
    """
    Presentable, versioned outcome of an attempt.

    A re-grade appends a new version and moves ``is_current``; earlier
    versions stay in place as the audit trail.
    """

    class FinalizedBy(models.TextChoices):
        SUBMIT = "submit", "Submitted by candidate"
        EXPIRY = "expiry", "Deadline expiry"
        REGRADE = "regrade", "Re-grade"

    attempt = models.ForeignKey(Attempt, related_name='results', on_delete=models.CASCADE)
    version = models.PositiveIntegerField()
    is_current = models.BooleanField(default=True)

    # Snapshot whose answer key produced these numbers
    snapshot = models.ForeignKey(ExamSnapshot, on_delete=models.PROTECT, related_name='results')
    key_version = models.PositiveIntegerField()

    score = models.DecimalField(max_digits=9, decimal_places=2)
    max_score = models.DecimalField(max_digits=9, decimal_places=2)
    percentage = models.DecimalField(max_digits=7, decimal_places=2)
    grade = models.CharField(max_length=10)
    passed = models.BooleanField(default=False)

    total_questions = models.PositiveIntegerField(default=0)
    attempted = models.PositiveIntegerField(default=0)
    correct = models.PositiveIntegerField(default=0)
    wrong = models.PositiveIntegerField(default=0)
    partially_correct = models.PositiveIntegerField(default=0)
    skipped = models.PositiveIntegerField(default=0)

    section_breakdown = models.JSONField(default=list, blank=True)
    question_breakdown = models.JSONField(default=list, blank=True)

    # Placeholders until ranking is computed elsewhere
    rank = models.PositiveIntegerField(null=True, blank=True)
    percentile = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    speed = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True, help_text="Questions attempted per minute")
    accuracy = models.DecimalField(max_digits=5, decimal_places=4, null=True, blank=True, help_text="correct / (correct + wrong)")
    time_taken_seconds = models.PositiveIntegerField(default=0)

    finalized_by = models.CharField(max_length=10, choices=FinalizedBy.choices)
    # No answer changes were accepted after this instant
    answers_locked_at = models.DateTimeField()
    completed_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['attempt', '-version']
        constraints = [
            models.UniqueConstraint(fields=['attempt', 'version'], name='unique_result_version'),
        ]

    def __str__(self):
        return f"Result v{self.version} for attempt {self.attempt_id}: {self.score}/{self.max_score}"
