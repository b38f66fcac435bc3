# assessments/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from exams.models import Exam, ExamSnapshot
from exams.snapshots import FrozenExam


class AttemptQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=Attempt.Status.IN_PROGRESS)

    def locked(self, pk):
        """Row-locked attempt. Call inside ``transaction.atomic()``; all writes to one attempt queue here."""
        return self.select_for_update(of=('self',)).select_related('snapshot', 'exam').get(pk=pk)


class Attempt(models.Model):
    """One candidate's timed run through a frozen exam snapshot."""

    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        SUBMITTED = "submitted", "Submitted"
        EXPIRED = "expired", "Expired"
        ABANDONED = "abandoned", "Abandoned"

    TERMINAL_STATUSES = (Status.SUBMITTED, Status.EXPIRED, Status.ABANDONED)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='attempts')
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='attempts')
    snapshot = models.ForeignKey(ExamSnapshot, on_delete=models.PROTECT, related_name='attempts')

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.IN_PROGRESS)
    started_at = models.DateTimeField()
    # Fixed at creation from the server clock; never recomputed
    deadline_at = models.DateTimeField()
    completed_at = models.DateTimeField(null=True, blank=True)
    last_active_at = models.DateTimeField(null=True, blank=True)

    shuffle_seed = models.BigIntegerField()

    current_section_id = models.CharField(max_length=64, blank=True)
    # Last question the candidate opened; a resumed session reopens it
    current_question_id = models.CharField(max_length=64, blank=True)
    section_entered_at = models.DateTimeField(null=True, blank=True)
    section_time_spent = models.JSONField(default=dict, blank=True)
    nav_seq = models.PositiveIntegerField(null=True, blank=True)

    objects = AttemptQuerySet.as_manager()

    class Meta:
        ordering = ['-started_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'exam'],
                condition=Q(status='in_progress'),
                name='one_in_progress_attempt_per_user_exam',
            ),
        ]
        indexes = [
            models.Index(fields=['status', 'deadline_at'], name='attempt_status_deadline_idx'),
        ]

    @property
    def is_active(self):
        return self.status == self.Status.IN_PROGRESS

    @property
    def frozen_exam(self):
        if not hasattr(self, '_frozen_exam'):
            self._frozen_exam = FrozenExam(self.snapshot.payload)
        return self._frozen_exam

    def answers_map(self):
        return {record.question_id: list(record.selected_option_ids) for record in self.answers.all()}

    def __str__(self):
        return f"{self.user} - {self.exam.title} ({self.status})"


class AnswerRecord(models.Model):
    class Status(models.TextChoices):
        UNANSWERED = "unanswered", "Unanswered"
        ANSWERED = "answered", "Answered"
        SKIPPED = "skipped", "Skipped"

    attempt = models.ForeignKey(Attempt, related_name='answers', on_delete=models.CASCADE)
    question_id = models.CharField(max_length=64)
    section_id = models.CharField(max_length=64, blank=True)

    selected_option_ids = models.JSONField(default=list, blank=True)
    marked_for_review = models.BooleanField(default=False)
    visited = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.UNANSWERED)
    time_spent_seconds = models.PositiveIntegerField(default=0)

    last_modified_at = models.DateTimeField(null=True, blank=True)
    # Highest client sequence number applied so far
    client_seq = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ['id']
        unique_together = ('attempt', 'question_id')

    def __str__(self):
        return f"{self.attempt_id}:{self.question_id} {self.status}"
