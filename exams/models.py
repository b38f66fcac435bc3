# exams/models.py
from decimal import Decimal

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class Exam(models.Model):
    class MultipleCorrectAlgorithm(models.TextChoices):
        PARTIAL = "partial", "Partial credit"
        ALL_OR_NONE = "all_or_none", "All or none"
        PROPORTIONAL = "proportional", "Proportional"

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    # Marking scheme, overridable per question
    positive_marks = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("4"))
    negative_marks = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("1"))
    passing_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("40"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    multiple_correct_algorithm = models.CharField(
        max_length=20, choices=MultipleCorrectAlgorithm.choices, default=MultipleCorrectAlgorithm.ALL_OR_NONE
    )
    # Lets 'partial' questions go below zero (down to -negative_marks)
    partial_negative_carry = models.BooleanField(default=False)

    shuffle_questions = models.BooleanField(default=False)
    shuffle_options = models.BooleanField(default=False)
    allow_section_navigation = models.BooleanField(default=True)
    show_section_wise_result = models.BooleanField(default=True)

    is_published = models.BooleanField(default=False)
    version = models.PositiveIntegerField(default=0, help_text="Latest published snapshot version")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def latest_snapshot(self):
        return self.snapshots.order_by('-version').first()

    def __str__(self):
        return self.title


class Section(models.Model):
    exam = models.ForeignKey(Exam, related_name='sections', on_delete=models.CASCADE)
    title = models.CharField(max_length=200)
    order = models.PositiveIntegerField(default=0)
    instructions = models.TextField(blank=True)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return f"{self.exam.title} / {self.title}"


class Question(models.Model):
    class QuestionType(models.TextChoices):
        SINGLE_CORRECT = "single_correct", "Single correct"
        MULTIPLE_CORRECT = "multiple_correct", "Multiple correct"

    section = models.ForeignKey(Section, related_name='questions', on_delete=models.CASCADE)
    order = models.PositiveIntegerField(default=0)
    text = models.TextField()
    question_type = models.CharField(max_length=20, choices=QuestionType.choices, default=QuestionType.SINGLE_CORRECT)
    explanation = models.TextField(blank=True, help_text="Shown to candidates with their graded answers")

    # Null means "use the exam default"
    positive_marks = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    negative_marks = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return f"{self.text[:50]}..."


class Option(models.Model):
    question = models.ForeignKey(Question, related_name='options', on_delete=models.CASCADE)
    text = models.CharField(max_length=255)
    is_correct = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return self.text


class ExamSnapshot(models.Model):
    """Frozen, self-contained copy of an exam definition. Never updated once created."""
    exam = models.ForeignKey(Exam, related_name='snapshots', on_delete=models.PROTECT)
    version = models.PositiveIntegerField()
    payload = models.JSONField()
    published_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['exam', '-version']
        constraints = [
            models.UniqueConstraint(fields=['exam', 'version'], name='unique_exam_snapshot_version'),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Exam snapshots are immutable.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.exam.title} v{self.version}"
