from django.db import models
from django.core.cache import cache
from django.conf import settings


def default_grade_bands():
    return [[90, "S"], [75, "A"], [60, "B"], [40, "C"], [0, "F"]]


class PlatformSetting(models.Model):
    # --- Grading Defaults ---
    default_pass_percentage = models.PositiveIntegerField(default=40, help_text="Default pass mark percentage")
    default_exam_duration = models.PositiveIntegerField(default=120, help_text="Default duration in minutes")
    grade_bands = models.JSONField(
        default=default_grade_bands,
        help_text="List of [minimum percentage, grade], highest band first",
    )

    def save(self, *args, **kwargs):
        self.pk = 1  # Singleton pattern
        super().save(*args, **kwargs)
        cache.set('platform_settings', self)

    def delete(self, *args, **kwargs):
        pass

    @classmethod
    def load(cls):
        obj = cache.get('platform_settings')
        if obj is None:
            obj, created = cls.objects.get_or_create(pk=1)
            cache.set('platform_settings', obj)
        return obj

    def sorted_grade_bands(self):
        return sorted(
            ([float(threshold), grade] for threshold, grade in self.grade_bands),
            key=lambda band: band[0],
            reverse=True,
        )

    def __str__(self):
        return "Platform Settings"


class AuditLog(models.Model):
    ACTION_CHOICES = [
        ('START', 'Attempt Started'),
        ('SUBMIT', 'Attempt Submitted'),
        ('EXPIRE', 'Attempt Expired'),
        ('ABANDON', 'Attempt Abandoned'),
        ('REGRADE', 'Re-grade'),
        ('PUBLISH', 'Exam Published'),
        ('SETTINGS', 'Settings Changed'),
    ]

    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    target_model = models.CharField(max_length=50, help_text="e.g., Attempt, Exam, Result")
    target_object_id = models.CharField(max_length=100, blank=True, null=True)
    details = models.TextField(blank=True, help_text="Description of changes")
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp']

    @classmethod
    def record(cls, action, target, details='', actor=None):
        return cls.objects.create(
            actor=actor,
            action=action,
            target_model=target.__class__.__name__,
            target_object_id=str(target.pk),
            details=details,
        )

    def __str__(self):
        return f"{self.actor} - {self.action} - {self.timestamp}"
