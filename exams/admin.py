from django.contrib import admin, messages
from django.core.exceptions import ValidationError

from cores.models import PlatformSetting
from .models import Exam, Section, Question, Option, ExamSnapshot
from .snapshots import publish_exam


class SectionInline(admin.TabularInline):
    model = Section
    extra = 0


class OptionInline(admin.TabularInline):
    model = Option
    extra = 2


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ('title', 'duration_minutes', 'multiple_correct_algorithm', 'is_published', 'version')
    readonly_fields = ('version', 'is_published')
    inlines = [SectionInline]
    actions = ['publish_selected']

    def get_changeform_initial_data(self, request):
        initial = super().get_changeform_initial_data(request)
        defaults = PlatformSetting.load()
        initial.setdefault('duration_minutes', defaults.default_exam_duration)
        initial.setdefault('passing_percentage', defaults.default_pass_percentage)
        return initial

    @admin.action(description="Publish a new snapshot")
    def publish_selected(self, request, queryset):
        for exam in queryset:
            try:
                snapshot = publish_exam(exam, actor=request.user)
            except ValidationError as e:
                self.message_user(request, f"{exam.title}: {'; '.join(e.messages)}", messages.ERROR)
            else:
                self.message_user(request, f"{exam.title}: published v{snapshot.version}")


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ('__str__', 'section', 'question_type')
    list_filter = ('question_type',)
    inlines = [OptionInline]


@admin.register(ExamSnapshot)
class ExamSnapshotAdmin(admin.ModelAdmin):
    list_display = ('exam', 'version', 'published_at')
    readonly_fields = ('exam', 'version', 'payload', 'published_at')

    def has_change_permission(self, request, obj=None):
        return False


admin.site.register(Section)
