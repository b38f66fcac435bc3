from django.contrib import admin

from .models import Attempt, AnswerRecord


class AnswerRecordInline(admin.TabularInline):
    model = AnswerRecord
    extra = 0
    can_delete = False
    readonly_fields = (
        'question_id', 'section_id', 'selected_option_ids', 'status',
        'marked_for_review', 'visited', 'last_modified_at', 'client_seq',
    )


@admin.register(Attempt)
class AttemptAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'exam', 'status', 'started_at', 'deadline_at', 'completed_at')
    list_filter = ('status',)
    readonly_fields = ('snapshot', 'started_at', 'deadline_at', 'completed_at', 'shuffle_seed', 'status')
    inlines = [AnswerRecordInline]
