from django.contrib import admin

from .models import Result


@admin.register(Result)
class ResultAdmin(admin.ModelAdmin):
    list_display = ('attempt', 'version', 'is_current', 'score', 'max_score', 'grade', 'finalized_by')
    list_filter = ('is_current', 'finalized_by', 'grade')

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
