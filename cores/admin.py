from django.contrib import admin

from .models import PlatformSetting, AuditLog

admin.site.register(PlatformSetting)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'target_model', 'target_object_id', 'actor')
    list_filter = ('action', 'target_model')
    readonly_fields = ('timestamp',)
