from rest_framework import generics
from rest_framework.permissions import IsAdminUser

from .models import PlatformSetting, AuditLog
from .serializers import PlatformSettingSerializer, AuditLogSerializer


class PlatformSettingView(generics.RetrieveUpdateAPIView):
    """Grading defaults. Changes apply to snapshots published afterwards."""
    serializer_class = PlatformSettingSerializer
    permission_classes = [IsAdminUser]

    def get_object(self):
        return PlatformSetting.load()

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)

    def perform_update(self, serializer):
        instance = serializer.save()
        AuditLog.record(
            'SETTINGS',
            instance,
            details=f"Updated fields: {', '.join(sorted(serializer.validated_data))}",
            actor=self.request.user,
        )


class AuditLogListView(generics.ListAPIView):
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdminUser]

    FILTERS = {
        'action': 'action',
        'target_model': 'target_model',
        'target_id': 'target_object_id',
        'actor': 'actor__email',
    }

    def get_queryset(self):
        queryset = AuditLog.objects.select_related('actor').order_by('-timestamp')
        for param, field in self.FILTERS.items():
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        return queryset
