import logging

from rest_framework import viewsets, permissions, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response

from assessments.serializers import AttemptStateSerializer
from assessments.sessions import start_attempt
from .models import Exam
from .serializers import ExamListSerializer, ExamDetailSerializer, ExamSnapshotSerializer
from .snapshots import publish_exam

logger = logging.getLogger(__name__)


class ExamViewSet(viewsets.ReadOnlyModelViewSet):
    filter_backends = [filters.SearchFilter]
    search_fields = ['title']

    def get_queryset(self):
        if self.request.user.is_staff:
            return Exam.objects.all().order_by('-created_at')
        return Exam.objects.filter(is_published=True).order_by('-created_at')

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ExamDetailSerializer
        return ExamListSerializer

    def get_permissions(self):
        if self.action == 'publish':
            return [permissions.IsAdminUser()]
        return [permissions.IsAuthenticated()]

    @action(detail=True, methods=['post'], url_path='start')
    def start(self, request, pk=None):
        exam = self.get_object()
        attempt = start_attempt(exam, request.user)
        return Response(AttemptStateSerializer(attempt).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='publish')
    def publish(self, request, pk=None):
        """Freeze the current definition; running attempts keep their snapshot."""
        snapshot = publish_exam(self.get_object(), actor=request.user)
        return Response(ExamSnapshotSerializer(snapshot).data, status=status.HTTP_201_CREATED)
