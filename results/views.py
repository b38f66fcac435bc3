from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, views
from rest_framework.response import Response

from assessments.models import Attempt
from assessments.permissions import IsExaminerOrAdmin
from exams.models import Exam
from .models import Result
from .projector import regrade_exam
from .serializers import ResultSerializer, ResultSummarySerializer


def _visible_attempt(request, attempt_id):
    if request.user.is_staff:
        return get_object_or_404(Attempt, pk=attempt_id)
    return get_object_or_404(Attempt, pk=attempt_id, user=request.user)


class ResultView(generics.RetrieveAPIView):
    """Current result of a finalized attempt."""
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ResultSerializer

    def get_object(self):
        attempt = _visible_attempt(self.request, self.kwargs['attempt_id'])
        return get_object_or_404(
            Result.objects.select_related('attempt__exam', 'snapshot'),
            attempt=attempt,
            is_current=True,
        )


class ResultHistoryView(generics.ListAPIView):
    """Every result version of an attempt, newest first."""
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ResultSummarySerializer
    pagination_class = None

    def get_queryset(self):
        attempt = _visible_attempt(self.request, self.kwargs['attempt_id'])
        return Result.objects.filter(attempt=attempt).order_by('-version')


class RegradeExamView(views.APIView):
    """Re-score finalized attempts after an answer-key correction has been published."""
    permission_classes = [IsExaminerOrAdmin]

    def post(self, request, exam_id):
        exam = get_object_or_404(Exam, pk=exam_id)
        regraded = regrade_exam(exam, actor=request.user)
        return Response({
            "status": "Re-grade complete",
            "key_version": exam.version,
            "regraded": len(regraded),
            "results": ResultSummarySerializer(regraded, many=True).data,
        })
