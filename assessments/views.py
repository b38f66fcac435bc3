import logging

from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from results.serializers import ResultSerializer
from .journal import mark_for_review, mark_visited, upsert_answer, upsert_answers_batch
from .models import Attempt
from .serializers import (
    AnswerBatchSerializer,
    AnswerRecordSerializer,
    AnswerWriteSerializer,
    AttemptListSerializer,
    AttemptStateSerializer,
    NavigateSerializer,
    ReviewSerializer,
    VisitSerializer,
    timestamp,
)
from .sessions import navigate as navigate_attempt, resume_attempt, submit_attempt
from .timer import heartbeat as attempt_heartbeat, server_now, timing_payload

logger = logging.getLogger(__name__)


class AttemptViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Candidate session API. Every response carries ``server_now`` and
    ``deadline_at`` so the client countdown can be corrected for drift.
    """
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = AttemptListSerializer

    def get_queryset(self):
        # Other users' attempts are simply not found
        return Attempt.objects.filter(user=self.request.user).select_related('exam', 'snapshot')

    def _timed(self, attempt, data, now):
        data.update(timing_payload(attempt, now))
        data['server_now'] = timestamp(data['server_now'])
        data['deadline_at'] = timestamp(data['deadline_at'])
        return Response(data)

    def _result_response(self, attempt, result, now):
        attempt.refresh_from_db(fields=['status', 'completed_at'])
        data = {
            'attempt_id': attempt.pk,
            'status': attempt.status,
            'result': ResultSerializer(result, context=self.get_serializer_context()).data if result else None,
        }
        return self._timed(attempt, data, now)

    def retrieve(self, request, pk=None):
        """Resume: the live state, or the terminal Result once time is up."""
        now = server_now()
        kind, payload = resume_attempt(self.get_object(), now=now)
        if kind == "state":
            return Response(AttemptStateSerializer(payload, context={'now': now}).data)
        return self._result_response(self.get_object(), payload, now)

    @action(detail=True, methods=['post'], url_path='answer')
    def answer(self, request, pk=None):
        attempt = self.get_object()
        serializer = AnswerWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        now = server_now()
        record, applied = upsert_answer(
            attempt,
            data['question_id'],
            data['selected_option_ids'],
            seq=data.get('seq'),
            client_modified_at=data.get('client_modified_at'),
            time_spent_seconds=data.get('time_spent_seconds'),
            now=now,
        )
        return self._timed(attempt, {'answer': AnswerRecordSerializer(record).data, 'applied': applied}, now)

    @action(detail=True, methods=['post'], url_path='answers')
    def answers(self, request, pk=None):
        """Batched autosave flush (interval timer, navigation or blur)."""
        attempt = self.get_object()
        serializer = AnswerBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        now = server_now()
        outcomes = upsert_answers_batch(attempt, serializer.validated_data['answers'], now=now)
        data = {
            'answers': [
                {'answer': AnswerRecordSerializer(record).data, 'applied': applied}
                for record, applied in outcomes
            ],
        }
        return self._timed(attempt, data, now)

    @action(detail=True, methods=['post'], url_path='review')
    def review(self, request, pk=None):
        attempt = self.get_object()
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        now = server_now()
        record = mark_for_review(
            attempt,
            serializer.validated_data['question_id'],
            serializer.validated_data['marked_for_review'],
            now=now,
        )
        return self._timed(attempt, {'answer': AnswerRecordSerializer(record).data}, now)

    @action(detail=True, methods=['post'], url_path='visit')
    def visit(self, request, pk=None):
        attempt = self.get_object()
        serializer = VisitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        now = server_now()
        record = mark_visited(attempt, serializer.validated_data['question_id'], now=now)
        return self._timed(attempt, {'answer': AnswerRecordSerializer(record).data}, now)

    @action(detail=True, methods=['patch'], url_path='navigate')
    def navigate(self, request, pk=None):
        serializer = NavigateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        now = server_now()
        attempt = navigate_attempt(
            self.get_object(),
            serializer.validated_data['section_id'],
            seq=serializer.validated_data.get('seq'),
            question_id=serializer.validated_data.get('question_id'),
            now=now,
        )
        data = {
            'current_section_id': attempt.current_section_id,
            'current_question_id': attempt.current_question_id,
            'section_time_spent': attempt.section_time_spent,
        }
        return self._timed(attempt, data, now)

    @action(detail=True, methods=['post'], url_path='heartbeat')
    def heartbeat(self, request, pk=None):
        now = server_now()
        payload, result = attempt_heartbeat(self.get_object(), now=now)
        payload['server_now'] = timestamp(payload['server_now'])
        payload['deadline_at'] = timestamp(payload['deadline_at'])
        if result is not None:
            payload['result'] = ResultSerializer(result, context=self.get_serializer_context()).data
        return Response(payload)

    @action(detail=True, methods=['post'], url_path='submit')
    def submit(self, request, pk=None):
        now = server_now()
        attempt = self.get_object()
        result = submit_attempt(attempt, now=now)
        return self._result_response(attempt, result, now)
