from rest_framework import serializers

from .models import Attempt, AnswerRecord
from .sessions import attempt_paper
from .timer import past_deadline, remaining_seconds, server_now


def timestamp(value):
    """Format an instant the way DRF renders model datetimes."""
    return serializers.DateTimeField().to_representation(value)


class AnswerRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = AnswerRecord
        fields = [
            'question_id', 'section_id', 'selected_option_ids', 'status',
            'marked_for_review', 'visited', 'time_spent_seconds', 'last_modified_at', 'client_seq',
        ]
        read_only_fields = fields


class AttemptListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for lists / dashboard history."""
    exam_title = serializers.CharField(source='exam.title', read_only=True)
    snapshot_version = serializers.IntegerField(source='snapshot.version', read_only=True)

    class Meta:
        model = Attempt
        fields = ['id', 'exam', 'exam_title', 'snapshot_version', 'status', 'started_at', 'deadline_at', 'completed_at']
        read_only_fields = fields


class AttemptStateSerializer(AttemptListSerializer):
    """Heavy serializer for taking the exam. Includes the shuffled paper and answers."""
    server_now = serializers.SerializerMethodField()
    remaining_seconds = serializers.SerializerMethodField()
    should_submit = serializers.SerializerMethodField()
    duration_minutes = serializers.IntegerField(source='frozen_exam.duration_minutes', read_only=True)
    allow_section_navigation = serializers.BooleanField(source='frozen_exam.allow_section_navigation', read_only=True)
    sections = serializers.SerializerMethodField()
    answers = AnswerRecordSerializer(many=True, read_only=True)

    class Meta(AttemptListSerializer.Meta):
        fields = AttemptListSerializer.Meta.fields + [
            'server_now', 'remaining_seconds', 'should_submit', 'duration_minutes', 'allow_section_navigation',
            'current_section_id', 'current_question_id', 'section_time_spent', 'sections', 'answers',
        ]
        read_only_fields = fields

    def _now(self):
        return self.context.get('now') or server_now()

    def get_server_now(self, obj):
        return timestamp(self._now())

    def get_remaining_seconds(self, obj):
        return remaining_seconds(obj, self._now())

    def get_should_submit(self, obj):
        return past_deadline(obj, self._now())

    def get_sections(self, obj):
        return attempt_paper(obj)


# --- Write payloads ---

class AnswerWriteSerializer(serializers.Serializer):
    question_id = serializers.CharField()
    selected_option_ids = serializers.ListField(child=serializers.CharField(), allow_empty=True, default=list)
    seq = serializers.IntegerField(min_value=0, required=False)
    client_modified_at = serializers.DateTimeField(required=False)
    time_spent_seconds = serializers.IntegerField(min_value=0, required=False)


class AnswerBatchSerializer(serializers.Serializer):
    answers = AnswerWriteSerializer(many=True, allow_empty=False)


class ReviewSerializer(serializers.Serializer):
    question_id = serializers.CharField()
    marked_for_review = serializers.BooleanField()


class VisitSerializer(serializers.Serializer):
    question_id = serializers.CharField()


class NavigateSerializer(serializers.Serializer):
    section_id = serializers.CharField()
    question_id = serializers.CharField(required=False)
    seq = serializers.IntegerField(min_value=0, required=False)
