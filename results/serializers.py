from rest_framework import serializers
from .models import Result


class ResultSerializer(serializers.ModelSerializer):
    attempt_id = serializers.IntegerField(source='attempt.id', read_only=True)
    exam_title = serializers.CharField(source='attempt.exam.title', read_only=True)
    section_breakdown = serializers.SerializerMethodField()

    class Meta:
        model = Result
        fields = [
            'id', 'attempt_id', 'exam_title', 'version', 'is_current', 'key_version',
            'score', 'max_score', 'percentage', 'grade', 'passed',
            'total_questions', 'attempted', 'correct', 'wrong', 'partially_correct', 'skipped',
            'section_breakdown', 'question_breakdown',
            'rank', 'percentile', 'speed', 'accuracy', 'time_taken_seconds',
            'finalized_by', 'answers_locked_at', 'completed_at', 'created_at',
        ]
        read_only_fields = fields

    def get_section_breakdown(self, obj):
        request = self.context.get('request')
        if request and request.user.is_staff:
            return obj.section_breakdown
        if obj.snapshot.payload.get("show_section_wise_result", True):
            return obj.section_breakdown
        return None


class ResultSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Result
        fields = ['id', 'version', 'is_current', 'key_version', 'score', 'max_score', 'percentage', 'grade', 'passed', 'finalized_by', 'created_at']
        read_only_fields = fields
