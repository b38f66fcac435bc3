# exams/serializers.py
from rest_framework import serializers
from .models import Exam, ExamSnapshot

# --- Catalog Serializers ---
# The answer key never leaves the server through these.

class ExamListSerializer(serializers.ModelSerializer):
    total_questions = serializers.SerializerMethodField()

    class Meta:
        model = Exam
        fields = ['id', 'title', 'duration_minutes', 'passing_percentage', 'version', 'total_questions']

    def get_total_questions(self, obj):
        snapshot = obj.latest_snapshot()
        return len(snapshot.payload["questions"]) if snapshot else 0


class ExamDetailSerializer(ExamListSerializer):
    """Published definition for candidates, without the answer key."""
    sections = serializers.SerializerMethodField()

    class Meta(ExamListSerializer.Meta):
        fields = ExamListSerializer.Meta.fields + [
            'description', 'positive_marks', 'negative_marks', 'multiple_correct_algorithm',
            'allow_section_navigation', 'show_section_wise_result', 'sections',
        ]

    def get_sections(self, obj):
        snapshot = obj.latest_snapshot()
        if not snapshot:
            return []
        return [
            {
                "id": section["id"],
                "title": section["title"],
                "instructions": section["instructions"],
                "total_questions": len(section["questions"]),
            }
            for section in snapshot.payload["sections"]
        ]


class ExamSnapshotSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExamSnapshot
        fields = ['id', 'exam', 'version', 'published_at']
