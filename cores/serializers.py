from rest_framework import serializers
from .models import PlatformSetting, AuditLog

class PlatformSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = PlatformSetting
        fields = '__all__'
        read_only_fields = ['id']

    def validate_grade_bands(self, value):
        if not isinstance(value, list) or not value:
            raise serializers.ValidationError("Grade bands must be a non-empty list.")
        for band in value:
            if not isinstance(band, (list, tuple)) or len(band) != 2:
                raise serializers.ValidationError("Each band must be [minimum percentage, grade].")
            threshold, grade = band
            if not isinstance(threshold, (int, float)) or not 0 <= threshold <= 100:
                raise serializers.ValidationError("Band thresholds must be between 0 and 100.")
            if not isinstance(grade, str) or not grade:
                raise serializers.ValidationError("Band grades must be non-empty strings.")
        if not any(band[0] == 0 for band in value):
            raise serializers.ValidationError("A band starting at 0 is required.")
        return value

class AuditLogSerializer(serializers.ModelSerializer):
    # This field fetches the email from the related User model
    actor_email = serializers.CharField(source='actor.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'actor', 'actor_email', 'action', 'target_model', 'target_object_id', 'timestamp', 'details']
