from rest_framework import serializers

from .models import ActivityLog


class ClientEventSerializer(serializers.Serializer):
    """Event reported by the browser/PWA (app start, background switch...)."""

    LAUNCH_TYPES = ['pwa', 'browser']

    action = serializers.CharField(max_length=50)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    launch_type = serializers.ChoiceField(choices=LAUNCH_TYPES, required=False)
    additional_data = serializers.DictField(required=False, default=dict)

    def validate_action(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('La acción es obligatoria.')
        return value


class ActivityLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = ActivityLog
        fields = ['id', 'action', 'description', 'device_type', 'app_state', 'route', 'additional_data', 'created_at']
