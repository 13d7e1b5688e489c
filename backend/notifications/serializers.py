from rest_framework import serializers
from .models import Notification, DevicePlatform


class NotificationSerializer(serializers.ModelSerializer):
    actor_name = serializers.CharField(source='actor.name', read_only=True, allow_null=True)
    deep_link = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Notification
        fields = [
            'id',
            'actor_name',
            'verb',
            'title',
            'body',
            'target_object_id',
            'is_read',
            'data',
            'deep_link',
            'created_at',
        ]
        read_only_fields = fields

    def get_deep_link(self, obj):
        return obj.get_deep_link()


class DeviceTokenRegisterSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=500)
    platform = serializers.ChoiceField(
        choices=DevicePlatform.choices,
        default=DevicePlatform.WEB
    )
