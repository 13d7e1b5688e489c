from rest_framework import serializers

from .models import Announcement


class AnnouncementSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.name', read_only=True, default=None)

    class Meta:
        model = Announcement
        fields = [
            'id',
            'title',
            'content',
            'type',
            'priority',
            'business',
            'business_name',
            'created_by',
            'is_active',
            'start_date',
            'end_date',
            'target_audience',
            'view_count',
            'is_admin_announcement',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'business',
            'created_by',
            'view_count',
            'is_admin_announcement',
            'created_at',
            'updated_at',
        ]

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end <= start:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        return attrs
