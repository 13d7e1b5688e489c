"""
DRF Serializers for Mosque model and map data.
"""
from rest_framework import serializers

from .models import Mosque, SERVICE_CHOICES, coordinates_valid


class MosqueSerializer(serializers.ModelSerializer):
    """Full mosque representation used for detail, create and update"""

    name = serializers.CharField(min_length=2, max_length=200)
    street = serializers.CharField(min_length=5, max_length=255)
    city = serializers.CharField(min_length=2, max_length=100)
    state = serializers.CharField(min_length=2, max_length=100)
    zip_code = serializers.CharField(min_length=5, max_length=20)
    services = serializers.ListField(
        child=serializers.ChoiceField(choices=SERVICE_CHOICES),
        required=False
    )
    facilities = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    imam_name = serializers.SerializerMethodField()
    full_address = serializers.CharField(read_only=True)

    class Meta:
        model = Mosque
        fields = [
            'id',
            'name',
            'description',
            'imam',
            'imam_name',
            'phone',
            'email',
            'website',
            'street',
            'city',
            'state',
            'zip_code',
            'country',
            'full_address',
            'latitude',
            'longitude',
            'geohash',
            'capacity',
            'services',
            'facilities',
            'fajr',
            'dhuhr',
            'asr',
            'maghrib',
            'isha',
            'jumma',
            'status',
            'verified',
            'verification_notes',
            'verified_at',
            'total_members',
            'total_events',
            'total_volunteers',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'imam',
            'geohash',
            'status',
            'verified',
            'verification_notes',
            'verified_at',
            'total_members',
            'total_events',
            'total_volunteers',
            'created_at',
            'updated_at',
        ]
        extra_kwargs = {
            'capacity': {'min_value': 1},
        }

    def get_imam_name(self, obj):
        profile = getattr(obj.imam, 'profile', None)
        return profile.name if profile else obj.imam.get_username()

    def validate(self, attrs):
        lat = attrs.get('latitude', getattr(self.instance, 'latitude', None))
        lon = attrs.get('longitude', getattr(self.instance, 'longitude', None))
        if (lat is None) != (lon is None):
            raise serializers.ValidationError({'latitude': 'Latitude and longitude must be provided together'})
        if lat is not None and not coordinates_valid(lat, lon):
            raise serializers.ValidationError({'latitude': 'Invalid coordinates'})
        return attrs


class MosqueListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list and map views"""

    distance_meters = serializers.FloatField(read_only=True)

    class Meta:
        model = Mosque
        fields = [
            'id',
            'name',
            'city',
            'state',
            'latitude',
            'longitude',
            'services',
            'status',
            'verified',
            'distance_meters',
        ]


class ClusterSerializer(serializers.Serializer):
    """Serializer for clustered map markers"""

    geohash = serializers.CharField(help_text="Shared geohash prefix of the cluster")
    center = serializers.ListField(
        child=serializers.FloatField(),
        help_text="[latitude, longitude]"
    )
    count = serializers.IntegerField(help_text="Number of records in cluster")
