from rest_framework import serializers

from mosques.models import Mosque
from .models import Level, NeedApplicant, Volunteer, VolunteerApplication, VolunteerNeed, VolunteerOffer


def string_list():
    return serializers.ListField(child=serializers.CharField(max_length=100), required=False)


class VolunteerSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=100, required=False)
    email = serializers.EmailField(required=False)
    skills = string_list()
    interests = string_list()
    languages = string_list()
    mosque_name = serializers.CharField(source='mosque.name', read_only=True, default=None)

    class Meta:
        model = Volunteer
        fields = [
            'id',
            'user',
            'name',
            'email',
            'phone',
            'skills',
            'availability',
            'experience',
            'interests',
            'languages',
            'mosque',
            'mosque_name',
            'emergency_contact',
            'status',
            'notes',
            'reviewed_by',
            'reviewed_at',
            'current_assignment',
            'assignment_date',
            'assigned_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'user',
            'status',
            'notes',
            'reviewed_by',
            'reviewed_at',
            'current_assignment',
            'assignment_date',
            'assigned_by',
            'created_at',
            'updated_at',
        ]


class VolunteerNeedSerializer(serializers.ModelSerializer):
    mosque_name = serializers.CharField(source='mosque.name', read_only=True)
    skills_required = string_list()
    volunteers_needed = serializers.IntegerField(min_value=1, required=False)
    applicants_count = serializers.SerializerMethodField()

    class Meta:
        model = VolunteerNeed
        fields = [
            'id',
            'mosque',
            'mosque_name',
            'posted_by',
            'title',
            'description',
            'category',
            'skills_required',
            'time_commitment',
            'urgency',
            'start_date',
            'end_date',
            'volunteers_needed',
            'status',
            'contact_email',
            'contact_phone',
            'applicants_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'posted_by', 'created_at', 'updated_at']

    def get_applicants_count(self, obj):
        return obj.applicants.count()

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end <= start:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        return attrs


class NeedApplicantSerializer(serializers.ModelSerializer):
    user_email = serializers.CharField(source='user.email', read_only=True)

    class Meta:
        model = NeedApplicant
        fields = ['id', 'need', 'user', 'user_email', 'message', 'status', 'applied_at']
        read_only_fields = ['id', 'need', 'user', 'status', 'applied_at']


class ApplicantReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[NeedApplicant.Status.ACCEPTED, NeedApplicant.Status.REJECTED])


class VolunteerOfferSerializer(serializers.ModelSerializer):
    skills_offered = string_list()
    preferred_locations = string_list()
    languages = string_list()
    is_general_offer = serializers.BooleanField(read_only=True)

    class Meta:
        model = VolunteerOffer
        fields = [
            'id',
            'user',
            'title',
            'description',
            'category',
            'skills_offered',
            'availability',
            'time_commitment',
            'preferred_locations',
            'experience',
            'languages',
            'contact_email',
            'contact_phone',
            'target_mosque',
            'is_general_offer',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'user', 'created_at', 'updated_at']


class VolunteerApplicationSerializer(serializers.ModelSerializer):
    mosque_name = serializers.CharField(source='mosque.name', read_only=True)
    skills_offered = string_list()
    languages = string_list()

    class Meta:
        model = VolunteerApplication
        fields = [
            'id',
            'user',
            'mosque',
            'mosque_name',
            'title',
            'description',
            'motivation',
            'category',
            'skills_offered',
            'availability',
            'time_commitment',
            'experience',
            'languages',
            'contact_email',
            'contact_phone',
            'status',
            'responded_by',
            'responded_at',
            'response_message',
            'admin_notes',
            'priority',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'user',
            'status',
            'responded_by',
            'responded_at',
            'response_message',
            'admin_notes',
            'priority',
            'created_at',
            'updated_at',
        ]

    def validate_mosque(self, value):
        if value.status != Mosque.Status.APPROVED:
            raise serializers.ValidationError('Applications are only accepted for approved mosques')
        return value


class ApplicationUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=VolunteerApplication.Status.choices)
    response_message = serializers.CharField(required=False, allow_blank=True, default='')
    admin_notes = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.ChoiceField(choices=Level.choices, required=False)


class VolunteerReviewSerializer(serializers.Serializer):
    """Body of the volunteer moderation endpoints."""
    status = serializers.CharField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='', max_length=1000)
    currentAssignment = serializers.CharField(required=False, allow_blank=True, max_length=255)
    clearAssignment = serializers.BooleanField(required=False, default=False)
