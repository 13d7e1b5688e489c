from django.contrib.auth import get_user_model
from rest_framework import serializers

from user.models import ADMIN_ROLES, Role, UserProfile

User = get_user_model()

MAX_NOTE_LENGTH = 1000


class StatusUpdateSerializer(serializers.Serializer):
    """
    Body of the mosque, business and halal certification moderation
    endpoints. The status is checked against the record's own enum by
    the moderation service.
    """
    status = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default='', max_length=MAX_NOTE_LENGTH)
    verificationNotes = serializers.CharField(required=False, allow_blank=True, max_length=MAX_NOTE_LENGTH)
    review_notes = serializers.CharField(required=False, allow_blank=True, max_length=MAX_NOTE_LENGTH)

    def validate(self, attrs):
        for alias in ('verificationNotes', 'review_notes'):
            if alias in attrs:
                attrs['notes'] = attrs.pop(alias)
        return attrs


class RoleUpdateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices, error_messages={'invalid_choice': 'Invalid role'})


class AdminUserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(read_only=True)
    email = serializers.CharField(source='user.email', read_only=True)
    last_login = serializers.DateTimeField(source='user.last_login', read_only=True)
    is_active = serializers.BooleanField(source='user.is_active', read_only=True)

    class Meta:
        model = UserProfile
        fields = [
            'id',
            'name',
            'email',
            'role',
            'phone',
            'city',
            'state',
            'is_verified',
            'is_active',
            'last_login',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ActivityLogCreateSerializer(serializers.Serializer):
    action = serializers.CharField(max_length=100)
    module = serializers.CharField(max_length=50)
    details = serializers.CharField(max_length=2000)
    targetId = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AdminAccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    role = serializers.ChoiceField(choices=ADMIN_ROLES, default=Role.ADMIN)

    def validate_email(self, value):
        email = value.strip().lower()
        if User.objects.filter(username=email).exists():
            raise serializers.ValidationError("A user with this email already exists")
        return email

    def create(self, validated_data):
        email = validated_data['email']
        user = User.objects.create_user(username=email, email=email, password=validated_data['password'])
        return UserProfile.objects.create(
            user=user,
            display_name=validated_data['name'].strip(),
            role=validated_data['role'],
            is_verified=True,
        )


class AdminAccountUpdateSerializer(serializers.Serializer):
    """Partial update of an administrator account. Every field is optional."""
    name = serializers.CharField(max_length=50, required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField(min_length=6, write_only=True, required=False)
    role = serializers.ChoiceField(choices=ADMIN_ROLES, required=False)
    isActive = serializers.BooleanField(required=False)

    def validate_email(self, value):
        email = value.strip().lower()
        taken = User.objects.filter(username=email)
        if self.instance is not None:
            taken = taken.exclude(pk=self.instance.user_id)
        if taken.exists():
            raise serializers.ValidationError("Email already in use by another user")
        return email

    def update(self, profile, validated_data):
        user = profile.user
        if 'email' in validated_data:
            user.username = user.email = validated_data['email']
        if 'password' in validated_data:
            user.set_password(validated_data['password'])
        if 'isActive' in validated_data:
            user.is_active = validated_data['isActive']
        user.save()

        if 'name' in validated_data:
            profile.display_name = validated_data['name'].strip()
        if 'role' in validated_data:
            profile.role = validated_data['role']
        profile.save()
        return profile
