from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Role, SELF_ASSIGNABLE_ROLES, UserProfile

User = get_user_model()


class UserProfileSerializer(serializers.ModelSerializer):
    name = serializers.CharField(read_only=True)
    email = serializers.CharField(source="user.email", read_only=True)
    redirect_url = serializers.CharField(source="get_redirect_url", read_only=True)

    class Meta:
        model = UserProfile
        fields = [
            "id",
            "name",
            "email",
            "role",
            "phone",
            "city",
            "state",
            "profile_picture",
            "is_verified",
            "redirect_url",
            "created_at",
        ]
        read_only_fields = fields


class UserProfileUpdateSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="display_name", max_length=50, required=False)

    class Meta:
        model = UserProfile
        fields = ["name", "phone", "city", "state", "profile_picture"]


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    role = serializers.ChoiceField(choices=SELF_ASSIGNABLE_ROLES, default=Role.USER)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate_email(self, value):
        email = value.strip().lower()
        if User.objects.filter(username=email).exists():
            raise serializers.ValidationError("A user with this email already exists")
        return email

    def create(self, validated_data):
        email = validated_data['email']
        user = User.objects.create_user(
            username=email,
            email=email,
            password=validated_data['password'],
        )
        return UserProfile.objects.create(
            user=user,
            display_name=validated_data['name'].strip(),
            role=validated_data['role'],
            phone=validated_data.get('phone', ''),
            city=validated_data.get('city', ''),
        )


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
