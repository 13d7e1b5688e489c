import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import UserProfile
from .serializers import (
    LoginSerializer,
    RegisterSerializer,
    UserProfileSerializer,
    UserProfileUpdateSerializer,
)

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        profile = serializer.save()
        token, _ = Token.objects.get_or_create(user=profile.user)
        logger.info("Registered %s as %s", profile.user.email, profile.role)
        return Response(
            {
                "message": "User registered successfully",
                "user": UserProfileSerializer(profile).data,
                "token": token.key,
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = authenticate(
            request,
            username=serializer.validated_data['email'].strip().lower(),
            password=serializer.validated_data['password'],
        )
        if user is None:
            return Response(
                {"error": "Invalid email or password"},
                status=status.HTTP_401_UNAUTHORIZED,
            )
        token, _ = Token.objects.get_or_create(user=user)
        profile = UserProfile.for_user(user)
        return Response({"token": token.key, "user": UserProfileSerializer(profile).data})


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        profile = UserProfile.for_user(request.user)
        return Response(UserProfileSerializer(profile).data)

    def patch(self, request):
        profile = UserProfile.for_user(request.user)
        serializer = UserProfileUpdateSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(UserProfileSerializer(profile).data)


class ProfileView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, id):
        profile = get_object_or_404(UserProfile, id=id)
        return Response(UserProfileSerializer(profile).data)
