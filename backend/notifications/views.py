from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from user.models import UserProfile
from .models import Notification, NotificationVerb
from .serializers import DeviceTokenRegisterSerializer, NotificationSerializer
from .services import get_push_service


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Notifications of the current user.

    GET /notifications/ - List, optional is_read and verb filters
    PATCH /notifications/{id}/mark_as_read/
    POST /notifications/mark_all_as_read/
    GET /notifications/unread_count/
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        queryset = Notification.objects.filter(
            recipient=UserProfile.for_user(self.request.user)
        ).select_related('actor__user')

        is_read = self.request.query_params.get('is_read')
        if is_read is not None:
            queryset = queryset.filter(is_read=is_read.lower() == 'true')

        verb = self.request.query_params.get('verb')
        if verb and verb in NotificationVerb.values:
            queryset = queryset.filter(verb=verb)

        return queryset.order_by('-created_at')

    @action(detail=True, methods=['patch'])
    def mark_as_read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_as_read()
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'])
    def mark_all_as_read(self, request):
        updated_count = Notification.objects.filter(
            recipient=UserProfile.for_user(request.user),
            is_read=False
        ).update(is_read=True)
        return Response({'message': f'Marked {updated_count} notifications as read', 'count': updated_count})

    @action(detail=False, methods=['get'])
    def unread_count(self, request):
        count = Notification.objects.filter(
            recipient=UserProfile.for_user(request.user),
            is_read=False
        ).count()
        return Response({'unread_count': count})


class DeviceTokenRegisterView(APIView):
    """
    Registers the FCM token of the device the user is signed in on.

    Expected payload: {"token": "abc123xyz", "platform": "ANDROID" | "iOS" | "WEB"}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = DeviceTokenRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        device_token = get_push_service().register_device(
            user=request.user,
            token=serializer.validated_data['token'],
            platform=serializer.validated_data['platform'],
        )
        return Response(
            {'message': 'Device registered successfully', 'device_id': device_token.id},
            status=status.HTTP_201_CREATED
        )
