"""
API views for public, business and administrator announcements.
"""
import logging

from django.db.models import F
from django.shortcuts import get_object_or_404
from rest_framework import viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from businesses.views import owned_business
from core.pagination import paginate
from core.permissions import IsAdmin, IsBusinessOwner
from moderation.activity import ActivityLogger
from .models import Announcement
from .serializers import AnnouncementSerializer

logger = logging.getLogger(__name__)


class PublicAnnouncementsView(APIView):
    """
    Live announcements, administrator ones first.

    Query parameters:
    - audience: all | members | visitors | businesses
    - business: only announcements of that business
    """
    permission_classes = [AllowAny]

    def get(self, request):
        queryset = Announcement.objects.live().select_related('business')
        audience = request.query_params.get('audience')
        if audience in Announcement.Audience.values and audience != Announcement.Audience.ALL:
            queryset = queryset.filter(target_audience__in=[audience, Announcement.Audience.ALL])
        if request.query_params.get('business'):
            queryset = queryset.filter(business_id=request.query_params['business'])

        announcements, pagination = paginate(
            queryset.order_by('-is_admin_announcement', '-created_at'), request, default_limit=20
        )
        return Response({
            'results': AnnouncementSerializer(announcements, many=True).data,
            'pagination': pagination,
        })


class PublicAnnouncementDetailView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, pk):
        announcement = get_object_or_404(Announcement.objects.live(), pk=pk)
        Announcement.objects.filter(pk=pk).update(view_count=F('view_count') + 1)
        announcement.refresh_from_db(fields=['view_count'])
        return Response(AnnouncementSerializer(announcement).data)


class BusinessAnnouncementViewSet(viewsets.ModelViewSet):
    permission_classes = [IsBusinessOwner]
    serializer_class = AnnouncementSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Announcement.objects.filter(business=owned_business(self.request.user))
        if self.request.query_params.get('type') in Announcement.Type.values:
            queryset = queryset.filter(type=self.request.query_params['type'])
        return queryset.order_by('-created_at')

    def perform_create(self, serializer):
        serializer.save(
            business=owned_business(self.request.user),
            created_by=self.request.user,
            is_admin_announcement=False,
        )


class AdminAnnouncementViewSet(viewsets.ModelViewSet):
    """Site wide announcements. Every write is recorded in the activity log."""
    permission_classes = [IsAdmin]
    serializer_class = AnnouncementSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Announcement.objects.filter(is_admin_announcement=True)
        params = self.request.query_params
        if params.get('type') in Announcement.Type.values:
            queryset = queryset.filter(type=params['type'])
        if params.get('status') in ('active', 'inactive'):
            queryset = queryset.filter(is_active=params['status'] == 'active')
        return queryset.order_by('-created_at')

    def perform_create(self, serializer):
        announcement = serializer.save(created_by=self.request.user, business=None, is_admin_announcement=True)
        ActivityLogger.record(
            self.request, 'CREATE_ANNOUNCEMENT', 'announcements',
            f"Created announcement {announcement.title}", announcement.pk
        )

    def perform_update(self, serializer):
        announcement = serializer.save()
        ActivityLogger.record(
            self.request, 'UPDATE_ANNOUNCEMENT', 'announcements',
            f"Updated announcement {announcement.title}", announcement.pk
        )

    def perform_destroy(self, instance):
        ActivityLogger.record(
            self.request, 'DELETE_ANNOUNCEMENT', 'announcements',
            f"Deleted announcement {instance.title}", instance.pk
        )
        instance.delete()
