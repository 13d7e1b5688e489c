"""
Administrator endpoints: user management, moderation of listings,
the activity log and dashboard analytics.
"""
import logging
from datetime import datetime, time, timedelta, timezone as dt_timezone

from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from pymongo.errors import PyMongoError
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from businesses.models import Business, HalalCertification
from businesses.serializers import BusinessSerializer, HalalCertificationSerializer
from core.pagination import paginate
from core.permissions import IsAdmin
from mosques.models import Mosque
from mosques.serializers import MosqueSerializer
from user.models import ADMIN_ROLES, Role, UserProfile, role_of
from volunteers.models import Volunteer
from volunteers.serializers import VolunteerReviewSerializer, VolunteerSerializer
from volunteers.views import review_volunteer
from .activity import ActivityLogger
from .analytics import AnalyticsService, dashboard_stats, mosque_statistics, pending_approvals, recent_activity
from .documents import ActivityLog
from .serializers import (
    ActivityLogCreateSerializer,
    AdminAccountCreateSerializer,
    AdminAccountUpdateSerializer,
    AdminUserSerializer,
    RoleUpdateSerializer,
    StatusUpdateSerializer,
)
from .services import ModerationService

logger = logging.getLogger(__name__)

MAX_LOG_LIMIT = 500


class AdminUserListView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        queryset = UserProfile.objects.select_related('user').order_by('-created_at')
        params = request.query_params
        if params.get('role') in Role.values:
            queryset = queryset.filter(role=params['role'])
        if params.get('search'):
            term = params['search']
            queryset = queryset.filter(
                Q(display_name__icontains=term) | Q(user__email__icontains=term) | Q(user__username__icontains=term)
            )
        users, pagination = paginate(queryset, request, default_limit=20)
        return Response({'results': AdminUserSerializer(users, many=True).data, 'pagination': pagination})


class AdminUserRoleView(APIView):
    permission_classes = [IsAdmin]

    def patch(self, request, pk):
        profile = get_object_or_404(UserProfile.objects.select_related('user'), pk=pk)
        serializer = RoleUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_role = serializer.validated_data['role']

        caller_is_superadmin = role_of(request.user) == Role.SUPERADMIN
        if Role.SUPERADMIN in (profile.role, new_role) and not caller_is_superadmin:
            raise PermissionDenied('Only a superadmin can change superadmin accounts.')

        previous = profile.role
        profile.role = new_role
        profile.save(update_fields=['role', 'updated_at'])
        ActivityLogger.record(
            request, 'UPDATE_USER_ROLE', 'users',
            f"Changed role of {profile.name} from {previous} to {new_role}", profile.pk
        )
        return Response({
            'message': 'User role updated successfully',
            'user': AdminUserSerializer(profile).data,
        })


class AdminUserStatsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        profiles = UserProfile.objects.all()
        by_role = dict(profiles.order_by().values_list('role').annotate(count=Count('pk')))
        return Response({
            'total': profiles.count(),
            'by_role': {role: by_role.get(role, 0) for role in Role.values},
            'verified': profiles.filter(is_verified=True).count(),
            'unverified': profiles.filter(is_verified=False).count(),
            'new_last_30_days': profiles.filter(created_at__gte=timezone.now() - timedelta(days=30)).count(),
        })


def admin_profiles():
    return UserProfile.objects.select_related('user').filter(role__in=ADMIN_ROLES)


class AdminAccountListView(APIView):
    """
    Administrator accounts. Only a superadmin sees or creates superadmins.
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        queryset = admin_profiles().order_by('-created_at')
        if role_of(request.user) != Role.SUPERADMIN:
            queryset = queryset.filter(role=Role.ADMIN)
        admins = AdminUserSerializer(queryset, many=True).data
        return Response({'admins': admins, 'count': len(admins)})

    def post(self, request):
        serializer = AdminAccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if serializer.validated_data['role'] == Role.SUPERADMIN and role_of(request.user) != Role.SUPERADMIN:
            raise PermissionDenied('Only a superadmin can create superadmin accounts.')

        profile = serializer.save()
        ActivityLogger.record(
            request, 'CREATE_ADMIN', 'user_management',
            f"Created {profile.role} account for {profile.user.email}", profile.pk
        )
        return Response({
            'message': 'Admin user created successfully',
            'admin': AdminUserSerializer(profile).data,
        }, status=status.HTTP_201_CREATED)


class AdminAccountDetailView(APIView):
    permission_classes = [IsAdmin]

    def get_object(self, request, pk):
        profile = get_object_or_404(admin_profiles(), pk=pk)
        if profile.role == Role.SUPERADMIN and role_of(request.user) != Role.SUPERADMIN:
            raise PermissionDenied('Only a superadmin can manage superadmin accounts.')
        return profile

    def get(self, request, pk):
        return Response({'admin': AdminUserSerializer(self.get_object(request, pk)).data})

    def patch(self, request, pk):
        profile = self.get_object(request, pk)
        serializer = AdminAccountUpdateSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        new_role = serializer.validated_data.get('role')
        if new_role == Role.SUPERADMIN and role_of(request.user) != Role.SUPERADMIN:
            raise PermissionDenied('Only a superadmin can grant the superadmin role.')
        if new_role and new_role != profile.role and profile.user_id == request.user.pk:
            return Response({'error': 'Cannot change your own role'}, status=status.HTTP_400_BAD_REQUEST)

        profile = serializer.save()
        changed = ', '.join(sorted(serializer.validated_data))
        ActivityLogger.record(
            request, 'UPDATE_ADMIN', 'user_management',
            f"Updated admin {profile.user.email} ({changed})", profile.pk
        )
        return Response({
            'message': 'Admin user updated successfully',
            'admin': AdminUserSerializer(profile).data,
        })

    def delete(self, request, pk):
        profile = self.get_object(request, pk)
        if profile.user_id == request.user.pk:
            return Response({'error': 'Cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)

        email = profile.user.email
        profile.user.delete()
        ActivityLogger.record(request, 'DELETE_ADMIN', 'user_management', f"Deleted admin {email}", pk)
        return Response({'message': 'Admin user deleted successfully'})


class AdminDashboardView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        businesses = Business.objects.select_related('owner')
        return Response({
            'stats': {
                'total_users': UserProfile.objects.count(),
                'total_businesses': businesses.count(),
                'total_volunteers': Volunteer.objects.count(),
                'pending_businesses': businesses.filter(
                    verification_status=Business.VerificationStatus.PENDING
                ).count(),
                'pending_volunteers': Volunteer.objects.filter(status=Volunteer.Status.PENDING).count(),
            },
            'recent_users': AdminUserSerializer(
                UserProfile.objects.select_related('user').order_by('-created_at')[:10], many=True
            ).data,
            'recent_businesses': BusinessSerializer(businesses.order_by('-created_at')[:10], many=True).data,
            'pending_approvals': pending_approvals(),
        })


class RecentActivityView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(recent_activity())


class ModeratedListView(APIView):
    """
    Paginated listing of one kind of moderated record with a status filter.
    """
    permission_classes = [IsAdmin]
    model = None
    serializer_class = None
    status_field = 'status'
    search_fields = ('name',)
    default_limit = 50

    def get_queryset(self):
        return self.model.objects.all()

    def get(self, request):
        queryset = self.get_queryset()
        params = request.query_params
        requested = params.get('status')
        if requested and requested != 'all':
            queryset = queryset.filter(**{self.status_field: requested})
        if params.get('search'):
            match = Q()
            for field in self.search_fields:
                match |= Q(**{f'{field}__icontains': params['search']})
            queryset = queryset.filter(match)

        records, pagination = paginate(queryset, request, default_limit=self.default_limit, max_limit=200)
        return Response({
            'results': self.serializer_class(records, many=True).data,
            'pagination': pagination,
        })


class ModeratedDetailView(APIView):
    """GET one moderated record, PATCH its status through the moderation workflow."""
    permission_classes = [IsAdmin]
    model = None
    serializer_class = None
    label = ''
    response_key = ''

    def get(self, request, pk):
        return Response(self.serializer_class(get_object_or_404(self.model, pk=pk)).data)

    def patch(self, request, pk):
        record = get_object_or_404(self.model, pk=pk)
        body = StatusUpdateSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        ModerationService.set_status(
            record,
            body.validated_data['status'],
            request.user,
            note=body.validated_data['notes'],
            request=request,
        )
        return Response({
            'message': f"{self.label} {self.current_status(record)} successfully",
            self.response_key: self.serializer_class(record).data,
        })

    def current_status(self, record):
        return record.status


class AdminMosqueListView(ModeratedListView):
    model = Mosque
    serializer_class = MosqueSerializer
    search_fields = ('name', 'city', 'state')

    def get_queryset(self):
        return Mosque.objects.select_related('imam').order_by('-created_at')


class AdminMosqueDetailView(ModeratedDetailView):
    model = Mosque
    serializer_class = MosqueSerializer
    label = 'Mosque'
    response_key = 'mosque'


class AdminBusinessListView(ModeratedListView):
    model = Business
    serializer_class = BusinessSerializer
    status_field = 'verification_status'
    search_fields = ('name', 'city', 'email')

    def get_queryset(self):
        queryset = Business.objects.select_related('owner').order_by('-created_at')
        category = self.request.query_params.get('category')
        if category in Business.Category.values:
            queryset = queryset.filter(category=category)
        return queryset


class AdminBusinessDetailView(ModeratedDetailView):
    model = Business
    serializer_class = BusinessSerializer
    label = 'Business'
    response_key = 'business'

    def current_status(self, record):
        return record.verification_status


class AdminVolunteerListView(ModeratedListView):
    model = Volunteer
    serializer_class = VolunteerSerializer
    search_fields = ('name', 'email')

    def get_queryset(self):
        return Volunteer.objects.select_related('mosque').order_by('-created_at')


class AdminVolunteerDetailView(ModeratedDetailView):
    model = Volunteer
    serializer_class = VolunteerSerializer
    label = 'Volunteer'
    response_key = 'volunteer'

    def patch(self, request, pk):
        volunteer = get_object_or_404(Volunteer, pk=pk)
        body = VolunteerReviewSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        review_volunteer(volunteer, body.validated_data, request)
        return Response({
            'message': f"Volunteer {volunteer.status} successfully",
            'volunteer': VolunteerSerializer(volunteer).data,
        })


class AdminHalalListView(ModeratedListView):
    model = HalalCertification
    serializer_class = HalalCertificationSerializer
    search_fields = ('business_name', 'city', 'contact_email')

    def get_queryset(self):
        return HalalCertification.objects.select_related('business').order_by('-requested_at')


class AdminHalalDetailView(ModeratedDetailView):
    model = HalalCertification
    serializer_class = HalalCertificationSerializer
    label = 'Halal certification'
    response_key = 'request'


class AnalyticsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(AnalyticsService(request.query_params.get('timeRange', '30d')).report())


class StatsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(dashboard_stats())


class MosqueStatisticsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(mosque_statistics())


def parse_bound(value, end_of_day=False):
    """Accepts an ISO datetime or a plain date; a date covers the whole day."""
    if not value:
        return None
    moment = parse_datetime(value)
    if moment is None:
        day = parse_date(value)
        if day is None:
            raise ValueError(f"Invalid date: {value}")
        moment = datetime.combine(day, time.max if end_of_day else time.min)
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment, dt_timezone.utc)
    return moment


class ActivityLogView(APIView):
    """
    GET /admin/activity-logs/ - Newest first, filters limit, module, adminId, startDate, endDate
    POST /admin/activity-logs/ - Record an action performed from the dashboard
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        params = request.query_params
        try:
            limit = min(max(int(params.get('limit', 50)), 1), MAX_LOG_LIMIT)
            start = parse_bound(params.get('startDate'))
            end = parse_bound(params.get('endDate'), end_of_day=True)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        filters = {}
        if params.get('module'):
            filters['module'] = params['module']
        if params.get('adminId'):
            filters['admin_id'] = params['adminId']
        if start:
            filters['timestamp__gte'] = start
        if end:
            filters['timestamp__lte'] = end

        try:
            queryset = ActivityLog.objects(**filters).order_by('-timestamp')
            total = queryset.count()
            logs = [log.to_dict() for log in queryset.limit(limit)]
        except PyMongoError as e:
            logger.error("Failed to read activity logs: %s", e)
            return Response({'error': 'Activity log unavailable'}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response({'logs': logs, 'count': len(logs), 'total': total})

    def post(self, request):
        serializer = ActivityLogCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'action, module and details are required', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )
        data = serializer.validated_data
        entry = ActivityLogger.record(request, data['action'], data['module'], data['details'], data.get('targetId'))
        if entry is None:
            return Response({'error': 'Activity log unavailable'}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({'log': entry.to_dict()}, status=status.HTTP_201_CREATED)
