"""
API views for volunteer registrations, needs, offers and applications.
"""
import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ConflictError
from core.permissions import IsImam
from moderation.services import ModerationService
from notifications.models import NotificationVerb
from notifications.services import notify
from user.models import Role, UserProfile, is_admin_user, role_of
from .models import NeedApplicant, Volunteer, VolunteerApplication, VolunteerNeed, VolunteerOffer
from .serializers import (
    ApplicantReviewSerializer,
    ApplicationUpdateSerializer,
    NeedApplicantSerializer,
    VolunteerApplicationSerializer,
    VolunteerNeedSerializer,
    VolunteerOfferSerializer,
    VolunteerReviewSerializer,
    VolunteerSerializer,
)

logger = logging.getLogger(__name__)


class VolunteerRegisterView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        if Volunteer.objects.filter(user=request.user).exists():
            raise ConflictError('You have already registered as a volunteer')

        serializer = VolunteerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        volunteer = serializer.save(
            user=request.user,
            name=serializer.validated_data.get('name') or UserProfile.for_user(request.user).name,
            email=serializer.validated_data.get('email') or request.user.email,
            status=Volunteer.Status.PENDING,
        )
        logger.info("Volunteer registration %s created by %s", volunteer.id, request.user.pk)
        return Response({
            'message': 'Volunteer registration submitted. Awaiting approval.',
            'volunteer': VolunteerSerializer(volunteer).data,
        }, status=status.HTTP_201_CREATED)


class VolunteerStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        volunteer = Volunteer.objects.filter(user=request.user).first()
        if volunteer is None:
            return Response({'registered': False, 'status': None, 'volunteer': None})
        return Response({
            'registered': True,
            'status': volunteer.status,
            'volunteer': VolunteerSerializer(volunteer).data,
        })


class VolunteerNeedViewSet(viewsets.ModelViewSet):
    """
    Calls for volunteers posted by imams.

    GET /volunteers/needs/ - Active needs, optional category, urgency and mosque filters
    POST /volunteers/needs/{id}/apply/ - Apply to a need
    GET /volunteers/needs/{id}/applicants/ - Applicants, for the poster
    """
    serializer_class = VolunteerNeedSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action == 'create':
            return [IsImam()]
        if self.action in ('list', 'retrieve'):
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_queryset(self):
        queryset = VolunteerNeed.objects.select_related('mosque')
        if self.action != 'list':
            return queryset
        params = self.request.query_params
        queryset = queryset.filter(status=VolunteerNeed.Status.ACTIVE)
        if params.get('category'):
            queryset = queryset.filter(category=params['category'])
        if params.get('urgency'):
            queryset = queryset.filter(urgency=params['urgency'])
        if params.get('mosque'):
            queryset = queryset.filter(mosque_id=params['mosque'])
        return queryset.order_by('-created_at')

    def perform_create(self, serializer):
        mosque = serializer.validated_data['mosque']
        if not mosque.is_managed_by(self.request.user):
            raise PermissionDenied('Only the mosque imam or an administrator can post needs for this mosque.')
        serializer.save(posted_by=self.request.user, status=VolunteerNeed.Status.ACTIVE)

    def perform_update(self, serializer):
        if not serializer.instance.can_manage(self.request.user):
            raise PermissionDenied('Only the poster or an administrator can edit this need.')
        serializer.save()

    def perform_destroy(self, instance):
        if not instance.can_manage(self.request.user):
            raise PermissionDenied('Only the poster or an administrator can delete this need.')
        instance.delete()

    @action(detail=True, methods=['post'])
    def apply(self, request, pk=None):
        need = self.get_object()
        applicant = need.apply(request.user, message=request.data.get('message', ''))
        notify(
            need.posted_by,
            NotificationVerb.APPLICATION,
            'New volunteer applicant',
            f'Someone applied to "{need.title}".',
            target_object_id=need.pk,
            actor=request.user,
            data={'kind': 'need', 'applicant_id': str(applicant.id)},
        )
        return Response({
            'message': 'Application submitted successfully',
            'applicant': NeedApplicantSerializer(applicant).data,
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def applicants(self, request, pk=None):
        need = self.get_object()
        if not need.can_manage(request.user):
            raise PermissionDenied('Only the poster or an administrator can view applicants.')
        return Response(NeedApplicantSerializer(need.applicants.select_related('user'), many=True).data)


class NeedApplicantReviewView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk, applicant_id):
        need = get_object_or_404(VolunteerNeed, pk=pk)
        if not need.can_manage(request.user):
            raise PermissionDenied('Only the poster or an administrator can review applicants.')
        applicant = get_object_or_404(need.applicants, pk=applicant_id)

        serializer = ApplicantReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        need.review_applicant(applicant, serializer.validated_data['status'])

        notify(
            applicant.user,
            NotificationVerb.APPLICATION,
            f'Application {applicant.status}',
            f'Your application to "{need.title}" was {applicant.status}.',
            target_object_id=need.pk,
            actor=request.user,
            data={'kind': 'need', 'status': applicant.status},
        )
        return Response({
            'message': f'Applicant {applicant.status} successfully',
            'applicant': NeedApplicantSerializer(applicant).data,
            'need_status': need.status,
        })


class VolunteerOfferViewSet(viewsets.ModelViewSet):
    serializer_class = VolunteerOfferSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action in ('list', 'retrieve'):
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_queryset(self):
        queryset = VolunteerOffer.objects.select_related('target_mosque')
        if self.action != 'list':
            return queryset
        params = self.request.query_params
        queryset = queryset.filter(status=VolunteerOffer.Status.ACTIVE)
        if params.get('category'):
            queryset = queryset.filter(category=params['category'])
        if params.get('mosque'):
            queryset = queryset.filter(target_mosque_id=params['mosque'])
        return queryset.order_by('-created_at')

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)

    def _check_owner(self, offer):
        if offer.user_id != self.request.user.id and not is_admin_user(self.request.user):
            raise PermissionDenied('You can only change your own offers.')

    def perform_update(self, serializer):
        self._check_owner(serializer.instance)
        serializer.save()

    def perform_destroy(self, instance):
        self._check_owner(instance)
        instance.delete()


class VolunteerApplicationViewSet(viewsets.ModelViewSet):
    """
    Applications to volunteer at a mosque. Applicants see their own,
    imams also see those sent to their mosques, administrators see all.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = VolunteerApplicationSerializer
    http_method_names = ['get', 'post', 'patch', 'head', 'options']

    def get_queryset(self):
        user = self.request.user
        queryset = VolunteerApplication.objects.select_related('mosque', 'user')
        role = role_of(user)
        if role == Role.IMAM:
            queryset = queryset.filter(Q(user=user) | Q(mosque__imam=user))
        elif not is_admin_user(user):
            queryset = queryset.filter(user=user)

        params = self.request.query_params
        if params.get('status') in VolunteerApplication.Status.values:
            queryset = queryset.filter(status=params['status'])
        if params.get('mosque'):
            queryset = queryset.filter(mosque_id=params['mosque'])
        return queryset.order_by('-created_at')

    def perform_create(self, serializer):
        application = serializer.save(user=self.request.user)
        notify(
            application.mosque.imam,
            NotificationVerb.APPLICATION,
            'New volunteer application',
            f'{application.title} for {application.mosque.name}',
            target_object_id=application.pk,
            actor=self.request.user,
            data={'kind': 'application'},
        )

    def partial_update(self, request, pk=None):
        application = self.get_object()
        serializer = ApplicationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        is_applicant = application.user_id == request.user.id

        if data['status'] == VolunteerApplication.Status.WITHDRAWN and is_applicant:
            application.withdraw()
            return Response({
                'message': 'Application withdrawn successfully',
                'application': VolunteerApplicationSerializer(application).data,
            })

        if not application.mosque.is_managed_by(request.user):
            raise PermissionDenied('Applicants can only withdraw their application.')

        if 'admin_notes' in data:
            application.admin_notes = data['admin_notes']
        if 'priority' in data:
            application.priority = data['priority']
        application.respond(data['status'], request.user, data['response_message'])

        notify(
            application.user,
            NotificationVerb.APPLICATION,
            f'Application {application.status}',
            f'Your application to {application.mosque.name} was {application.status}.',
            target_object_id=application.pk,
            actor=request.user,
            data={'kind': 'application', 'status': application.status},
        )
        return Response({
            'message': f'Application {application.status} successfully',
            'application': VolunteerApplicationSerializer(application).data,
        })


def imam_volunteers(user):
    queryset = Volunteer.objects.select_related('mosque')
    if is_admin_user(user):
        return queryset
    return queryset.filter(mosque__imam=user)


class ImamVolunteersView(APIView):
    permission_classes = [IsImam]

    def get(self, request):
        queryset = imam_volunteers(request.user)
        requested = request.query_params.get('status')
        if requested in Volunteer.Status.values:
            queryset = queryset.filter(status=requested)
        return Response(VolunteerSerializer(queryset.order_by('-created_at'), many=True).data)


class ImamVolunteerDetailView(APIView):
    permission_classes = [IsImam]

    def patch(self, request, pk):
        volunteer = get_object_or_404(imam_volunteers(request.user), pk=pk)
        serializer = VolunteerReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review_volunteer(volunteer, serializer.validated_data, request)
        return Response({
            'message': f'Volunteer {volunteer.status} successfully',
            'volunteer': VolunteerSerializer(volunteer).data,
        })


def review_volunteer(volunteer, data, request):
    """
    Applies a volunteer review body: assignment changes first, then the
    status through the moderation workflow when one was sent.
    """
    if data.get('clearAssignment'):
        volunteer.clear_assignment()
    elif data.get('currentAssignment'):
        volunteer.assign(data['currentAssignment'], request.user)

    if data.get('status'):
        ModerationService.set_status(volunteer, data['status'], request.user, note=data.get('notes', ''), request=request)
    else:
        if data.get('notes'):
            volunteer.notes = data['notes']
        volunteer.save()
    return volunteer
