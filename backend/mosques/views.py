"""
API views for the mosque directory, map queries and prayer times.
"""
import logging

import requests
from django.db.models import Q
from django.http import Http404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import paginate
from core.permissions import IsImam
from user.models import ADMIN_ROLES, Role, role_of
from .models import Mosque
from .serializers import ClusterSerializer, MosqueListSerializer, MosqueSerializer
from .services import GeoService, GeocodingService, PrayerTimesService

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ('street', 'city', 'state', 'zip_code')


def parse_floats(params, *names):
    """Reads required float query parameters, raising ValueError when one is missing."""
    try:
        return [float(params.get(name)) for name in names]
    except (TypeError, ValueError):
        raise ValueError(f"Invalid parameters. Required: {', '.join(names)} (float)")


def geocode_into(validated_data, instance=None):
    """
    Fills latitude/longitude from the address when the caller did not send
    coordinates. On update only an address change triggers a lookup.
    """
    if 'latitude' in validated_data or 'longitude' in validated_data:
        return
    if instance is not None and not any(field in validated_data for field in ADDRESS_FIELDS):
        return

    geocoder = GeocodingService()
    if not geocoder.enabled:
        return

    parts = {field: validated_data.get(field, getattr(instance, field, '')) for field in ADDRESS_FIELDS}
    address = f"{parts['street']}, {parts['city']}, {parts['state']} {parts['zip_code']}"
    coordinates = geocoder.geocode(address)
    if coordinates:
        validated_data['latitude'], validated_data['longitude'] = coordinates


class MosqueViewSet(viewsets.ModelViewSet):
    """
    Public mosque directory. Only approved mosques are visible to the public;
    imams and administrators can see and filter every listing.
    """
    queryset = Mosque.objects.select_related('imam').order_by('-created_at')
    serializer_class = MosqueSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action == 'create':
            return [IsImam()]
        if self.action in ('partial_update', 'destroy'):
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_serializer_class(self):
        if self.action in ('nearby', 'viewport'):
            return MosqueListSerializer
        return MosqueSerializer

    def public_queryset(self):
        return Mosque.objects.filter(status=Mosque.Status.APPROVED)

    def list(self, request):
        params = request.query_params
        queryset = self.get_queryset()

        if role_of(request.user) in (Role.IMAM, *ADMIN_ROLES):
            requested = params.get('status')
            if requested in Mosque.Status.values:
                queryset = queryset.filter(status=requested)
        else:
            queryset = queryset.filter(status=Mosque.Status.APPROVED)

        if params.get('city'):
            queryset = queryset.filter(city__icontains=params['city'])
        if params.get('state'):
            queryset = queryset.filter(state__icontains=params['state'])
        if params.get('name'):
            queryset = queryset.filter(name__icontains=params['name'])
        if params.get('services'):
            match = Q()
            for service in params['services'].split(','):
                if service.strip():
                    # SQLite has no JSON containment lookup
                    match |= Q(services__icontains=f'"{service.strip()}"')
            queryset = queryset.filter(match)

        mosques, pagination = paginate(queryset, request)
        return Response({
            'success': True,
            'data': MosqueSerializer(mosques, many=True).data,
            'pagination': pagination,
        })

    def retrieve(self, request, pk=None):
        mosque = self.get_object()
        if not mosque.is_public and not mosque.is_managed_by(request.user):
            raise Http404
        return Response(MosqueSerializer(mosque).data)

    def create(self, request):
        serializer = MosqueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        geocode_into(serializer.validated_data)
        mosque = serializer.save(
            imam=request.user,
            status=Mosque.Status.PENDING,
            verified=False,
        )
        logger.info("Mosque %s created by %s", mosque.id, request.user.pk)
        return Response({
            'success': True,
            'data': MosqueSerializer(mosque).data,
            'message': 'Mosque created successfully',
        }, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        mosque = self.get_object()
        if not mosque.is_managed_by(request.user):
            raise PermissionDenied('Only the mosque imam or an administrator can edit this mosque.')
        serializer = MosqueSerializer(mosque, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        geocode_into(serializer.validated_data, instance=mosque)
        serializer.save()
        return Response(serializer.data)

    def destroy(self, request, pk=None):
        mosque = self.get_object()
        if not mosque.is_managed_by(request.user):
            raise PermissionDenied('Only the mosque imam or an administrator can delete this mosque.')
        mosque.delete()
        return Response({'message': 'Mosque deleted successfully'})

    @action(detail=False, methods=['get'])
    def nearby(self, request):
        """
        Find approved mosques near a location.

        Query parameters:
        - latitude: float (required)
        - longitude: float (required)
        - radius: int in meters (default: 5000)
        """
        try:
            lat, lon = parse_floats(request.query_params, 'latitude', 'longitude')
            radius = int(request.query_params.get('radius', 5000))
        except (TypeError, ValueError):
            return Response(
                {'error': 'Invalid parameters. Required: latitude, longitude (float), radius (int)'},
                status=status.HTTP_400_BAD_REQUEST
            )

        if not GeoService.is_location_valid(lat, lon) or radius <= 0:
            return Response({'error': 'Invalid coordinates'}, status=status.HTTP_400_BAD_REQUEST)

        mosques = GeoService.find_nearby(self.public_queryset(), lat, lon, radius)
        return Response({
            'count': len(mosques),
            'results': MosqueListSerializer(mosques, many=True).data
        })

    @action(detail=False, methods=['get'])
    def viewport(self, request):
        """
        Approved mosques within the visible map bounds (north, south, east, west).
        """
        try:
            north, south, east, west = parse_floats(request.query_params, 'north', 'south', 'east', 'west')
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        mosques = GeoService.find_in_viewport(self.public_queryset(), north, south, east, west)
        return Response({
            'count': mosques.count(),
            'results': MosqueListSerializer(mosques, many=True).data
        })

    @action(detail=False, methods=['get'])
    def clusters(self, request):
        """
        Approved mosques grouped into map clusters for a viewport and zoom level.
        """
        try:
            bbox = parse_floats(request.query_params, 'north', 'south', 'east', 'west')
            zoom = int(request.query_params.get('zoom'))
        except (TypeError, ValueError):
            return Response(
                {'error': 'Invalid parameters. Required: north, south, east, west, zoom'},
                status=status.HTTP_400_BAD_REQUEST
            )

        clusters = GeoService.get_cluster_aggregates(self.public_queryset(), bbox, zoom)
        return Response({
            'count': len(clusters),
            'results': ClusterSerializer(clusters, many=True).data
        })


class ImamMosquesView(APIView):
    """Mosques managed by the requesting imam. Administrators without mosques see all of them."""
    permission_classes = [IsImam]

    def get(self, request):
        mosques = Mosque.objects.filter(imam=request.user).order_by('-created_at')
        if not mosques.exists() and role_of(request.user) in ADMIN_ROLES:
            mosques = Mosque.objects.order_by('-created_at')
        return Response({
            'success': True,
            'data': MosqueSerializer(mosques, many=True).data,
        })


class PrayerTimesView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        params = request.query_params
        try:
            data = PrayerTimesService().fetch_calendar(
                latitude=params.get('latitude'),
                longitude=params.get('longitude'),
                method=params.get('method'),
                month=params.get('month'),
                year=params.get('year'),
            )
        except (requests.RequestException, ValueError) as e:
            logger.warning("Prayer times lookup failed: %s", e)
            return Response(
                {'success': False, 'error': 'Failed to fetch prayer times'},
                status=status.HTTP_502_BAD_GATEWAY
            )
        return Response({'success': True, 'data': data})
